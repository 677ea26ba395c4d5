"""
Logging configuration for the ``tiangong-setup`` entrypoint.

Diagnostics only: the ✓ / ⚠ / ✗ progress lines a user follows during a
run go through ``reporter.py``, not through logging.  Every module logs
via ``logging.getLogger(__name__)`` and inherits what is set up here.

Console level, highest precedence first:
    --debug / --verbose / --quiet  >  TGSETUP_LOG_LEVEL  >  WARNING

A run can also be captured to a file (TGSETUP_LOG_FILE), at its own
level (TGSETUP_LOG_FILE_LEVEL), e.g. to attach to a bug report about a
failed apt or uv step.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "TGSETUP_LOG_LEVEL"
ENV_FILE = "TGSETUP_LOG_FILE"
ENV_FILE_LEVEL = "TGSETUP_LOG_FILE_LEVEL"

# (threshold, format, datefmt): the first row whose threshold is at or
# above the console level wins.
_CONSOLE_FORMATS: list[tuple[int, str, str | None]] = [
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(message)s", None),
]

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Console level name from the global CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LEVEL, "WARNING")


def _console_formatter(level: int) -> logging.Formatter:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter("%(message)s")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install the stderr handler and, optionally, a file handler on the root logger.

    Args:
        level: Console level name.
        log_file: Path of a log file to append to.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown names fall back to WARNING."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) and level else logging.WARNING
