"""
L4 Execution — Shell profile PATH lines.

Newly installed user-level tools (uv) land in directories that are not
on PATH yet.  The current run gets them through an explicit PATH
override; future shells get an export line in the rc file.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def _shell_config_line(shell_type: str, path_entry: str) -> str:
    """Generate a shell-specific PATH export line.

    Args:
        shell_type: ``"bash"`` | ``"zsh"`` | ``"fish"`` | etc.
        path_entry: Directory to add to PATH, e.g. ``"$HOME/.cargo/bin"``.
    """
    if shell_type == "fish":
        return f"set -gx PATH {path_entry} $PATH"
    return f'export PATH="{path_entry}:$PATH"'


def _home_relative(entry: str) -> str:
    """``/home/u/.cargo/bin`` → ``$HOME/.cargo/bin`` for portable rc lines."""
    home = str(Path.home())
    if entry == home or entry.startswith(home + "/"):
        return "$HOME" + entry[len(home):]
    return entry


def ensure_path_in_rc(rc_file: Path, entries: list[str]) -> list[str]:
    """Append PATH export lines for ``entries`` not already in ``rc_file``.

    Returns:
        The lines that were appended.
    """
    shell_type = "fish" if rc_file.name.endswith(".fish") else "bash"
    try:
        existing = rc_file.read_text(encoding="utf-8") if rc_file.is_file() else ""
    except OSError as e:
        logger.warning("Cannot read %s: %s", rc_file, e)
        return []

    added: list[str] = []
    for entry in entries:
        line = _shell_config_line(shell_type, _home_relative(entry))
        if line not in existing:
            added.append(line)

    if added:
        rc_file.parent.mkdir(parents=True, exist_ok=True)
        with open(rc_file, "a", encoding="utf-8") as f:
            if existing and not existing.endswith("\n"):
                f.write("\n")
            f.write("\n".join(added) + "\n")
        logger.info("Added %d PATH line(s) to %s", len(added), rc_file)
    return added
