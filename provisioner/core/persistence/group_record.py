"""
Optional-group record — which uv dependency groups a run selected.

Stored as plain text in ``.tiangong/uv-groups.selected``: one group per
line, sorted, unique.  Writes are atomic (temp file, then rename).

The record is a hint for humans and future runs
(``uv sync --group <name>``); the provisioner never reads it back to
make decisions in the run that wrote it.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_RECORD_FILE = "uv-groups.selected"


def default_record_path(project_dir: Path, cache_dir: str = ".tiangong") -> Path:
    """Get the default record path for a project."""
    return project_dir / cache_dir / DEFAULT_RECORD_FILE


def write_group_record(groups: Iterable[str], path: Path) -> list[str]:
    """Write the sorted, de-duplicated group names to ``path``.

    Returns:
        The names as written.
    """
    names = sorted({g.strip() for g in groups if g and g.strip()})
    path.parent.mkdir(parents=True, exist_ok=True)
    content = "".join(f"{name}\n" for name in names)

    _fd, tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=".groups_",
        suffix=".tmp",
    )
    tmp = Path(tmp_path)
    try:
        with open(_fd, "w", encoding="utf-8") as f:
            f.write(content)
        tmp.replace(path)
        logger.debug("Group record saved to %s: %s", path, names)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise

    return names


def read_group_record(path: Path) -> list[str]:
    """Read a previously written record.

    Returns:
        Sorted group names; empty when the file is missing or unreadable.
    """
    if not path.is_file():
        return []
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        logger.warning("Cannot read group record %s: %s", path, e)
        return []
    return sorted({line.strip() for line in lines if line.strip()})
