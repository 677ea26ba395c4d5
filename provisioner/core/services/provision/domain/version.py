"""
L1 Domain — Version parsing and comparison (pure).

No I/O, no subprocess.  Anything that cannot be parsed counts as
major version 0, which never meets a minimum.
"""

from __future__ import annotations

import re

_NUMERIC = re.compile(r"(\d+(?:\.\d+)*)")


def extract_version(text: str | None) -> str | None:
    """Return the first dotted numeric run in ``text``.

    ``"pandoc 3.1.11"`` → ``"3.1.11"``; ``"v22.3.0"`` → ``"22.3.0"``.
    """
    if not text:
        return None
    match = _NUMERIC.search(text)
    return match.group(1) if match else None


def parse_major(version: str | None) -> int:
    """Leading integer before the first separator; 0 when unparseable.

    >>> parse_major("v22.3.1")
    22
    >>> parse_major("not a version")
    0
    """
    if not version:
        return 0
    match = re.match(r"\s*v?(\d+)", version)
    if not match:
        return 0
    return int(match.group(1))


def version_tuple(version: str | None) -> tuple[int, ...]:
    """``"24.04"`` → ``(24, 4)``; unparseable → ``()``."""
    found = extract_version(version)
    if not found:
        return ()
    return tuple(int(part) for part in found.split("."))


def version_at_least(version: str | None, minimum: str) -> bool:
    """Numeric, component-wise ``version >= minimum``.

    Missing trailing components count as zero, so ``"24"`` equals
    ``"24.0"``.  An unparseable ``version`` is never at least anything.
    """
    have = version_tuple(version)
    want = version_tuple(minimum)
    if not have:
        return False
    width = max(len(have), len(want))
    have += (0,) * (width - len(have))
    want += (0,) * (width - len(want))
    return have >= want


def meets_major(major: int, minimum: int | None) -> bool:
    """Major-version threshold check; no minimum means any major passes."""
    if minimum is None:
        return True
    return major >= minimum


def python_source_for(os_version: str | None, default_repo_min: str) -> str:
    """Where the interpreter comes from on an Ubuntu host.

    Releases at or above ``default_repo_min`` ship it in the default
    repository; older or unknown releases need the alternate source.

    Returns:
        ``"default"`` | ``"alternate"``
    """
    if version_at_least(os_version, default_repo_min):
        return "default"
    return "alternate"
