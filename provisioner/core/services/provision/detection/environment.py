"""
L3 Detection — Execution context and host OS release.

Read-only probes.  Nothing here raises: unreadable files and missing
binaries simply mean "no evidence".
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from provisioner.core.models.environment import ExecutionContext
from provisioner.core.services.provision.data.constants import (
    CGROUP_KEYWORDS,
    CGROUP_PATH,
    CONTAINER_MARKER_FILES,
    PROBE_TIMEOUT,
)

logger = logging.getLogger(__name__)


def detect_context(
    force_local: bool = False,
    *,
    marker_files: tuple[str, ...] = CONTAINER_MARKER_FILES,
    cgroup_path: str = CGROUP_PATH,
) -> ExecutionContext:
    """Decide whether we run inside a container.

    Evidence, any of which is enough:
        - a runtime marker file (``/.dockerenv``, ``/run/.containerenv``)
        - a container runtime named in PID 1's cgroup metadata

    ``force_local`` keeps the markers for display but reports a
    bare-metal context.
    """
    markers: list[str] = []

    for marker in marker_files:
        if os.path.isfile(marker):
            markers.append(marker)

    try:
        cgroup = Path(cgroup_path).read_text(encoding="utf-8", errors="replace").lower()
    except OSError:
        cgroup = ""
    for keyword in CGROUP_KEYWORDS:
        if keyword in cgroup:
            markers.append(f"cgroup:{keyword}")

    containerized = bool(markers) and not force_local
    if markers and force_local:
        logger.info("Container markers %s ignored (--local)", markers)
    else:
        logger.debug("Execution context: containerized=%s markers=%s", containerized, markers)

    return ExecutionContext(
        containerized=containerized,
        markers=markers,
        forced_local=force_local,
    )


def detect_os_version(os_release: str = "/etc/os-release") -> str | None:
    """Host OS release number, e.g. ``"24.04"``.

    Asks ``lsb_release -rs`` first and falls back to ``VERSION_ID`` in
    ``/etc/os-release``.
    """
    if shutil.which("lsb_release"):
        try:
            r = subprocess.run(
                ["lsb_release", "-rs"],
                capture_output=True, text=True, timeout=PROBE_TIMEOUT,
            )
            value = r.stdout.strip()
            if r.returncode == 0 and value:
                return value
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug("lsb_release failed: %s", e)

    try:
        with open(os_release, encoding="utf-8") as f:
            for line in f:
                if line.startswith("VERSION_ID="):
                    return line.strip().split("=", 1)[1].strip('"') or None
    except OSError:
        pass

    return None
