"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called for install
operations.  Sudo prefixing, PATH overrides, timing and error capture
are centralised here.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from typing import Any

from provisioner.core.services.provision.data.constants import INSTALL_TIMEOUT

logger = logging.getLogger(__name__)


def _is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def _run_subprocess(
    cmd: list[str],
    *,
    needs_sudo: bool = False,
    timeout: int = INSTALL_TIMEOUT,
    env_overrides: dict[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    capture: bool = False,
) -> dict[str, Any]:
    """Run a command with sudo and env support.

    Unlike probes, install commands normally stream to the terminal so
    the user sees apt progress and can answer a sudo password prompt;
    ``capture=True`` collects output instead (used for fetching scripts).

    Args:
        cmd: Command list for ``subprocess.run()``.
        needs_sudo: Prefix ``sudo -E`` unless already root.
        timeout: Seconds before ``TimeoutExpired``.
        env_overrides: Extra env vars (e.g. an extended PATH).
        cwd: Working directory for the command.
        input_text: Data fed to stdin.
        capture: Capture stdout/stderr instead of inheriting them.

    Returns:
        ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on success,
        ``{"ok": False, "error": "...", ...}`` on failure.
    """
    if needs_sudo and not _is_root():
        cmd = ["sudo", "-E"] + cmd

    env = os.environ.copy()
    if env_overrides:
        for key, value in env_overrides.items():
            env[key] = os.path.expandvars(value)

    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=capture,
            text=True,
            timeout=timeout,
            input=input_text,
            env=env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        return {"ok": False, "error": f"Command timed out ({timeout}s)"}
    except OSError as e:
        logger.debug("Cannot start %s: %s", cmd[0], e)
        return {"ok": False, "error": str(e)}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout or ""
    stderr = result.stderr[-2000:] if result.stderr else ""

    if result.returncode == 0:
        return {"ok": True, "stdout": stdout, "elapsed_ms": elapsed_ms}

    return {
        "ok": False,
        "error": f"Command failed (exit {result.returncode})",
        "stderr": stderr,
        "stdout": stdout[-2000:],
        "elapsed_ms": elapsed_ms,
    }
