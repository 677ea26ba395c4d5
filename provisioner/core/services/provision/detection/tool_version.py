"""
L3 Detection — Tool version checking.

Read-only probes: runs version queries and parses the output into a
``ToolStatus``.  A missing tool, a crashing version query or an
unparseable version string all degrade to "does not meet minimum";
none of them raise.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess

from provisioner.core.config.loader import ProvisionConfig
from provisioner.core.models.environment import ExecutionContext, ToolStatus
from provisioner.core.services.provision.data.constants import PROBE_TIMEOUT
from provisioner.core.services.provision.domain.version import (
    extract_version,
    meets_major,
    parse_major,
)

logger = logging.getLogger(__name__)

# tool → version query.  Output of stdout and stderr is searched; the
# first line is kept as the display string.
VERSION_COMMANDS: dict[str, list[str]] = {
    "python3.12": ["python3.12", "--version"],
    "python3":    ["python3", "--version"],
    "uv":         ["uv", "--version"],
    "node":       ["node", "--version"],
    "pandoc":     ["pandoc", "--version"],
    "pdflatex":   ["pdflatex", "--version"],
}


def search_path(extra: list[str] | None = None) -> str:
    """PATH with ``extra`` entries appended (not mutating os.environ)."""
    base = os.environ.get("PATH", "")
    parts = [p for p in base.split(os.pathsep) if p]
    for entry in extra or []:
        if entry not in parts:
            parts.append(entry)
    return os.pathsep.join(parts)


def get_version_line(tool: str, path: str | None = None) -> str | None:
    """First line of the tool's version output, or None if unavailable."""
    cmd = VERSION_COMMANDS.get(tool, [tool, "--version"])
    binary = shutil.which(cmd[0], path=path)
    if not binary:
        return None

    env = None
    if path is not None:
        env = {**os.environ, "PATH": path}

    try:
        result = subprocess.run(
            [binary, *cmd[1:]],
            capture_output=True, text=True, timeout=PROBE_TIMEOUT, env=env,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug("Version query for %s failed: %s", tool, e)
        return ""

    output = (result.stdout or "").strip() or (result.stderr or "").strip()
    return output.splitlines()[0].strip() if output else ""


def probe_tool(
    tool: str,
    minimum: int | None = None,
    *,
    path: str | None = None,
) -> ToolStatus:
    """Probe one tool.

    Args:
        tool: Binary name (key of ``VERSION_COMMANDS``).
        minimum: Required major version, or None when presence suffices.
        path: Search path override (see ``search_path``).
    """
    line = get_version_line(tool, path=path)
    if line is None:
        return ToolStatus.absent(tool, minimum)

    version = extract_version(line)
    major = parse_major(version)
    if version is None:
        logger.debug("Unparseable version for %s: %r", tool, line)

    return ToolStatus(
        tool=tool,
        present=True,
        version=line or None,
        major=major,
        minimum=minimum,
        meets_minimum=meets_major(major, minimum) if minimum is not None else True,
    )


def tool_minimums(config: ProvisionConfig) -> dict[str, int | None]:
    """Minimum major version per probed tool."""
    return {
        config.python_binary: None,
        "python3": 3,
        "uv": None,
        "node": config.node_baseline,
        "pandoc": config.pandoc_min,
        "pdflatex": None,
    }


def probe_tools(
    context: ExecutionContext,
    config: ProvisionConfig,
    *,
    path: str | None = None,
) -> dict[str, ToolStatus]:
    """Probe the interpreter, uv, Node.js, Pandoc and LaTeX.

    Inside a container the generic ``python3`` is probed instead of
    the pinned interpreter, since nothing will be installed there.
    """
    minimums = tool_minimums(config)
    interpreter = "python3" if context.containerized else config.python_binary
    tools = [interpreter, "uv", "node", "pandoc", "pdflatex"]
    if path is None:
        path = search_path(config.search_paths())

    statuses = {tool: probe_tool(tool, minimums.get(tool), path=path) for tool in tools}
    logger.info(
        "Probed tools: %s",
        ", ".join(f"{t}={s.version or 'absent'}" for t, s in statuses.items()),
    )
    return statuses
