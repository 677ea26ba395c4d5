"""
L5 Orchestration — Post-run verification.

Re-probes the same tool set the plan was built from and classifies
each as satisfied / degraded / missing.  Verification never changes
the exit code.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from provisioner.core.config.loader import ProvisionConfig
from provisioner.core.models.action import VerificationRow
from provisioner.core.models.environment import ExecutionContext, ToolStatus
from provisioner.core.services.provision.data.constants import PROBE_TIMEOUT, TOOL_LABELS
from provisioner.core.services.provision.detection.tool_version import probe_tool, tool_minimums
from provisioner.core.services.provision.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)


def classify(status: ToolStatus, target: int | None = None) -> str:
    """satisfied / degraded / missing.

    ``target`` is a recommended major above the hard minimum (Node.js
    22 vs 18): present but below it is *degraded*, as is present but
    below the minimum.
    """
    if not status.present:
        return "missing"
    if not status.meets_minimum:
        return "degraded"
    if target is not None and status.major < target:
        return "degraded"
    return "satisfied"


def _row(
    status: ToolStatus,
    *,
    target: int | None = None,
    missing_hint: str = "not found",
    degraded_hint: str = "",
    install_attempted: bool = False,
) -> VerificationRow:
    label = TOOL_LABELS.get(status.tool, status.tool)
    verdict = classify(status, target)
    if verdict == "satisfied":
        detail = status.version or "present"
    elif verdict == "degraded":
        detail = f"{status.version} {degraded_hint}".strip()
    else:
        detail = missing_hint
    return VerificationRow(
        name=label,
        status=verdict,  # type: ignore[arg-type]
        detail=detail,
        error=verdict == "missing" and install_attempted,
    )


def _uv_run_ok(args: list[str], project_dir: Path, path: str, runner=_run_subprocess) -> bool:
    if not shutil.which("uv", path=path):
        return False
    result = runner(
        ["uv", "run", *args],
        env_overrides={"PATH": path},
        cwd=str(project_dir),
        timeout=PROBE_TIMEOUT * 6,
        capture=True,
    )
    return bool(result.get("ok"))


def verify_installation(
    context: ExecutionContext,
    config: ProvisionConfig,
    *,
    path: str,
    project_dir: Path | None = None,
    groups: list[str] | None = None,
    pdf_install_attempted: bool = False,
    runner=_run_subprocess,
) -> list[VerificationRow]:
    """Build the final status table.

    Args:
        context: Execution context of the run.
        config: Thresholds.
        path: Search path including anything installed this run.
        project_dir: Project directory for ``uv run`` checks (skipped if None).
        groups: Selected optional groups; each known probe is run via uv.
        pdf_install_attempted: Missing Pandoc/LaTeX becomes an error row.
    """
    minimums = tool_minimums(config)
    interpreter = "python3" if context.containerized else config.python_binary
    rows: list[VerificationRow] = []

    rows.append(_row(
        probe_tool(interpreter, minimums.get(interpreter), path=path),
        missing_hint=f"{interpreter} not found",
    ))
    rows.append(_row(
        probe_tool("uv", path=path),
        missing_hint=f"not found. Try: source {config.shell_rc}",
    ))

    if project_dir is not None:
        cli_ok = _uv_run_ok([config.cli_name, "--help"], project_dir, path, runner)
        rows.append(VerificationRow(
            name=f"{config.cli_name} CLI",
            status="satisfied" if cli_ok else "missing",
            detail=(
                f"accessible (run 'uv run {config.cli_name} --help')"
                if cli_ok else "not accessible"
            ),
            error=not cli_ok,
        ))

    rows.append(_row(
        probe_tool("node", config.node_baseline, path=path),
        target=config.node_target,
        missing_hint="not found (chart workflows disabled)",
        degraded_hint=f"(upgrade to >={config.node_target} for chart workflows)",
    ))
    rows.append(_row(
        probe_tool("pandoc", config.pandoc_min, path=path),
        missing_hint=(
            "not found (installation may have failed)"
            if pdf_install_attempted else "not found (PDF/DOCX export disabled)"
        ),
        degraded_hint=f"(below {config.pandoc_min}.0)",
        install_attempted=pdf_install_attempted,
    ))
    rows.append(_row(
        probe_tool("pdflatex", path=path),
        missing_hint=(
            "not found" if pdf_install_attempted else "not found (PDF/DOCX export disabled)"
        ),
        install_attempted=pdf_install_attempted,
    ))

    if project_dir is not None:
        for group in groups or []:
            probe = config.group_probes.get(group)
            if not probe:
                continue
            ok = _uv_run_ok(["--group", group, *probe], project_dir, path, runner)
            rows.append(VerificationRow(
                name=f"{probe[0]} (group '{group}')",
                status="satisfied" if ok else "missing",
                detail=(
                    "available via uv run" if ok
                    else f"not accessible via uv run. Re-run 'uv sync --group {group}'"
                ),
                error=not ok,
            ))

    logger.info(
        "Verification: %s",
        ", ".join(f"{r.name}={r.status}" for r in rows),
    )
    return rows
