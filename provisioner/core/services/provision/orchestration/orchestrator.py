"""
L5 Orchestration — The provisioning run.

The full vertical slice: probe the host, collect answers, build the
plan, execute it, sync the project, record the optional groups and
verify.  Everything outside this module is either pure (resolver,
domain) or a single-purpose probe/runner.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from provisioner.core.config.loader import ProvisionConfig
from provisioner.core.errors import MandatoryActionFailure
from provisioner.core.models.action import VerificationRow
from provisioner.core.models.environment import ExecutionContext, ToolStatus
from provisioner.core.models.plan import (
    Answers,
    InstallationPlan,
    InstallMode,
    ProvisionOptions,
)
from provisioner.core.observability.reporter import Reporter
from provisioner.core.persistence.group_record import default_record_path, write_group_record
from provisioner.core.services.provision.data.constants import TOOL_LABELS
from provisioner.core.services.provision.detection.environment import detect_os_version
from provisioner.core.services.provision.detection.tool_version import probe_tools
from provisioner.core.services.provision.execution.step_executors import (
    ExecutionReport,
    RunEnvironment,
    execute_plan,
)
from provisioner.core.services.provision.execution.subprocess_runner import _run_subprocess
from provisioner.core.services.provision.orchestration.prompts import Prompter, collect_answers
from provisioner.core.services.provision.orchestration.verification import verify_installation
from provisioner.core.services.provision.resolver.plan_resolution import build_plan

logger = logging.getLogger(__name__)


@dataclass
class ProvisionResult:
    """Outcome of a provisioning run (or a dry run)."""

    context: ExecutionContext | None = None
    mode: InstallMode | None = None
    statuses: dict[str, ToolStatus] = field(default_factory=dict)
    answers: Answers = field(default_factory=dict)
    plan: InstallationPlan | None = None
    report: ExecutionReport | None = None
    verification: list[VerificationRow] = field(default_factory=list)
    project_dir: Path | None = None
    record_path: Path | None = None
    error: str | None = None

    @property
    def exit_code(self) -> int:
        return 1 if self.error else 0

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.context is not None:
            result["context"] = self.context.label
            result["markers"] = list(self.context.markers)
        if self.mode is not None:
            result["mode"] = self.mode.value
        result["tools"] = {name: s.to_dict() for name, s in self.statuses.items()}
        if self.plan is not None:
            result["plan"] = self.plan.to_dict()
        if self.report is not None:
            result["report"] = self.report.to_dict()
        if self.verification:
            result["verification"] = [r.to_dict() for r in self.verification]
        if self.record_path is not None:
            result["record_path"] = str(self.record_path)
        return result


def _report_core_status(
    context: ExecutionContext,
    statuses: dict[str, ToolStatus],
    reporter: Reporter,
) -> None:
    for tool, status in statuses.items():
        label = TOOL_LABELS.get(tool, tool)
        if status.present:
            reporter.success(f"{label} detected: {status.version}")
        elif tool in ("python3", "uv") and context.containerized:
            reporter.error(f"{tool} not found in container")
        else:
            reporter.warning(f"{label} not found.")


def _sync_dir(plan: InstallationPlan, project_dir: Path) -> Path:
    sync = plan.get("sync")
    return Path(sync.cwd) if sync and sync.cwd else project_dir


def prepare_plan(
    context: ExecutionContext,
    options: ProvisionOptions,
    config: ProvisionConfig,
    project_dir: Path,
    prompter: Prompter,
    reporter: Reporter,
    *,
    env: RunEnvironment | None = None,
) -> ProvisionResult:
    """Probe, ask and plan — everything short of executing."""
    result = ProvisionResult(context=context, mode=options.mode, project_dir=project_dir)
    env = env or RunEnvironment().with_entries(config.search_paths())

    has_marker = (project_dir / config.project_marker).is_file()
    has_checkout = (project_dir / config.repository_dir / config.project_marker).is_file()
    if not has_marker and context.containerized:
        result.error = (
            f"{config.project_marker} not found. This command should be run "
            f"from the project root directory ({project_dir})."
        )
        reporter.error(result.error)
        return result

    result.statuses = probe_tools(context, config, path=env.path)
    _report_core_status(context, result.statuses, reporter)

    result.answers = collect_answers(prompter, context, result.statuses, options, config)

    os_version = None
    python = result.statuses.get(config.python_binary)
    if not context.containerized and (python is None or not python.present):
        os_version = detect_os_version()
        logger.info("Host release: %s", os_version)

    result.plan = build_plan(
        context,
        result.statuses,
        options,
        result.answers,
        os_version=os_version,
        config=config,
        project_dir=project_dir,
        has_marker=has_marker,
        has_checkout=has_checkout,
    )
    return result


def run_provision(
    context: ExecutionContext,
    options: ProvisionOptions,
    config: ProvisionConfig,
    project_dir: Path,
    prompter: Prompter,
    reporter: Reporter,
    *,
    runner=_run_subprocess,
) -> ProvisionResult:
    """Run the whole provisioning sequence.

    Returns:
        ProvisionResult; ``error`` is set (exit code 1) when the project
        marker is missing in a container or a mandatory step failed.
    """
    reporter.header("Welcome to TianGong AI for Sustainability Setup")
    reporter.info(f"Environment: {'Container' if context.containerized else 'Local Ubuntu'}")
    reporter.info(f"Installation mode: {options.mode.value}")
    if not context.containerized and hasattr(os, "geteuid") and os.geteuid() != 0:
        reporter.warning(
            "This command will use sudo to install packages. "
            "You may be prompted for your password."
        )

    env = RunEnvironment().with_entries(config.search_paths())

    reporter.header("Checking installed tools")
    result = prepare_plan(context, options, config, project_dir, prompter, reporter, env=env)
    if result.error or result.plan is None:
        return result
    plan = result.plan

    for warning in plan.warnings:
        reporter.warning(warning)

    reporter.header("Installing")
    try:
        result.report = execute_plan(plan, reporter, config, env=env, runner=runner)
    except MandatoryActionFailure as e:
        logger.error("Mandatory step %s failed: %s", e.action, e)
        result.error = str(e)
        return result

    sync_dir = _sync_dir(plan, project_dir)
    result.project_dir = sync_dir
    reporter.success("Project dependencies installed")

    if plan.groups:
        record = default_record_path(sync_dir, config.cache_dir)
        write_group_record(plan.groups.sorted(), record)
        result.record_path = record
        reporter.success(
            f"Optional uv groups recorded in {record} "
            "(reapply with 'uv sync --group <name>')."
        )

    reporter.header("Verification")
    pdf_attempted = result.report.performed("pandoc") or result.report.performed("latex")
    result.verification = verify_installation(
        context,
        config,
        path=result.report.environment.path,
        project_dir=sync_dir,
        groups=plan.groups.sorted(),
        pdf_install_attempted=pdf_attempted,
        runner=runner,
    )
    report_verification(result.verification, reporter)

    _final_summary(
        context, options, config, sync_dir, prompter, reporter, result.report.environment, runner,
    )
    return result


def report_verification(rows: list[VerificationRow], reporter: Reporter) -> None:
    for row in rows:
        line = f"{row.name}: {row.detail}"
        if row.status == "satisfied":
            reporter.success(line)
        elif row.error:
            reporter.error(line)
        else:
            reporter.warning(line)


def _final_summary(
    context: ExecutionContext,
    options: ProvisionOptions,
    config: ProvisionConfig,
    project_dir: Path,
    prompter: Prompter,
    reporter: Reporter,
    env: RunEnvironment,
    runner,
) -> None:
    cli = config.cli_name
    reporter.header("Setup Complete!")
    if context.containerized:
        reporter.info("Container environment setup completed successfully!")
        reporter.info(f"Test the CLI with: uv run {cli} --help")
        return

    reporter.info("Next steps:")
    reporter.info(f"1. Test the CLI: uv run {cli} --help")
    reporter.info(f"2. List available data sources: uv run {cli} sources list")
    reporter.info(
        f'3. Run a simple workflow: uv run {cli} research workflow simple '
        '--topic "life cycle assessment"'
    )
    reporter.info("4. For more details, read README.md, SETUP_GUIDE.md and AGENTS.md")

    if options.mode == InstallMode.INTERACTIVE and prompter.confirm(
        "Would you like to run the CLI help now?", default=False,
    ):
        runner(
            ["uv", "run", cli, "--help"],
            env_overrides=env.overrides(),
            cwd=str(project_dir),
        )
