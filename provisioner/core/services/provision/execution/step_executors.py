"""
L4 Execution — Plan step executors.

Each scheduled action runs once, in plan order.  A failing mandatory
action raises ``MandatoryActionFailure`` and stops the run; a failing
optional action becomes a failed Receipt plus a warning and the run
continues.  There is no rollback.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from provisioner.core.config.loader import ProvisionConfig
from provisioner.core.errors import MandatoryActionFailure
from provisioner.core.models.action import Receipt
from provisioner.core.models.plan import InstallAction, InstallationPlan
from provisioner.core.observability.reporter import Reporter
from provisioner.core.services.provision.detection.tool_version import probe_tool, search_path
from provisioner.core.services.provision.execution.shell_config import ensure_path_in_rc
from provisioner.core.services.provision.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunEnvironment:
    """PATH handed to every external command of this run.

    Replaces exporting PATH into the provisioner's own environment:
    steps that install user-level tools return a new RunEnvironment
    and later steps receive it explicitly.
    """

    path: str = field(default_factory=search_path)

    def with_entries(self, entries: list[str]) -> RunEnvironment:
        parts = self.path.split(os.pathsep) if self.path else []
        new = [e for e in entries if e not in parts]
        return RunEnvironment(path=os.pathsep.join(new + parts))

    def overrides(self) -> dict[str, str]:
        return {"PATH": self.path}


@dataclass
class ExecutionReport:
    """Receipts of one plan execution, in order."""

    receipts: list[Receipt] = field(default_factory=list)
    environment: RunEnvironment = field(default_factory=RunEnvironment)

    @property
    def failed(self) -> list[Receipt]:
        return [r for r in self.receipts if r.failed]

    def performed(self, action_id: str) -> bool:
        """Whether the action ran (successfully or not)."""
        return any(r.action_id == action_id and r.status != "skipped" for r in self.receipts)

    def to_dict(self) -> dict:
        return {
            "receipts": [r.model_dump() for r in self.receipts],
            "failed": len(self.failed),
        }


def _run_action(
    action: InstallAction,
    env: RunEnvironment,
    runner=_run_subprocess,
) -> dict:
    """Run the fetch-and-run script (if any) then each command."""
    overrides = env.overrides()
    elapsed = 0

    if action.script_url:
        fetched = runner(
            ["curl", "-LsSf", action.script_url],
            env_overrides=overrides,
            capture=True,
        )
        if not fetched.get("ok"):
            return {**fetched, "error": f"Cannot fetch {action.script_url}: {fetched.get('error')}"}
        result = runner(
            action.script_runner,
            needs_sudo=action.needs_sudo,
            env_overrides=overrides,
            input_text=fetched.get("stdout", ""),
        )
        if not result.get("ok"):
            return result
        elapsed += result.get("elapsed_ms", 0)

    for cmd in action.commands:
        result = runner(
            cmd,
            needs_sudo=action.needs_sudo,
            env_overrides=overrides,
            cwd=action.cwd,
        )
        if not result.get("ok"):
            return {**result, "command": " ".join(cmd)}
        elapsed += result.get("elapsed_ms", 0)

    return {"ok": True, "elapsed_ms": elapsed}


def execute_action(
    action: InstallAction,
    env: RunEnvironment,
    reporter: Reporter,
    config: ProvisionConfig,
    *,
    runner=_run_subprocess,
) -> tuple[Receipt, RunEnvironment]:
    """Execute one action.

    Returns:
        ``(receipt, environment)`` — the environment is extended when
        the action installed something into ``path_entries``.

    Raises:
        MandatoryActionFailure: A mandatory action failed.
    """
    started = datetime.now(UTC).isoformat()
    if not action.scheduled:
        if action.reason:
            reporter.success(f"{action.label}: {action.reason}")
        return Receipt.skip(action.key, action.reason, started_at=started), env

    if not action.commands and not action.script_url:
        reporter.success(f"{action.label} scheduled.")
        return Receipt.success(action.key, output="scheduled", started_at=started), env

    reporter.warning(f"{action.label}...")
    result = _run_action(action, env, runner=runner)

    if not result.get("ok"):
        error = result.get("error", "unknown error")
        stderr = result.get("stderr", "")
        if action.mandatory:
            reporter.error(f"{action.label} failed: {error}")
            raise MandatoryActionFailure(action.key, f"{action.label} failed: {error}", stderr=stderr)
        reporter.warning(f"{action.label} failed: {error}. Continuing.")
        logger.warning("Optional step %s failed: %s %s", action.key, error, stderr)
        return Receipt.failure(
            action.key, error, started_at=started, metadata={"stderr": stderr},
        ), env

    if action.path_entries:
        env = env.with_entries(action.path_entries)
        rc_file = Path(config.shell_rc).expanduser()
        try:
            ensure_path_in_rc(rc_file, action.path_entries)
        except OSError as e:
            reporter.warning(f"Cannot update {rc_file}: {e}")

    receipt = Receipt.success(
        action.key, started_at=started, duration_ms=result.get("elapsed_ms", 0),
    )
    _after_install(action, env, reporter, config, receipt)
    return receipt, env


def _after_install(
    action: InstallAction,
    env: RunEnvironment,
    reporter: Reporter,
    config: ProvisionConfig,
    receipt: Receipt,
) -> None:
    """Re-probe what the action installed and report it."""
    if action.key == "node":
        status = probe_tool("node", config.node_baseline, path=env.path)
        receipt.metadata["version"] = status.version
        if status.major >= config.node_target:
            reporter.success(f"Node.js installed: {status.version}")
        else:
            # Best effort: the run continues
            reporter.error(
                f"Node.js installation did not reach version {config.node_target}+. "
                "Please review the NodeSource output."
            )
        return

    if action.key in ("python", "uv", "pandoc", "latex"):
        status = probe_tool(action.tool, path=env.path)
        receipt.metadata["version"] = status.version
        reporter.success(f"{action.label}: done ({status.version or 'version unknown'})")
        return

    reporter.success(f"{action.label}: done")


def execute_plan(
    plan: InstallationPlan,
    reporter: Reporter,
    config: ProvisionConfig,
    *,
    env: RunEnvironment | None = None,
    runner=_run_subprocess,
) -> ExecutionReport:
    """Execute every plan entry in order.

    Raises:
        MandatoryActionFailure: Propagated from the first mandatory failure.
    """
    report = ExecutionReport(environment=env or RunEnvironment())
    for action in plan.actions:
        receipt, report.environment = execute_action(
            action, report.environment, reporter, config, runner=runner,
        )
        report.receipts.append(receipt)
    return report
