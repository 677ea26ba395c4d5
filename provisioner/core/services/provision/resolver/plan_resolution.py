"""
L2 Resolver — Plan resolution.

``build_plan`` is a pure decision function over the execution context,
probed tool status, parsed options and already-collected answers.
Same inputs, same plan: it reads no files and runs no commands.

Step order is fixed:

    refresh-index → python → uv → node → pandoc → latex
    → group:<name>... → clone → sync
"""

from __future__ import annotations

import logging
from pathlib import Path

from provisioner.core.config.loader import ProvisionConfig
from provisioner.core.models.environment import ExecutionContext, ToolStatus
from provisioner.core.models.plan import (
    ActionKind,
    Answers,
    InstallAction,
    InstallationPlan,
    InstallMode,
    OptionalGroupSelection,
    ProvisionOptions,
)
from provisioner.core.services.provision.data.constants import (
    LATEX_PROFILES,
    PYTHON_PACKAGE_SUFFIXES,
)
from provisioner.core.services.provision.domain.version import python_source_for
from provisioner.core.services.provision.resolver.questions import (
    considers_pdf,
    group_key,
    node_major,
    pdf_ready,
    requests_charts,
    requests_pdf,
    wants_pdf,
)

logger = logging.getLogger(__name__)

_APT_INSTALL = ["apt", "install", "-y"]


def _status(statuses: dict[str, ToolStatus], tool: str) -> ToolStatus:
    return statuses.get(tool) or ToolStatus.absent(tool)


def select_groups(
    options: ProvisionOptions,
    answers: Answers,
    config: ProvisionConfig,
) -> tuple[OptionalGroupSelection, list[str]]:
    """Resolve the optional dependency groups.

    Starts from the groups named by flags.  Full mode adds every known
    group, interactive mode each group answered "yes"; minimal mode
    never adds anything beyond the flags.

    Returns:
        ``(selection, warnings)``
    """
    selection = options.groups
    warnings: list[str] = []
    if options.mode == InstallMode.FULL:
        return selection.add(*config.optional_groups), warnings
    if options.mode != InstallMode.INTERACTIVE:
        return selection, warnings

    for group in sorted(config.optional_groups):
        if group in selection:
            continue
        if answers.get(group_key(group)):
            selection = selection.add(group)
        else:
            warnings.append(
                f"Skipping optional group '{group}'. "
                f"You can install it later with: uv sync --group {group}"
            )
    return selection, warnings


def _python_action(config: ProvisionConfig, source: str) -> InstallAction:
    binary = config.python_binary
    packages = [f"{binary}{suffix}" for suffix in PYTHON_PACKAGE_SUFFIXES]
    commands: list[list[str]] = []
    if source == "alternate":
        commands += [
            ["add-apt-repository", "-y", config.python_ppa],
            ["apt", "update"],
        ]
    commands.append(_APT_INSTALL + packages)
    where = "default repository" if source == "default" else config.python_ppa
    return InstallAction(
        key="python",
        tool=binary,
        label=f"Install Python {config.python_version} from {where}",
        commands=commands,
        needs_sudo=True,
        mandatory=True,
        system_package=True,
        reason=f"{binary} not found",
    )


def _node_actions(
    context: ExecutionContext,
    statuses: dict[str, ToolStatus],
    options: ProvisionOptions,
    answers: Answers,
    config: ProvisionConfig,
) -> tuple[list[InstallAction], list[str]]:
    node = _status(statuses, "node")
    major = node_major(statuses)
    shown = node.version or ""
    requested = requests_charts(options)
    actions: list[InstallAction] = []
    warnings: list[str] = []

    def _skip(reason: str) -> InstallAction:
        return InstallAction(
            key="node", tool="node", feature="charts", kind=ActionKind.SKIP,
            label="Node.js", system_package=True, reason=reason,
        )

    if major >= config.node_target:
        if requested:
            actions.append(_skip(f"Node.js {shown} already meets the requirement"))
        return actions, warnings

    if major >= config.node_baseline:
        if not requested:
            warnings.append(
                f"Node.js {shown} detected. Charts may work but "
                f"Node.js {config.node_target}+ is recommended."
            )
            return actions, warnings
        install = True
    else:
        if node.present:
            warnings.append(
                f"Detected Node.js {shown} (<{config.node_baseline}). "
                "Chart workflows may not work properly."
            )
        else:
            warnings.append(
                f"Node.js not found. Chart workflows require Node.js {config.node_baseline}+."
            )
        if requested:
            install = True
        elif context.containerized or options.mode != InstallMode.INTERACTIVE:
            install = False
        elif answers.get("charts"):
            install = True
        else:
            install = False
            warnings.append(
                "Skipping Node.js installation. AntV chart features will remain "
                f"disabled until Node.js {config.node_target}+ is available."
            )

    if not install:
        if context.containerized:
            warnings.append("Skipping Node.js installation in container environment.")
        return actions, warnings

    if context.containerized:
        warnings.append("Skipping Node.js installation in container environment.")
        actions.append(_skip("system packages are not installed in containers"))
        return actions, warnings

    actions.append(InstallAction(
        key="node",
        tool="node",
        feature="charts",
        kind=ActionKind.UPGRADE if node.present else ActionKind.INSTALL,
        label=f"Install Node.js {config.node_target} from NodeSource",
        script_url=config.nodesource_url,
        script_runner=["bash", "-"],
        commands=[_APT_INSTALL + ["nodejs"]],
        needs_sudo=True,
        system_package=True,
        reason=f"Node.js {shown or 'absent'} below {config.node_target}",
    ))
    return actions, warnings


def _pdf_actions(
    context: ExecutionContext,
    statuses: dict[str, ToolStatus],
    options: ProvisionOptions,
    answers: Answers,
    config: ProvisionConfig,
) -> tuple[list[InstallAction], list[str]]:
    actions: list[InstallAction] = []
    warnings: list[str] = []
    if not considers_pdf(options):
        return actions, warnings

    pandoc = _status(statuses, "pandoc")
    latex = _status(statuses, "pdflatex")

    if pdf_ready(statuses) and not requests_pdf(options):
        return actions, warnings

    if not wants_pdf(options, answers):
        if options.mode == InstallMode.INTERACTIVE:
            warnings.append("Skipping Pandoc/LaTeX installation. PDF export will remain disabled.")
        return actions, warnings

    if context.containerized:
        warnings.append(
            "PDF export tools (Pandoc/LaTeX) are not recommended in container "
            "environments due to large size."
        )
        warnings.append("Consider installing these on the host system if needed.")
        for key, tool in (("pandoc", "pandoc"), ("latex", "pdflatex")):
            actions.append(InstallAction(
                key=key, tool=tool, feature="pdf", kind=ActionKind.SKIP,
                label=tool, system_package=True,
                reason="large-footprint tools are not installed in containers",
            ))
        return actions, warnings

    if pandoc.present and pandoc.meets_minimum:
        actions.append(InstallAction(
            key="pandoc", tool="pandoc", feature="pdf", kind=ActionKind.SKIP,
            label="Pandoc", system_package=True,
            reason=f"already satisfied: {pandoc.version}",
        ))
    else:
        actions.append(InstallAction(
            key="pandoc",
            tool="pandoc",
            feature="pdf",
            kind=ActionKind.UPGRADE if pandoc.present else ActionKind.INSTALL,
            label="Install or upgrade Pandoc",
            commands=[_APT_INSTALL + ["pandoc"]],
            needs_sudo=True,
            system_package=True,
            reason=(
                f"Pandoc {pandoc.version} below {config.pandoc_min}.0"
                if pandoc.present else "Pandoc not found"
            ),
        ))

    if latex.present:
        actions.append(InstallAction(
            key="latex", tool="pdflatex", feature="pdf", kind=ActionKind.SKIP,
            label="LaTeX", system_package=True,
            reason=f"already satisfied: {latex.version}",
        ))
    else:
        profile = options.latex_profile or answers.get("latex_profile") or "full"
        if profile not in LATEX_PROFILES:
            profile = "full"
        actions.append(InstallAction(
            key="latex",
            tool="pdflatex",
            feature="pdf",
            label=f"Install {profile} TeX Live",
            commands=[_APT_INSTALL + LATEX_PROFILES[profile]],
            needs_sudo=True,
            system_package=True,
            reason="LaTeX not found",
        ))

    return actions, warnings


def build_plan(
    context: ExecutionContext,
    statuses: dict[str, ToolStatus],
    options: ProvisionOptions,
    answers: Answers | None = None,
    *,
    os_version: str | None = None,
    config: ProvisionConfig | None = None,
    project_dir: Path | None = None,
    has_marker: bool = True,
    has_checkout: bool = False,
) -> InstallationPlan:
    """Compute the ordered installation plan.

    Args:
        context: Detected execution context.
        statuses: Probed tool status by binary name.
        options: Parsed invocation flags.
        answers: Interactive answers; an unanswered question counts as "no".
        os_version: Host release (``"24.04"``), picks the interpreter source.
        config: Thresholds and URLs (defaults when None).
        project_dir: Working directory; enables the clone / sync steps.
        has_marker: Whether ``project_dir`` holds the project marker.
        has_checkout: Whether an earlier clone already left the marker in
            ``project_dir / config.repository_dir``.

    Returns:
        InstallationPlan.  Inside a container it never contains a
        scheduled system-package action.
    """
    config = config or ProvisionConfig()
    answers = answers or {}
    plan = InstallationPlan(context=context, mode=options.mode)

    # ── Core: host only ──────────────────────────────────────────
    if not context.containerized:
        plan.actions.append(InstallAction(
            key="refresh-index",
            tool="apt",
            label="Update package index and upgrade packages",
            commands=[["apt", "update"], ["apt", "upgrade", "-y"]],
            needs_sudo=True,
            system_package=True,
        ))

        python = _status(statuses, config.python_binary)
        if not python.present:
            source = python_source_for(os_version, config.ubuntu_default_repo_min)
            plan.python_source = source  # type: ignore[assignment]
            plan.actions.append(_python_action(config, source))

        if not _status(statuses, "uv").present:
            plan.actions.append(InstallAction(
                key="uv",
                tool="uv",
                label="Install uv via the official install script",
                script_url=config.uv_install_url,
                script_runner=["sh"],
                path_entries=config.search_paths(),
                mandatory=True,
                reason="uv not found",
            ))
            plan.warnings.append(f"Please run: source {config.shell_rc}")
    else:
        for tool in ("python3", "uv"):
            if not _status(statuses, tool).present:
                plan.warnings.append(f"{tool} not found in container")

    # ── Optional features ────────────────────────────────────────
    for resolve in (_node_actions, _pdf_actions):
        actions, warnings = resolve(context, statuses, options, answers, config)
        plan.actions.extend(actions)
        plan.warnings.extend(warnings)

    groups, group_warnings = select_groups(options, answers, config)
    plan.groups = groups
    plan.warnings.extend(group_warnings)
    for group in groups.sorted():
        plan.actions.append(InstallAction(
            key=group_key(group),
            tool="uv",
            feature="groups",
            label=f"uv dependency group '{group}' ({config.describe_group(group)})",
            reason="installed by the dependency sync",
        ))

    # ── Project setup ────────────────────────────────────────────
    if project_dir is not None:
        sync_dir = project_dir
        if not has_marker and not context.containerized:
            if has_checkout:
                plan.actions.append(InstallAction(
                    key="clone",
                    tool="git",
                    kind=ActionKind.SKIP,
                    label=f"Clone {config.repository_url}",
                    reason=f"already cloned into {config.repository_dir}",
                ))
            else:
                plan.actions.append(InstallAction(
                    key="clone",
                    tool="git",
                    label=f"Clone {config.repository_url}",
                    commands=[["git", "clone", config.repository_url]],
                    cwd=str(project_dir),
                    mandatory=True,
                    reason=f"{config.project_marker} not found",
                ))
            sync_dir = project_dir / config.repository_dir

        sync_cmd = ["uv", "sync"]
        for group in groups.sorted():
            sync_cmd += ["--group", group]
        plan.actions.append(InstallAction(
            key="sync",
            tool="uv",
            label="Install project dependencies",
            commands=[sync_cmd],
            cwd=str(sync_dir),
            mandatory=True,
        ))

    logger.debug(
        "Plan: %d actions (%d scheduled), %d warnings",
        len(plan.actions), len(plan.scheduled()), len(plan.warnings),
    )
    return plan
