"""
L2 Resolver — Which questions still need a human answer.

Pure.  A question is only asked when no explicit flag already decided
the outcome AND the mode is interactive.  The plan builder reads the
same helpers, so a question exists exactly where an answer changes
the plan.
"""

from __future__ import annotations

from provisioner.core.config.loader import ProvisionConfig
from provisioner.core.models.environment import ExecutionContext, ToolStatus
from provisioner.core.models.plan import Answers, InstallMode, ProvisionOptions, Question
from provisioner.core.services.provision.data.constants import LATEX_PROFILE_LABELS


def group_key(group: str) -> str:
    return f"group:{group}"


def _status(statuses: dict[str, ToolStatus], tool: str) -> ToolStatus:
    return statuses.get(tool) or ToolStatus.absent(tool)


def node_major(statuses: dict[str, ToolStatus]) -> int:
    node = _status(statuses, "node")
    return node.major if node.present else 0


def considers_pdf(options: ProvisionOptions) -> bool:
    """PDF tooling is only looked at outside minimal mode or when requested."""
    return options.mode != InstallMode.MINIMAL or requests_pdf(options)


def pdf_ready(statuses: dict[str, ToolStatus]) -> bool:
    pandoc = _status(statuses, "pandoc")
    latex = _status(statuses, "pdflatex")
    return pandoc.present and pandoc.meets_minimum and latex.present


def requests_charts(options: ProvisionOptions) -> bool:
    """Charts asked for up front: the flag, or full mode."""
    return options.with_charts or options.mode == InstallMode.FULL


def requests_pdf(options: ProvisionOptions) -> bool:
    """PDF export asked for up front: the flag, or full mode."""
    return options.with_pdf or options.mode == InstallMode.FULL


def wants_pdf(options: ProvisionOptions, answers: Answers) -> bool:
    """Explicit request, else the interactive answer (unanswered = no)."""
    if requests_pdf(options):
        return True
    return options.mode == InstallMode.INTERACTIVE and bool(answers.get("pdf", False))


def charts_question(
    context: ExecutionContext,
    statuses: dict[str, ToolStatus],
    options: ProvisionOptions,
    config: ProvisionConfig,
) -> Question | None:
    if options.mode != InstallMode.INTERACTIVE or requests_charts(options):
        return None
    if context.containerized or node_major(statuses) >= config.node_baseline:
        return None
    return Question(
        key="charts",
        prompt=f"Install or upgrade Node.js to version {config.node_target}+ now?",
        default=False,
    )


def pdf_question(
    statuses: dict[str, ToolStatus],
    options: ProvisionOptions,
) -> Question | None:
    if options.mode != InstallMode.INTERACTIVE or requests_pdf(options):
        return None
    if not considers_pdf(options) or pdf_ready(statuses):
        return None
    return Question(
        key="pdf",
        prompt="Install Pandoc + LaTeX for PDF/DOCX report export?",
        default=False,
    )


def latex_question(
    context: ExecutionContext,
    statuses: dict[str, ToolStatus],
    options: ProvisionOptions,
    answers: Answers,
) -> Question | None:
    if options.mode != InstallMode.INTERACTIVE or options.latex_profile:
        return None
    if context.containerized or not considers_pdf(options):
        return None
    if not wants_pdf(options, answers) or _status(statuses, "pdflatex").present:
        return None
    return Question(
        key="latex_profile",
        prompt="Choose TeX Live installation size",
        kind="choice",
        choices=list(LATEX_PROFILE_LABELS),
        default="full",
    )


def group_questions(options: ProvisionOptions, config: ProvisionConfig) -> list[Question]:
    if options.mode != InstallMode.INTERACTIVE:
        return []
    return [
        Question(
            key=group_key(group),
            prompt=(
                "Install optional third-party packages via uv? "
                f"({config.describe_group(group)})"
            ),
            default=False,
        )
        for group in sorted(config.optional_groups)
        if group not in options.groups
    ]


def next_question(
    context: ExecutionContext,
    statuses: dict[str, ToolStatus],
    options: ProvisionOptions,
    answers: Answers,
    config: ProvisionConfig,
) -> Question | None:
    """The next unanswered question whose answer matters, or None.

    Callers loop: ask, store the answer under ``question.key``, call
    again.  Later questions may depend on earlier answers (the TeX Live
    size is only asked once PDF export was accepted).
    """
    candidates = [
        charts_question(context, statuses, options, config),
        pdf_question(statuses, options),
        latex_question(context, statuses, options, answers),
        *group_questions(options, config),
    ]
    for question in candidates:
        if question is not None and question.key not in answers:
            return question
    return None
