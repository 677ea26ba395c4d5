"""
L5 Orchestration — Answer collection (the interactive I/O boundary).

The resolver never prompts.  It exposes ``next_question``; this module
loops over it with a ``Prompter`` until every question that matters
has an answer, then hands the answers to ``build_plan``.
"""

from __future__ import annotations

import logging
from typing import Any

from provisioner.core.config.loader import ProvisionConfig
from provisioner.core.models.environment import ExecutionContext, ToolStatus
from provisioner.core.models.plan import Answers, ProvisionOptions, Question
from provisioner.core.services.provision.resolver.questions import next_question

logger = logging.getLogger(__name__)


class Prompter:
    """Answers questions.  The base class accepts every default."""

    def ask(self, question: Question) -> Any:
        return question.default

    def confirm(self, prompt: str, default: bool = False) -> bool:
        return default


def collect_answers(
    prompter: Prompter,
    context: ExecutionContext,
    statuses: dict[str, ToolStatus],
    options: ProvisionOptions,
    config: ProvisionConfig,
) -> Answers:
    """Ask every question ``next_question`` produces, in order."""
    answers: Answers = {}
    while (question := next_question(context, statuses, options, answers, config)) is not None:
        answers[question.key] = prompter.ask(question)
        logger.debug("Answer %s=%r", question.key, answers[question.key])
    return answers
