"""
Terminal I/O for the CLI — colored progress lines and prompts.

Thin adapters over ``click``; the core never imports this module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import click

from provisioner.core.models.plan import Question
from provisioner.core.observability.reporter import Reporter
from provisioner.core.services.provision.data.constants import LATEX_PROFILE_LABELS
from provisioner.core.services.provision.orchestration.prompts import Prompter

_RULE = "═" * 59

_STYLES: dict[str, tuple[str, str]] = {
    "success": ("✓ ", "green"),
    "warning": ("⚠ ", "yellow"),
    "error": ("✗ ", "red"),
}


@dataclass
class ConsoleReporter(Reporter):
    """Reporter that also prints, ✓ / ⚠ / ✗ tagged."""

    quiet: bool = False

    def render(self, severity: str, message: str) -> None:
        if severity == "header":
            if self.quiet:
                return
            click.echo()
            click.secho(_RULE, fg="blue")
            click.secho(message, fg="blue", bold=True)
            click.secho(_RULE, fg="blue")
            click.echo()
            return
        if severity == "info":
            if not self.quiet:
                click.echo(message)
            return
        if self.quiet and severity == "success":
            return
        icon, color = _STYLES.get(severity, ("", "white"))
        click.secho(f"{icon}{message}", fg=color, err=severity == "error")


class ClickPrompter(Prompter):
    """Interactive prompts via ``click.confirm`` / ``click.prompt``."""

    def ask(self, question: Question) -> Any:
        if question.kind == "choice":
            click.echo()
            for i, choice in enumerate(question.choices, start=1):
                click.echo(f"{i}) {LATEX_PROFILE_LABELS.get(choice, choice)}")
            click.echo()
            picked = click.prompt(
                question.prompt,
                type=click.IntRange(1, len(question.choices)),
                default=question.choices.index(question.default) + 1
                if question.default in question.choices else 1,
            )
            return question.choices[picked - 1]
        return click.confirm(
            click.style(question.prompt, fg="yellow"),
            default=bool(question.default),
        )

    def confirm(self, prompt: str, default: bool = False) -> bool:
        return click.confirm(click.style(prompt, fg="yellow"), default=default)
