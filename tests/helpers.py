"""
Test helpers — status factories and a recording command runner.
"""

from __future__ import annotations

from typing import Any

from provisioner.core.models.environment import ToolStatus
from provisioner.core.models.plan import Question
from provisioner.core.services.provision.domain.version import (
    extract_version,
    meets_major,
    parse_major,
)
from provisioner.core.services.provision.orchestration.prompts import Prompter


def make_status(tool: str, version: str | None, minimum: int | None = None) -> ToolStatus:
    """ToolStatus as probe_tool would build it from a version line."""
    if version is None:
        return ToolStatus.absent(tool, minimum)
    major = parse_major(extract_version(version))
    return ToolStatus(
        tool=tool,
        present=True,
        version=version,
        major=major,
        minimum=minimum,
        meets_minimum=meets_major(major, minimum),
    )


def make_statuses(
    *,
    python: str | None = "Python 3.12.3",
    uv: str | None = "uv 0.4.18",
    node: str | None = "v22.9.0",
    pandoc: str | None = "pandoc 3.1.11",
    pdflatex: str | None = "pdfTeX 3.141592653-2.6-1.40.25 (TeX Live 2023/Debian)",
    interpreter: str = "python3.12",
) -> dict[str, ToolStatus]:
    """A fully provisioned host unless overridden."""
    return {
        interpreter: make_status(interpreter, python),
        "uv": make_status("uv", uv),
        "node": make_status("node", node, 18),
        "pandoc": make_status("pandoc", pandoc, 3),
        "pdflatex": make_status("pdflatex", pdflatex),
    }


class FakeRunner:
    """Stands in for _run_subprocess; records every call.

    Any command whose joined text contains a token in ``fail`` fails.
    """

    def __init__(self, fail: set[str] | None = None, stdout: str = "") -> None:
        self.calls: list[dict] = []
        self.fail = fail or set()
        self.stdout = stdout

    def __call__(self, cmd, **kwargs):
        self.calls.append({"cmd": list(cmd), **kwargs})
        joined = " ".join(cmd)
        if any(token in joined for token in self.fail):
            return {"ok": False, "error": "Command failed (exit 1)", "stderr": "boom"}
        return {"ok": True, "stdout": self.stdout, "elapsed_ms": 1}

    def commands(self) -> list[str]:
        return [" ".join(c["cmd"]) for c in self.calls]


class ScriptedPrompter(Prompter):
    """Answers from a fixed mapping; unknown keys get the default."""

    def __init__(self, answers: dict[str, Any] | None = None, *, confirm_all: bool | None = None) -> None:
        self.answers = dict(answers or {})
        self.confirm_all = confirm_all
        self.asked: list[str] = []

    def ask(self, question: Question) -> Any:
        self.asked.append(question.key)
        if question.key in self.answers:
            return self.answers[question.key]
        return question.default

    def confirm(self, prompt: str, default: bool = False) -> bool:
        self.asked.append(prompt)
        return default if self.confirm_all is None else self.confirm_all
