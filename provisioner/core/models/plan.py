"""
Plan models — the provisioner's decision contract.

The resolver turns an ``ExecutionContext``, a set of ``ToolStatus``
records, the parsed ``ProvisionOptions`` and any ``Answers`` into an
``InstallationPlan``.  The executor consumes the plan step by step.

Nothing here performs I/O.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from provisioner.core.models.environment import ExecutionContext

Answers = dict[str, Any]
"""Interactive answers keyed by ``Question.key`` (bool or choice string)."""


class InstallMode(str, Enum):
    """Overall policy for optional features."""

    MINIMAL = "minimal"
    FULL = "full"
    INTERACTIVE = "interactive"


class ActionKind(str, Enum):
    INSTALL = "install"
    UPGRADE = "upgrade"
    SKIP = "skip"


class OptionalGroupSelection(BaseModel):
    """Set of optional dependency groups the user opted into.

    Immutable: ``add`` returns a new selection.  Persisted in sorted
    order; iteration order is never significant.
    """

    model_config = ConfigDict(frozen=True)

    names: frozenset[str] = Field(default_factory=frozenset)

    def add(self, *groups: str) -> OptionalGroupSelection:
        return OptionalGroupSelection(names=self.names | frozenset(g for g in groups if g))

    def sorted(self) -> list[str]:
        return sorted(self.names)

    def __contains__(self, group: object) -> bool:
        return group in self.names

    def __len__(self) -> int:
        return len(self.names)

    def __bool__(self) -> bool:
        return bool(self.names)


class ProvisionOptions(BaseModel):
    """Invocation flags, parsed once.

    ``mode`` is fixed at construction.  ``with_pdf`` / ``with_charts``
    are explicit feature flags and always win over prompts.
    """

    model_config = ConfigDict(frozen=True)

    mode: InstallMode = InstallMode.INTERACTIVE
    with_pdf: bool = False
    with_charts: bool = False
    groups: OptionalGroupSelection = Field(default_factory=OptionalGroupSelection)
    force_local: bool = False
    latex_profile: Literal["full", "minimal"] | None = None

    @classmethod
    def from_flags(
        cls,
        *,
        containerized: bool,
        full: bool = False,
        minimal: bool = False,
        with_pdf: bool = False,
        with_charts: bool = False,
        groups: tuple[str, ...] | list[str] = (),
        force_local: bool = False,
        latex_profile: str | None = None,
        known_groups: tuple[str, ...] | list[str] = (),
    ) -> ProvisionOptions:
        """Build options from CLI flags.

        Default mode is minimal inside a container and interactive on
        a host.  ``--full`` implies every feature flag and every known
        group.  Flag order is not visible here: when both ``full`` and
        ``minimal`` are set, ``full`` wins, so the CLI resolves the
        order before calling.
        """
        selection = OptionalGroupSelection().add(*groups)
        if full:
            mode = InstallMode.FULL
            with_pdf = True
            with_charts = True
            selection = selection.add(*known_groups)
        elif minimal:
            mode = InstallMode.MINIMAL
        elif containerized and not force_local:
            mode = InstallMode.MINIMAL
        else:
            mode = InstallMode.INTERACTIVE

        return cls(
            mode=mode,
            with_pdf=with_pdf,
            with_charts=with_charts,
            groups=selection,
            force_local=force_local,
            latex_profile=latex_profile,  # type: ignore[arg-type]
        )


class Question(BaseModel):
    """A prompt the resolver needs answered before it can decide."""

    model_config = ConfigDict(frozen=True)

    key: str
    prompt: str
    kind: Literal["confirm", "choice"] = "confirm"
    choices: list[str] = Field(default_factory=list)
    default: Any = None


class InstallAction(BaseModel):
    """One step of the installation plan."""

    key: str                                    # unique, e.g. "node"
    tool: str                                   # tool the step affects
    feature: str = "core"                       # core, charts, pdf, groups
    kind: ActionKind = ActionKind.INSTALL
    label: str = ""
    script_url: str | None = None               # fetched, then piped to script_runner
    script_runner: list[str] = Field(default_factory=lambda: ["sh"])
    commands: list[list[str]] = Field(default_factory=list)
    cwd: str | None = None
    path_entries: list[str] = Field(default_factory=list)   # added to PATH on success
    needs_sudo: bool = False
    mandatory: bool = False
    system_package: bool = False                # touches apt / the host OS
    reason: str = ""

    @property
    def scheduled(self) -> bool:
        return self.kind != ActionKind.SKIP


class InstallationPlan(BaseModel):
    """Ordered actions plus the warnings and groups decided alongside."""

    context: ExecutionContext
    mode: InstallMode
    actions: list[InstallAction] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    groups: OptionalGroupSelection = Field(default_factory=OptionalGroupSelection)
    python_source: Literal["default", "alternate"] | None = None

    def scheduled(self) -> list[InstallAction]:
        """Actions that will actually run."""
        return [a for a in self.actions if a.scheduled]

    def get(self, key: str) -> InstallAction | None:
        for action in self.actions:
            if action.key == key:
                return action
        return None

    def features(self) -> set[str]:
        """Features that have at least one entry (scheduled or re-checked)."""
        return {a.feature for a in self.actions}

    def has_system_packages(self) -> bool:
        return any(a.system_package for a in self.scheduled())

    def to_dict(self) -> dict:
        return {
            "context": self.context.label,
            "mode": self.mode.value,
            "python_source": self.python_source,
            "groups": self.groups.sorted(),
            "warnings": list(self.warnings),
            "actions": [
                {
                    "key": a.key,
                    "tool": a.tool,
                    "feature": a.feature,
                    "kind": a.kind.value,
                    "label": a.label,
                    "mandatory": a.mandatory,
                    "needs_sudo": a.needs_sudo,
                    "script_url": a.script_url,
                    "commands": [" ".join(c) for c in a.commands],
                    "reason": a.reason,
                }
                for a in self.actions
            ],
        }
