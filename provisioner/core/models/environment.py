"""
Environment models — what the provisioner observed about the host.

Both models are built once by the detection layer and never mutated
afterwards; the resolver only reads them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExecutionContext(BaseModel):
    """Containerized vs bare-metal host.

    ``markers`` lists the probes that fired (``/.dockerenv``,
    ``cgroup:docker`` ...) so status output can explain the verdict.
    """

    model_config = ConfigDict(frozen=True)

    containerized: bool = False
    markers: list[str] = Field(default_factory=list)
    forced_local: bool = False

    @property
    def label(self) -> str:
        return "container" if self.containerized else "local"


class ToolStatus(BaseModel):
    """Presence and version sufficiency of one external tool."""

    model_config = ConfigDict(frozen=True)

    tool: str
    present: bool = False
    version: str | None = None      # raw first line of the version query
    major: int = 0                  # 0 when absent or unparseable
    minimum: int | None = None      # None = presence is enough
    meets_minimum: bool = False

    @classmethod
    def absent(cls, tool: str, minimum: int | None = None) -> ToolStatus:
        """Status for a tool that is not on the search path."""
        return cls(tool=tool, minimum=minimum)

    def to_dict(self) -> dict:
        return self.model_dump()
