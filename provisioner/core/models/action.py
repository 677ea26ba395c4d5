"""
Receipt and verification models — the execution contract.

The executor returns a Receipt for every plan step.  Failures of
optional steps are captured here, never raised.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of executing one plan step."""

    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    # The executor passes started_at before the step runs; ended_at is
    # stamped when the receipt is built, after it finished.
    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the step succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the step failed."""
        return self.status == "failed"

    @classmethod
    def success(cls, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, action_id: str, error: str, **kwargs: Any) -> Receipt:
        """Create a failure receipt."""
        return cls(action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Create a skip receipt."""
        return cls(action_id=action_id, status="skipped", output=reason, **kwargs)


class VerificationRow(BaseModel):
    """One line of the post-run verification table."""

    name: str
    status: Literal["satisfied", "degraded", "missing"] = "missing"
    detail: str = ""
    error: bool = False     # missing where an install was attempted

    def to_dict(self) -> dict:
        return self.model_dump()
