"""
Domain models — Pydantic types for the provisioner.

All models are re-exported here for convenient access:

    from provisioner.core.models import ExecutionContext, ToolStatus, InstallationPlan
"""

from provisioner.core.models.action import Receipt, VerificationRow
from provisioner.core.models.environment import ExecutionContext, ToolStatus
from provisioner.core.models.plan import (
    ActionKind,
    Answers,
    InstallAction,
    InstallationPlan,
    InstallMode,
    OptionalGroupSelection,
    ProvisionOptions,
    Question,
)

__all__ = [
    "ActionKind",
    "Answers",
    "ExecutionContext",
    "InstallAction",
    "InstallationPlan",
    "InstallMode",
    "OptionalGroupSelection",
    "ProvisionOptions",
    "Question",
    "Receipt",
    "ToolStatus",
    "VerificationRow",
]
