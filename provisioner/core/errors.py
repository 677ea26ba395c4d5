"""
Provisioner error taxonomy.

Only mandatory failures travel as exceptions.  Probe failures are
folded into ``ToolStatus`` and optional failures into failed
``Receipt`` objects, so neither ever reaches the caller as a raise.
"""

from __future__ import annotations


class ProvisionError(Exception):
    """Base class for provisioner errors."""


class MandatoryActionFailure(ProvisionError):
    """A step the run cannot continue without has failed.

    Raised for the project dependency sync, the repository clone and
    the missing project marker inside a container.
    """

    def __init__(self, action: str, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.action = action
        self.stderr = stderr
