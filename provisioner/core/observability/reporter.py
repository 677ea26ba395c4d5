"""
Reporter — severity-tagged, human-readable progress lines.

The provisioner is an interactive bootstrap tool, so failures surface
as ✓ / ⚠ / ✗ lines rather than structured errors.  The base Reporter
only records events (tests read ``events``) and mirrors them to the
module logger; the CLI swaps in a subclass that also prints.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class Reporter:
    """Collects progress events in order."""

    events: list[tuple[str, str]] = field(default_factory=list)

    def _emit(self, severity: str, message: str) -> None:
        self.events.append((severity, message))
        logger.debug("[%s] %s", severity, message)
        self.render(severity, message)

    def render(self, severity: str, message: str) -> None:
        """Hook for subclasses that print."""

    def header(self, message: str) -> None:
        self._emit("header", message)

    def info(self, message: str) -> None:
        self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def messages(self, severity: str) -> list[str]:
        return [m for s, m in self.events if s == severity]
