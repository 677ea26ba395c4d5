"""
L3 Detection — ``__init__.py`` re-exports all detection functions.

These functions READ system state but never WRITE.
"""

from provisioner.core.services.provision.detection.environment import (  # noqa: F401
    detect_context,
    detect_os_version,
)
from provisioner.core.services.provision.detection.tool_version import (  # noqa: F401
    VERSION_COMMANDS,
    probe_tool,
    probe_tools,
    search_path,
)
