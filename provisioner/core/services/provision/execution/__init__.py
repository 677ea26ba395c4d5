"""
L4 Execution — runs plan steps through external commands.
"""

from provisioner.core.services.provision.execution.step_executors import (  # noqa: F401
    ExecutionReport,
    RunEnvironment,
    execute_action,
    execute_plan,
)
