"""
Provisioning service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate layer (data → domain → resolver → detection → execution
→ orchestration)::

    from provisioner.core.services.provision import build_plan, run_provision
"""

# ── L1: Domain ──
from provisioner.core.services.provision.domain.version import (  # noqa: F401
    parse_major,
    python_source_for,
    version_at_least,
)

# ── L2: Resolver ──
from provisioner.core.services.provision.resolver.plan_resolution import (  # noqa: F401
    build_plan,
    select_groups,
)
from provisioner.core.services.provision.resolver.questions import (  # noqa: F401
    next_question,
)

# ── L3: Detection ──
from provisioner.core.services.provision.detection.environment import (  # noqa: F401
    detect_context,
    detect_os_version,
)
from provisioner.core.services.provision.detection.tool_version import (  # noqa: F401
    probe_tool,
    probe_tools,
)

# ── L4: Execution ──
from provisioner.core.services.provision.execution.step_executors import (  # noqa: F401
    execute_plan,
)

# ── L5: Orchestration ──
from provisioner.core.services.provision.orchestration.orchestrator import (  # noqa: F401
    ProvisionResult,
    prepare_plan,
    run_provision,
)
