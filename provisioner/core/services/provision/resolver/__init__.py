"""
L2 Resolver — decides what to install and what to ask.

Pure: takes already-probed status and already-collected answers.
"""

from provisioner.core.services.provision.resolver.plan_resolution import (  # noqa: F401
    build_plan,
    select_groups,
)
from provisioner.core.services.provision.resolver.questions import (  # noqa: F401
    next_question,
)
