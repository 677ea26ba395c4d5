"""L5 Orchestration — the provisioning run end to end."""

from provisioner.core.services.provision.orchestration.orchestrator import (  # noqa: F401
    ProvisionResult,
    prepare_plan,
    run_provision,
)
