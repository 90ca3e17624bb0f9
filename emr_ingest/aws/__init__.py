"""AWS service interactions (credentials, EMR)."""

from emr_ingest.aws.context import (
    AWSContext,
    ProfileCredentialProvider,
    resolve_profile,
    resolve_region,
)
from emr_ingest.aws.emr import (
    EmrProvisioningClient,
    build_instance_group,
    build_run_job_flow_request,
    build_step_config,
    render_status,
)

__all__ = [
    "AWSContext",
    "EmrProvisioningClient",
    "ProfileCredentialProvider",
    "build_instance_group",
    "build_run_job_flow_request",
    "build_step_config",
    "render_status",
    "resolve_profile",
    "resolve_region",
]
