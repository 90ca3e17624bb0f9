"""Launch configuration models and cluster description loading."""

from emr_ingest.config.loader import (
    ClusterConfig,
    CoreGroupConfig,
    apply_to_builder,
    load_cluster_config,
)
from emr_ingest.config.models import (
    ACTIVE_STATES,
    TERMINAL_STATES,
    BootstrapAction,
    ClusterIdentity,
    ClusterSummary,
    ControllerState,
    FailurePolicy,
    LaunchPolicy,
    LaunchResult,
    LaunchSpecification,
    Market,
    NodeGroup,
    NodeRole,
    SoftwareProfile,
    SubmissionAck,
    WorkStep,
)

__all__ = [
    "ACTIVE_STATES",
    "BootstrapAction",
    "ClusterConfig",
    "ClusterIdentity",
    "ClusterSummary",
    "ControllerState",
    "CoreGroupConfig",
    "FailurePolicy",
    "LaunchPolicy",
    "LaunchResult",
    "LaunchSpecification",
    "Market",
    "NodeGroup",
    "NodeRole",
    "SoftwareProfile",
    "SubmissionAck",
    "TERMINAL_STATES",
    "WorkStep",
    "apply_to_builder",
    "load_cluster_config",
]
