"""Cluster specification, launch, step submission and status queries."""

from emr_ingest.cluster.builder import ClusterSpecBuilder
from emr_ingest.cluster.controller import ClusterController
from emr_ingest.cluster.fleet import (
    WAITING_TOKEN,
    default_client_factory,
    find_clusters,
    is_cluster_running,
)
from emr_ingest.cluster.interfaces import CredentialProvider, ProvisioningClient
from emr_ingest.cluster.steps import (
    COMMAND_RUNNER_JAR,
    DEBUGGING_COMMAND,
    DEBUGGING_STEP_NAME,
    SCRIPT_RUNNER_JAR,
    make_debugging_step,
    make_job_step,
    script_runner_jar,
)

__all__ = [
    "COMMAND_RUNNER_JAR",
    "ClusterController",
    "ClusterSpecBuilder",
    "CredentialProvider",
    "DEBUGGING_COMMAND",
    "DEBUGGING_STEP_NAME",
    "ProvisioningClient",
    "SCRIPT_RUNNER_JAR",
    "WAITING_TOKEN",
    "default_client_factory",
    "find_clusters",
    "is_cluster_running",
    "make_debugging_step",
    "make_job_step",
    "script_runner_jar",
]
