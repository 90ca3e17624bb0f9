"""Collaborator interfaces the controller depends on.

The AWS-backed implementations live in :mod:`emr_ingest.aws`; tests pass
``MagicMock`` objects that satisfy the same shape.
"""

from __future__ import annotations

from typing import Any, List, Protocol, Sequence

from emr_ingest.config.models import (
    ClusterSummary,
    LaunchResult,
    LaunchSpecification,
    SubmissionAck,
    WorkStep,
)


class CredentialProvider(Protocol):
    """Resolves an identity usable to call the provisioning API."""

    def resolve(self, profile: str) -> Any:
        """Return credentials for *profile* or raise ``CredentialError``."""
        ...


class ProvisioningClient(Protocol):
    """Remote cluster-provisioning surface.  Every method raises ``ProviderError``."""

    def create_cluster(self, spec: LaunchSpecification) -> LaunchResult:
        ...

    def add_steps(self, cluster_handle: str, steps: Sequence[WorkStep]) -> SubmissionAck:
        ...

    def describe_cluster(self, cluster_handle: str) -> str:
        ...

    def list_clusters(self) -> List[ClusterSummary]:
        ...

    def close(self) -> None:
        ...
