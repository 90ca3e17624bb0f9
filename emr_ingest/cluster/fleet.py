"""Fleet-wide cluster queries, independent of any controller instance.

Each call builds a fresh credential/client pair for the requested region,
issues one listing, and closes the client again.

Matching rules (default, loose)::

    name matches   ⇔  <name> is a substring of the cluster name
    running        ⇔  the rendered status contains "State: WAITING"

With ``exact=True`` the name must be equal and the bare state must be
``WAITING``.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from emr_ingest.aws.context import AWSContext
from emr_ingest.aws.emr import EmrProvisioningClient
from emr_ingest.cluster.interfaces import ProvisioningClient
from emr_ingest.config.models import STATE_WAITING, ClusterSummary
from emr_ingest.errors import ProviderError, StatusUnavailable

logger = logging.getLogger(__name__)

#: Literal token searched for in the rendered status string.
WAITING_TOKEN = f"State: {STATE_WAITING}"

ClientFactory = Callable[[str, Optional[str]], ProvisioningClient]


def default_client_factory(region: str, profile: Optional[str] = None) -> EmrProvisioningClient:
    """Resolve credentials and build a boto3-backed EMR client for *region*."""
    return EmrProvisioningClient.from_context(AWSContext.build(region, profile))


def _is_waiting(summary: ClusterSummary, name: str, exact: bool) -> bool:
    if exact:
        return summary.name == name and summary.state == STATE_WAITING
    return name in summary.name and WAITING_TOKEN in summary.status


def find_clusters(
    name: str,
    region: str,
    *,
    profile: Optional[str] = None,
    client_factory: Optional[ClientFactory] = None,
    exact: bool = False,
) -> List[ClusterSummary]:
    """Return the clusters in *region* named like *name* that are WAITING.

    Raises:
        StatusUnavailable: The listing call failed.
    """
    factory = client_factory or default_client_factory
    client = factory(region, profile)
    try:
        try:
            summaries = client.list_clusters()
        except ProviderError as exc:
            raise StatusUnavailable(
                f"Unable to list clusters in {region}: {exc}"
            ) from exc
    finally:
        client.close()

    matches = [s for s in summaries if _is_waiting(s, name, exact)]
    logger.debug(
        "%d of %d clusters in %s match '%s' and are waiting",
        len(matches), len(summaries), region, name,
    )
    return matches


def is_cluster_running(
    name: str,
    region: str,
    *,
    profile: Optional[str] = None,
    client_factory: Optional[ClientFactory] = None,
    exact: bool = False,
) -> bool:
    """Return True iff a WAITING cluster named like *name* exists in *region*."""
    return bool(
        find_clusters(
            name,
            region,
            profile=profile,
            client_factory=client_factory,
            exact=exact,
        )
    )
