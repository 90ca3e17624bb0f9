"""EMR provisioning client — boto3 ``emr`` wrapper.

Translates the controller's value objects into EMR API payloads and the
replies back, so the rest of the package never touches raw boto3 dicts.

API mapping::

    create_cluster   → RunJobFlow
    add_steps        → AddJobFlowSteps
    describe_cluster → DescribeCluster        (returns Status.State)
    list_clusters    → ListClusters paginator (all pages)

Any botocore ``ClientError`` / ``BotoCoreError`` is re-raised as
:class:`ProviderError` carrying the AWS error code.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from emr_ingest.config.models import (
    ClusterSummary,
    LaunchResult,
    LaunchSpecification,
    NodeGroup,
    SubmissionAck,
    WorkStep,
)
from emr_ingest.errors import ProviderError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request builders
# ---------------------------------------------------------------------------


def build_step_config(step: WorkStep) -> Dict[str, Any]:
    """Render a :class:`WorkStep` as an EMR ``StepConfig``."""
    return {
        "Name": step.name,
        "ActionOnFailure": step.failure_policy.value,
        "HadoopJarStep": {
            "Jar": step.jar,
            "Args": list(step.args),
        },
    }


def build_instance_group(group: NodeGroup) -> Dict[str, Any]:
    """Render a :class:`NodeGroup` as an EMR ``InstanceGroupConfig``."""
    return {
        "InstanceRole": group.role.value,
        "InstanceType": group.instance_type,
        "InstanceCount": group.instance_count,
        "Market": group.market.value,
    }


def build_run_job_flow_request(spec: LaunchSpecification) -> Dict[str, Any]:
    """Render a :class:`LaunchSpecification` as ``RunJobFlow`` keyword arguments.

    Node groups keep their declaration order.  ``BootstrapActions`` and
    ``Steps`` are omitted when empty.
    """
    policy = spec.policy
    request: Dict[str, Any] = {
        "Name": spec.identity.name,
        "ReleaseLabel": spec.software.release_label,
        "LogUri": policy.log_uri,
        "Applications": [{"Name": app} for app in spec.software.applications],
        "ServiceRole": policy.service_role,
        "JobFlowRole": policy.job_flow_role,
        "Instances": {
            "InstanceGroups": [build_instance_group(g) for g in spec.node_groups],
            "Ec2KeyName": policy.ec2_key_name,
            "KeepJobFlowAliveWhenNoSteps": policy.keep_alive_when_no_steps,
        },
        "Tags": [{"Key": k, "Value": v} for k, v in policy.tags.items()],
    }
    if spec.bootstrap is not None:
        request["BootstrapActions"] = [
            {
                "Name": spec.bootstrap.name,
                "ScriptBootstrapAction": {"Path": spec.bootstrap.script_location},
            }
        ]
    if spec.steps:
        request["Steps"] = [build_step_config(s) for s in spec.steps]
    return request


# ---------------------------------------------------------------------------
# Status rendering
# ---------------------------------------------------------------------------


def _render(value: Any) -> str:
    if isinstance(value, dict):
        return "{" + ", ".join(f"{k}: {_render(v)}" for k, v in value.items()) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_render(v) for v in value) + "]"
    return str(value)


def render_status(status: Dict[str, Any]) -> str:
    """Render an EMR ``ClusterStatus`` dict as a flat, human-readable string.

    ``State`` always comes first.

    Examples:
        >>> render_status({"StateChangeReason": {}, "State": "WAITING"})
        '{State: WAITING, StateChangeReason: {}}'
    """
    ordered: Dict[str, Any] = {}
    if "State" in status:
        ordered["State"] = status["State"]
    ordered.update((k, v) for k, v in status.items() if k != "State")
    return _render(ordered)


def _error_code(exc: BaseException) -> str:
    """Extract the AWS error code from a ClientError-like exception."""
    resp = getattr(exc, "response", None)
    if not resp:
        return ""
    return (resp.get("Error") or {}).get("Code", "")


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class EmrProvisioningClient:
    """:class:`ProvisioningClient` backed by a boto3 ``emr`` client."""

    def __init__(self, client: Any) -> None:
        self._client = client
        self._closed = False

    @classmethod
    def from_context(cls, aws_ctx: Any) -> "EmrProvisioningClient":
        """Build from an :class:`AWSContext` (raises ``ClientInitError``)."""
        return cls(aws_ctx.client("emr"))

    @property
    def closed(self) -> bool:
        return self._closed

    def _call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        if self._closed:
            raise ProviderError(
                f"{operation} called on a closed EMR client", operation=operation,
            )
        try:
            return fn(**kwargs)
        except ClientError as exc:
            code = _error_code(exc)
            raise ProviderError(
                f"EMR {operation} failed ({code}): {exc}",
                code=code,
                operation=operation,
            ) from exc
        except BotoCoreError as exc:
            raise ProviderError(
                f"EMR {operation} failed: {exc}", operation=operation,
            ) from exc

    # -- operations -------------------------------------------------------

    def create_cluster(self, spec: LaunchSpecification) -> LaunchResult:
        request = build_run_job_flow_request(spec)
        logger.debug("RunJobFlow request: %s", request)
        resp = self._call("RunJobFlow", self._client.run_job_flow, **request)
        handle = resp.get("JobFlowId")
        if not handle:
            raise ProviderError(
                "EMR RunJobFlow returned no JobFlowId", operation="RunJobFlow",
            )
        return LaunchResult(
            cluster_handle=handle,
            submission_metadata=resp.get("ResponseMetadata", {}),
        )

    def add_steps(self, cluster_handle: str, steps: Sequence[WorkStep]) -> SubmissionAck:
        resp = self._call(
            "AddJobFlowSteps",
            self._client.add_job_flow_steps,
            JobFlowId=cluster_handle,
            Steps=[build_step_config(s) for s in steps],
        )
        return SubmissionAck(
            step_ids=tuple(resp.get("StepIds", [])),
            submission_metadata=resp.get("ResponseMetadata", {}),
        )

    def describe_status(self, cluster_handle: str) -> Dict[str, Any]:
        """Return the raw ``Cluster.Status`` dict for *cluster_handle*."""
        resp = self._call(
            "DescribeCluster", self._client.describe_cluster, ClusterId=cluster_handle,
        )
        status = (resp.get("Cluster") or {}).get("Status")
        if not status:
            raise ProviderError(
                f"EMR DescribeCluster returned no status for {cluster_handle}",
                operation="DescribeCluster",
            )
        return status

    def describe_cluster(self, cluster_handle: str) -> str:
        """Return the current provider state, e.g. ``WAITING``."""
        status = self.describe_status(cluster_handle)
        state = status.get("State")
        if not state:
            raise ProviderError(
                f"EMR DescribeCluster returned no state for {cluster_handle}",
                operation="DescribeCluster",
            )
        return state

    def list_clusters(self, states: Optional[Iterable[str]] = None) -> List[ClusterSummary]:
        """List every cluster visible to the caller, across all pages."""
        kwargs: Dict[str, Any] = {}
        if states:
            kwargs["ClusterStates"] = list(states)

        def _collect(**kw: Any) -> List[ClusterSummary]:
            summaries: List[ClusterSummary] = []
            paginator = self._client.get_paginator("list_clusters")
            for page in paginator.paginate(**kw):
                for item in page.get("Clusters", []):
                    status = item.get("Status") or {}
                    summaries.append(
                        ClusterSummary(
                            cluster_id=item.get("Id", ""),
                            name=item.get("Name", ""),
                            state=status.get("State", ""),
                            status=render_status(status),
                        )
                    )
            return summaries

        return self._call("ListClusters", _collect, **kwargs)

    def close(self) -> None:
        """Release the underlying HTTP connections.  Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        close = getattr(self._client, "close", None)
        if close is not None:
            close()
        logger.debug("EMR client closed")
