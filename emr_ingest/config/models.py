"""Pydantic models for EMR cluster launch configuration.

Defines the immutable value objects passed between the builder, the
controller and the provisioning client:

- node topology (:class:`NodeGroup`) and software (:class:`SoftwareProfile`)
- the optional :class:`BootstrapAction`
- fixed launch policy fields (:class:`LaunchPolicy`)
- the assembled :class:`LaunchSpecification` and the provider's replies
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_BOOTSTRAP_NAME = "Bootstrap action before Hadoop starts"

DEFAULT_LOG_URI = "s3://batchdataingestion/log"
DEFAULT_SERVICE_ROLE = "EMR_DefaultRole"
DEFAULT_JOB_FLOW_ROLE = "EMR_EC2_DefaultRole"
DEFAULT_EC2_KEY_NAME = "MyFrankfurtKey"
DEFAULT_TAGS: Dict[str, str] = {"EMR": "DataIngestion"}


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class NodeRole(str, Enum):
    """Role of an instance group in the cluster topology."""

    MASTER = "MASTER"
    CORE = "CORE"


class Market(str, Enum):
    """Purchasing option for an instance group."""

    ON_DEMAND = "ON_DEMAND"


class FailurePolicy(str, Enum):
    """What EMR does with the cluster when a step fails."""

    CONTINUE = "CONTINUE"
    TERMINATE_CLUSTER = "TERMINATE_CLUSTER"


class ControllerState(str, Enum):
    """Local lifecycle state of a :class:`ClusterController`."""

    UNLAUNCHED = "UNLAUNCHED"
    LAUNCHED = "LAUNCHED"
    LAUNCH_FAILED = "LAUNCH_FAILED"


#: Provider states in which the cluster accepts or runs steps.
ACTIVE_STATES = frozenset({
    "STARTING",
    "BOOTSTRAPPING",
    "RUNNING",
    "WAITING",
})

#: Provider states from which the cluster never comes back.
TERMINAL_STATES = frozenset({
    "TERMINATING",
    "TERMINATED",
    "TERMINATED_WITH_ERRORS",
})

STATE_WAITING = "WAITING"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_FROZEN = ConfigDict(frozen=True)


def _require_text(value: str, what: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{what} must not be empty")
    return value


# ---------------------------------------------------------------------------
# Launch building blocks
# ---------------------------------------------------------------------------


class ClusterIdentity(BaseModel):
    """Human-facing label of a cluster: its name and AWS region."""

    model_config = _FROZEN

    name: str
    region: str

    @field_validator("name", "region")
    @classmethod
    def _non_blank(cls, v: str, info: Any) -> str:
        return _require_text(v, info.field_name)


class SoftwareProfile(BaseModel):
    """EMR release label plus the ordered set of applications to install.

    Duplicate application names collapse onto their first occurrence.
    """

    model_config = _FROZEN

    release_label: str
    applications: Tuple[str, ...]

    @field_validator("release_label")
    @classmethod
    def _label_non_blank(cls, v: str) -> str:
        return _require_text(v, "release_label")

    @field_validator("applications", mode="before")
    @classmethod
    def _ordered_unique(cls, v: Any) -> Tuple[str, ...]:
        if isinstance(v, str):
            v = [v]
        names = list(v or [])
        if not names:
            raise ValueError("applications must not be empty")
        seen: Dict[str, None] = {}
        for name in names:
            seen.setdefault(_require_text(str(name), "application name"), None)
        return tuple(seen)


class BootstrapAction(BaseModel):
    """Script EMR runs on every node before the software stack starts."""

    model_config = _FROZEN

    script_location: str
    name: str = DEFAULT_BOOTSTRAP_NAME

    @field_validator("script_location", "name")
    @classmethod
    def _non_blank(cls, v: str, info: Any) -> str:
        return _require_text(v, info.field_name)


class NodeGroup(BaseModel):
    """A set of identically-configured instances fulfilling one role."""

    model_config = _FROZEN

    role: NodeRole
    instance_type: str
    instance_count: int = Field(ge=1)
    market: Market = Market.ON_DEMAND

    @field_validator("instance_type")
    @classmethod
    def _type_non_blank(cls, v: str) -> str:
        return _require_text(v, "instance_type")


class LaunchPolicy(BaseModel):
    """Fixed policy fields sent with every launch request."""

    model_config = _FROZEN

    log_uri: str = DEFAULT_LOG_URI
    service_role: str = DEFAULT_SERVICE_ROLE
    job_flow_role: str = DEFAULT_JOB_FLOW_ROLE
    ec2_key_name: str = DEFAULT_EC2_KEY_NAME
    keep_alive_when_no_steps: bool = True
    tags: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TAGS))


class WorkStep(BaseModel):
    """A single named unit of work executed by a jar on the cluster."""

    model_config = _FROZEN

    name: str
    jar: str
    args: Tuple[str, ...] = ()
    failure_policy: FailurePolicy = FailurePolicy.CONTINUE

    @field_validator("name", "jar")
    @classmethod
    def _non_blank(cls, v: str, info: Any) -> str:
        return _require_text(v, info.field_name)


# ---------------------------------------------------------------------------
# Aggregate + results
# ---------------------------------------------------------------------------


class LaunchSpecification(BaseModel):
    """Everything needed to issue one create-cluster request.

    Produced by :meth:`ClusterSpecBuilder.build`; never mutated afterwards.
    """

    model_config = _FROZEN

    identity: ClusterIdentity
    software: SoftwareProfile
    bootstrap: Optional[BootstrapAction] = None
    node_groups: Tuple[NodeGroup, ...]
    policy: LaunchPolicy = Field(default_factory=LaunchPolicy)
    steps: Tuple[WorkStep, ...] = ()

    def groups_for(self, role: NodeRole) -> Tuple[NodeGroup, ...]:
        """Node groups with *role*, in declaration order."""
        return tuple(g for g in self.node_groups if g.role == role)

    def with_steps(self, *steps: WorkStep) -> "LaunchSpecification":
        """Return a copy whose launch request carries *steps* up front."""
        return self.model_copy(update={"steps": tuple(steps) + self.steps})


class LaunchResult(BaseModel):
    """Provider reply to a successful create-cluster request."""

    model_config = _FROZEN

    cluster_handle: str
    submission_metadata: Dict[str, Any] = Field(default_factory=dict)


class SubmissionAck(BaseModel):
    """Provider reply to an add-steps request."""

    model_config = _FROZEN

    step_ids: Tuple[str, ...] = ()
    submission_metadata: Dict[str, Any] = Field(default_factory=dict)


class ClusterSummary(BaseModel):
    """One entry of a fleet listing.

    Attributes:
        cluster_id: EMR cluster handle.
        name: Cluster name as shown in the console.
        state: Bare provider state, e.g. ``WAITING``.
        status: Rendered status string, e.g.
            ``{State: WAITING, StateChangeReason: {Message: Cluster ready}}``.
    """

    model_config = _FROZEN

    cluster_id: str = ""
    name: str
    state: str = ""
    status: str = ""
