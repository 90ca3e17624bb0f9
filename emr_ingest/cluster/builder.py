"""Incremental assembly of a :class:`LaunchSpecification`.

Setters check their own arguments immediately; checks that span several
settings (profile present, exactly one MASTER group) run in :meth:`build`,
which the controller calls at launch time.

``add_master_node`` appends a new MASTER group on every call.  A second call
is a caller error that surfaces as :class:`ValidationError` from ``build``;
it is not silently de-duplicated.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from emr_ingest.config.models import (
    DEFAULT_BOOTSTRAP_NAME,
    BootstrapAction,
    ClusterIdentity,
    LaunchPolicy,
    LaunchSpecification,
    NodeGroup,
    NodeRole,
    SoftwareProfile,
)
from emr_ingest.errors import ValidationError

logger = logging.getLogger(__name__)


def _invalid(exc: PydanticValidationError) -> ValidationError:
    messages = "; ".join(err["msg"] for err in exc.errors())
    return ValidationError(messages)


class ClusterSpecBuilder:
    """Accumulates software, bootstrap and topology settings for one cluster."""

    def __init__(self, identity: ClusterIdentity) -> None:
        self.identity = identity
        self._software: Optional[SoftwareProfile] = None
        self._bootstrap: Optional[BootstrapAction] = None
        self._node_groups: List[NodeGroup] = []
        self._policy = LaunchPolicy()

    # -- setters ----------------------------------------------------------

    def set_software_profile(
        self, release_label: str, applications: Union[str, Iterable[str]],
    ) -> "ClusterSpecBuilder":
        """Replace the software profile.  A bare string names a single application."""
        try:
            self._software = SoftwareProfile(
                release_label=release_label, applications=applications,
            )
        except PydanticValidationError as exc:
            raise _invalid(exc) from exc
        return self

    def set_bootstrap_action(
        self, script_location: str, name: str = DEFAULT_BOOTSTRAP_NAME,
    ) -> "ClusterSpecBuilder":
        """Replace the bootstrap action.  The location is not checked for reachability."""
        try:
            self._bootstrap = BootstrapAction(script_location=script_location, name=name)
        except PydanticValidationError as exc:
            raise _invalid(exc) from exc
        return self

    def add_master_node(self, instance_type: str) -> "ClusterSpecBuilder":
        """Append a MASTER group of exactly one instance."""
        return self._add_group(NodeRole.MASTER, instance_type, 1)

    def add_core_node(self, instance_type: str, instance_count: int) -> "ClusterSpecBuilder":
        """Append a CORE group.  Groups of the same type are never merged."""
        return self._add_group(NodeRole.CORE, instance_type, instance_count)

    def set_policy(self, policy: LaunchPolicy) -> "ClusterSpecBuilder":
        """Replace the fixed launch policy fields."""
        self._policy = policy
        return self

    def _add_group(self, role: NodeRole, instance_type: str, count: int) -> "ClusterSpecBuilder":
        try:
            group = NodeGroup(role=role, instance_type=instance_type, instance_count=count)
        except PydanticValidationError as exc:
            raise _invalid(exc) from exc
        self._node_groups.append(group)
        logger.debug("Added %s group %s x%d", role.value, instance_type, count)
        return self

    # -- accessors --------------------------------------------------------

    @property
    def software(self) -> Optional[SoftwareProfile]:
        return self._software

    @property
    def bootstrap(self) -> Optional[BootstrapAction]:
        return self._bootstrap

    @property
    def node_groups(self) -> tuple:
        return tuple(self._node_groups)

    @property
    def policy(self) -> LaunchPolicy:
        return self._policy

    # -- finalize ---------------------------------------------------------

    def build(self) -> LaunchSpecification:
        """Validate the accumulated settings and return an immutable specification.

        Raises:
            ValidationError: No software profile, no node groups, or a
                MASTER group count other than one.
        """
        if self._software is None:
            raise ValidationError(
                f"Cluster '{self.identity.name}' has no software profile; "
                "call set_software_profile() before launch."
            )
        if not self._node_groups:
            raise ValidationError(
                f"Cluster '{self.identity.name}' has no node groups; "
                "add at least a MASTER node before launch."
            )
        masters = sum(1 for g in self._node_groups if g.role == NodeRole.MASTER)
        if masters != 1:
            raise ValidationError(
                f"Cluster '{self.identity.name}' must have exactly one MASTER "
                f"group, found {masters}."
            )
        return LaunchSpecification(
            identity=self.identity,
            software=self._software,
            bootstrap=self._bootstrap,
            node_groups=tuple(self._node_groups),
            policy=self._policy,
        )
