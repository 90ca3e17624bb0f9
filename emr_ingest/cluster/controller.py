"""ClusterController — launch an EMR cluster, feed it steps, read its state.

Local lifecycle::

    UNLAUNCHED ──launch ok──▶ LAUNCHED
        │                        ▲
        └──launch fails──▶ LAUNCH_FAILED ──launch ok──┘

``submit_step`` and ``get_state`` require LAUNCHED; a second ``launch`` on a
LAUNCHED controller raises :class:`StateError`.  Provider-side states
(STARTING, WAITING, TERMINATED, ...) are never tracked locally; read them with
:meth:`ClusterController.get_state`.

Every public operation issues at most one blocking provider call.  A lock
guards the local state so concurrent ``launch`` calls on one instance cannot
both reach the provider.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from emr_ingest.aws.context import AWSContext
from emr_ingest.aws.emr import EmrProvisioningClient
from emr_ingest.cluster.builder import ClusterSpecBuilder
from emr_ingest.cluster.interfaces import CredentialProvider, ProvisioningClient
from emr_ingest.cluster.steps import make_debugging_step, make_job_step
from emr_ingest.config.models import (
    DEFAULT_BOOTSTRAP_NAME,
    ClusterIdentity,
    ControllerState,
    LaunchResult,
    LaunchSpecification,
    SubmissionAck,
)
from emr_ingest.errors import (
    LaunchFailed,
    ProviderError,
    StateError,
    StatusUnavailable,
    SubmissionFailed,
    ValidationError,
)

logger = logging.getLogger(__name__)


class ClusterController:
    """Owns one cluster's launch specification and launch result.

    Args:
        name: Cluster name.
        region: AWS region the cluster runs in.
        profile: AWS profile used when *client* is not given.
        client: Shared :class:`ProvisioningClient`.  When omitted, credentials
            are resolved for *profile* and a boto3-backed client is built;
            that may raise ``CredentialError`` or ``ClientInitError``.
        credential_provider: Override for credential lookup.
    """

    def __init__(
        self,
        name: str,
        region: str,
        *,
        profile: Optional[str] = None,
        client: Optional[ProvisioningClient] = None,
        credential_provider: Optional[CredentialProvider] = None,
    ) -> None:
        try:
            self.identity = ClusterIdentity(name=name, region=region)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid cluster identity: {exc}") from exc

        if client is None:
            aws_ctx = AWSContext.build(
                region, profile, credential_provider=credential_provider,
            )
            client = EmrProvisioningClient.from_context(aws_ctx)
            self._owns_client = True
        else:
            self._owns_client = False

        self._client: ProvisioningClient = client
        self.builder = ClusterSpecBuilder(self.identity)
        self._state = ControllerState.UNLAUNCHED
        self._spec: Optional[LaunchSpecification] = None
        self._result: Optional[LaunchResult] = None
        self._lock = threading.Lock()

    # -- accessors --------------------------------------------------------

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def region(self) -> str:
        return self.identity.region

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def launch_result(self) -> Optional[LaunchResult]:
        return self._result

    @property
    def specification(self) -> Optional[LaunchSpecification]:
        """The specification that was submitted, once launched."""
        return self._spec

    @property
    def cluster_handle(self) -> Optional[str]:
        return self._result.cluster_handle if self._result else None

    # -- builder passthroughs --------------------------------------------

    def set_software_profile(self, release_label, applications) -> "ClusterController":
        self._require_unlaunched("set_software_profile")
        self.builder.set_software_profile(release_label, applications)
        return self

    def set_bootstrap_action(
        self, script_location: str, name: str = DEFAULT_BOOTSTRAP_NAME,
    ) -> "ClusterController":
        self._require_unlaunched("set_bootstrap_action")
        self.builder.set_bootstrap_action(script_location, name)
        return self

    def add_master_node(self, instance_type: str) -> "ClusterController":
        self._require_unlaunched("add_master_node")
        self.builder.add_master_node(instance_type)
        return self

    def add_core_node(self, instance_type: str, instance_count: int) -> "ClusterController":
        self._require_unlaunched("add_core_node")
        self.builder.add_core_node(instance_type, instance_count)
        return self

    def _require_unlaunched(self, operation: str) -> None:
        if self._state is ControllerState.LAUNCHED:
            raise StateError(
                f"{operation}: cluster '{self.name}' is already launched; "
                "its specification is frozen."
            )

    def _require_launched(self, operation: str) -> LaunchResult:
        if self._state is not ControllerState.LAUNCHED or self._result is None:
            raise ValidationError(
                f"{operation}: cluster '{self.name}' has not been launched "
                f"(state={self._state.value})."
            )
        return self._result

    # -- launcher ---------------------------------------------------------

    def launch(self, enable_diagnostics_step: bool = False) -> LaunchResult:
        """Submit the accumulated specification as one create-cluster request.

        Raises:
            StateError: The controller is already launched.
            ValidationError: The specification is incomplete.
            LaunchFailed: The provider rejected the request.  The controller
                moves to LAUNCH_FAILED and ``launch`` may be retried.
        """
        with self._lock:
            if self._state is ControllerState.LAUNCHED:
                raise StateError(
                    f"Cluster '{self.name}' is already launched as "
                    f"{self.cluster_handle}; refusing to launch again."
                )

            spec = self.builder.build()
            if enable_diagnostics_step:
                spec = spec.with_steps(make_debugging_step())

            logger.info("Starting cluster: %s in region: %s", self.name, self.region)
            try:
                result = self._client.create_cluster(spec)
            except ProviderError as exc:
                self._state = ControllerState.LAUNCH_FAILED
                logger.error("Launch of cluster %s failed: %s", self.name, exc)
                raise LaunchFailed(
                    f"Cannot launch cluster '{self.name}' in {self.region}: {exc}"
                ) from exc

            self._spec = spec
            self._result = result
            self._state = ControllerState.LAUNCHED
            logger.info(
                "Cluster %s in region %s launched as %s. Request state: %s",
                self.name,
                self.region,
                result.cluster_handle,
                result.submission_metadata,
            )
            return result

    def attach(self, cluster_handle: str) -> LaunchResult:
        """Adopt a cluster launched earlier (e.g. by a previous process).

        Raises :class:`StateError` if this controller is already launched.
        """
        if not cluster_handle:
            raise ValidationError("cluster_handle must not be empty")
        with self._lock:
            if self._state is ControllerState.LAUNCHED:
                raise StateError(
                    f"Cluster '{self.name}' is already launched as "
                    f"{self.cluster_handle}."
                )
            self._result = LaunchResult(cluster_handle=cluster_handle)
            self._state = ControllerState.LAUNCHED
        logger.info("Attached to cluster %s (%s)", self.name, cluster_handle)
        return self._result

    # -- step submitter ---------------------------------------------------

    def submit_step(self, job_name: str, payload_location: str) -> SubmissionAck:
        """Append one CONTINUE-on-failure script step to the cluster.

        Raises:
            ValidationError: Not launched, or blank job name / location.
            SubmissionFailed: The provider rejected the step.
        """
        result = self._require_launched("submit_step")
        if not payload_location or not payload_location.strip():
            raise ValidationError("payload_location must not be empty")
        try:
            step = make_job_step(job_name, payload_location, self.region)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid step '{job_name}': {exc}") from exc

        logger.info("Adding job %s to cluster %s", job_name, self.name)
        try:
            ack = self._client.add_steps(result.cluster_handle, [step])
        except ProviderError as exc:
            raise SubmissionFailed(
                f"Cannot add job '{job_name}' to cluster {result.cluster_handle}: {exc}"
            ) from exc
        logger.info("Request state: %s", ack.submission_metadata)
        return ack

    # -- status inspector -------------------------------------------------

    def get_state(self) -> str:
        """Return the provider's current state for this cluster.

        Raises:
            ValidationError: Not launched; no remote call is made.
            StatusUnavailable: The provider could not describe the cluster.
        """
        result = self._require_launched("get_state")
        try:
            return self._client.describe_cluster(result.cluster_handle)
        except ProviderError as exc:
            raise StatusUnavailable(
                f"Unable to retrieve status of cluster {result.cluster_handle}: {exc}"
            ) from exc

    # -- teardown ---------------------------------------------------------

    def close(self) -> None:
        """Release the provisioning client if this controller built it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ClusterController":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
