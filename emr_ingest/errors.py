"""Error taxonomy for the cluster controller.

Every failure that originates at AWS is wrapped in one of the kinds below
with the original exception chained (``raise ... from exc``), so callers can
branch on the kind and still inspect :attr:`ClusterControlError.cause`.

::

    ClusterControlError
    ├── CredentialError
    ├── ClientInitError
    ├── ValidationError
    │   └── StateError
    ├── ProviderError
    ├── LaunchFailed
    ├── SubmissionFailed
    └── StatusUnavailable
"""

from __future__ import annotations

from typing import Optional


class ClusterControlError(Exception):
    """Base class for all controller errors."""

    @property
    def cause(self) -> Optional[BaseException]:
        """The wrapped exception, if any."""
        return self.__cause__


class CredentialError(ClusterControlError):
    """AWS identity could not be resolved for the requested profile."""


class ClientInitError(ClusterControlError):
    """A client bound to the credentials and region could not be built."""


class ValidationError(ClusterControlError):
    """The caller violated a precondition.  Controller state is unchanged."""


class StateError(ValidationError):
    """The operation is not legal in the controller's current state."""


class ProviderError(ClusterControlError):
    """The provisioning API rejected a request or could not be reached.

    Attributes:
        code: AWS error code (e.g. ``ValidationException``), empty for
            transport-level failures.
        operation: Name of the API operation that failed.
    """

    def __init__(self, message: str, *, code: str = "", operation: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.operation = operation


class LaunchFailed(ClusterControlError):
    """Cluster creation failed; no launch result was recorded."""


class SubmissionFailed(ClusterControlError):
    """Adding steps to the cluster failed."""


class StatusUnavailable(ClusterControlError):
    """Cluster status could not be read from the provider."""
