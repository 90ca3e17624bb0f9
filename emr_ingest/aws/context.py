"""AWS context: credential, session and region resolution.

Wraps profile credential lookup and boto3 session creation into a single
:class:`AWSContext` that the EMR client is built from.

Region resolution precedence:
1. Explicit ``--region`` CLI flag / argument
2. ``AWS_DEFAULT_REGION`` / ``AWS_REGION`` env vars
3. Hardcoded fallback (``us-east-1``)

Profile resolution precedence:
1. Explicit ``--profile`` CLI flag / argument
2. ``AWS_PROFILE`` env var
3. ``default``
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from emr_ingest.errors import ClientInitError, CredentialError

logger = logging.getLogger(__name__)

_DEFAULT_REGION = "us-east-1"
_DEFAULT_PROFILE = "default"


# ---------------------------------------------------------------------------
# Region / profile helpers
# ---------------------------------------------------------------------------

def resolve_region(region: Optional[str] = None) -> str:
    """Return the AWS region string.

    Precedence: *region* → ``AWS_DEFAULT_REGION`` → ``AWS_REGION`` → fallback.
    """
    if region:
        return region
    return (
        os.environ.get("AWS_DEFAULT_REGION")
        or os.environ.get("AWS_REGION")
        or _DEFAULT_REGION
    )


def resolve_profile(profile: Optional[str] = None) -> str:
    """Return the AWS profile name.

    Precedence: explicit *profile* → ``AWS_PROFILE`` env → ``default``.
    """
    return profile or os.environ.get("AWS_PROFILE", "") or _DEFAULT_PROFILE


# ---------------------------------------------------------------------------
# Credential provider
# ---------------------------------------------------------------------------

class ProfileCredentialProvider:
    """Resolve credentials from a named profile in the shared AWS config."""

    def resolve(self, profile: str) -> Any:
        """Return botocore credentials for *profile*.

        Raises :class:`CredentialError` when the profile is unknown or has
        no credentials attached.
        """
        try:
            credentials = boto3.Session(profile_name=profile).get_credentials()
        except BotoCoreError as exc:
            raise CredentialError(
                f"Cannot load user credentials for profile '{profile}': {exc}"
            ) from exc
        if credentials is None:
            raise CredentialError(
                f"Cannot load user credentials for profile '{profile}': "
                "no credentials found"
            )
        return credentials


# ---------------------------------------------------------------------------
# AWSContext
# ---------------------------------------------------------------------------

@dataclass
class AWSContext:
    """Resolved credentials bound to one region, plus a client factory.

    Attributes:
        profile: Resolved AWS profile name.
        region: AWS region (e.g. ``eu-central-1``).
    """

    profile: str
    region: str
    _session: Any = field(default=None, repr=False, compare=False)

    # -- factory ----------------------------------------------------------

    @classmethod
    def build(
        cls,
        region: str,
        profile: Optional[str] = None,
        *,
        credential_provider: Any = None,
    ) -> "AWSContext":
        """Resolve credentials for *profile* and bind them to *region*.

        Raises:
            CredentialError: Credentials could not be resolved.
        """
        resolved_profile = resolve_profile(profile)
        if resolved_profile == _DEFAULT_PROFILE:
            logger.warning("Using the 'default' AWS profile.")

        provider = credential_provider or ProfileCredentialProvider()
        credentials = provider.resolve(resolved_profile)

        session = boto3.Session(
            aws_access_key_id=credentials.access_key,
            aws_secret_access_key=credentials.secret_key,
            aws_session_token=credentials.token,
            region_name=region,
        )
        return cls(profile=resolved_profile, region=region, _session=session)

    # -- session accessor -------------------------------------------------

    @property
    def session(self) -> boto3.Session:
        """Return the cached :class:`boto3.Session`."""
        if self._session is None:
            self._session = boto3.Session(
                profile_name=self.profile, region_name=self.region
            )
        return self._session

    def client(self, service: str, **kwargs: Any) -> Any:
        """Create a boto3 client for *service* in this context's region.

        Raises :class:`ClientInitError` when botocore refuses to build it.
        """
        try:
            return self.session.client(service, region_name=self.region, **kwargs)
        except (BotoCoreError, ClientError, ValueError) as exc:
            raise ClientInitError(
                f"Cannot create {service} client with credentials and region "
                f"{self.region}: {exc}"
            ) from exc
