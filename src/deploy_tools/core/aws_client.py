"""Centralized AWS client management with session handling.

This module provides a centralized way to create and cache boto3 clients
for a single profile while keeping region selection consistent across the
gateway, IAM, CloudFormation and STS calls made by the tools.
"""

import logging
import os
from typing import Dict, Mapping, Optional, Tuple

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    ProfileNotFound,
)

from .errors import DeployToolsError


logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-west-2"


class AWSClientError(DeployToolsError):
    """Raised when AWS credentials or sessions cannot be used."""

    pass


def session_profile(
    profile: Optional[str], environ: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """Map a CLI-style profile name to a boto3 profile name.

    'default' becomes None so boto3 falls back to its normal credential
    chain (environment, instance role) when no default profile exists.
    That only holds while AWS_PROFILE does not name another profile;
    otherwise the chain would resolve to that profile instead.

    Args:
        profile: Requested profile, None or empty when none was given
        environ: Environment boto3 will read, defaults to os.environ
    """
    if not profile:
        return None
    if profile == "default":
        environ = os.environ if environ is None else environ
        if environ.get("AWS_PROFILE", "default") in ("", "default"):
            return None
    return profile


class AWSClientManager:
    """Centralized AWS client management with session handling.

    Clients are created lazily and cached per service and region so that
    repeated checks against the same service reuse one client.
    """

    def __init__(
        self,
        profile_name: Optional[str] = None,
        region_name: Optional[str] = None,
    ) -> None:
        """Initialize AWS client manager.

        Args:
            profile_name: Optional AWS profile name for credentials
            region_name: Optional region overriding the session default
        """
        self._session: Optional[boto3.Session] = None
        self._clients: Dict[Tuple[str, str], object] = {}
        self._profile_name = profile_name
        self._region_name = region_name

    def _get_session(self) -> boto3.Session:
        """Get or create boto3 session.

        Returns:
            Configured boto3 session

        Raises:
            AWSClientError: When the configured profile does not exist
        """
        if self._session is None:
            try:
                if self._profile_name:
                    self._session = boto3.Session(
                        profile_name=self._profile_name
                    )
                else:
                    self._session = boto3.Session()
            except ProfileNotFound as e:
                raise AWSClientError(
                    f"AWS profile not found: {self._profile_name}"
                ) from e
        return self._session

    def get_client(self, service_name: str, region_name: Optional[str] = None):
        """Get AWS service client for specified region.

        Args:
            service_name: AWS service name (e.g., 'iam', 'cloudformation')
            region_name: AWS region name, defaults to the current region

        Returns:
            Configured boto3 client for the service and region
        """
        region = region_name or self.get_current_region()
        client_key = (service_name, region)

        if client_key not in self._clients:
            logger.debug("Creating %s client in %s", service_name, region)
            session = self._get_session()
            self._clients[client_key] = session.client(
                service_name, region_name=region
            )

        return self._clients[client_key]

    def get_current_region(self) -> str:
        """Get the region used for clients.

        Returns:
            Explicit region, else the session region, else us-west-2
        """
        if self._region_name:
            return self._region_name
        session = self._get_session()
        return session.region_name or DEFAULT_REGION

    def get_account_id(self) -> str:
        """Get current AWS account ID.

        Returns:
            Current AWS account ID

        Raises:
            AWSClientError: When credentials are missing or STS rejects them
        """
        try:
            sts_client = self.get_client("sts")
            response = sts_client.get_caller_identity()
        except NoCredentialsError as e:
            raise AWSClientError(
                "AWS credentials not found. Run 'aws configure' or set "
                "AWS_PROFILE."
            ) from e
        except ClientError as e:
            raise AWSClientError(
                f"Unable to get caller identity: "
                f"{e.response['Error'].get('Message', e)}"
            ) from e
        except BotoCoreError as e:
            raise AWSClientError(f"Unable to get caller identity: {e}") from e

        return response.get("Account", "")

    def clear_cache(self) -> None:
        """Clear cached clients to force recreation."""
        self._clients.clear()
