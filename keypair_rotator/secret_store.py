"""Secret store clients: the source of truth for version staging state."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

from keypair_rotator.arn import parse_arn
from keypair_rotator.config import DEFAULT_SETTINGS, RotatorSettings
from keypair_rotator.constants import Constants
from keypair_rotator.exceptions import SecretVersionExistsError
from keypair_rotator.models import SecretDescriptor

logger = logging.getLogger(__name__)


class SecretStore(ABC):
    """Operations the rotation engine needs from the secret-management service."""

    @abstractmethod
    def describe_secret(self, secret_id: str) -> SecretDescriptor:
        """Get the secret's rotation flag, tags and version staging map."""

    @abstractmethod
    def get_secret_value(self, secret_id: str, version_id: str) -> str:
        """Get the stored value of one version."""

    @abstractmethod
    def put_secret_value(
        self,
        secret_id: str,
        token: str,
        value: str,
        stages: list[str]
    ) -> None:
        """
        Store a new version.

        Raises:
            SecretVersionExistsError: If a value is already stored for the token
        """

    @abstractmethod
    def move_staging_label(
        self,
        secret_id: str,
        label: str,
        to_version: str,
        from_version: Optional[str]
    ) -> None:
        """
        Move a staging label between versions in a single atomic request.

        Args:
            secret_id: Secret to update
            label: Staging label to move
            to_version: Version receiving the label
            from_version: Version losing the label (None if no version has it)
        """


def create_secrets_manager_client(
    region: Optional[str] = None,
    endpoint_url: Optional[str] = None
) -> Any:
    """Create a boto3 Secrets Manager client."""
    return boto3.client(
        "secretsmanager",
        region_name=region or None,
        endpoint_url=endpoint_url,
    )


class SecretsManagerStore(SecretStore):
    """Secret store backed by AWS Secrets Manager."""

    def __init__(self, client: Any):
        """Initialize the store.

        Args:
            client: boto3 ``secretsmanager`` client
        """
        self._client = client

    @classmethod
    def for_secret(
        cls,
        secret_id: str,
        settings: RotatorSettings | None = None
    ) -> "SecretsManagerStore":
        """Create a store in the region named by the secret's ARN."""
        settings = settings or DEFAULT_SETTINGS
        region = parse_arn(secret_id).region
        return cls(create_secrets_manager_client(region, settings.endpoint_url))

    @property
    def client(self) -> Any:
        return self._client

    def describe_secret(self, secret_id: str) -> SecretDescriptor:
        response = self._client.describe_secret(SecretId=secret_id)
        descriptor = SecretDescriptor.from_dict(response)
        # Keep the identifier the caller used so log lines and ARN parsing agree
        descriptor.secret_id = secret_id
        return descriptor

    def get_secret_value(self, secret_id: str, version_id: str) -> str:
        response = self._client.get_secret_value(SecretId=secret_id, VersionId=version_id)
        return response["SecretString"]

    def put_secret_value(
        self,
        secret_id: str,
        token: str,
        value: str,
        stages: list[str]
    ) -> None:
        try:
            self._client.put_secret_value(
                SecretId=secret_id,
                ClientRequestToken=token,
                SecretString=value,
                VersionStages=list(stages),
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == Constants.RESOURCE_EXISTS_ERROR_CODE():
                raise SecretVersionExistsError(
                    f"Secret {secret_id} already has a value for version {token}"
                ) from e
            raise

    def move_staging_label(
        self,
        secret_id: str,
        label: str,
        to_version: str,
        from_version: Optional[str]
    ) -> None:
        request = {
            "SecretId": secret_id,
            "VersionStage": label,
            "MoveToVersionId": to_version,
        }
        if from_version:
            request["RemoveFromVersionId"] = from_version
        self._client.update_secret_version_stage(**request)
