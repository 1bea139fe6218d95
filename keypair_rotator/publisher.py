"""Public key publishers used by the setSecret step."""

import json
import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import unquote, urlparse

import boto3

from keypair_rotator.exceptions import ConfigurationError, PublishError
from keypair_rotator.models import PublicKeyRecord

logger = logging.getLogger(__name__)


class PublicKeyPublisher(ABC):
    """Durably stores public keys where relying parties can find them."""

    @abstractmethod
    def publish(
        self,
        destination: Any,
        name: str,
        version: str,
        public_key: PublicKeyRecord
    ) -> None:
        """
        Store a public key.

        Args:
            destination: Opaque destination from the cfg.publicKeyStore tag
            name: Key name
            version: Key version
            public_key: Public key to store

        Raises:
            Exception: Any failure; the rotation step fails with it
        """


class CallablePublisher(PublicKeyPublisher):
    """Publisher that delegates to a plain function.

    Example:
        >>> def put_public_key(store, name, version, public_key):
        ...     requests.put(f"{store}{name}/{version}", data=public_key.to_json())
        >>> publisher = CallablePublisher(put_public_key)
    """

    def __init__(self, func: Callable[[Any, str, str, PublicKeyRecord], Any]):
        if not callable(func):
            raise TypeError("func must be callable")
        self._func = func

    def publish(
        self,
        destination: Any,
        name: str,
        version: str,
        public_key: PublicKeyRecord
    ) -> None:
        self._func(destination, name, version, public_key)


class SsmParameterPublisher(PublicKeyPublisher):
    """Publishes public keys to SSM Parameter Store.

    Destinations look like ``ssm://us-east-1/keyStore/``; the key is written
    to the parameter ``/keyStore/<name>/<version>`` as JSON.
    """

    def __init__(
        self,
        client_factory: Optional[Callable[[str], Any]] = None,
        endpoint_url: Optional[str] = None
    ):
        self._endpoint_url = endpoint_url
        self._client_factory = client_factory or self._default_client

    def _default_client(self, region: str) -> Any:
        return boto3.client("ssm", region_name=region or None, endpoint_url=self._endpoint_url)

    @staticmethod
    def parameter_name(destination: str, name: str, version: str) -> tuple[str, str]:
        """Resolve the region and parameter name for a key.

        Returns:
            Tuple of (region, parameter_name)
        """
        url = urlparse(destination)
        if url.scheme != "ssm":
            raise ConfigurationError(f"Not an ssm:// destination: {destination}")
        path = url.path if url.path.endswith("/") else f"{url.path}/"
        if not path.startswith("/"):
            path = f"/{path}"
        return url.netloc, f"{path}{name}/{version}"

    def publish(
        self,
        destination: Any,
        name: str,
        version: str,
        public_key: PublicKeyRecord
    ) -> None:
        region, parameter = self.parameter_name(destination, name, version)
        client = self._client_factory(region)
        client.put_parameter(
            Name=parameter,
            Value=public_key.to_json(),
            Type="String",
            Overwrite=True,
        )

        logger.info("Public key published to SSM", extra={
            "parameter": parameter,
            "region": region,
            "event": "public_key_parameter_written"
        })


class FilePublisher(PublicKeyPublisher):
    """Publishes public keys as JSON files under ``file://<directory>``.

    The key is written to ``<directory>/<name>/<version>.json``.
    """

    @staticmethod
    def key_path(destination: str, name: str, version: str) -> Path:
        """Resolve the key file for a name and version under the destination.

        Raises:
            ConfigurationError: If the destination is not a file:// URL
            PublishError: If the name or version would leave the destination directory
        """
        url = urlparse(destination)
        if url.scheme != "file":
            raise ConfigurationError(f"Not a file:// destination: {destination}")
        base = Path(unquote(url.netloc + url.path)).resolve()
        file_path = (base / name / f"{version}.json").resolve()
        if not file_path.is_relative_to(base):
            raise PublishError(f"Key {name}/{version} resolves outside {base}")
        return file_path

    def _write_json_atomic(self, file_path: Path, data: dict[str, Any]) -> None:
        """Write JSON data atomically using a temporary file.

        Raises:
            PublishError: If the write fails
        """
        temp_file = None

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)

            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=file_path.parent,
                prefix=f".{file_path.stem}.",
                suffix=".temp",
                delete=False,
            ) as f:
                temp_file = Path(f.name)
                json.dump(data, f, indent=2, ensure_ascii=False)

            shutil.move(str(temp_file), str(file_path))

        except Exception as e:
            if temp_file is not None and temp_file.exists():
                temp_file.unlink()
            raise PublishError(f"Failed to write public key {file_path}: {e}") from e

    def publish(
        self,
        destination: Any,
        name: str,
        version: str,
        public_key: PublicKeyRecord
    ) -> None:
        file_path = self.key_path(destination, name, version)
        self._write_json_atomic(file_path, public_key.to_dict())

        logger.info(f"Public key written to {file_path}", extra={
            "event": "public_key_file_written"
        })


def publisher_for_destination(
    destination: Any,
    *,
    endpoint_url: Optional[str] = None
) -> PublicKeyPublisher:
    """Pick a bundled publisher by destination URL scheme.

    Args:
        destination: Destination from the cfg.publicKeyStore tag
        endpoint_url: Endpoint override for AWS clients (optional)

    Returns:
        Publisher for the destination

    Raises:
        ConfigurationError: If no bundled publisher handles the destination
    """
    if not destination or not isinstance(destination, str):
        raise ConfigurationError("publicKeyStore must be set to a destination URL")

    scheme = urlparse(destination).scheme
    if scheme == "ssm":
        return SsmParameterPublisher(endpoint_url=endpoint_url)
    if scheme == "file":
        return FilePublisher()
    raise ConfigurationError(f"No publisher for publicKeyStore scheme: {scheme or destination}")


class DestinationPublisher(PublicKeyPublisher):
    """Publisher that resolves a bundled publisher from each destination."""

    def __init__(self, endpoint_url: Optional[str] = None):
        self._endpoint_url = endpoint_url

    def publish(
        self,
        destination: Any,
        name: str,
        version: str,
        public_key: PublicKeyRecord
    ) -> None:
        publisher = publisher_for_destination(destination, endpoint_url=self._endpoint_url)
        publisher.publish(destination, name, version, public_key)
