"""Key pair providers used by the createSecret and setSecret steps."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from keypair_rotator.constants import Constants
from keypair_rotator.crypto_utils import CryptoUtils
from keypair_rotator.exceptions import KeyPairError
from keypair_rotator.models import KeyPairRecord, PublicKeyRecord

logger = logging.getLogger(__name__)


class KeyPairProvider(ABC):
    """Creates key pairs and extracts their public halves."""

    @abstractmethod
    def create_key_pair(
        self,
        *,
        type: str,
        options: dict[str, Any],
        name: str,
        version: str,
        expires_at: int,
        grace_days: int = 0
    ) -> KeyPairRecord:
        """
        Create a fresh key pair.

        Args:
            type: Key type (rsa, ec, ed25519, ...)
            options: Type-specific generation options
            name: Logical key name
            version: Key version (the rotation token)
            expires_at: Private key expiry, epoch seconds
            grace_days: Extra public key validity beyond expires_at

        Returns:
            The generated KeyPairRecord
        """

    @abstractmethod
    def public_key_from_key_pair(self, record: KeyPairRecord) -> PublicKeyRecord:
        """
        Extract the publishable public key from a key pair.

        Must be pure and deterministic for a given record.
        """


class CryptographyKeyPairProvider(KeyPairProvider):
    """Key pair provider backed by the ``cryptography`` package."""

    def create_key_pair(
        self,
        *,
        type: str,
        options: dict[str, Any],
        name: str,
        version: str,
        expires_at: int,
        grace_days: int = 0
    ) -> KeyPairRecord:
        private_key = CryptoUtils.generate_private_key(type, options)

        record = KeyPairRecord(
            type=type.lower(),
            name=name,
            version=version,
            expires_at=int(expires_at),
            grace_days=grace_days or Constants.DEFAULT_GRACE_DAYS(),
            options=dict(options or {}),
            private_key=CryptoUtils.private_key_to_pem(private_key),
            public_key=CryptoUtils.public_key_to_pem(private_key.public_key()),
        )

        logger.debug("Key pair generated", extra={
            "key_name": name,
            "key_version": version,
            "key_type": record.type,
            "event": "key_pair_generated"
        })

        return record

    def public_key_from_key_pair(self, record: KeyPairRecord) -> PublicKeyRecord:
        if record is None:
            raise KeyPairError("Key pair record is required")

        # The stored public PEM is trusted only if it matches the private key
        public_pem = CryptoUtils.public_pem_from_private_pem(record.private_key)
        if record.public_key and record.public_key.strip() != public_pem.strip():
            raise KeyPairError(
                f"Stored public key does not match private key for {record.name}/{record.version}"
            )

        return PublicKeyRecord(
            type=record.type,
            name=record.name,
            version=record.version,
            expires_at=record.expires_at + record.grace_days * Constants.SECONDS_PER_DAY(),
            public_key=public_pem,
        )
