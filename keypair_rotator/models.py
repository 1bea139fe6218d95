"""Data models for the Key Pair Rotator."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from keypair_rotator.constants import Constants
from keypair_rotator.exceptions import ValidationError


class RotationStep(str, Enum):
    """The four steps of the Secrets Manager rotation protocol."""

    CREATE_SECRET = "createSecret"
    SET_SECRET = "setSecret"
    TEST_SECRET = "testSecret"
    FINISH_SECRET = "finishSecret"

    @classmethod
    def parse(cls, name: Any) -> Optional["RotationStep"]:
        """Return the step named ``name``, or None if there is no such step."""
        for step in cls:
            if step.value == name:
                return step
        return None


class StagingLabel:
    """Staging labels that drive which rotation step is legal to run."""

    CURRENT = Constants.CURRENT_STAGE()
    PENDING = Constants.PENDING_STAGE()


@dataclass
class SecretDescriptor:
    """Rotation-relevant view of a secret's metadata."""

    secret_id: str
    rotation_enabled: bool = False
    rotation_interval_days: int | None = None
    tags: list[dict[str, str]] = field(default_factory=list)
    versions: dict[str, list[str]] = field(default_factory=dict)  # VersionId -> staging labels

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.secret_id:
            raise ValueError("secret_id cannot be empty")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecretDescriptor":
        """Create SecretDescriptor from a describe_secret response."""
        rotation_rules = data.get("RotationRules") or {}
        return cls(
            secret_id=data.get("ARN") or data.get("Name") or "",
            rotation_enabled=bool(data.get("RotationEnabled", False)),
            rotation_interval_days=rotation_rules.get("AutomaticallyAfterDays"),
            tags=list(data.get("Tags") or []),
            versions={
                version_id: list(stages)
                for version_id, stages in (data.get("VersionIdsToStages") or {}).items()
            },
        )

    def has_version(self, version_id: str) -> bool:
        """Check if a version is recorded on the secret."""
        return version_id in self.versions

    def stages_for(self, version_id: str) -> list[str]:
        """Get the staging labels of a version (empty if unknown)."""
        return self.versions.get(version_id, [])

    def is_current(self, version_id: str) -> bool:
        return StagingLabel.CURRENT in self.stages_for(version_id)

    def is_pending(self, version_id: str) -> bool:
        return StagingLabel.PENDING in self.stages_for(version_id)

    def current_version(self) -> str | None:
        """Get the version carrying the current label, if any."""
        for version_id, stages in self.versions.items():
            if StagingLabel.CURRENT in stages:
                return version_id
        return None

    def pending_version(self) -> str | None:
        """Get the version carrying the pending label, if any."""
        for version_id, stages in self.versions.items():
            if StagingLabel.PENDING in stages:
                return version_id
        return None


@dataclass
class KeyPairRecord:
    """Generated key pair, stored serialized as the pending secret value."""

    type: str
    name: str
    version: str
    expires_at: int  # Epoch seconds
    private_key: str  # PEM
    public_key: str  # PEM
    grace_days: int = 0
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.type:
            raise ValueError("type cannot be empty")
        if not self.name:
            raise ValueError("name cannot be empty")
        if not self.version:
            raise ValueError("version cannot be empty")
        if not self.private_key:
            raise ValueError("private_key cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using the stored wire field names."""
        return {
            "type": self.type,
            "name": self.name,
            "version": self.version,
            "expiresAt": self.expires_at,
            "graceDays": self.grace_days,
            "options": self.options,
            "privateKey": self.private_key,
            "publicKey": self.public_key,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KeyPairRecord":
        """Create KeyPairRecord from dictionary."""
        return cls(
            type=data["type"],
            name=data["name"],
            version=data["version"],
            expires_at=int(data["expiresAt"]),
            private_key=data["privateKey"],
            public_key=data.get("publicKey", ""),
            grace_days=int(data.get("graceDays") or 0),
            options=data.get("options") or {},
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, value: str) -> "KeyPairRecord":
        """Parse a stored secret string.

        Raises:
            ValidationError: If the value is not a serialized key pair
        """
        try:
            return cls.from_dict(json.loads(value))
        except (ValueError, KeyError, TypeError) as e:
            raise ValidationError(f"Invalid key pair record: {e}") from e


@dataclass
class PublicKeyRecord:
    """Public half of a key pair, as handed to the publisher."""

    type: str
    name: str
    version: str
    expires_at: int  # Private key expiry plus grace days
    public_key: str  # PEM

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type,
            "name": self.name,
            "version": self.version,
            "expiresAt": self.expires_at,
            "publicKey": self.public_key,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublicKeyRecord":
        """Create PublicKeyRecord from dictionary."""
        return cls(
            type=data["type"],
            name=data["name"],
            version=data["version"],
            expires_at=int(data["expiresAt"]),
            public_key=data["publicKey"],
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class RotationEvent:
    """Rotation request delivered by Secrets Manager."""

    secret_id: str
    token: str
    step: str

    @classmethod
    def from_dict(cls, event: dict[str, Any]) -> "RotationEvent":
        """Create RotationEvent from a Lambda event.

        Raises:
            ValidationError: If a required field is missing
        """
        missing = [
            key for key in ("SecretId", "ClientRequestToken", "Step")
            if not event.get(key)
        ]
        if missing:
            raise ValidationError(f"Rotation event is missing: {', '.join(missing)}")
        return cls(
            secret_id=event["SecretId"],
            token=event["ClientRequestToken"],
            step=event["Step"],
        )
