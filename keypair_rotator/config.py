"""Configuration management for the Key Pair Rotator."""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from keypair_rotator.constants import Constants
from keypair_rotator.exceptions import ConfigurationError
from keypair_rotator.tag_utils import from_pairs_deep, tags_to_pairs


@dataclass(frozen=True)
class KeyPairConfig:
    """Key pair generation settings taken from ``cfg.keyPair.*`` tags."""

    type: str | None = None
    options: dict[str, Any] = field(default_factory=dict)
    grace_days: int = 0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.grace_days < 0:
            raise ConfigurationError("keyPair.graceDays must be non-negative")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KeyPairConfig":
        """Create KeyPairConfig from the nested ``keyPair`` mapping."""
        options = data.get("options") or {}
        if not isinstance(options, dict):
            raise ConfigurationError("keyPair.options must be a set of keyPair.options.* tags")

        return cls(
            type=data.get("type") or None,
            options=options,
            grace_days=_parse_grace_days(data.get("graceDays")),
        )


_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


def _parse_grace_days(value: Any) -> int:
    """Parse the graceDays tag from its leading base-10 integer.

    ``"2 days"`` is 2. A value with no leading integer, or no value, is 0.
    """
    if value is None:
        return Constants.DEFAULT_GRACE_DAYS()
    match = _LEADING_INTEGER.match(str(value))
    if match is None:
        return Constants.DEFAULT_GRACE_DAYS()
    return int(match.group(1), 10)


@dataclass(frozen=True)
class RotationConfig:
    """Rotation configuration resolved from a secret's tags.

    Recomputed on every invocation; nothing is cached between invocations.
    """

    key_pair: KeyPairConfig | None = None
    public_key_store: Any = None  # Opaque destination, passed through to the publisher

    @classmethod
    def from_tags(
        cls,
        tags: Iterable[dict[str, str]] | None,
        prefix: str | None = None
    ) -> "RotationConfig":
        """Resolve configuration from Secrets Manager tags.

        Args:
            tags: Tags as returned by describe_secret
            prefix: Tag prefix reserved for this package (default: "cfg.")

        Returns:
            RotationConfig instance

        Raises:
            ConfigurationError: If the tags are malformed
        """
        nested = from_pairs_deep(tags_to_pairs(tags), prefix=prefix)

        key_pair_data = nested.get("keyPair")
        if key_pair_data is not None and not isinstance(key_pair_data, dict):
            raise ConfigurationError("keyPair must be a set of keyPair.* tags")

        return cls(
            key_pair=KeyPairConfig.from_dict(key_pair_data) if key_pair_data else None,
            public_key_store=nested.get("publicKeyStore"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using the tag names."""
        key_pair = None
        if self.key_pair is not None:
            key_pair = {
                "type": self.key_pair.type,
                "options": self.key_pair.options,
                "graceDays": self.key_pair.grace_days,
            }
        return {
            "keyPair": key_pair,
            "publicKeyStore": self.public_key_store,
        }


@dataclass
class RotatorSettings:
    """Runtime settings for the rotation Lambda and CLI."""

    tag_prefix: str = Constants.CONFIG_TAG_PREFIX()
    log_level: str = "INFO"
    endpoint_url: Optional[str] = None  # Override for local AWS stacks

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not self.tag_prefix:
            raise ConfigurationError("tag_prefix cannot be empty")

        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> "RotatorSettings":
        """Create settings from ``KPR_*`` environment variables."""
        environ = os.environ if environ is None else environ
        return cls(
            tag_prefix=environ.get("KPR_TAG_PREFIX") or Constants.CONFIG_TAG_PREFIX(),
            log_level=environ.get("KPR_LOG_LEVEL") or "INFO",
            endpoint_url=environ.get("KPR_ENDPOINT_URL") or None,
        )


# Default settings instance
DEFAULT_SETTINGS = RotatorSettings()
