"""Custom exceptions for the Key Pair Rotator."""

from enum import Enum


class RotationErrorKind(Enum):
    """Stable identifiers for the ways a rotation request can be rejected."""

    ROTATION_DISABLED = "rotation_disabled"
    UNKNOWN_VERSION = "unknown_version"
    VERSION_NOT_PENDING = "version_not_pending"
    UNKNOWN_STEP = "unknown_step"

    @property
    def category(self) -> str:
        """Coarse grouping used by monitoring to route alerts."""
        if self in (RotationErrorKind.ROTATION_DISABLED, RotationErrorKind.UNKNOWN_STEP):
            return "configuration"
        return "protocol_state"


class KeyPairRotatorError(Exception):
    """Base exception for all Key Pair Rotator errors."""


class RotationError(KeyPairRotatorError):
    """Raised when a rotation request fails its staging preconditions."""

    kind: RotationErrorKind

    def __init__(
        self,
        message: str,
        *,
        secret_id: str | None = None,
        token: str | None = None
    ):
        super().__init__(message)
        self.secret_id = secret_id
        self.token = token


class RotationDisabledError(RotationError):
    """Raised when rotation is not enabled on the secret."""

    kind = RotationErrorKind.ROTATION_DISABLED


class UnknownVersionError(RotationError):
    """Raised when the request token is not a version of the secret."""

    kind = RotationErrorKind.UNKNOWN_VERSION


class VersionNotPendingError(RotationError):
    """Raised when the token's version is not staged as pending."""

    kind = RotationErrorKind.VERSION_NOT_PENDING


class UnknownStepError(RotationError):
    """Raised when the requested step is not one of the four rotation steps."""

    kind = RotationErrorKind.UNKNOWN_STEP


class ConfigurationError(KeyPairRotatorError):
    """Raised when the secret's tag configuration is invalid."""


class ValidationError(KeyPairRotatorError):
    """Raised when data validation fails."""


class KeyPairError(KeyPairRotatorError):
    """Raised when key pair generation or extraction fails."""


class SecretVersionExistsError(KeyPairRotatorError):
    """Raised when the store already holds a value for a version."""


class PublishError(KeyPairRotatorError):
    """Raised when publishing a public key fails."""
