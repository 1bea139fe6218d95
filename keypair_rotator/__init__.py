"""Key Pair Rotator - Secrets Manager rotation for asymmetric key pairs.

This package implements the four-step Secrets Manager rotation protocol
(createSecret, setSecret, testSecret, finishSecret) for key pairs, keeping
exactly one version current through retries and partial failures.
"""

from keypair_rotator.config import KeyPairConfig, RotationConfig, RotatorSettings
from keypair_rotator.engine import RotationEngine
from keypair_rotator.exceptions import (
    ConfigurationError,
    KeyPairError,
    KeyPairRotatorError,
    PublishError,
    RotationDisabledError,
    RotationError,
    RotationErrorKind,
    SecretVersionExistsError,
    UnknownStepError,
    UnknownVersionError,
    ValidationError,
    VersionNotPendingError,
)
from keypair_rotator.handler import make_handler
from keypair_rotator.keypair import CryptographyKeyPairProvider, KeyPairProvider
from keypair_rotator.models import (
    KeyPairRecord,
    PublicKeyRecord,
    RotationStep,
    SecretDescriptor,
)
from keypair_rotator.publisher import (
    CallablePublisher,
    DestinationPublisher,
    FilePublisher,
    PublicKeyPublisher,
    SsmParameterPublisher,
    publisher_for_destination,
)
from keypair_rotator.secret_store import SecretsManagerStore, SecretStore

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("keypair-rotator")
except PackageNotFoundError:
    # Running from a source checkout
    __version__ = "unknown"

__all__ = [
    "CallablePublisher",
    "ConfigurationError",
    "CryptographyKeyPairProvider",
    "DestinationPublisher",
    "FilePublisher",
    "KeyPairConfig",
    "KeyPairError",
    "KeyPairProvider",
    "KeyPairRecord",
    "KeyPairRotatorError",
    "PublicKeyPublisher",
    "PublicKeyRecord",
    "PublishError",
    "RotationConfig",
    "RotationDisabledError",
    "RotationEngine",
    "RotationError",
    "RotationErrorKind",
    "RotationStep",
    "RotatorSettings",
    "SecretDescriptor",
    "SecretStore",
    "SecretVersionExistsError",
    "SecretsManagerStore",
    "SsmParameterPublisher",
    "UnknownStepError",
    "UnknownVersionError",
    "ValidationError",
    "VersionNotPendingError",
    "make_handler",
    "publisher_for_destination",
]
