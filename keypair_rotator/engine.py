"""Rotation engine that validates staging state and dispatches rotation steps."""

import logging
import time
from typing import Any, Callable, Mapping, Optional

from keypair_rotator.config import DEFAULT_SETTINGS, RotatorSettings
from keypair_rotator.exceptions import (
    RotationDisabledError,
    RotationError,
    UnknownStepError,
    UnknownVersionError,
    VersionNotPendingError,
)
from keypair_rotator.keypair import CryptographyKeyPairProvider, KeyPairProvider
from keypair_rotator.models import RotationEvent, RotationStep, SecretDescriptor
from keypair_rotator.publisher import PublicKeyPublisher
from keypair_rotator.secret_store import SecretStore
from keypair_rotator.steps import STEP_HANDLERS, StepContext

logger = logging.getLogger(__name__)


class RotationEngine:
    """Runs one invocation of the four-step key pair rotation protocol."""

    def __init__(
        self,
        store: SecretStore,
        publisher: PublicKeyPublisher,
        *,
        key_pair_provider: Optional[KeyPairProvider] = None,
        settings: Optional[RotatorSettings] = None,
        clock: Callable[[], float] = time.time,
        handlers: Optional[Mapping[RotationStep, Callable[[StepContext], None]]] = None
    ):
        """Initialize the rotation engine.

        Args:
            store: Secret store holding the secret's versions
            publisher: Destination for public keys (setSecret)
            key_pair_provider: Key pair provider (default: cryptography-backed)
            settings: Runtime settings (default: DEFAULT_SETTINGS)
            clock: Source of the current epoch time in seconds
            handlers: Replacement handlers for individual steps (optional)
        """
        self._store = store
        self._publisher = publisher
        self._key_pair_provider = key_pair_provider or CryptographyKeyPairProvider()
        self._settings = settings or DEFAULT_SETTINGS
        self._clock = clock
        self._handlers = dict(STEP_HANDLERS)
        if handlers:
            self._handlers.update(handlers)

    def validate(
        self,
        descriptor: SecretDescriptor,
        token: str,
        step_name: Any
    ) -> RotationStep | None:
        """Check that a step may run for the token.

        Checks run in a fixed order: rotation enabled, token known, token
        already current, token pending, step known.

        Args:
            descriptor: Current secret metadata
            token: Version being rotated
            step_name: Requested step name

        Returns:
            The step to run, or None if the token is already current

        Raises:
            RotationDisabledError: If rotation is not enabled on the secret
            UnknownVersionError: If the token is not a version of the secret
            VersionNotPendingError: If the token's version is not pending
            UnknownStepError: If the step name is not a rotation step
        """
        secret_id = descriptor.secret_id

        if not descriptor.rotation_enabled:
            raise RotationDisabledError(
                f"Secret {secret_id} is not enabled for rotation",
                secret_id=secret_id, token=token
            )

        if not descriptor.has_version(token):
            raise UnknownVersionError(
                f"Secret {secret_id} has no version {token}",
                secret_id=secret_id, token=token
            )

        if descriptor.is_current(token):
            return None

        if not descriptor.is_pending(token):
            raise VersionNotPendingError(
                f"Version {token} of secret {secret_id} is not pending rotation",
                secret_id=secret_id, token=token
            )

        step = RotationStep.parse(step_name)
        if step is None or step not in self._handlers:
            raise UnknownStepError(
                f"Unknown rotation step: {step_name}",
                secret_id=secret_id, token=token
            )

        return step

    def rotate(self, secret_id: str, token: str, step_name: Any) -> None:
        """Run one rotation step.

        Args:
            secret_id: Secret ARN
            token: Version being rotated (ClientRequestToken)
            step_name: Step name from the rotation event

        Raises:
            RotationError: If the staging preconditions fail
            ConfigurationError: If a step needs the tag configuration and it is invalid
        """
        descriptor = self._store.describe_secret(secret_id)

        try:
            step = self.validate(descriptor, token, step_name)
        except RotationError as e:
            logger.warning(f"Rotation request rejected: {e}", extra={
                "secret_id": secret_id,
                "token": token,
                "step": str(step_name),
                "error_kind": e.kind.value,
                "event": "rotation_rejected"
            })
            raise

        if step is None:
            logger.info("Version is already current, nothing to do", extra={
                "secret_id": secret_id,
                "token": token,
                "step": str(step_name),
                "event": "rotation_already_current"
            })
            return

        context = StepContext(
            store=self._store,
            secret_id=secret_id,
            token=token,
            descriptor=descriptor,
            key_pair_provider=self._key_pair_provider,
            publisher=self._publisher,
            clock=self._clock,
            tag_prefix=self._settings.tag_prefix,
        )

        logger.info("Rotation step started", extra={
            "secret_id": secret_id,
            "token": token,
            "step": step.value,
            "event": "rotation_step_started"
        })

        self._handlers[step](context)

        logger.info("Rotation step completed", extra={
            "secret_id": secret_id,
            "token": token,
            "step": step.value,
            "event": "rotation_step_completed"
        })

    def handle_event(self, event: dict[str, Any]) -> None:
        """Run the step named by a Secrets Manager rotation event."""
        rotation_event = RotationEvent.from_dict(event)
        self.rotate(rotation_event.secret_id, rotation_event.token, rotation_event.step)
