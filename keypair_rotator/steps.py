"""Stateless handlers for the four rotation steps.

Every handler must be safe to re-invoke for the same token, since Secrets
Manager may redeliver any step.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from keypair_rotator.arn import parse_arn
from keypair_rotator.config import RotationConfig
from keypair_rotator.constants import Constants
from keypair_rotator.exceptions import ConfigurationError, SecretVersionExistsError
from keypair_rotator.keypair import KeyPairProvider
from keypair_rotator.models import KeyPairRecord, RotationStep, SecretDescriptor, StagingLabel
from keypair_rotator.publisher import PublicKeyPublisher
from keypair_rotator.secret_store import SecretStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepContext:
    """Everything a step handler needs for one invocation."""

    store: SecretStore
    secret_id: str
    token: str
    descriptor: SecretDescriptor
    key_pair_provider: KeyPairProvider
    publisher: PublicKeyPublisher
    clock: Callable[[], float]
    tag_prefix: str = Constants.CONFIG_TAG_PREFIX()

    def load_config(self) -> RotationConfig:
        """Resolve configuration from the secret's tags.

        Called only by the steps that read configuration.

        Raises:
            ConfigurationError: If the tags are malformed
        """
        return RotationConfig.from_tags(self.descriptor.tags, prefix=self.tag_prefix)


def compute_expires_at(now: float, rotation_interval_days: int) -> int:
    """Private key expiry: one rotation interval plus a day of skew from now.

    Grace days only extend the public key expiry.
    """
    valid_days = rotation_interval_days + Constants.EXPIRY_SKEW_DAYS()
    return int(now) + valid_days * Constants.SECONDS_PER_DAY()


def create_secret(ctx: StepContext) -> None:
    """Generate a key pair for the pending version and store it."""
    key_pair = ctx.load_config().key_pair
    if key_pair is None or not key_pair.type:
        raise ConfigurationError(f"Secret {ctx.secret_id} has no cfg.keyPair.type tag")
    if ctx.descriptor.rotation_interval_days is None:
        raise ConfigurationError(f"Secret {ctx.secret_id} has no automatic rotation schedule")

    record = ctx.key_pair_provider.create_key_pair(
        type=key_pair.type,
        options=key_pair.options,
        name=parse_arn(ctx.secret_id).short_name,
        version=ctx.token,
        expires_at=compute_expires_at(ctx.clock(), ctx.descriptor.rotation_interval_days),
        grace_days=key_pair.grace_days or Constants.DEFAULT_GRACE_DAYS(),
    )

    try:
        ctx.store.put_secret_value(
            ctx.secret_id,
            ctx.token,
            record.to_json(),
            [StagingLabel.PENDING],
        )
    except SecretVersionExistsError:
        # A retry after an earlier createSecret stored this version
        logger.info("Key pair already stored for version", extra={
            "secret_id": ctx.secret_id,
            "token": ctx.token,
            "event": "key_pair_already_exists"
        })
        return

    logger.info("Key pair created", extra={
        "secret_id": ctx.secret_id,
        "token": ctx.token,
        "key_type": record.type,
        "expires_at": record.expires_at,
        "event": "key_pair_created"
    })


def set_secret(ctx: StepContext) -> None:
    """Publish the public half of the pending key pair."""
    record = KeyPairRecord.from_json(ctx.store.get_secret_value(ctx.secret_id, ctx.token))
    public_key = ctx.key_pair_provider.public_key_from_key_pair(record)

    ctx.publisher.publish(
        ctx.load_config().public_key_store,
        public_key.name,
        public_key.version,
        public_key,
    )

    logger.info("Public key published", extra={
        "secret_id": ctx.secret_id,
        "token": ctx.token,
        "key_name": public_key.name,
        "event": "public_key_published"
    })


def test_secret(ctx: StepContext) -> None:
    """Testing the new key pair is not supported; always succeeds."""
    return None


def finish_secret(ctx: StepContext) -> None:
    """Promote the pending version to current, demoting the previous one."""
    current_version = ctx.descriptor.current_version()
    if current_version == ctx.token:
        logger.info("Version is already current", extra={
            "secret_id": ctx.secret_id,
            "token": ctx.token,
            "event": "secret_already_current"
        })
        return

    ctx.store.move_staging_label(
        ctx.secret_id,
        StagingLabel.CURRENT,
        to_version=ctx.token,
        from_version=current_version,
    )

    logger.info("Version promoted to current", extra={
        "secret_id": ctx.secret_id,
        "token": ctx.token,
        "previous_version": current_version,
        "event": "secret_promoted"
    })


STEP_HANDLERS: dict[RotationStep, Callable[[StepContext], None]] = {
    RotationStep.CREATE_SECRET: create_secret,
    RotationStep.SET_SECRET: set_secret,
    RotationStep.TEST_SECRET: test_secret,
    RotationStep.FINISH_SECRET: finish_secret,
}
