"""AWS Lambda entry point for Secrets Manager key pair rotation.

Example:
    # Tags on the secret:
    #   cfg.keyPair.type                 ec
    #   cfg.keyPair.options.namedCurve   prime256v1
    #   cfg.keyPair.graceDays            2
    #   cfg.publicKeyStore               ssm://us-east-1/keyStore/

    from keypair_rotator import DestinationPublisher, make_handler

    lambda_handler = make_handler(DestinationPublisher())
"""

import logging
from typing import Any, Callable, Optional

from keypair_rotator.config import RotatorSettings
from keypair_rotator.engine import RotationEngine
from keypair_rotator.keypair import KeyPairProvider
from keypair_rotator.models import RotationEvent
from keypair_rotator.publisher import CallablePublisher, PublicKeyPublisher
from keypair_rotator.secret_store import SecretsManagerStore, SecretStore

logger = logging.getLogger(__name__)


def make_handler(
    publisher: PublicKeyPublisher | Callable[..., Any],
    *,
    key_pair_provider: Optional[KeyPairProvider] = None,
    settings: Optional[RotatorSettings] = None,
    store_factory: Optional[Callable[[str], SecretStore]] = None
) -> Callable[[dict[str, Any], Any], None]:
    """Build a Lambda handler bound to a public key publisher.

    Args:
        publisher: Publisher, or a function ``(store, name, version, public_key)``
        key_pair_provider: Key pair provider (default: cryptography-backed)
        settings: Runtime settings (default: read from the environment)
        store_factory: Builds the secret store for a secret ARN (default: Secrets
            Manager in the secret's region)

    Returns:
        Handler with the ``(event, context)`` Lambda signature
    """
    if not isinstance(publisher, PublicKeyPublisher):
        publisher = CallablePublisher(publisher)

    def lambda_handler(event: dict[str, Any], context: Any) -> None:
        handler_settings = settings or RotatorSettings.from_environment()
        logging.getLogger("keypair_rotator").setLevel(handler_settings.log_level_number)

        rotation_event = RotationEvent.from_dict(event)
        if store_factory is not None:
            store = store_factory(rotation_event.secret_id)
        else:
            store = SecretsManagerStore.for_secret(rotation_event.secret_id, handler_settings)

        engine = RotationEngine(
            store,
            publisher,
            key_pair_provider=key_pair_provider,
            settings=handler_settings,
        )
        engine.rotate(rotation_event.secret_id, rotation_event.token, rotation_event.step)

    return lambda_handler
