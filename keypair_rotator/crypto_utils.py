"""Cryptographic utilities for the Key Pair Rotator."""

from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa, x448, x25519

from keypair_rotator.constants import Constants
from keypair_rotator.exceptions import KeyPairError, ValidationError


class CryptoUtils:
    """Cryptographic utilities for asymmetric key pairs."""

    # Curve names accepted in cfg.keyPair.options.namedCurve
    _EC_CURVES = {
        "prime256v1": ec.SECP256R1,
        "secp256r1": ec.SECP256R1,
        "p-256": ec.SECP256R1,
        "secp384r1": ec.SECP384R1,
        "p-384": ec.SECP384R1,
        "secp521r1": ec.SECP521R1,
        "p-521": ec.SECP521R1,
        "secp256k1": ec.SECP256K1,
    }
    _KEY_TYPES = ("rsa", "dsa", "ec", "ed25519", "ed448", "x25519", "x448")
    _MIN_RSA_MODULUS_LENGTH = 1024

    @classmethod
    def supported_key_types(cls) -> tuple[str, ...]:
        return cls._KEY_TYPES

    @staticmethod
    def _int_option(options: dict[str, Any], name: str, default: int) -> int:
        """Read an integer option; tag values arrive as strings."""
        value = options.get(name)
        if value is None or value == "":
            return default
        try:
            return int(str(value), 10)
        except ValueError as e:
            raise ValidationError(f"Option {name} must be an integer, got {value!r}") from e

    @classmethod
    def generate_private_key(
        cls,
        key_type: str,
        options: dict[str, Any] | None = None
    ) -> Any:
        """Generate a private key of the given type.

        Args:
            key_type: One of rsa, dsa, ec, ed25519, ed448, x25519, x448
            options: Type-specific options (modulusLength, publicExponent, namedCurve)

        Returns:
            Private key object

        Raises:
            ValidationError: If the type or options are invalid
            KeyPairError: If generation fails
        """
        options = options or {}
        if not key_type:
            raise ValidationError("Key type is required")

        key_type = key_type.lower()
        if key_type == "rsa-pss":
            # cryptography only generates rsaEncryption keys
            raise ValidationError("Key type rsa-pss is not supported; use rsa")
        if key_type not in cls._KEY_TYPES:
            raise ValidationError(
                f"Unsupported key type: {key_type} (expected one of {', '.join(cls._KEY_TYPES)})"
            )

        try:
            if key_type == "rsa":
                modulus_length = cls._int_option(
                    options, "modulusLength", Constants.DEFAULT_RSA_MODULUS_LENGTH()
                )
                if modulus_length < cls._MIN_RSA_MODULUS_LENGTH:
                    raise ValidationError(
                        f"modulusLength must be at least {cls._MIN_RSA_MODULUS_LENGTH}"
                    )
                return rsa.generate_private_key(
                    public_exponent=cls._int_option(
                        options, "publicExponent", Constants.DEFAULT_RSA_PUBLIC_EXPONENT()
                    ),
                    key_size=modulus_length,
                )

            if key_type == "dsa":
                return dsa.generate_private_key(
                    key_size=cls._int_option(options, "modulusLength", 2048)
                )

            if key_type == "ec":
                curve_name = str(options.get("namedCurve") or Constants.DEFAULT_EC_CURVE())
                curve = cls._EC_CURVES.get(curve_name.lower())
                if curve is None:
                    raise ValidationError(f"Unsupported namedCurve: {curve_name}")
                return ec.generate_private_key(curve())

            if key_type == "ed25519":
                return ed25519.Ed25519PrivateKey.generate()
            if key_type == "ed448":
                return ed448.Ed448PrivateKey.generate()
            if key_type == "x25519":
                return x25519.X25519PrivateKey.generate()
            return x448.X448PrivateKey.generate()

        except ValidationError:
            raise
        except Exception as e:
            raise KeyPairError(f"Key generation failed: {e}") from e

    @staticmethod
    def private_key_to_pem(private_key: Any) -> str:
        """Serialize a private key as unencrypted PKCS#8 PEM."""
        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode("ascii")

    @staticmethod
    def public_key_to_pem(public_key: Any) -> str:
        """Serialize a public key as SubjectPublicKeyInfo PEM."""
        return public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ).decode("ascii")

    @staticmethod
    def load_private_key_pem(pem: str) -> Any:
        """Load an unencrypted PEM private key.

        Raises:
            KeyPairError: If the PEM cannot be loaded
        """
        if not pem:
            raise ValidationError("Private key PEM cannot be empty")
        try:
            return serialization.load_pem_private_key(pem.encode("ascii"), password=None)
        except Exception as e:
            raise KeyPairError(f"Failed to load private key: {e}") from e

    @classmethod
    def public_pem_from_private_pem(cls, pem: str) -> str:
        """Derive the public key PEM from a private key PEM."""
        return cls.public_key_to_pem(cls.load_private_key_pem(pem).public_key())
