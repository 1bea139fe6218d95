"""Library-wide constants.

These constants centralize protocol values used across modules to keep
behavior consistent and avoid duplication.
"""


class Constants:

    # Secrets Manager staging labels
    _CURRENT_STAGE: str = "AWSCURRENT"
    _PENDING_STAGE: str = "AWSPENDING"

    # Tag configuration
    _CONFIG_TAG_PREFIX: str = "cfg."
    _CONFIG_TAG_SEPARATOR: str = "."

    # Validity window
    _SECONDS_PER_DAY: int = 24 * 60 * 60
    _EXPIRY_SKEW_DAYS: int = 1  # Absorbs clock and scheduling skew
    _DEFAULT_GRACE_DAYS: int = 0

    # Store error codes
    _RESOURCE_EXISTS_ERROR_CODE: str = "ResourceExistsException"

    # Key generation defaults
    _DEFAULT_RSA_MODULUS_LENGTH: int = 2048
    _DEFAULT_RSA_PUBLIC_EXPONENT: int = 65537
    _DEFAULT_EC_CURVE: str = "prime256v1"

    @classmethod
    def CURRENT_STAGE(cls) -> str:
        return cls._CURRENT_STAGE

    @classmethod
    def PENDING_STAGE(cls) -> str:
        return cls._PENDING_STAGE

    @classmethod
    def CONFIG_TAG_PREFIX(cls) -> str:
        return cls._CONFIG_TAG_PREFIX

    @classmethod
    def CONFIG_TAG_SEPARATOR(cls) -> str:
        return cls._CONFIG_TAG_SEPARATOR

    @classmethod
    def SECONDS_PER_DAY(cls) -> int:
        return cls._SECONDS_PER_DAY

    @classmethod
    def EXPIRY_SKEW_DAYS(cls) -> int:
        return cls._EXPIRY_SKEW_DAYS

    @classmethod
    def DEFAULT_GRACE_DAYS(cls) -> int:
        return cls._DEFAULT_GRACE_DAYS

    @classmethod
    def RESOURCE_EXISTS_ERROR_CODE(cls) -> str:
        return cls._RESOURCE_EXISTS_ERROR_CODE

    # Key generation defaults
    @classmethod
    def DEFAULT_RSA_MODULUS_LENGTH(cls) -> int:
        return cls._DEFAULT_RSA_MODULUS_LENGTH

    @classmethod
    def DEFAULT_RSA_PUBLIC_EXPONENT(cls) -> int:
        return cls._DEFAULT_RSA_PUBLIC_EXPONENT

    @classmethod
    def DEFAULT_EC_CURVE(cls) -> str:
        return cls._DEFAULT_EC_CURVE
