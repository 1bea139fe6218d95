"""Tests for the config module."""

import unittest

from keypair_rotator.config import (
    DEFAULT_SETTINGS,
    KeyPairConfig,
    RotationConfig,
    RotatorSettings,
)
from keypair_rotator.exceptions import ConfigurationError


def _tags(**values):
    return [{"Key": key, "Value": value} for key, value in values.items()]


class TestRotationConfig(unittest.TestCase):
    """Test cases for RotationConfig."""

    def test_from_tags(self):
        """Test a fully configured secret."""
        config = RotationConfig.from_tags([
            {"Key": "cfg.keyPair.type", "Value": "rsa"},
            {"Key": "cfg.keyPair.options.modulusLength", "Value": "4096"},
            {"Key": "cfg.keyPair.graceDays", "Value": "3"},
            {"Key": "cfg.publicKeyStore", "Value": "ssm://us-east-1/keyStore/"},
            {"Key": "Environment", "Value": "prod"},
        ])

        self.assertEqual(config.key_pair.type, "rsa")
        self.assertEqual(config.key_pair.options, {"modulusLength": "4096"})
        self.assertEqual(config.key_pair.grace_days, 3)
        self.assertEqual(config.public_key_store, "ssm://us-east-1/keyStore/")

    def test_grace_days_default_to_zero(self):
        config = RotationConfig.from_tags(_tags(**{"cfg.keyPair.type": "ec"}))

        self.assertEqual(config.key_pair.grace_days, 0)
        self.assertEqual(config.key_pair.options, {})

    def test_grace_days_leading_integer(self):
        """Test graceDays is read from its leading integer, like parseInt."""
        for value, expected in (("2 days", 2), (" 7", 7), ("1.5", 1), ("+4", 4), ("two", 0), ("", 0)):
            with self.subTest(value=value):
                config = RotationConfig.from_tags(_tags(**{
                    "cfg.keyPair.type": "ec",
                    "cfg.keyPair.graceDays": value,
                }))
                self.assertEqual(config.key_pair.grace_days, expected)

    def test_grace_days_must_be_non_negative(self):
        with self.assertRaises(ConfigurationError):
            RotationConfig.from_tags(_tags(**{"cfg.keyPair.graceDays": "-1"}))

    def test_no_configuration_tags(self):
        """Secrets without cfg.* tags resolve to an empty configuration."""
        config = RotationConfig.from_tags(_tags(Owner="platform-team"))

        self.assertIsNone(config.key_pair)
        self.assertIsNone(config.public_key_store)

    def test_public_key_store_passed_through(self):
        """Nested destinations are handed over unmodified."""
        config = RotationConfig.from_tags(_tags(**{
            "cfg.publicKeyStore.bucket": "keys",
            "cfg.publicKeyStore.prefix": "public/",
        }))

        self.assertEqual(config.public_key_store, {"bucket": "keys", "prefix": "public/"})

    def test_options_must_be_nested(self):
        with self.assertRaises(ConfigurationError):
            RotationConfig.from_tags(_tags(**{"cfg.keyPair.options": "namedCurve=secp384r1"}))

    def test_custom_prefix(self):
        config = RotationConfig.from_tags(
            _tags(**{"rotation:keyPair.type": "ed25519", "cfg.keyPair.type": "rsa"}),
            prefix="rotation:",
        )

        self.assertEqual(config.key_pair.type, "ed25519")

    def test_to_dict(self):
        config = RotationConfig(
            key_pair=KeyPairConfig(type="ec", options={"namedCurve": "prime256v1"}, grace_days=1),
            public_key_store="file:///srv/keys",
        )

        self.assertEqual(config.to_dict(), {
            "keyPair": {"type": "ec", "options": {"namedCurve": "prime256v1"}, "graceDays": 1},
            "publicKeyStore": "file:///srv/keys",
        })


class TestRotatorSettings(unittest.TestCase):
    """Test cases for RotatorSettings."""

    def test_defaults(self):
        self.assertEqual(DEFAULT_SETTINGS.tag_prefix, "cfg.")
        self.assertEqual(DEFAULT_SETTINGS.log_level, "INFO")
        self.assertIsNone(DEFAULT_SETTINGS.endpoint_url)

    def test_from_environment(self):
        settings = RotatorSettings.from_environment({
            "KPR_TAG_PREFIX": "rot.",
            "KPR_LOG_LEVEL": "debug",
            "KPR_ENDPOINT_URL": "http://localhost:4566",
        })

        self.assertEqual(settings.tag_prefix, "rot.")
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.log_level_number, 10)
        self.assertEqual(settings.endpoint_url, "http://localhost:4566")

    def test_from_empty_environment(self):
        settings = RotatorSettings.from_environment({})

        self.assertEqual(settings, RotatorSettings())

    def test_invalid_log_level(self):
        with self.assertRaises(ConfigurationError):
            RotatorSettings(log_level="LOUD")

    def test_empty_tag_prefix(self):
        with self.assertRaises(ConfigurationError):
            RotatorSettings(tag_prefix="")
