"""Tests for the exceptions module."""

import unittest

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


class TestExceptions(unittest.TestCase):
    """Test cases for the exceptions module."""

    def test_rotation_errors_carry_their_kind(self):
        """Each rotation error subclass maps to exactly one kind."""
        expected = {
            RotationDisabledError: RotationErrorKind.ROTATION_DISABLED,
            UnknownVersionError: RotationErrorKind.UNKNOWN_VERSION,
            VersionNotPendingError: RotationErrorKind.VERSION_NOT_PENDING,
            UnknownStepError: RotationErrorKind.UNKNOWN_STEP,
        }
        for error_class, kind in expected.items():
            error = error_class("failed", secret_id="arn", token="v2")
            self.assertIsInstance(error, RotationError)
            self.assertIsInstance(error, KeyPairRotatorError)
            self.assertEqual(error.kind, kind)
            self.assertEqual(error.secret_id, "arn")
            self.assertEqual(error.token, "v2")
            self.assertEqual(str(error), "failed")

    def test_kind_values_are_stable(self):
        """Kind identifiers are the strings monitoring keys on."""
        self.assertEqual(
            sorted(kind.value for kind in RotationErrorKind),
            ["rotation_disabled", "unknown_step", "unknown_version", "version_not_pending"],
        )

    def test_kind_categories(self):
        """Configuration errors are distinguished from protocol-state anomalies."""
        self.assertEqual(RotationErrorKind.ROTATION_DISABLED.category, "configuration")
        self.assertEqual(RotationErrorKind.UNKNOWN_STEP.category, "configuration")
        self.assertEqual(RotationErrorKind.UNKNOWN_VERSION.category, "protocol_state")
        self.assertEqual(RotationErrorKind.VERSION_NOT_PENDING.category, "protocol_state")

    def test_other_errors_share_base(self):
        """Test the non-rotation errors derive from the package base."""
        for error_class in (
            ConfigurationError,
            ValidationError,
            KeyPairError,
            SecretVersionExistsError,
            PublishError,
        ):
            error = error_class("message")
            self.assertIsInstance(error, KeyPairRotatorError)
            self.assertNotIsInstance(error, RotationError)

    def test_optional_context_defaults_to_none(self):
        error = UnknownStepError("bad step")
        self.assertIsNone(error.secret_id)
        self.assertIsNone(error.token)
