"""Tests for the rotation step handlers."""

import json
from dataclasses import replace
from unittest.mock import Mock

import pytest

from keypair_rotator import steps
from keypair_rotator.exceptions import ConfigurationError, KeyPairError
from keypair_rotator.keypair import CryptographyKeyPairProvider
from keypair_rotator.models import KeyPairRecord, PublicKeyRecord
from tests.test_utility import (
    FIXED_NOW,
    SECRET_ARN,
    SECRET_SHORT_NAME,
    FakeSecretStore,
    RecordingPublisher,
    TestDataHelper,
)

DAY = 86400


def _context(store, publisher=None, token="v2", provider=None, **descriptor_kwargs):
    descriptor = store.describe_secret(SECRET_ARN)
    for name, value in descriptor_kwargs.items():
        setattr(descriptor, name, value)
    return steps.StepContext(
        store=store,
        secret_id=SECRET_ARN,
        token=token,
        descriptor=descriptor,
        key_pair_provider=provider or CryptographyKeyPairProvider(),
        publisher=publisher or RecordingPublisher(),
        clock=lambda: FIXED_NOW,
    )


class TestComputeExpiresAt:
    def test_interval_plus_one_day(self):
        assert steps.compute_expires_at(FIXED_NOW, 30) == FIXED_NOW + 31 * DAY

    def test_truncates_fractional_clock(self):
        assert steps.compute_expires_at(FIXED_NOW + 0.75, 1) == FIXED_NOW + 2 * DAY


class TestCreateSecret:
    def test_stores_pending_key_pair(self):
        store = TestDataHelper.create_pending_store()

        steps.create_secret(_context(store))

        record = KeyPairRecord.from_json(store.value("v2"))
        assert record.type == "ec"
        assert record.name == SECRET_SHORT_NAME
        assert record.version == "v2"
        assert record.grace_days == 2
        assert record.options == {"namedCurve": "prime256v1"}
        assert "BEGIN PRIVATE KEY" in record.private_key
        assert store.put_calls == [(SECRET_ARN, "v2", ["AWSPENDING"])]
        assert store.versions_with("AWSPENDING") == ["v2"]
        assert store.versions_with("AWSCURRENT") == ["v1"]

    def test_private_expiry_ignores_grace_days(self):
        store = TestDataHelper.create_pending_store(grace_days="10")

        steps.create_secret(_context(store, rotation_interval_days=7))

        record = KeyPairRecord.from_json(store.value("v2"))
        assert record.expires_at == FIXED_NOW + 8 * DAY
        assert record.grace_days == 10

    def test_missing_grace_days_defaults_to_zero(self):
        store = TestDataHelper.create_pending_store(grace_days=None)

        steps.create_secret(_context(store))

        assert KeyPairRecord.from_json(store.value("v2")).grace_days == 0

    def test_existing_version_is_kept(self):
        """A retried createSecret leaves the first stored key pair in place."""
        store = TestDataHelper.create_pending_store()
        steps.create_secret(_context(store))
        first_value = store.value("v2")

        steps.create_secret(_context(store))

        assert store.value("v2") == first_value
        assert len(store.put_calls) == 2

    def test_requires_key_type(self):
        store = TestDataHelper.create_pending_store()
        ctx = _context(store, tags=[{"Key": "Owner", "Value": "platform-team"}])

        with pytest.raises(ConfigurationError):
            steps.create_secret(ctx)
        assert store.put_calls == []

    def test_requires_rotation_schedule(self):
        store = TestDataHelper.create_pending_store()

        with pytest.raises(ConfigurationError):
            steps.create_secret(_context(store, rotation_interval_days=None))
        assert store.put_calls == []


class TestSetSecret:
    def test_publishes_public_key(self):
        store = TestDataHelper.create_pending_store()
        publisher = RecordingPublisher()
        steps.create_secret(_context(store))

        steps.set_secret(_context(store, publisher=publisher))

        assert len(publisher.published) == 1
        destination, name, version, public_key = publisher.published[0]
        assert destination == "ssm://us-east-1/keyStore/"
        assert name == SECRET_SHORT_NAME
        assert version == "v2"
        assert isinstance(public_key, PublicKeyRecord)
        assert "BEGIN PUBLIC KEY" in public_key.public_key
        assert "PRIVATE" not in public_key.to_json()

    def test_public_key_expiry_includes_grace_days(self):
        store = TestDataHelper.create_pending_store(grace_days="2")
        publisher = RecordingPublisher()
        steps.create_secret(_context(store))

        steps.set_secret(_context(store, publisher=publisher))

        private_expiry = KeyPairRecord.from_json(store.value("v2")).expires_at
        assert publisher.published[0][3].expires_at == private_expiry + 2 * DAY

    def test_repeat_publishes_same_key(self):
        store = TestDataHelper.create_pending_store()
        publisher = RecordingPublisher()
        steps.create_secret(_context(store))

        steps.set_secret(_context(store, publisher=publisher))
        steps.set_secret(_context(store, publisher=publisher))

        first, second = publisher.published
        assert first[3].to_dict() == second[3].to_dict()

    def test_publisher_failure_propagates(self):
        store = TestDataHelper.create_pending_store()
        steps.create_secret(_context(store))
        publisher = Mock()
        publisher.publish.side_effect = RuntimeError("store unavailable")

        with pytest.raises(RuntimeError):
            steps.set_secret(_context(store, publisher=publisher))

    def test_corrupt_stored_key_pair(self):
        store = TestDataHelper.create_pending_store()
        record = {
            "type": "ec",
            "name": SECRET_SHORT_NAME,
            "version": "v2",
            "expiresAt": FIXED_NOW,
            "privateKey": "not a pem",
            "publicKey": "",
        }
        store.put_secret_value(SECRET_ARN, "v2", json.dumps(record), ["AWSPENDING"])
        publisher = RecordingPublisher()

        with pytest.raises(KeyPairError):
            steps.set_secret(_context(store, publisher=publisher))
        assert publisher.published == []


class TestTestSecret:
    def test_no_op(self):
        store = TestDataHelper.create_pending_store()
        publisher = Mock()
        before = store.versions()

        assert steps.test_secret(_context(store, publisher=publisher)) is None

        assert store.versions() == before
        assert store.put_calls == []
        publisher.publish.assert_not_called()


class TestFinishSecret:
    def test_promotes_pending_version(self):
        store = TestDataHelper.create_pending_store()

        steps.finish_secret(_context(store))

        assert store.moves == [(SECRET_ARN, "AWSCURRENT", "v2", "v1")]
        assert store.versions_with("AWSCURRENT") == ["v2"]
        assert "AWSCURRENT" not in store.versions()["v1"]

    def test_already_current(self):
        store = TestDataHelper.create_pending_store()
        store.move_staging_label(SECRET_ARN, "AWSCURRENT", to_version="v2", from_version="v1")
        store.moves.clear()

        steps.finish_secret(_context(store))

        assert store.moves == []

    def test_no_previous_current(self):
        store = FakeSecretStore()
        store.add_secret(
            tags=TestDataHelper.create_config_tags(),
            versions={"v2": ["AWSPENDING"]},
        )

        steps.finish_secret(_context(store))

        assert store.moves == [(SECRET_ARN, "AWSCURRENT", "v2", None)]


class TestStepHandlers:
    def test_all_steps_registered(self):
        assert [step.value for step in steps.STEP_HANDLERS] == [
            "createSecret",
            "setSecret",
            "testSecret",
            "finishSecret",
        ]


class TestStepContext:
    def test_load_config_uses_tag_prefix(self):
        store = FakeSecretStore()
        store.add_secret(
            tags={"rotation:keyPair.type": "ed448", "cfg.keyPair.type": "ec"},
            versions={"v1": ["AWSCURRENT"], "v2": ["AWSPENDING"]},
        )
        ctx = _context(store)

        assert ctx.load_config().key_pair.type == "ec"
        assert replace(ctx, tag_prefix="rotation:").load_config().key_pair.type == "ed448"

    @pytest.mark.parametrize("handler", [steps.test_secret, steps.finish_secret])
    def test_malformed_tags_do_not_block_promotion(self, handler):
        """Steps that do not read configuration ignore broken tags."""
        store = FakeSecretStore()
        store.add_secret(
            tags={"cfg.keyPair": "ec", "cfg.keyPair.type": "ec"},
            versions={"v1": ["AWSCURRENT"], "v2": ["AWSPENDING"]},
        )
        ctx = _context(store)

        with pytest.raises(ConfigurationError):
            ctx.load_config()
        handler(ctx)
