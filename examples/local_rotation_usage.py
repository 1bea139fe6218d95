#!/usr/bin/env python3
"""Example of a full key pair rotation against an in-memory secret store."""

import json
import tempfile
from pathlib import Path

from keypair_rotator import FilePublisher, RotationEngine, SecretDescriptor, SecretStore

SECRET_ARN = "arn:aws:secretsmanager:us-east-1:123456789012:secret:signing-key-AbCdEf"


class InMemorySecretStore(SecretStore):
    """Minimal secret store keeping versions in a dictionary."""

    def __init__(self, tags, versions):
        self.tags = [{"Key": key, "Value": value} for key, value in tags.items()]
        self.versions = versions
        self.values = {}

    def describe_secret(self, secret_id):
        return SecretDescriptor(
            secret_id=secret_id,
            rotation_enabled=True,
            rotation_interval_days=30,
            tags=self.tags,
            versions={version_id: list(stages) for version_id, stages in self.versions.items()},
        )

    def get_secret_value(self, secret_id, version_id):
        return self.values[version_id]

    def put_secret_value(self, secret_id, token, value, stages):
        self.values[token] = value
        self.versions.setdefault(token, []).extend(stages)

    def move_staging_label(self, secret_id, label, to_version, from_version):
        if from_version:
            self.versions[from_version].remove(label)
        self.versions[to_version].append(label)


def main():
    """Rotate a secret from v1 to v2, publishing the public key to a directory."""

    with tempfile.TemporaryDirectory() as temp_dir:
        store = InMemorySecretStore(
            tags={
                "cfg.keyPair.type": "ec",
                "cfg.keyPair.options.namedCurve": "secp384r1",
                "cfg.keyPair.graceDays": "2",
                "cfg.publicKeyStore": Path(temp_dir).as_uri(),
            },
            versions={"v1": ["AWSCURRENT"], "v2": ["AWSPENDING"]},
        )
        engine = RotationEngine(store, FilePublisher())

        for step in ("createSecret", "setSecret", "testSecret", "finishSecret"):
            engine.rotate(SECRET_ARN, "v2", step)
            print(f"{step}: {store.versions}")

        public_key_file = Path(temp_dir) / "signing-key-AbCdEf" / "v2.json"
        published = json.loads(public_key_file.read_text(encoding="utf-8"))
        print(f"Published {public_key_file.name} (expires at {published['expiresAt']})")

        # A redelivered step for the promoted version does nothing
        engine.rotate(SECRET_ARN, "v2", "finishSecret")
        print(f"After redelivery: {store.versions}")


if __name__ == "__main__":
    main()
