#!/usr/bin/env python3
"""Example Lambda function module for Secrets Manager key pair rotation.

Deploy this module as the rotation function of a secret tagged with:

    cfg.keyPair.type                 rsa
    cfg.keyPair.options.modulusLength 3072
    cfg.keyPair.graceDays            7
    cfg.publicKeyStore               ssm://us-east-1/keyStore/

The public key of each new version is written to the SSM parameter
``/keyStore/<secret short name>/<version>``.
"""

import json

import boto3

from keypair_rotator import DestinationPublisher, make_handler

# Bundled publishers: ssm:// and file:// destinations
lambda_handler = make_handler(DestinationPublisher())


def publish_to_bucket(store, name, version, public_key):
    """Publish to S3 instead, reading cfg.publicKeyStore as the bucket name."""
    boto3.client("s3").put_object(
        Bucket=store,
        Key=f"public-keys/{name}/{version}.json",
        Body=json.dumps(public_key.to_dict()).encode("utf-8"),
        ContentType="application/json",
    )


s3_lambda_handler = make_handler(publish_to_bucket)
