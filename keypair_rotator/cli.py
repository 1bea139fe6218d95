#!/usr/bin/env python3
"""Command-line interface for the Key Pair Rotator."""

import argparse
import json
import logging
import sys
import time
from dataclasses import replace
from typing import Any, Callable, Optional

from keypair_rotator.config import RotationConfig, RotatorSettings
from keypair_rotator.constants import Constants
from keypair_rotator.crypto_utils import CryptoUtils
from keypair_rotator.engine import RotationEngine
from keypair_rotator.exceptions import (
    ConfigurationError,
    KeyPairError,
    RotationError,
    ValidationError,
)
from keypair_rotator.keypair import CryptographyKeyPairProvider
from keypair_rotator.models import RotationStep
from keypair_rotator.publisher import CallablePublisher, DestinationPublisher
from keypair_rotator.secret_store import (
    SecretsManagerStore,
    SecretStore,
    create_secrets_manager_client,
)


class KeyPairRotatorCLI:
    """Command-line interface for running and inspecting key pair rotations."""

    def __init__(
        self,
        store_factory: Optional[Callable[[argparse.Namespace], SecretStore]] = None
    ) -> None:
        """Initialize the CLI.

        Args:
            store_factory: Builds the secret store from parsed arguments (optional)
        """
        self._parser = self._create_parser()
        self._store_factory = store_factory or self._default_store
        self._pretty = False

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            prog="keypair-rotator",
            description="Key Pair Rotator - Secrets Manager key pair rotation",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Show staging state of a secret
  keypair-rotator status -s arn:aws:secretsmanager:us-east-1:123456789012:secret:signing-AbCdEf

  # Show the configuration resolved from the secret's cfg.* tags
  keypair-rotator config -s arn:aws:secretsmanager:us-east-1:123456789012:secret:signing-AbCdEf

  # Run one rotation step by hand
  keypair-rotator run-step -s arn:aws:secretsmanager:...:secret:signing-AbCdEf \\
    -t 6f1c0f0e-8a55-4d1e-9f57-1d3e1c2b7a10 --step createSecret

  # Generate a key pair locally
  keypair-rotator generate --type ec --option namedCurve=secp384r1 \\
    --name signing --version v1 --valid-days 31 --grace-days 2
            """,
        )

        # Global arguments
        parser.add_argument(
            "--region",
            help="AWS region (default: taken from the secret ARN)",
        )
        parser.add_argument(
            "--endpoint-url",
            help="Override the AWS endpoint URL (e.g. a local stack)",
        )
        parser.add_argument(
            "--pretty",
            action="store_true",
            help="Pretty-print JSON outputs",
        )
        parser.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Log rotation progress to stderr",
        )

        subparsers = parser.add_subparsers(
            dest="command",
            help="Available commands",
        )

        # Run-step command
        run_step_parser = subparsers.add_parser(
            "run-step",
            help="Run one rotation step",
        )
        run_step_parser.add_argument(
            "-s",
            "--secret-id",
            required=True,
            help="Secret ARN",
        )
        run_step_parser.add_argument(
            "-t",
            "--token",
            required=True,
            help="Version being rotated (ClientRequestToken)",
        )
        run_step_parser.add_argument(
            "--step",
            required=True,
            help=f"Step to run ({', '.join(step.value for step in RotationStep)})",
        )
        run_step_parser.add_argument(
            "--publish-to",
            help="Override the cfg.publicKeyStore destination for setSecret",
        )

        # Status command
        status_parser = subparsers.add_parser(
            "status",
            help="Show rotation staging state",
        )
        status_parser.add_argument(
            "-s",
            "--secret-id",
            required=True,
            help="Secret ARN",
        )

        # Config command
        config_parser = subparsers.add_parser(
            "config",
            help="Show configuration resolved from the secret's tags",
        )
        config_parser.add_argument(
            "-s",
            "--secret-id",
            required=True,
            help="Secret ARN",
        )

        # Generate command
        generate_parser = subparsers.add_parser(
            "generate",
            help="Generate a key pair locally",
        )
        generate_parser.add_argument(
            "--type",
            required=True,
            choices=CryptoUtils.supported_key_types(),
            help="Key pair type",
        )
        generate_parser.add_argument(
            "-o",
            "--option",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Type-specific option, e.g. namedCurve=secp384r1 (repeatable)",
        )
        generate_parser.add_argument(
            "-n",
            "--name",
            required=True,
            help="Key name",
        )
        generate_parser.add_argument(
            "--version",
            required=True,
            help="Key version",
        )
        generate_parser.add_argument(
            "--valid-days",
            type=int,
            required=True,
            help="Days until the private key expires",
        )
        generate_parser.add_argument(
            "--grace-days",
            type=int,
            default=Constants.DEFAULT_GRACE_DAYS(),
            help="Extra days of public key validity",
        )
        generate_parser.add_argument(
            "--public-only",
            action="store_true",
            help="Print only the public key record",
        )

        return parser

    def _settings(self, endpoint_url: str | None) -> RotatorSettings:
        """Read KPR_* settings, letting --endpoint-url override the endpoint."""
        settings = RotatorSettings.from_environment()
        if endpoint_url:
            settings = replace(settings, endpoint_url=endpoint_url)
        return settings

    def _default_store(self, args: argparse.Namespace) -> SecretStore:
        """Build a Secrets Manager store for the command's secret."""
        settings = self._settings(args.endpoint_url)
        if args.region:
            return SecretsManagerStore(
                create_secrets_manager_client(args.region, settings.endpoint_url)
            )
        return SecretsManagerStore.for_secret(args.secret_id, settings)

    def _parse_options(self, values: list[str]) -> dict[str, str]:
        """Parse repeated KEY=VALUE options.

        Raises:
            ValidationError: If an option is not KEY=VALUE
        """
        options = {}
        for value in values:
            key, sep, option_value = value.partition("=")
            if not sep or not key.strip():
                raise ValidationError(f"Option must be KEY=VALUE, got {value!r}")
            options[key.strip()] = option_value.strip()
        return options

    def _print_json(self, payload: dict[str, Any]) -> None:
        """Print a JSON payload to stdout."""
        print(json.dumps(payload, indent=2 if self._pretty else None))

    def _print_error(self, *, message: str, code: str = "error", extra: dict[str, Any] | None = None) -> None:
        """Print a JSON error to stderr and exit non-zero."""
        error_obj = {
            "success": False,
            "error_code": code,
            "message": message,
        }
        if extra:
            error_obj["data"] = extra
        print(json.dumps(error_obj, indent=2), file=sys.stderr)
        sys.exit(1)

    def _handle_run_step(self, args: argparse.Namespace) -> None:
        """Handle run-step command."""
        self._handle_run_step_with_dependencies(
            store=self._store_factory(args),
            secret_id=args.secret_id,
            token=args.token,
            step=args.step,
            publish_to=args.publish_to,
            endpoint_url=args.endpoint_url
        )

    def _handle_run_step_with_dependencies(
        self,
        *,
        store: SecretStore,
        secret_id: str,
        token: str,
        step: str,
        publish_to: str | None,
        endpoint_url: str | None
    ) -> None:
        """Handle run-step command with explicit dependencies.

        Args:
            store: Secret store
            secret_id: Secret ARN
            token: Version being rotated
            step: Step name
            publish_to: Destination overriding cfg.publicKeyStore (optional)
            endpoint_url: AWS endpoint override for publishers (optional)
        """
        settings = self._settings(endpoint_url)
        publisher = DestinationPublisher(endpoint_url=settings.endpoint_url)
        if publish_to:
            by_destination = publisher
            publisher = CallablePublisher(
                lambda _destination, name, version, public_key: by_destination.publish(
                    publish_to, name, version, public_key
                )
            )

        engine = RotationEngine(
            store,
            publisher,
            settings=settings,
        )
        engine.rotate(secret_id, token, step)

        self._print_json({
            "success": True,
            "command": "run-step",
            "secret_id": secret_id,
            "token": token,
            "step": step,
        })

    def _handle_status(self, args: argparse.Namespace) -> None:
        """Handle status command."""
        descriptor = self._store_factory(args).describe_secret(args.secret_id)
        self._print_json({
            "success": True,
            "command": "status",
            "secret_id": args.secret_id,
            "rotation_enabled": descriptor.rotation_enabled,
            "rotation_interval_days": descriptor.rotation_interval_days,
            "current_version": descriptor.current_version(),
            "pending_version": descriptor.pending_version(),
            "versions": descriptor.versions,
        })

    def _handle_config(self, args: argparse.Namespace) -> None:
        """Handle config command."""
        descriptor = self._store_factory(args).describe_secret(args.secret_id)
        settings = self._settings(args.endpoint_url)
        config = RotationConfig.from_tags(descriptor.tags, prefix=settings.tag_prefix)
        self._print_json({
            "success": True,
            "command": "config",
            "secret_id": args.secret_id,
            "config": config.to_dict(),
        })

    def _handle_generate(self, args: argparse.Namespace) -> None:
        """Handle generate command."""
        if args.valid_days < 1:
            raise ValidationError("--valid-days must be at least 1")
        if args.grace_days < 0:
            raise ValidationError("--grace-days must be non-negative")

        provider = CryptographyKeyPairProvider()
        record = provider.create_key_pair(
            type=args.type,
            options=self._parse_options(args.option),
            name=args.name,
            version=args.version,
            expires_at=int(time.time()) + args.valid_days * Constants.SECONDS_PER_DAY(),
            grace_days=args.grace_days,
        )

        if args.public_only:
            payload = provider.public_key_from_key_pair(record).to_dict()
        else:
            payload = record.to_dict()

        self._print_json({
            "success": True,
            "command": "generate",
            "key_pair": payload,
        })

    def run(self, args: Optional[list[str]] = None) -> None:
        """Run the CLI with given arguments."""
        try:
            parsed_args = self._parser.parse_args(args)
            self._pretty = bool(getattr(parsed_args, "pretty", False))

            if parsed_args.verbose:
                logging.basicConfig(
                    level=logging.INFO,
                    stream=sys.stderr,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
                )

            if not parsed_args.command:
                self._print_error(message="No command specified", code="missing_command")

            # Handle commands
            if parsed_args.command == "run-step":
                self._handle_run_step(parsed_args)
            elif parsed_args.command == "status":
                self._handle_status(parsed_args)
            elif parsed_args.command == "config":
                self._handle_config(parsed_args)
            elif parsed_args.command == "generate":
                self._handle_generate(parsed_args)
            else:
                self._print_error(message=f"Unknown command: {parsed_args.command}", code="unknown_command")

        except RotationError as e:
            self._print_error(
                message=str(e),
                code=e.kind.value,
                extra={"category": e.kind.category}
            )
        except ConfigurationError as e:
            self._print_error(message=str(e), code="configuration_error")
        except ValidationError as e:
            self._print_error(message=str(e), code="validation_error")
        except KeyPairError as e:
            self._print_error(message=str(e), code="key_pair_error")
        except KeyboardInterrupt:
            self._print_error(message="Operation cancelled by user", code="cancelled")
        except Exception as e:
            self._print_error(message=str(e), code="unexpected_error")


def main() -> None:
    """Main entry point for the CLI."""
    cli = KeyPairRotatorCLI()
    cli.run()


if __name__ == "__main__":
    main()
