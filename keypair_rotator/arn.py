"""Amazon Resource Name parsing."""

from dataclasses import dataclass

from keypair_rotator.exceptions import ValidationError


@dataclass(frozen=True)
class SecretArn:
    """Parsed components of a secret ARN."""

    partition: str
    service: str
    region: str
    account_id: str
    resource: str

    @property
    def short_name(self) -> str:
        """Secret name taken from the ``secret:<name>`` resource.

        Secrets Manager appends a random suffix to the name in the ARN; it is
        kept so that names stay unique across re-created secrets.
        """
        parts = self.resource.split(":")
        if len(parts) < 2 or not parts[1]:
            raise ValidationError(f"ARN resource has no name: {self.resource}")
        return parts[1]


def parse_arn(arn: str) -> SecretArn:
    """Parse an ARN of the form ``arn:partition:service:region:account:resource``.

    Args:
        arn: ARN to parse

    Returns:
        Parsed SecretArn

    Raises:
        ValidationError: If the value is not an ARN
    """
    if not arn or not isinstance(arn, str):
        raise ValidationError("ARN must be a non-empty string")

    parts = arn.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn":
        raise ValidationError(f"Invalid ARN: {arn}")

    _, partition, service, region, account_id, resource = parts
    if not service or not resource:
        raise ValidationError(f"Invalid ARN: {arn}")

    return SecretArn(
        partition=partition,
        service=service,
        region=region,
        account_id=account_id,
        resource=resource,
    )
