"""Utilities for turning a secret's flat tag list into nested configuration."""

from typing import Any, Iterable

from keypair_rotator.constants import Constants
from keypair_rotator.exceptions import ConfigurationError


def tags_to_pairs(tags: Iterable[dict[str, str]] | None) -> list[tuple[str, str]]:
    """Convert Secrets Manager tags to ``(key, value)`` pairs."""
    return [(tag["Key"], tag.get("Value", "")) for tag in tags or []]


def from_pairs_deep(
    pairs: Iterable[tuple[str, Any]],
    separator: str | None = None,
    prefix: str | None = None
) -> dict[str, Any]:
    """Build a nested dictionary from dotted-key pairs.

    Only keys starting with ``prefix`` are kept, with the prefix removed.
    ``[("cfg.keyPair.type", "ec")]`` becomes ``{"keyPair": {"type": "ec"}}``.

    Args:
        pairs: Key/value pairs
        separator: Path separator (default: ".")
        prefix: Key prefix to select and strip (default: "cfg.")

    Returns:
        Nested dictionary

    Raises:
        ConfigurationError: If a key is both a value and a parent of other keys
    """
    separator = separator or Constants.CONFIG_TAG_SEPARATOR()
    prefix = Constants.CONFIG_TAG_PREFIX() if prefix is None else prefix

    result: dict[str, Any] = {}
    for key, value in pairs:
        if not key.startswith(prefix):
            continue
        path = key[len(prefix):].split(separator)
        if not all(path):
            raise ConfigurationError(f"Invalid configuration key: {key}")

        node = result
        for part in path[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ConfigurationError(f"Configuration key conflicts with a value: {key}")
            node = child

        if isinstance(node.get(path[-1]), dict):
            raise ConfigurationError(f"Configuration key conflicts with nested keys: {key}")
        node[path[-1]] = value

    return result
