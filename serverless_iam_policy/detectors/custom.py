"""Keyword detection over the free-form ``custom`` block.

This is a coarse heuristic: the block is serialised to JSON and searched for
service keywords, so unrelated text (a plugin named ``...-vpc-...``, a bucket
prefix containing ``s3``) also matches. Those false positives are accepted.
"""
from __future__ import annotations

import json
from typing import Any, FrozenSet, Mapping, Tuple

from . import register_rule

CUSTOM_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("s3", "s3"),
    ("dynamodb", "dynamodb"),
    ("rds", "rds"),
    ("ec2", "ec2"),
    ("vpc", "ec2"),
)


def _stringify_keys(value: Any) -> Any:
    """Return *value* with every mapping key converted to ``str``."""

    if isinstance(value, Mapping):
        return {str(key): _stringify_keys(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_stringify_keys(item) for item in value]
    return value


def serialize_custom(custom: Any) -> str:
    """Return the lower-cased compact JSON text of *custom*.

    YAML may yield dates and other non-JSON scalars as values or as keys
    (an unquoted ``2024-01-01:``); both are stringified.
    """

    text = json.dumps(
        _stringify_keys(custom), separators=(",", ":"), ensure_ascii=False, default=str
    )
    return text.lower()


@register_rule("custom")
def detect_custom(descriptor: Mapping[str, Any]) -> FrozenSet[str]:
    """Return categories whose keyword appears anywhere in ``custom``."""

    custom = descriptor.get("custom")
    if not custom:
        return frozenset()

    text = serialize_custom(custom)
    return frozenset(category for keyword, category in CUSTOM_KEYWORDS if keyword in text)


__all__ = ["CUSTOM_KEYWORDS", "detect_custom", "serialize_custom"]
