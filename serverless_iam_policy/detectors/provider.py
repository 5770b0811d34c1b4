"""Detection based on the ``provider`` block."""
from __future__ import annotations

from typing import Any, FrozenSet, Mapping

from ..utils import get_section, get_value
from . import register_rule


@register_rule("provider-vpc")
def detect_provider_vpc(descriptor: Mapping[str, Any]) -> FrozenSet[str]:
    """A VPC configuration means functions attach ENIs, which is EC2."""

    if get_value(descriptor, "provider", "vpc"):
        return frozenset({"ec2"})
    return frozenset()


@register_rule("provider-environment")
def detect_provider_environment(descriptor: Mapping[str, Any]) -> FrozenSet[str]:
    """Environment values mentioning ``dynamodb`` imply table access."""

    environment = get_section(descriptor, "provider", "environment")
    for value in environment.values():
        if isinstance(value, str) and "dynamodb" in value:
            return frozenset({"dynamodb"})
    return frozenset()


__all__ = ["detect_provider_environment", "detect_provider_vpc"]
