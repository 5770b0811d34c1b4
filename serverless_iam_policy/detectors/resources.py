"""Detection based on CloudFormation resource types under ``resources``."""
from __future__ import annotations

from typing import Any, FrozenSet, Mapping, Optional, Tuple

from ..utils import get_section, iter_mappings
from . import register_rule

# Checked in order; the first matching prefix wins for a given resource.
RESOURCE_TYPE_PREFIXES: Tuple[Tuple[str, str], ...] = (
    ("AWS::S3::", "s3"),
    ("AWS::DynamoDB::", "dynamodb"),
    ("AWS::EC2::", "ec2"),
    ("AWS::RDS::", "rds"),
    ("AWS::Lambda::", "lambda"),
)


def category_for_resource_type(resource_type: object) -> Optional[str]:
    """Return the category for a CloudFormation ``Type``, if one is known."""

    if not isinstance(resource_type, str):
        return None
    for prefix, category in RESOURCE_TYPE_PREFIXES:
        if resource_type.startswith(prefix):
            return category
    return None


@register_rule("resources")
def detect_resources(descriptor: Mapping[str, Any]) -> FrozenSet[str]:
    """Map each ``resources.Resources`` entry to a category by type prefix."""

    resources = get_section(descriptor, "resources", "Resources")
    found = set()
    for resource in iter_mappings(resources.values()):
        category = category_for_resource_type(resource.get("Type"))
        if category:
            found.add(category)
    return frozenset(found)


__all__ = ["RESOURCE_TYPE_PREFIXES", "category_for_resource_type", "detect_resources"]
