"""Categories every Serverless deployment needs."""
from __future__ import annotations

from typing import Any, FrozenSet, Mapping

from ..models import BASELINE_CATEGORIES
from . import register_rule


@register_rule("baseline")
def detect_baseline(descriptor: Mapping[str, Any]) -> FrozenSet[str]:
    """CloudFormation and IAM are used by every deployment."""

    return BASELINE_CATEGORIES


__all__ = ["detect_baseline"]
