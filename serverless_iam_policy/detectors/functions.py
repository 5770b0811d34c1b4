"""Detection of Lambda functions declared under ``functions``."""
from __future__ import annotations

from typing import Any, FrozenSet, Mapping

from . import register_rule


@register_rule("functions")
def detect_functions(descriptor: Mapping[str, Any]) -> FrozenSet[str]:
    """Return ``lambda`` when at least one function is declared.

    Both the usual mapping form and a list of function entries count.
    """

    functions = descriptor.get("functions")
    if isinstance(functions, (Mapping, list)) and functions:
        return frozenset({"lambda"})
    return frozenset()


__all__ = ["detect_functions"]
