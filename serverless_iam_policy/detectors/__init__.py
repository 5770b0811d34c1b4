"""Category detection rules.

Every rule is a pure function that inspects the parsed ``serverless.yml`` and
returns the categories it found. Rules register themselves by name with
:func:`register_rule`; :func:`detect_categories` returns the union of all of
them.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional

from ..models import CategorySet

LOG = logging.getLogger(__name__)

DetectionRule = Callable[[Mapping[str, Any]], FrozenSet[str]]

_RULES: Dict[str, DetectionRule] = {}

DETECTION_RULES: Mapping[str, DetectionRule] = MappingProxyType(_RULES)


def register_rule(name: str) -> Callable[[DetectionRule], DetectionRule]:
    """Return a decorator adding the wrapped rule under *name*."""

    def decorator(func: DetectionRule) -> DetectionRule:
        if _RULES.get(name, func) is not func:
            raise ValueError(f"Detection rule '{name}' is already registered")
        _RULES[name] = func
        return func

    return decorator


def detect_categories(
    descriptor: Mapping[str, Any], rules: Optional[Iterable[DetectionRule]] = None
) -> CategorySet:
    """Return every category used by *descriptor*.

    ``rules`` defaults to all registered rules. Rules are cumulative, so the
    order in which they run does not affect the result.
    """

    if rules is None:
        rules = DETECTION_RULES.values()

    found: set[str] = set()
    for rule in rules:
        matched = rule(descriptor)
        if matched:
            LOG.debug("%s matched %s", rule.__name__, ", ".join(sorted(matched)))
        found.update(matched)
    return frozenset(found)


# Rule modules register on import.
from . import baseline, custom, functions, provider, resources  # noqa: E402,F401

__all__ = [
    "DETECTION_RULES",
    "DetectionRule",
    "detect_categories",
    "register_rule",
]
