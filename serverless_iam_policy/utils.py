"""Shared helpers for walking parsed deployment descriptors."""
from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, TypeVar

T = TypeVar("T")

_EMPTY: Mapping[str, Any] = {}


def get_section(descriptor: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    """Return the mapping found at ``descriptor[keys[0]][keys[1]]...``.

    Missing keys and values that are not mappings (YAML allows ``functions:``
    with no body, which parses to ``None``) yield an empty mapping so callers
    never have to guard each level.
    """

    node: Any = descriptor
    for key in keys:
        if not isinstance(node, Mapping):
            return _EMPTY
        node = node.get(key)
    if not isinstance(node, Mapping):
        return _EMPTY
    return node


def get_value(descriptor: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the scalar found under *keys*, or *default* if any level is missing."""

    if not keys:
        return default
    parent = get_section(descriptor, *keys[:-1])
    return parent.get(keys[-1], default)


def iter_mappings(values: Iterable[Any]) -> Iterator[Mapping[str, Any]]:
    """Yield only the members of *values* that are mappings."""

    for value in values:
        if isinstance(value, Mapping):
            yield value


def unique_in_order(items: Iterable[T]) -> list[T]:
    """Drop repeated items while keeping the first occurrence of each."""

    return list(dict.fromkeys(items))


__all__ = ["get_section", "get_value", "iter_mappings", "unique_in_order"]
