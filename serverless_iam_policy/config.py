"""Loading of the deployment descriptor and the permission table."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml

from .errors import ConfigNotFoundError, ConfigParseError, PermissionTableError
from .models import PermissionTable

LOG = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "./serverless.yml"
DEFAULT_PERMISSIONS_PATH = Path(__file__).resolve().parent / "data" / "resource_map.json"

PathLike = Union[str, Path]


class CloudFormationLoader(yaml.SafeLoader):
    """Safe YAML loader that understands CloudFormation short-form tags."""


def _construct_intrinsic(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Dict[str, Any]:
    """Turn ``!GetAtt A.B`` into ``{"Fn::GetAtt": ["A", "B"]}`` and friends."""

    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)

    if tag_suffix == "Ref":
        return {"Ref": value}
    if tag_suffix == "GetAtt" and isinstance(value, str):
        value = value.split(".", 1)
    return {f"Fn::{tag_suffix}": value}


CloudFormationLoader.add_multi_constructor("!", _construct_intrinsic)


def load_descriptor(path: PathLike = DEFAULT_CONFIG_PATH) -> Mapping[str, Any]:
    """Read and parse the ``serverless.yml`` found at *path*.

    An empty file is treated as an empty descriptor. Raises
    :class:`ConfigNotFoundError` when *path* does not exist and
    :class:`ConfigParseError` when the content is not a YAML mapping.
    """

    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigNotFoundError(str(path))

    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigParseError(str(path), str(exc)) from exc

    try:
        document = yaml.load(text, Loader=CloudFormationLoader)
    except yaml.YAMLError as exc:
        raise ConfigParseError(str(path), str(exc)) from exc

    if document is None:
        LOG.debug("%s is empty; using defaults", path)
        return {}
    # A list or scalar parses, but has no service, provider or functions to read.
    if not isinstance(document, Mapping):
        raise ConfigParseError(
            str(path), f"expected a mapping at the top level, got {type(document).__name__}"
        )
    return document


def parse_permission_table(data: Any, *, source: str = "<permission table>") -> PermissionTable:
    """Validate raw JSON *data* and return an immutable :class:`PermissionTable`."""

    if not isinstance(data, Mapping):
        raise PermissionTableError(f"{source}: expected an object mapping categories to actions")

    entries: Dict[str, tuple[str, ...]] = {}
    for category, actions in data.items():
        if not isinstance(actions, list) or not all(isinstance(a, str) for a in actions):
            raise PermissionTableError(
                f"{source}: actions for '{category}' must be a list of strings"
            )
        entries[str(category)] = tuple(actions)
    return PermissionTable(entries)


def load_permission_table(path: PathLike = DEFAULT_PERMISSIONS_PATH) -> PermissionTable:
    """Load the category to action mapping from the JSON file at *path*."""

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError as exc:
        raise PermissionTableError(f"Permission table not found: {path}") from exc
    except (OSError, ValueError) as exc:
        raise PermissionTableError(f"Failed to read permission table {path}: {exc}") from exc

    table = parse_permission_table(data, source=str(path))
    LOG.debug("Loaded %d permission table entries from %s", len(table), path)
    return table


__all__ = [
    "CloudFormationLoader",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_PERMISSIONS_PATH",
    "load_descriptor",
    "load_permission_table",
    "parse_permission_table",
]
