"""Tests for descriptor and permission table loading."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from serverless_iam_policy.config import (
    DEFAULT_PERMISSIONS_PATH,
    load_descriptor,
    load_permission_table,
    parse_permission_table,
)
from serverless_iam_policy.errors import (
    ConfigNotFoundError,
    ConfigParseError,
    PermissionTableError,
)
from serverless_iam_policy.models import CATEGORY_ORDER


SERVERLESS_YML = """\
service: orders
provider:
  name: aws
  stage: prod
  region: eu-central-1
  environment:
    TABLE_NAME: !Ref OrdersTable
    TABLE_ARN: !GetAtt OrdersTable.Arn
functions:
  create:
    handler: handler.create
resources:
  Resources:
    OrdersTable:
      Type: AWS::DynamoDB::Table
      Properties:
        TableName: !Sub "${self:service}-${sls:stage}-orders"
    Output:
      Value: !Join [":", [a, b]]
"""


def test_load_descriptor_parses_cloudformation_tags(tmp_path: Path) -> None:
    """Short-form intrinsic functions become their long-form mappings."""

    path = tmp_path / "serverless.yml"
    path.write_text(SERVERLESS_YML, encoding="utf-8")

    descriptor = load_descriptor(path)

    environment = descriptor["provider"]["environment"]
    assert environment["TABLE_NAME"] == {"Ref": "OrdersTable"}
    assert environment["TABLE_ARN"] == {"Fn::GetAtt": ["OrdersTable", "Arn"]}
    resources = descriptor["resources"]["Resources"]
    assert resources["OrdersTable"]["Properties"]["TableName"] == {
        "Fn::Sub": "${self:service}-${sls:stage}-orders"
    }
    assert resources["Output"]["Value"] == {"Fn::Join": [":", ["a", "b"]]}


def test_load_descriptor_missing_file(tmp_path: Path) -> None:
    """A missing descriptor raises :class:`ConfigNotFoundError`."""

    with pytest.raises(ConfigNotFoundError) as excinfo:
        load_descriptor(tmp_path / "missing.yml")

    assert "missing.yml" in str(excinfo.value)


def test_load_descriptor_invalid_yaml(tmp_path: Path) -> None:
    """Malformed YAML raises :class:`ConfigParseError`."""

    path = tmp_path / "serverless.yml"
    path.write_text("service: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigParseError):
        load_descriptor(path)


def test_load_descriptor_rejects_non_mapping(tmp_path: Path) -> None:
    """A top-level list is not a deployment descriptor."""

    path = tmp_path / "serverless.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigParseError) as excinfo:
        load_descriptor(path)

    assert "list" in str(excinfo.value)


def test_load_descriptor_empty_file(tmp_path: Path) -> None:
    """An empty file is an empty descriptor."""

    path = tmp_path / "serverless.yml"
    path.write_text("", encoding="utf-8")

    assert load_descriptor(path) == {}


def test_bundled_permission_table_covers_every_category() -> None:
    """The packaged table maps every known category to sorted unique actions."""

    table = load_permission_table()

    assert DEFAULT_PERMISSIONS_PATH.is_file()
    for category in CATEGORY_ORDER:
        actions = table.actions_for(category)
        assert actions, category
        assert all(action.startswith(f"{category}:") for action in actions)
        assert len(actions) == len(set(actions))


def test_load_permission_table_from_custom_file(tmp_path: Path) -> None:
    """A caller-supplied table replaces the bundled one."""

    path = tmp_path / "map.json"
    path.write_text(json.dumps({"s3": ["s3:GetObject"]}), encoding="utf-8")

    table = load_permission_table(path)

    assert table.actions_for("s3") == ("s3:GetObject",)
    assert table.actions_for("lambda") == ()
    assert "lambda" not in table


def test_load_permission_table_errors(tmp_path: Path) -> None:
    """Missing or malformed tables raise :class:`PermissionTableError`."""

    with pytest.raises(PermissionTableError):
        load_permission_table(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(PermissionTableError):
        load_permission_table(broken)


@pytest.mark.parametrize("data", [["s3:GetObject"], {"s3": "s3:GetObject"}, {"s3": [1, 2]}])
def test_parse_permission_table_validates_shape(data: object) -> None:
    """The table must map categories to lists of action strings."""

    with pytest.raises(PermissionTableError):
        parse_permission_table(data)


def test_permission_table_is_read_only() -> None:
    """Entries cannot be mutated after loading."""

    table = parse_permission_table({"s3": ["s3:GetObject"]})

    with pytest.raises(TypeError):
        table.entries["s3"] = ("s3:*",)  # type: ignore[index]
