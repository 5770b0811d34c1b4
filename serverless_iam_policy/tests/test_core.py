"""Tests for the detect and synthesize pipeline."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from serverless_iam_policy.config import load_permission_table
from serverless_iam_policy.core import (
    export_policy_to_excel,
    format_sts_snippet,
    format_summary,
    generate_policy,
    write_policy,
)
from serverless_iam_policy.models import NamingParams, PermissionTable


@pytest.fixture(scope="module")
def table() -> PermissionTable:
    return load_permission_table()


def test_function_descriptor(table: PermissionTable) -> None:
    """A single function yields Lambda resources scoped by name, stage and region."""

    descriptor = {
        "service": "api",
        "provider": {"stage": "prod", "region": "eu-west-1"},
        "functions": {"hello": {}},
    }

    result = generate_policy(descriptor, table)
    resources = result.policy.statements[0].resources

    assert result.categories == frozenset({"cloudformation", "iam", "lambda"})
    assert "arn:aws:lambda:eu-west-1:*:function:api-prod-*" in resources
    assert resources[-1] == "*"


def test_dynamodb_descriptor_without_functions(table: PermissionTable) -> None:
    """A table resource alone does not pull in Lambda."""

    descriptor = {"resources": {"Resources": {"Table": {"Type": "AWS::DynamoDB::Table"}}}}

    result = generate_policy(descriptor, table)
    resources = result.policy.statements[0].resources

    assert result.categories == frozenset({"cloudformation", "iam", "dynamodb"})
    assert not any(arn.startswith("arn:aws:lambda:") for arn in resources)
    assert not any(action.startswith("lambda:") for action in result.policy.statements[0].actions)


def test_empty_descriptor_uses_defaults(table: PermissionTable) -> None:
    """Missing naming fields fall back to the documented defaults."""

    result = generate_policy({}, table)

    assert result.categories == frozenset({"cloudformation", "iam"})
    assert result.naming == NamingParams(
        service="serverless-service", stage="dev", region="us-east-1"
    )
    assert (
        "arn:aws:cloudformation:us-east-1:*:stack/serverless-service-dev/*"
        in result.policy.statements[0].resources
    )


def test_service_name_mapping_form(table: PermissionTable) -> None:
    """``service: {name: ...}`` is accepted alongside the plain string form."""

    result = generate_policy({"service": {"name": "legacy"}}, table)

    assert result.naming.service == "legacy"


def test_generation_is_idempotent(table: PermissionTable) -> None:
    """Two runs over the same descriptor serialise to identical bytes."""

    descriptor = {
        "service": "shop",
        "functions": {"a": {}, "b": {}},
        "provider": {"vpc": {"subnetIds": ["s"]}},
        "custom": {"bucket": "s3", "db": "rds"},
    }

    first = generate_policy(descriptor, table).policy.to_json()
    second = generate_policy(descriptor, table).policy.to_json()

    assert first == second


def test_output_invariants(table: PermissionTable) -> None:
    """Actions are sorted and unique; resources are unique and end with ``*``."""

    descriptor = {
        "functions": {"a": {}},
        "resources": {
            "Resources": {
                "Fn": {"Type": "AWS::Lambda::Function"},
                "Bucket": {"Type": "AWS::S3::Bucket"},
            }
        },
        "custom": {"s3": True, "vpc": True},
    }

    statement = generate_policy(descriptor, table).policy.statements[0]

    assert list(statement.actions) == sorted(set(statement.actions))
    assert len(statement.resources) == len(set(statement.resources))
    assert statement.resources[-1] == "*"


def test_wildcard_disabled(table: PermissionTable) -> None:
    """The fallback wildcard can be switched off."""

    result = generate_policy({}, table, include_wildcard=False)

    assert "*" not in result.policy.statements[0].resources


def test_write_policy_creates_parent_directories(tmp_path: Path, table: PermissionTable) -> None:
    """The artifact is written as indented JSON below new directories."""

    policy = generate_policy({}, table).policy
    path = write_policy(policy, tmp_path / "output" / "generated-policy.json")

    assert path.is_file()
    assert json.loads(path.read_text(encoding="utf-8")) == policy.to_dict()
    assert path.read_text(encoding="utf-8").startswith('{\n  "Version"')


def test_format_summary_counts(table: PermissionTable) -> None:
    """The summary reports action and resource totals."""

    policy = generate_policy({}, table).policy
    summary = format_summary(policy)

    assert f"Total Actions: {len(policy.statements[0].actions)}" in summary
    assert "Total Resources: 5" in summary
    assert "Session Policy Size:" in summary


def test_sts_snippet_embeds_policy(table: PermissionTable) -> None:
    """The snippet carries the policy and the assume_role call."""

    policy = generate_policy({}, table).policy
    snippet = format_sts_snippet(policy)

    assert '"Version": "2012-10-17"' in snippet
    assert "assume_role(" in snippet
    assert 'RoleSessionName="CI-CD-Session"' in snippet
    assert "DurationSeconds=900" in snippet


def test_export_policy_to_excel(tmp_path: Path, table: PermissionTable) -> None:
    """The breakdown is written one row per action or resource."""

    openpyxl = pytest.importorskip("openpyxl")
    result = generate_policy({"functions": {"a": {}}}, table)
    path = export_policy_to_excel(result.breakdown, str(tmp_path / "policy.xlsx"))

    sheet = openpyxl.load_workbook(path).active
    rows = list(sheet.iter_rows(values_only=True))
    expected = sum(len(item.actions) + len(item.resources) for item in result.breakdown)

    assert rows[0] == ("Category", "Kind", "Value")
    assert len(rows) == expected + 1
    assert ("lambda", "Resource", "arn:aws:lambda:us-east-1:*:function:serverless-service-dev-*") in rows


def test_result_breakdown_is_immutable(table: PermissionTable) -> None:
    """The per-category breakdown is stored as a tuple."""

    result = generate_policy({"functions": {"a": {}}}, table)

    assert isinstance(result.breakdown, tuple)
    assert [item.category for item in result.breakdown] == ["cloudformation", "iam", "lambda"]
