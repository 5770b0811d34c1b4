"""Core orchestration for building a policy from a deployment descriptor."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence, Tuple, Union

from .detectors import detect_categories
from .models import (
    CategoryContribution,
    CategorySet,
    NamingParams,
    PermissionTable,
    PolicyDocument,
    ordered_categories,
)
from .sts import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_SESSION_NAME,
    SESSION_POLICY_LIMIT,
    session_policy_size,
)
from .synthesizer import PolicySynthesizer

DEFAULT_OUTPUT_PATH = "./output/generated-policy.json"


@dataclass(frozen=True)
class PolicyResult:
    """Everything produced by one detect and synthesize pass."""

    categories: CategorySet
    naming: NamingParams
    policy: PolicyDocument
    breakdown: Tuple[CategoryContribution, ...]

    @property
    def ordered_categories(self) -> List[str]:
        return ordered_categories(self.categories)


def generate_policy(
    descriptor: Mapping[str, Any],
    table: PermissionTable,
    *,
    include_wildcard: bool = True,
) -> PolicyResult:
    """Detect the categories used by *descriptor* and build its policy."""

    categories = detect_categories(descriptor)
    naming = NamingParams.from_descriptor(descriptor)
    synthesizer = PolicySynthesizer(table, include_wildcard=include_wildcard)
    return PolicyResult(
        categories=categories,
        naming=naming,
        policy=synthesizer.synthesize(categories, naming),
        breakdown=tuple(synthesizer.breakdown(categories, naming)),
    )


def write_policy(policy: PolicyDocument, path: Union[str, Path] = DEFAULT_OUTPUT_PATH) -> Path:
    """Write *policy* as indented JSON, creating parent directories."""

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(policy.to_json(), encoding="utf-8")
    return output_path


def format_summary(policy: PolicyDocument) -> str:
    """Return the action and resource counts for *policy*."""

    size = session_policy_size(policy)
    status = "within" if size <= SESSION_POLICY_LIMIT else "exceeds"
    return "\n".join(
        [
            f"Total Actions: {policy.action_count}",
            f"Total Resources: {policy.resource_count}",
            f"Session Policy Size: {size} characters ({status} the {SESSION_POLICY_LIMIT} limit)",
        ]
    )


def format_sts_snippet(policy: PolicyDocument) -> str:
    """Return a boto3 snippet that passes *policy* to ``sts.assume_role``."""

    return (
        "import json\n"
        "import os\n"
        "\n"
        "import boto3\n"
        "\n"
        f"policy = {json.dumps(policy.to_dict(), indent=4)}\n"
        "\n"
        'credentials = boto3.client("sts").assume_role(\n'
        '    RoleArn=os.environ["ROLE_ARN"],\n'
        f'    RoleSessionName="{DEFAULT_SESSION_NAME}",\n'
        f"    DurationSeconds={DEFAULT_DURATION_SECONDS},\n"
        '    Policy=json.dumps(policy, separators=(",", ":")),\n'
        ')["Credentials"]\n'
    )


def print_policy_report(result: PolicyResult) -> None:
    """Pretty-print the detected categories, policy, summary and snippet."""

    print(f"Detected services: {', '.join(result.ordered_categories)}")
    print("\n=== Generated IAM Policy ===")
    print(result.policy.to_json())
    print("\n=== Policy Summary ===")
    print(format_summary(result.policy))
    print("\n=== Policy for STS AssumeRole ===")
    print("Use this policy in your STS assume_role call:\n")
    print(format_sts_snippet(result.policy))


def export_policy_to_excel(breakdown: Iterable[CategoryContribution], path: str) -> str:
    """Write the per-category actions and resources to an Excel workbook."""

    headers = ("Category", "Kind", "Value")
    rows: List[tuple[str, str, str]] = []
    for contribution in breakdown:
        rows.extend((contribution.category, "Action", action) for action in contribution.actions)
        rows.extend((contribution.category, "Resource", arn) for arn in contribution.resources)
    return _export_rows_to_excel(rows, headers, path, sheet_title="Policy")


def _export_rows_to_excel(
    rows: Iterable[Sequence[object]],
    headers: Sequence[str],
    path: str,
    *,
    sheet_title: str,
) -> str:
    """Write ``rows`` with ``headers`` to an Excel sheet using :mod:`openpyxl`."""

    try:
        from openpyxl import Workbook
        from openpyxl.utils import get_column_letter
    except ImportError as exc:  # pragma: no cover - dependency missing during tests
        raise RuntimeError(
            "The 'openpyxl' package is required to export the policy to Excel. "
            "Install it with 'pip install openpyxl'."
        ) from exc

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title

    sheet.append(list(headers))
    column_widths = [len(header) for header in headers]

    for row in rows:
        values = list(row)
        sheet.append(values)
        for idx, value in enumerate(values):
            column_widths[idx] = max(column_widths[idx], len(str(value)))

    for idx, width in enumerate(column_widths, start=1):
        column_letter = get_column_letter(idx)
        sheet.column_dimensions[column_letter].width = min(width + 2, 80)

    workbook.save(path)
    return path


__all__ = [
    "DEFAULT_OUTPUT_PATH",
    "PolicyResult",
    "export_policy_to_excel",
    "format_sts_snippet",
    "format_summary",
    "generate_policy",
    "print_policy_report",
    "write_policy",
]
