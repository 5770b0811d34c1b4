"""Command line interface for the Serverless IAM policy builder."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .config import DEFAULT_CONFIG_PATH, load_descriptor, load_permission_table
from .core import (
    DEFAULT_OUTPUT_PATH,
    export_policy_to_excel,
    generate_policy,
    print_policy_report,
    write_policy,
)
from .errors import PolicyBuilderError, RoleAssumptionError
from .sts import DEFAULT_DURATION_SECONDS, DEFAULT_SESSION_NAME, assume_role_with_policy


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Return parsed command line arguments."""

    parser = argparse.ArgumentParser(
        description="Generate a least-privilege IAM policy from a serverless.yml file."
    )
    parser.add_argument(
        "config",
        nargs="?",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the Serverless config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--permissions",
        default=None,
        help="JSON file mapping service categories to IAM actions (default: bundled table)",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_PATH,
        help=f"Where to write the policy JSON (default: {DEFAULT_OUTPUT_PATH})",
    )
    parser.add_argument(
        "--no-wildcard",
        dest="include_wildcard",
        action="store_false",
        help='Omit the catch-all "*" resource for a stricter policy',
    )
    parser.add_argument(
        "--excel",
        dest="excel_path",
        help="Optional path to export the per-service breakdown as an Excel workbook (.xlsx)",
    )
    parser.add_argument(
        "--assume-role",
        dest="role_arn",
        help="Assume this role with the generated policy as the session policy",
    )
    parser.add_argument(
        "--session-name",
        default=DEFAULT_SESSION_NAME,
        help=f"Role session name used with --assume-role (default: {DEFAULT_SESSION_NAME})",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=DEFAULT_DURATION_SECONDS,
        help=f"Session duration in seconds for --assume-role (default: {DEFAULT_DURATION_SECONDS})",
    )
    parser.add_argument("--profile", help="AWS CLI profile to use with --assume-role", default=None)
    parser.add_argument("--region", help="AWS region for the STS client", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point used by ``python -m serverless_iam_policy``."""

    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.permissions:
            table = load_permission_table(args.permissions)
        else:
            table = load_permission_table()
        print(f"Reading serverless config from: {args.config}")
        descriptor = load_descriptor(args.config)
    except PolicyBuilderError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    result = generate_policy(descriptor, table, include_wildcard=args.include_wildcard)
    print_policy_report(result)

    path = write_policy(result.policy, args.output)
    print(f"\nPolicy saved to: {path}")

    if args.excel_path:
        try:
            excel_path = export_policy_to_excel(result.breakdown, args.excel_path)
        except RuntimeError as exc:
            print(f"Failed to export Excel report: {exc}", file=sys.stderr)
        else:
            print(f"Excel report written to {excel_path}")

    if args.role_arn:
        try:
            session = boto3.Session(profile_name=args.profile, region_name=args.region)
            credentials = assume_role_with_policy(
                session,
                args.role_arn,
                result.policy,
                session_name=args.session_name,
                duration_seconds=args.duration,
            )
        except (BotoCoreError, RoleAssumptionError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        print(
            f"Assumed {args.role_arn} as {args.session_name}; "
            f"credentials expire at {credentials.get('Expiration')}"
        )

    return 0


__all__ = ["main", "parse_args"]
