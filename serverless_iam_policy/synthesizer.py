"""Assemble an IAM policy document from detected categories."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Tuple

from .models import (
    CategoryContribution,
    NamingParams,
    PermissionTable,
    PolicyDocument,
    PolicyStatement,
    ordered_categories,
)
from .utils import unique_in_order

LOG = logging.getLogger(__name__)

WILDCARD_RESOURCE = "*"

# ARN templates per category. Placeholders are filled from NamingParams.
RESOURCE_TEMPLATES: Dict[str, Tuple[str, ...]] = {
    "s3": (
        "arn:aws:s3:::{service}-{stage}-*",
        "arn:aws:s3:::{service}-{stage}-*/*",
    ),
    "lambda": (
        "arn:aws:lambda:{region}:{account}:function:{service}-{stage}-*",
        "arn:aws:lambda:{region}:{account}:layer:{service}-{stage}-*",
    ),
    "dynamodb": (
        "arn:aws:dynamodb:{region}:{account}:table/{service}-{stage}-*",
        "arn:aws:dynamodb:{region}:{account}:table/{service}-{stage}-*/index/*",
    ),
    "logs": (
        "arn:aws:logs:{region}:{account}:log-group:/aws/lambda/{service}-{stage}-*",
        "arn:aws:logs:{region}:{account}:log-group:/aws/lambda/{service}-{stage}-*:*",
    ),
    "cloudformation": (
        "arn:aws:cloudformation:{region}:{account}:stack/{service}-{stage}/*",
        "arn:aws:cloudformation:{region}:{account}:stack/{service}-{stage}-*/*",
    ),
    "iam": (
        "arn:aws:iam::{account}:role/{service}-{stage}-*",
        "arn:aws:iam::{account}:role/*-{service}-{stage}-*",
    ),
    "ec2": (
        "arn:aws:ec2:{region}:{account}:security-group/*",
        "arn:aws:ec2:{region}:{account}:network-interface/*",
        "arn:aws:ec2:{region}:{account}:vpc/*",
        "arn:aws:ec2:{region}:{account}:subnet/*",
    ),
    "rds": (
        "arn:aws:rds:{region}:{account}:db:{service}-{stage}-*",
        "arn:aws:rds:{region}:{account}:subgrp:{service}-{stage}-*",
        "arn:aws:rds:{region}:{account}:pg:{service}-{stage}-*",
    ),
}


def render_resources(category: str, naming: NamingParams) -> Tuple[str, ...]:
    """Return the resource patterns for *category* scoped by *naming*."""

    values = naming.as_template_values()
    return tuple(template.format(**values) for template in RESOURCE_TEMPLATES.get(category, ()))


class PolicySynthesizer:
    """Build policy documents from category sets.

    The permission table is fixed at construction time. ``include_wildcard``
    controls whether the catch-all ``"*"`` resource is appended after the
    category specific patterns; it is on by default and broadens the policy
    so that a missing pattern never blocks a deployment.
    """

    def __init__(self, table: PermissionTable, *, include_wildcard: bool = True) -> None:
        self.table = table
        self.include_wildcard = include_wildcard

    def breakdown(
        self, categories: Iterable[str], naming: NamingParams
    ) -> List[CategoryContribution]:
        """Return what each category contributes, in canonical order."""

        contributions = []
        for category in ordered_categories(categories):
            if category not in self.table:
                LOG.debug("No permission table entry for category %s", category)
            contributions.append(
                CategoryContribution(
                    category=category,
                    actions=self.table.actions_for(category),
                    resources=render_resources(category, naming),
                )
            )
        return contributions

    def synthesize(self, categories: Iterable[str], naming: NamingParams) -> PolicyDocument:
        """Return a single-statement ``Allow`` policy for *categories*."""

        actions: set[str] = set()
        resources: List[str] = []
        for contribution in self.breakdown(categories, naming):
            actions.update(contribution.actions)
            resources.extend(contribution.resources)

        if self.include_wildcard:
            resources.append(WILDCARD_RESOURCE)

        statement = PolicyStatement(
            actions=tuple(sorted(actions)),
            resources=tuple(unique_in_order(resources)),
        )
        return PolicyDocument(statements=(statement,))


__all__ = ["PolicySynthesizer", "RESOURCE_TEMPLATES", "WILDCARD_RESOURCE", "render_resources"]
