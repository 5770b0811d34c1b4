"""Value types shared by the detector and the synthesizer."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple

POLICY_VERSION = "2012-10-17"

DEFAULT_SERVICE = "serverless-service"
DEFAULT_STAGE = "dev"
DEFAULT_REGION = "us-east-1"
WILDCARD_ACCOUNT = "*"

# Canonical emission order. Anything the detector can produce is listed here.
CATEGORY_ORDER: Tuple[str, ...] = (
    "cloudformation",
    "iam",
    "lambda",
    "s3",
    "dynamodb",
    "ec2",
    "rds",
    "logs",
)

BASELINE_CATEGORIES: FrozenSet[str] = frozenset({"cloudformation", "iam"})

CategorySet = FrozenSet[str]


def ordered_categories(categories: Iterable[str]) -> List[str]:
    """Return *categories* in canonical order, unknown labels sorted last."""

    unique = set(categories)
    known = [category for category in CATEGORY_ORDER if category in unique]
    extra = sorted(unique.difference(CATEGORY_ORDER))
    return known + extra


@dataclass(frozen=True)
class NamingParams:
    """Values substituted into resource ARN templates."""

    service: str = DEFAULT_SERVICE
    stage: str = DEFAULT_STAGE
    region: str = DEFAULT_REGION
    account: str = WILDCARD_ACCOUNT

    @classmethod
    def from_descriptor(cls, descriptor: Mapping[str, Any]) -> "NamingParams":
        """Build naming parameters from a parsed ``serverless.yml``.

        Older Serverless releases allow ``service: {name: ...}``; both forms are
        accepted. Empty values fall back to the defaults.
        """

        service = descriptor.get("service")
        if isinstance(service, Mapping):
            service = service.get("name")

        provider = descriptor.get("provider")
        if not isinstance(provider, Mapping):
            provider = {}

        return cls(
            service=str(service or DEFAULT_SERVICE),
            stage=str(provider.get("stage") or DEFAULT_STAGE),
            region=str(provider.get("region") or DEFAULT_REGION),
        )

    def as_template_values(self) -> Dict[str, str]:
        return {
            "service": self.service,
            "stage": self.stage,
            "region": self.region,
            "account": self.account,
        }


@dataclass(frozen=True)
class PermissionTable:
    """Read-only mapping of category label to permitted IAM actions."""

    entries: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {key: tuple(actions) for key, actions in self.entries.items()}
        object.__setattr__(self, "entries", MappingProxyType(frozen))

    def actions_for(self, category: str) -> Tuple[str, ...]:
        """Return the actions for *category*, or an empty tuple if unmapped."""

        return self.entries.get(category, ())

    def __contains__(self, category: object) -> bool:
        return category in self.entries

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class PolicyStatement:
    """A single IAM policy statement."""

    actions: Tuple[str, ...]
    resources: Tuple[str, ...]
    effect: str = "Allow"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Effect": self.effect,
            "Action": list(self.actions),
            "Resource": list(self.resources),
        }


@dataclass(frozen=True)
class PolicyDocument:
    """An IAM policy document in the AWS JSON grammar."""

    statements: Tuple[PolicyStatement, ...]
    version: str = POLICY_VERSION

    @property
    def action_count(self) -> int:
        return sum(len(statement.actions) for statement in self.statements)

    @property
    def resource_count(self) -> int:
        return sum(len(statement.resources) for statement in self.statements)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Version": self.version,
            "Statement": [statement.to_dict() for statement in self.statements],
        }

    def to_json(self, *, compact: bool = False) -> str:
        """Serialise the document.

        ``compact`` drops all optional whitespace, which is the form STS
        measures against its session policy size limit.
        """

        if compact:
            return json.dumps(self.to_dict(), separators=(",", ":"))
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class CategoryContribution:
    """Actions and resource patterns contributed by one category."""

    category: str
    actions: Tuple[str, ...]
    resources: Tuple[str, ...]


__all__ = [
    "BASELINE_CATEGORIES",
    "CATEGORY_ORDER",
    "CategoryContribution",
    "CategorySet",
    "DEFAULT_REGION",
    "DEFAULT_SERVICE",
    "DEFAULT_STAGE",
    "NamingParams",
    "POLICY_VERSION",
    "PermissionTable",
    "PolicyDocument",
    "PolicyStatement",
    "WILDCARD_ACCOUNT",
    "ordered_categories",
]
