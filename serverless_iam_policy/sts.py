"""Role assumption with a generated session policy."""
from __future__ import annotations

import logging
from typing import Any, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import RoleAssumptionError
from .models import PolicyDocument

LOG = logging.getLogger(__name__)

# STS rejects session policies whose packed form exceeds this many characters.
SESSION_POLICY_LIMIT = 2048
DEFAULT_SESSION_NAME = "CI-CD-Session"
DEFAULT_DURATION_SECONDS = 900


def session_policy_size(policy: PolicyDocument) -> int:
    """Return the length of the whitespace-free policy JSON."""

    return len(policy.to_json(compact=True))


def exceeds_session_policy_limit(policy: PolicyDocument) -> bool:
    return session_policy_size(policy) > SESSION_POLICY_LIMIT


def assume_role_with_policy(
    session: boto3.session.Session,
    role_arn: str,
    policy: PolicyDocument,
    *,
    session_name: str = DEFAULT_SESSION_NAME,
    duration_seconds: int = DEFAULT_DURATION_SECONDS,
) -> Dict[str, Any]:
    """Assume *role_arn* scoped down by *policy* and return the credentials.

    The returned mapping is the ``Credentials`` member of the STS response.
    Raises :class:`RoleAssumptionError` if STS or botocore reports a failure.
    """

    if exceeds_session_policy_limit(policy):
        LOG.warning(
            "Session policy is %d characters; STS limits packed policies to about %d",
            session_policy_size(policy),
            SESSION_POLICY_LIMIT,
        )

    sts = session.client("sts")
    try:
        response = sts.assume_role(
            RoleArn=role_arn,
            RoleSessionName=session_name,
            DurationSeconds=duration_seconds,
            Policy=policy.to_json(compact=True),
        )
    except (ClientError, BotoCoreError) as exc:
        raise RoleAssumptionError(f"Failed to assume role {role_arn}: {exc}") from exc

    credentials = response.get("Credentials", {})
    LOG.debug("Assumed %s until %s", role_arn, credentials.get("Expiration"))
    return credentials


__all__ = [
    "DEFAULT_DURATION_SECONDS",
    "DEFAULT_SESSION_NAME",
    "SESSION_POLICY_LIMIT",
    "assume_role_with_policy",
    "exceeds_session_policy_limit",
    "session_policy_size",
]
