"""Exceptions raised by the policy builder."""
from __future__ import annotations


class PolicyBuilderError(Exception):
    """Base class for errors the command line reports to the operator."""


class ConfigNotFoundError(PolicyBuilderError):
    """The deployment descriptor path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Serverless config file not found: {path}")
        self.path = path


class ConfigParseError(PolicyBuilderError):
    """The deployment descriptor is not a valid YAML mapping."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Error reading {path}: {reason}")
        self.path = path
        self.reason = reason


class PermissionTableError(PolicyBuilderError):
    """The permission table file is missing or malformed."""


class RoleAssumptionError(PolicyBuilderError):
    """STS rejected the role assumption request."""


__all__ = [
    "ConfigNotFoundError",
    "ConfigParseError",
    "PermissionTableError",
    "PolicyBuilderError",
    "RoleAssumptionError",
]
