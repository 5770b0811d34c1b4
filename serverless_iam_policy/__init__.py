"""Least-privilege IAM policy generation for Serverless Framework deployments."""

from __future__ import annotations

from .config import load_descriptor, load_permission_table
from .core import PolicyResult, generate_policy, write_policy
from .detectors import detect_categories
from .errors import (
    ConfigNotFoundError,
    ConfigParseError,
    PermissionTableError,
    PolicyBuilderError,
    RoleAssumptionError,
)
from .models import NamingParams, PermissionTable, PolicyDocument, PolicyStatement
from .synthesizer import PolicySynthesizer

__all__ = [
    "ConfigNotFoundError",
    "ConfigParseError",
    "NamingParams",
    "PermissionTable",
    "PermissionTableError",
    "PolicyBuilderError",
    "PolicyDocument",
    "PolicyResult",
    "PolicyStatement",
    "PolicySynthesizer",
    "RoleAssumptionError",
    "detect_categories",
    "generate_policy",
    "load_descriptor",
    "load_permission_table",
    "write_policy",
]
