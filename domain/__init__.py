"""
Domain layer for the plan engine.

This package contains pure domain models and services that are independent
of infrastructure concerns (database, API, external services). Nothing in
here performs I/O or keeps state between calls.
"""

from domain.exceptions import (
    ErrorCode,
    InvalidParametersError,
    NotFoundError,
    PlanEngineError,
    StructureInconsistentError,
    UnauthorizedAccessError,
)
from domain.plan_tree import PlanTree

__all__ = [
    "PlanTree",
    "ErrorCode",
    "PlanEngineError",
    "NotFoundError",
    "UnauthorizedAccessError",
    "InvalidParametersError",
    "StructureInconsistentError",
]
