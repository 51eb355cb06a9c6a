"""
Domain error taxonomy for the plan engine.

Every failure the engine can report carries an ErrorCode so callers
(use cases, routers) can translate it without string matching:

- NOT_FOUND: a referenced workout, plan item, block or variant is absent
- UNAUTHORIZED_ACCESS: propagated from the access-control collaborator
- INVALID_PARAMETERS: a cursor or request names a combination that is
  not present in the snapshot
- STRUCTURE_INCONSISTENT: the snapshot violates a structural invariant

EMPTY_WORKOUT is part of the taxonomy but is a result status, never raised.
"""

from enum import Enum
from typing import List, Optional


class ErrorCode(str, Enum):
    """Outcome codes shared by the domain, use cases and API."""

    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED_ACCESS = "UNAUTHORIZED_ACCESS"
    INVALID_PARAMETERS = "INVALID_PARAMETERS"
    STRUCTURE_INCONSISTENT = "STRUCTURE_INCONSISTENT"
    EMPTY_WORKOUT = "EMPTY_WORKOUT"


class PlanEngineError(Exception):
    """Base class for typed plan engine failures."""

    code: ErrorCode = ErrorCode.INVALID_PARAMETERS

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class NotFoundError(PlanEngineError):
    """Raised when a referenced entity is absent."""

    code = ErrorCode.NOT_FOUND


class UnauthorizedAccessError(PlanEngineError):
    """Raised when the caller lacks entitlement to a workout or does not own a block."""

    code = ErrorCode.UNAUTHORIZED_ACCESS


class InvalidParametersError(PlanEngineError):
    """Raised when a cursor or request does not match the snapshot."""

    code = ErrorCode.INVALID_PARAMETERS


class StructureInconsistentError(PlanEngineError):
    """Raised when a snapshot violates a structural invariant.

    The `errors` list holds one entry per violation found, so a single
    load reports everything that is wrong with the snapshot.
    """

    code = ErrorCode.STRUCTURE_INCONSISTENT


class BlockCreationError(Exception):
    """Error during atomic block creation.

    Raised when the block row and its default variant could not be
    committed together by the store.
    """

    pass
