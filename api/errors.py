"""
Translation of use case error codes into HTTP errors.
"""

from typing import List, Optional

from fastapi import HTTPException

from domain.exceptions import ErrorCode

STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.UNAUTHORIZED_ACCESS: 403,
    ErrorCode.INVALID_PARAMETERS: 422,
    ErrorCode.STRUCTURE_INCONSISTENT: 409,
}


def raise_for_error(
    error_code: Optional[ErrorCode],
    error: Optional[str],
    validation_errors: Optional[List[str]] = None,
) -> None:
    """
    Raise the HTTPException matching a failed use case result.

    Results without a code come from store failures and map to 500.
    """
    status_code = STATUS_BY_CODE.get(error_code, 500)
    detail = {
        "error_code": error_code.value if error_code else "INTERNAL_ERROR",
        "message": error or "Unexpected error",
    }
    if validation_errors:
        detail["errors"] = list(validation_errors)
    raise HTTPException(status_code=status_code, detail=detail)
