"""Centralized error transformation for API routes.

Maps placement errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from placement.domain.shared.error import (
    ConflictError,
    DomainError,
    InfrastructureError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    PlacementError,
    ValidationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    InvalidStateError: 409,
    ConflictError: 409,
    PermissionDeniedError: 403,
}


def map_placement_error(error: PlacementError) -> HTTPException:
    """Map a placement error to an HTTPException with a JSON detail body."""
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        status_code = DOMAIN_ERROR_STATUS_MAP.get(type(error), 400)
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        if isinstance(error, PermissionDeniedError):
            detail["hint"] = error.hint
        return HTTPException(status_code=status_code, detail=detail)

    # Fallback for unknown PlacementError subclasses
    return HTTPException(status_code=500, detail=detail)
