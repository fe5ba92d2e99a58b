"""
Shared validation utilities for API endpoints.
"""

from typing import Iterable, Optional
from fastapi import Query, HTTPException


def validate_string_length(
    value: Optional[str],
    param_name: str = "parameter",
    max_length: int = 255,
    min_length: int = 0,
) -> Optional[str]:
    """
    Validate string parameter length.

    Args:
        value: The string to validate
        param_name: Name of the parameter for error messages
        max_length: Maximum allowed length
        min_length: Minimum allowed length

    Returns:
        The validated value

    Raises:
        HTTPException: If validation fails
    """
    if value is not None:
        if len(value) < min_length:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid {param_name}: minimum length is {min_length}",
            )
        if len(value) > max_length:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid {param_name}: maximum length is {max_length}",
            )
    return value


def validate_status_filter(
    status: Optional[str], allowed: Iterable[str], param_name: str = "status"
) -> Optional[str]:
    """Reject status filters other than the known ones."""
    allowed = list(allowed)
    if status and status not in allowed:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {param_name}: must be one of {', '.join(allowed)}",
        )
    return status


# Query parameter dependencies for common validations
PageParam = Query(1, ge=1, le=100000, description="Page number (1-based)")
PageLimitParam = Query(10, ge=1, le=100, description="Items per page")
