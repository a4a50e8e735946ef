"""
Common schema types used across the API.
"""

from typing import Any, List

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str


class ValidationErrorResponse(BaseModel):
    """Request body or query failed validation."""

    detail: str = "Validation error"
    errors: List[Any] = []


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"
