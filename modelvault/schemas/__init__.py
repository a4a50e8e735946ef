"""
Pydantic schemas for API request/response validation.
"""

from modelvault.schemas.auth import (
    LoginRequest,
    LoginResponse,
    OwnAccountUpdate,
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserUpdate,
)
from modelvault.schemas.common import (
    ErrorResponse,
    HealthResponse,
    ValidationErrorResponse,
)
from modelvault.schemas.model import ModelCreate, ModelResponse, ModelUpdate

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "OwnAccountUpdate",
    "UserCreate",
    "UserCreatedResponse",
    "UserResponse",
    "UserUpdate",
    "ErrorResponse",
    "HealthResponse",
    "ValidationErrorResponse",
    "ModelCreate",
    "ModelResponse",
    "ModelUpdate",
]
