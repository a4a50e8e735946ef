"""
Authentication and user account schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from modelvault.kernel.permissions import MAX_PERMISSIONS


class LoginRequest(BaseModel):
    """
    Login request.

    Both fields are optional here so that a missing one gets its own
    error message instead of a generic validation failure.
    """

    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """User payload. Artifact flags are probed when the payload is built."""

    id: str
    email: str
    name: str
    permissions: int
    default_lang: str
    model_ids: List[str] = []
    model_names: List[str] = []
    files_exist: List[bool] = []
    variant_files_exist: List[bool] = []


class LoginResponse(UserResponse):
    """User payload plus the freshly issued token."""

    jwt: str


class UserCreate(BaseModel):
    """User creation request (admin only)."""

    name: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=4, max_length=128)
    permissions: int = Field(0, ge=0, le=MAX_PERMISSIONS)
    default_lang: Optional[str] = Field(None, min_length=2, max_length=16)


class UserCreatedResponse(UserResponse):
    """Returned once on creation, with the plain password or generated PIN."""

    password: str


class UserUpdate(BaseModel):
    """
    Account edit request (admin only).

    The email must repeat the account's current one; it cannot be changed.
    A password, when given, replaces the current one.
    """

    name: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=4, max_length=128)
    permissions: int = Field(..., ge=0, le=MAX_PERMISSIONS)


class OwnAccountUpdate(UserUpdate):
    """
    Account edit request for the caller's own account.

    Email and permissions must both match the stored values. Changing the
    password also requires the current one.
    """

    model_config = ConfigDict(populate_by_name=True)

    old_password: Optional[str] = Field(None, alias="oldPassword")
