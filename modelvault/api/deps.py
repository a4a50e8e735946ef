"""
FastAPI dependencies for authentication, authorization, and database sessions.

The access guard runs in three steps, each with its own outcome:

1. no token                    -> 401 AuthenticationError
2. token fails verification    -> 400 TokenError
3. role not satisfied          -> 403 AuthorizationError

Only then are path ids parsed and records resolved.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from modelvault.config import get_settings
from modelvault.database import get_db
from modelvault.errors import AuthenticationError, AuthorizationError, NotFoundError
from modelvault.kernel.identity.jwt import TokenIdentity, TokenService, get_token_service
from modelvault.kernel.permissions import RequiredRole, allows, allows_self_or_admin
from modelvault.kernel.storage import ArtifactStore, get_artifact_store
from modelvault.services.lifecycle_service import ModelLifecycleService

INVALID_USER_ID_DETAIL = "Invalid user id..."
INVALID_MODEL_ID_DETAIL = "Invalid id..."


# Security scheme
security = HTTPBearer(auto_error=False)


DbSession = Annotated[AsyncSession, Depends(get_db)]
Store = Annotated[ArtifactStore, Depends(get_artifact_store)]
Tokens = Annotated[TokenService, Depends(get_token_service)]


def get_raw_token(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[str]:
    """Token from the configured header, falling back to `Authorization: Bearer`."""
    token = request.headers.get(get_settings().token_header)
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None


async def get_current_identity(
    token: Annotated[Optional[str], Depends(get_raw_token)],
    tokens: Tokens,
) -> TokenIdentity:
    """Verified identity of the caller, or 401/400."""
    if not token:
        raise AuthenticationError()
    return tokens.verify(token)


CurrentIdentity = Annotated[TokenIdentity, Depends(get_current_identity)]


class RoleChecker:
    """
    Dependency class requiring a role from the caller.

    Usage:
        @router.post("/models/{user_id}")
        async def create_model(identity: Annotated[TokenIdentity, Depends(RoleChecker(RequiredRole.ADMIN))]):
            ...
    """

    def __init__(self, required_role: RequiredRole):
        self.required_role = required_role

    async def __call__(self, identity: CurrentIdentity) -> TokenIdentity:
        if not allows(identity.permissions, self.required_role):
            raise AuthorizationError()
        return identity


RequireUser = Annotated[TokenIdentity, Depends(RoleChecker(RequiredRole.USER))]
RequireAdmin = Annotated[TokenIdentity, Depends(RoleChecker(RequiredRole.ADMIN))]


def _parse_uuid(raw: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


def parse_user_id(user_id: str) -> uuid.UUID:
    parsed = _parse_uuid(user_id)
    if parsed is None:
        raise NotFoundError(INVALID_USER_ID_DETAIL)
    return parsed


def parse_model_id(model_id: str) -> uuid.UUID:
    parsed = _parse_uuid(model_id)
    if parsed is None:
        raise NotFoundError(INVALID_MODEL_ID_DETAIL)
    return parsed


async def require_self_or_admin(user_id: str, identity: CurrentIdentity) -> uuid.UUID:
    """
    Path user id, provided the caller may address that user.

    Admins may address anyone; plain users only themselves. A malformed id
    is reported as such to admins only; for everyone else it cannot be
    their own id and is forbidden.
    """
    addressed = _parse_uuid(user_id)
    if addressed is None:
        if allows(identity.permissions, RequiredRole.ADMIN):
            raise NotFoundError(INVALID_USER_ID_DETAIL)
        raise AuthorizationError()

    if not allows_self_or_admin(identity.permissions, identity.user_id, addressed):
        raise AuthorizationError()
    return addressed


SelfOrAdminUserId = Annotated[uuid.UUID, Depends(require_self_or_admin)]


def get_lifecycle_service(db: DbSession, store: Store) -> ModelLifecycleService:
    return ModelLifecycleService(db, store)


LifecycleService = Annotated[ModelLifecycleService, Depends(get_lifecycle_service)]


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    """Extract user agent from request."""
    return request.headers.get("User-Agent")
