"""
User account endpoints.
"""

from typing import List

from fastapi import APIRouter, Request

from modelvault.api.deps import (
    DbSession,
    LifecycleService,
    RequireAdmin,
    RequireUser,
    get_client_ip,
    parse_user_id,
)
from modelvault.errors import AuthorizationError, UserNotFoundError
from modelvault.kernel.identity.identity_service import USER_NOT_FOUND_DETAIL, IdentityService
from modelvault.kernel.permissions import Permission, has_permission
from modelvault.logging_config import log_action
from modelvault.schemas.auth import (
    OwnAccountUpdate,
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserUpdate,
)

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def list_users(
    _: RequireAdmin,
    db: DbSession,
    service: LifecycleService,
):
    """All user accounts."""
    users = await IdentityService(db).list_users()
    return [await service.user_payload(user) for user in users]


@router.get("/me", response_model=UserResponse)
async def get_me(
    identity: RequireUser,
    db: DbSession,
    service: LifecycleService,
):
    """The caller's own account."""
    user = await IdentityService(db).get_user_by_id(identity.user_id)
    if not user:
        raise UserNotFoundError(USER_NOT_FOUND_DETAIL)
    return await service.user_payload(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    _: RequireAdmin,
    db: DbSession,
    service: LifecycleService,
):
    user = await IdentityService(db).get_user_by_id(parse_user_id(user_id))
    if not user:
        raise UserNotFoundError(USER_NOT_FOUND_DETAIL)
    return await service.user_payload(user)


@router.post("", response_model=UserCreatedResponse)
async def create_user(
    request: Request,
    data: UserCreate,
    identity: RequireAdmin,
    db: DbSession,
    service: LifecycleService,
):
    """
    Create an account.

    Without a password a random PIN is generated. The plain password is
    returned in this response only. The SUPER bit cannot be granted here.
    """
    if has_permission(data.permissions, Permission.SUPER):
        raise AuthorizationError()

    user, plain_password = await IdentityService(db).create_user(
        name=data.name,
        email=data.email,
        password=data.password,
        permissions=data.permissions,
        default_lang=data.default_lang,
        created_by=identity.user_id,
        ip_address=get_client_ip(request),
    )

    log_action("User %s created user %s", identity.email, user.email)

    payload = await service.user_payload(user)
    return UserCreatedResponse(**payload, password=plain_password)


@router.put("/me", response_model=UserResponse)
async def update_me(
    request: Request,
    data: OwnAccountUpdate,
    identity: RequireUser,
    db: DbSession,
    service: LifecycleService,
):
    """
    Edit the caller's own account.

    Only the name and the password can change. Email and permissions must
    repeat the current values; a new password needs `oldPassword`.
    """
    user = await IdentityService(db).update_own_account(
        identity.user_id,
        name=data.name,
        email=data.email,
        permissions=data.permissions,
        password=data.password,
        old_password=data.old_password,
        ip_address=get_client_ip(request),
    )

    log_action("User %s edited own account", identity.email)
    return await service.user_payload(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    request: Request,
    user_id: str,
    data: UserUpdate,
    identity: RequireAdmin,
    db: DbSession,
    service: LifecycleService,
):
    """Edit any account's name, permissions or password."""
    user = await IdentityService(db).update_user(
        parse_user_id(user_id),
        name=data.name,
        email=data.email,
        permissions=data.permissions,
        password=data.password,
        updated_by=identity.user_id,
        ip_address=get_client_ip(request),
    )

    log_action("User %s edited user %s", identity.email, user.email)
    return await service.user_payload(user)


@router.delete("/{user_id}", response_model=UserResponse)
async def delete_user(
    request: Request,
    user_id: str,
    identity: RequireAdmin,
    service: LifecycleService,
):
    """
    Delete an account.

    The user is taken off every model first; models they owned alone are
    deleted together with their files.
    """
    return await service.delete_user(
        identity,
        parse_user_id(user_id),
        ip_address=get_client_ip(request),
    )
