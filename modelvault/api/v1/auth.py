"""
Authentication endpoints.
"""

from fastapi import APIRouter, Request, Response

from modelvault.api.deps import (
    DbSession,
    LifecycleService,
    Tokens,
    get_client_ip,
    get_user_agent,
)
from modelvault.config import get_settings
from modelvault.errors import ValidationError
from modelvault.kernel.identity.identity_service import IdentityService
from modelvault.logging_config import log_action
from modelvault.schemas.auth import LoginRequest, LoginResponse

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    db: DbSession,
    tokens: Tokens,
    service: LifecycleService,
):
    """
    Authenticate with email and password.

    Returns the user payload with a signed token, which is also set in the
    token response header.
    """
    if not data.email:
        raise ValidationError("Invalid request - email cannot be empty")
    if not data.password:
        raise ValidationError("Invalid request - password cannot be empty")

    identity_service = IdentityService(db)
    user = await identity_service.authenticate(
        email=data.email,
        password=data.password,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    if not user:
        raise ValidationError("Invalid email or password")

    token = tokens.issue(user)
    response.headers[get_settings().token_header] = token

    log_action("User %s logged in", user.email)

    payload = await service.user_payload(user)
    return LoginResponse(**payload, jwt=token)
