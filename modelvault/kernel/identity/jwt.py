"""
Signed identity tokens.

A token is a snapshot of the caller at login time: id, email, name and
permission mask. Verification trusts that snapshot until the token
expires; permission changes take effect on the next login.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Protocol

from jose import JWTError, jwt
from pydantic import BaseModel

from modelvault.config import Settings, get_settings
from modelvault.errors import InvalidSignatureError, MalformedTokenError

ACCESS_TOKEN_TYPE = "access"


class TokenSubject(Protocol):
    """Anything a token can be issued for (normally a User row)."""

    id: uuid.UUID
    email: str
    name: str
    permissions: int


@dataclass(frozen=True)
class TokenConfig:
    """Signing configuration. The secret is the only trust anchor."""

    secret_key: str
    algorithm: str = "HS256"
    expire_minutes: int = 1440

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            expire_minutes=settings.access_token_expire_minutes,
        )


class TokenIdentity(BaseModel):
    """Verified claims of an access token."""

    user_id: uuid.UUID
    email: str
    name: str
    permissions: int
    issued_at: datetime
    expires_at: datetime
    jti: str


class TokenService:
    """
    Issue and verify access tokens.

    Usage:
        service = TokenService(TokenConfig(secret_key="..."))
        token = service.issue(user)
        identity = service.verify(token)
    """

    def __init__(self, config: TokenConfig):
        self.config = config

    def issue(
        self,
        user: TokenSubject,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed access token for a user.

        Args:
            user: User whose identity is embedded
            expires_delta: Optional custom lifetime

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.config.expire_minutes))

        payload = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "permissions": int(user.permissions),
            "iat": now,
            "exp": expire,
            "jti": str(uuid.uuid4()),
            "type": ACCESS_TOKEN_TYPE,
        }

        return jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)

    def verify(self, token: str) -> TokenIdentity:
        """
        Verify a token and return its identity.

        Raises:
            MalformedTokenError: token is not a structurally valid JWS
            InvalidSignatureError: signature, expiry or type check failed
        """
        try:
            jwt.get_unverified_header(token)
        except JWTError as e:
            raise MalformedTokenError() from e

        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
            )
        except JWTError as e:
            raise InvalidSignatureError() from e

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidSignatureError()

        try:
            return TokenIdentity(
                user_id=uuid.UUID(payload["sub"]),
                email=payload["email"],
                name=payload["name"],
                permissions=payload["permissions"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                jti=payload["jti"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedTokenError() from e


@lru_cache
def get_token_service() -> TokenService:
    """Token service built from the application settings."""
    return TokenService(TokenConfig.from_settings(get_settings()))
