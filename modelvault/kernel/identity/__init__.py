"""
Identity Core - accounts, credentials and access tokens.
"""

from modelvault.kernel.identity.identity_service import IdentityService
from modelvault.kernel.identity.jwt import (
    TokenConfig,
    TokenIdentity,
    TokenService,
    get_token_service,
)
from modelvault.kernel.identity.password import (
    PasswordHasher,
    generate_pin,
    hash_password,
    verify_password,
)

__all__ = [
    "IdentityService",
    "TokenConfig",
    "TokenIdentity",
    "TokenService",
    "get_token_service",
    "PasswordHasher",
    "generate_pin",
    "hash_password",
    "verify_password",
]
