"""
Typed outcomes of the access-control and model lifecycle core.

Every error carries the HTTP status it maps to and a short, stable detail
message that clients and tests can match on exactly.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for all outcomes that end a request early."""

    status_code: int = 500
    default_detail: str = "Ups.. Something fails.."

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthenticationError(ServiceError):
    """No token was supplied."""

    status_code = 401
    default_detail = "Access denied. No token provided"


class TokenError(ServiceError):
    """Token present but unusable. Subclasses are never told apart by callers."""

    status_code = 400
    default_detail = "Invalid token provided"


class MalformedTokenError(TokenError):
    """The string is not a structurally valid signed token."""


class InvalidSignatureError(TokenError):
    """Signature, expiry or token type did not verify."""


class AuthorizationError(ServiceError):
    """Valid identity, insufficient role."""

    status_code = 403
    default_detail = "Access forbidden."


class NotFoundError(ServiceError):
    status_code = 404
    default_detail = "Not found"


class UserNotFoundError(NotFoundError):
    default_detail = "User not found..."


class OwnerNotFoundError(UserNotFoundError):
    """An id in a replacement owner list does not resolve to a user."""

    default_detail = "User in user property not found ..."


class ModelNotFoundError(NotFoundError):
    default_detail = "Model not found..."


class ArtifactNotFoundError(NotFoundError):
    default_detail = "Model file not found..."


class ValidationError(ServiceError):
    status_code = 400
    default_detail = "Invalid request content"


class ConflictError(ServiceError):
    """Only raised for duplicate accounts; model names are not unique."""

    status_code = 400
    default_detail = "User already registered."


class StorageError(ServiceError):
    """Filesystem failed for a reason other than a missing file."""

    status_code = 500
    default_detail = "Storage operation failed"
