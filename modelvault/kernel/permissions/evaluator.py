"""
Permission bitmask evaluation.

A user's `permissions` column is a set of independent bit flags. Routes
declare the role they require; `allows` decides whether a caller's mask
satisfies it. Nothing here touches the database.
"""

import uuid
from enum import Enum, IntFlag
from typing import Dict


class Permission(IntFlag):
    """Bit flags stored in User.permissions."""

    NONE = 0
    USER = 1 << 0
    ADMIN = 1 << 1
    # Reserved for out-of-band provisioning, never granted through the API
    SUPER = 1 << 7


MAX_PERMISSIONS = 255


class RequiredRole(str, Enum):
    """Role an operation demands from its caller."""

    NONE = "none"
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


# Bits a mask must contain to satisfy each role
ROLE_REQUIREMENTS: Dict[RequiredRole, Permission] = {
    RequiredRole.NONE: Permission.NONE,
    RequiredRole.USER: Permission.USER,
    RequiredRole.ADMIN: Permission.ADMIN,
    RequiredRole.SUPER_ADMIN: Permission.SUPER | Permission.ADMIN | Permission.USER,
}


def has_permission(mask: int, flag: Permission) -> bool:
    """True if every bit of `flag` is set in `mask`."""
    return (mask & flag) == flag


def grant(mask: int, flag: Permission) -> int:
    return mask | flag


def allows(caller_mask: int, required_role: RequiredRole) -> bool:
    """
    Decide whether a caller may perform an operation.

    Args:
        caller_mask: Permission bitmask taken from the verified token
        required_role: Role declared by the operation

    Returns:
        True if the mask carries every bit the role requires
    """
    return has_permission(caller_mask, ROLE_REQUIREMENTS[required_role])


def allows_self_or_admin(
    caller_mask: int,
    caller_id: uuid.UUID,
    addressed_user_id: uuid.UUID,
) -> bool:
    """
    Admins may address any user; plain users only themselves.

    A caller addressing their own resources still needs the USER bit,
    so a mask of 0 is refused here too.
    """
    if allows(caller_mask, RequiredRole.ADMIN):
        return True
    return allows(caller_mask, RequiredRole.USER) and caller_id == addressed_user_id
