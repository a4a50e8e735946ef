"""
Permission Core - bitmask role evaluation.
"""

from modelvault.kernel.permissions.evaluator import (
    MAX_PERMISSIONS,
    Permission,
    RequiredRole,
    allows,
    allows_self_or_admin,
    grant,
    has_permission,
)

__all__ = [
    "MAX_PERMISSIONS",
    "Permission",
    "RequiredRole",
    "allows",
    "allows_self_or_admin",
    "grant",
    "has_permission",
]
