"""
Ownership Core - shared model owner lists.
"""

from modelvault.kernel.ownership.ledger import (
    EMPTY_OWNERS_DETAIL,
    OwnershipLedger,
    RemovalResult,
    require_owner_ids,
    unique_in_order,
)

__all__ = [
    "EMPTY_OWNERS_DETAIL",
    "OwnershipLedger",
    "RemovalResult",
    "require_owner_ids",
    "unique_in_order",
]
