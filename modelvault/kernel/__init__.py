"""
Kernel layer

Foundational components the API is built on:
- Identity Core (accounts, credentials, access tokens)
- Permission Core (bitmask role evaluation)
- Ownership Core (shared model owner lists)
- Artifact storage (model files on disk)
- Immutable Event Log (all mutations logged)
"""

from modelvault.kernel.models import (
    EventLog,
    EventType,
    Model,
    ModelOwner,
    User,
)

__all__ = [
    "EventLog",
    "EventType",
    "Model",
    "ModelOwner",
    "User",
]
