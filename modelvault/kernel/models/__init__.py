"""
Kernel Data Models

SQLAlchemy models for users, shared models and the audit log.
"""

from modelvault.kernel.models.base import Base, TimestampMixin, generate_uuid
from modelvault.kernel.models.user import User
from modelvault.kernel.models.model import (
    Model,
    ModelOwner,
    MODEL_NAME_MIN_LENGTH,
    MODEL_NAME_MAX_LENGTH,
)
from modelvault.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    # User
    "User",
    # Models
    "Model",
    "ModelOwner",
    "MODEL_NAME_MIN_LENGTH",
    "MODEL_NAME_MAX_LENGTH",
    # Event Log
    "EventLog",
    "EventType",
]
