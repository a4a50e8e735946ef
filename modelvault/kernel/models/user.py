"""
User model for identity management.
"""

import uuid

from sqlalchemy import Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from modelvault.kernel.models.base import Base, TimestampMixin, generate_uuid


class User(Base, TimestampMixin):
    """
    User account.

    `permissions` is a bitmask, see modelvault.kernel.permissions.Permission.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    permissions: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    default_lang: Mapped[str] = mapped_column(
        String(16),
        default="pl",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
