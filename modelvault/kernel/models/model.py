"""
Model records and their ordered owner list.
"""

import uuid
from typing import List

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from modelvault.kernel.models.base import Base, TimestampMixin, generate_uuid

MODEL_NAME_MIN_LENGTH = 3
MODEL_NAME_MAX_LENGTH = 100


class Model(Base, TimestampMixin):
    """
    A shareable model.

    Artifact files are not referenced here: their paths derive from `id`
    alone, so every owner sees the same bytes.
    """

    __tablename__ = "models"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        String(MODEL_NAME_MAX_LENGTH),
        nullable=False,
    )

    owners: Mapped[List["ModelOwner"]] = relationship(
        "ModelOwner",
        back_populates="model",
        cascade="all, delete-orphan",
        order_by="ModelOwner.position",
        lazy="selectin",
    )

    @property
    def owner_ids(self) -> List[uuid.UUID]:
        return [owner.user_id for owner in self.owners]

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        return user_id in self.owner_ids

    def __repr__(self) -> str:
        return f"<Model {self.id} {self.name[:50]}>"


class ModelOwner(Base):
    """One entry of a model's owner list."""

    __tablename__ = "model_owners"

    model_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("models.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    model: Mapped["Model"] = relationship("Model", back_populates="owners")

    def __repr__(self) -> str:
        return f"<ModelOwner model={self.model_id} user={self.user_id}>"
