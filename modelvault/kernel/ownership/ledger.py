"""
Ownership ledger.

Domain rules for a model's owner list:

* a model is created with exactly one owner
* owner lists are replaced wholesale and never become empty through a
  replacement
* removing the last owner deletes the model record

Artifacts are not touched here. The caller decides when to reclaim them,
after the record deletion is committed.
"""

import uuid
from dataclasses import dataclass
from typing import List, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modelvault.errors import (
    ModelNotFoundError,
    OwnerNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from modelvault.kernel.models.model import Model, ModelOwner
from modelvault.kernel.models.user import User

EMPTY_OWNERS_DETAIL = '"user" must contain at least 1 items'


@dataclass
class RemovalResult:
    """Outcome of taking one owner off a model."""

    model: Model
    owners: List[uuid.UUID]
    orphaned: bool


def unique_in_order(ids: Sequence[uuid.UUID]) -> List[uuid.UUID]:
    """Drop repeated ids, keeping the first occurrence."""
    seen = set()
    result = []
    for item in ids:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def require_owner_ids(ids: Sequence[uuid.UUID]) -> List[uuid.UUID]:
    """
    De-duplicated owner list, refusing an empty one.

    Raises:
        ValidationError: If no id is given
    """
    owner_ids = unique_in_order(ids)
    if not owner_ids:
        raise ValidationError(EMPTY_OWNERS_DETAIL)
    return owner_ids


class OwnershipLedger:
    """
    Reads and mutates model owner lists.

    Flushes but never commits; the transaction belongs to the caller.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _require_user(self, user_id: uuid.UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    async def get_model(self, model_id: uuid.UUID) -> Model:
        model = await self.session.get(Model, model_id)
        if model is None:
            raise ModelNotFoundError()
        return model

    async def create_for_user(self, owner_user_id: uuid.UUID, name: str) -> Model:
        """
        Create a model owned by exactly one user.

        Raises:
            UserNotFoundError: If the owner does not exist
        """
        await self._require_user(owner_user_id)

        model = Model(
            name=name,
            owners=[ModelOwner(user_id=owner_user_id, position=0)],
        )
        self.session.add(model)
        await self.session.flush()
        return model

    async def list_for_user(self, user_id: uuid.UUID) -> List[Model]:
        """
        Every model the user owns or co-owns, with full owner lists.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        await self._require_user(user_id)

        result = await self.session.execute(
            select(Model)
            .join(ModelOwner, ModelOwner.model_id == Model.id)
            .where(ModelOwner.user_id == user_id)
            .order_by(Model.created_at, Model.name)
        )
        return list(result.scalars().unique().all())

    async def get_for_user_and_model(
        self,
        user_id: uuid.UUID,
        model_id: uuid.UUID,
    ) -> Model:
        """
        A model as seen by one of its owners.

        A model that exists but is not owned by the user is reported exactly
        like a missing one.

        Raises:
            UserNotFoundError: If the user does not exist
            ModelNotFoundError: If the model is missing or not owned
        """
        await self._require_user(user_id)

        model = await self.get_model(model_id)
        if not model.is_owned_by(user_id):
            raise ModelNotFoundError()
        return model

    async def update_owners(
        self,
        model_id: uuid.UUID,
        new_owner_ids: Sequence[uuid.UUID],
        requesting_user_id: uuid.UUID,
    ) -> Model:
        """
        Replace a model's owner list.

        Every id is checked before anything changes; an empty list is
        rejected rather than treated as a deletion.

        Raises:
            UserNotFoundError: If the requesting user does not exist
            ModelNotFoundError: If the model is missing or not theirs
            ValidationError: If the new list is empty
            OwnerNotFoundError: If any id is not a user
        """
        model = await self.get_for_user_and_model(requesting_user_id, model_id)

        owner_ids = require_owner_ids(new_owner_ids)

        result = await self.session.execute(
            select(User.id).where(User.id.in_(owner_ids))
        )
        known = set(result.scalars().all())
        if any(owner_id not in known for owner_id in owner_ids):
            raise OwnerNotFoundError()

        current = {owner.user_id: owner for owner in model.owners}
        replacement = []
        for position, owner_id in enumerate(owner_ids):
            owner = current.get(owner_id) or ModelOwner(user_id=owner_id)
            owner.position = position
            replacement.append(owner)

        model.owners = replacement
        await self.session.flush()
        return model

    async def rename(self, model: Model, name: str) -> Model:
        model.name = name
        await self.session.flush()
        return model

    async def remove_owner(self, model_id: uuid.UUID, user_id: uuid.UUID) -> RemovalResult:
        """
        Take one user off a model's owner list.

        When that leaves nobody, the model record is deleted and the result
        is flagged as orphaned.

        Raises:
            UserNotFoundError: If the user does not exist
            ModelNotFoundError: If the model is missing or not owned by the user
        """
        model = await self.get_for_user_and_model(user_id, model_id)

        model.owners = [owner for owner in model.owners if owner.user_id != user_id]
        orphaned = not model.owners

        if orphaned:
            await self.session.delete(model)
        await self.session.flush()

        return RemovalResult(model=model, owners=model.owner_ids, orphaned=orphaned)

    async def delete(self, model: Model) -> None:
        """Delete a model record together with its owner rows."""
        await self.session.delete(model)
        await self.session.flush()

    async def remove_user_everywhere(self, user_id: uuid.UUID) -> List[RemovalResult]:
        """
        Take a user off every model they own.

        Used when the account itself is being deleted.
        """
        result = await self.session.execute(
            select(Model.id)
            .join(ModelOwner, ModelOwner.model_id == Model.id)
            .where(ModelOwner.user_id == user_id)
        )
        model_ids = list(result.scalars().all())

        return [await self.remove_owner(model_id, user_id) for model_id in model_ids]
