"""
Model and artifact lifecycle.

Use cases behind the model, file and user routes. Each one resolves its
records through the ownership ledger, touches artifacts through the
artifact store and records what it did in the audit log.

Deletion ordering: the record deletion and its audit entry are committed
first, artifacts are removed afterwards. A storage failure at that point
surfaces as StorageError and the record stays deleted.
"""

import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from modelvault.config import get_settings
from modelvault.errors import (
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)
from modelvault.kernel.events.event_store import EventStore
from modelvault.kernel.identity.identity_service import IdentityService
from modelvault.kernel.identity.jwt import TokenIdentity
from modelvault.kernel.models.event_log import EventType
from modelvault.kernel.models.model import Model
from modelvault.kernel.models.user import User
from modelvault.kernel.ownership.ledger import (
    OwnershipLedger,
    RemovalResult,
    require_owner_ids,
)
from modelvault.kernel.storage.artifact_store import ArtifactStore, ArtifactVariant
from modelvault.logging_config import get_logger, log_action
from modelvault.schemas.model import ModelCreate

logger = get_logger(__name__)

READ_NOT_FOUND_DETAIL = "Model or user not found"
EMPTY_FILE_DETAIL = "File content not exists or is empty!"
FILE_TOO_LARGE_DETAIL = "File exceeds maximum upload size"

VARIANT_LABELS = {
    ArtifactVariant.PRIMARY: "primary",
    ArtifactVariant.PLATFORM_VARIANT: "variant",
}


def sanitize_model_create(data: ModelCreate) -> ModelCreate:
    """
    Drop client-supplied ownership from a creation request.

    A new model is always owned by the user addressed in the path, so any
    owner list in the body is discarded here. An empty list is still
    rejected.
    """
    if data.user is not None:
        require_owner_ids(data.user)
    if data.user:
        logger.debug("Discarding owner list supplied with model creation")
    return data.model_copy(update={"user": None})


class ModelLifecycleService:
    """
    Use-case layer for models, their artifacts and account removal.

    Usage:
        service = ModelLifecycleService(session, store)
        payload = await service.create_model(identity, user_id, data)
    """

    def __init__(
        self,
        session: AsyncSession,
        store: ArtifactStore,
        max_upload_bytes: Optional[int] = None,
    ):
        self.session = session
        self.store = store
        self.ledger = OwnershipLedger(session)
        self.identity = IdentityService(session)
        self.event_store = EventStore(session)
        if max_upload_bytes is None:
            max_upload_bytes = get_settings().max_upload_size_mb * 1024 * 1024
        self.max_upload_bytes = max_upload_bytes

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------

    def model_payload(
        self,
        model: Model,
        owners: Optional[Sequence[uuid.UUID]] = None,
    ) -> Dict[str, Any]:
        """Model payload with artifact existence probed now."""
        owner_ids = model.owner_ids if owners is None else owners
        return {
            "id": str(model.id),
            "name": model.name,
            "owners": [str(owner_id) for owner_id in owner_ids],
            "file_exists": self.store.exists(model.id, ArtifactVariant.PRIMARY),
            "variant_file_exists": self.store.exists(model.id, ArtifactVariant.PLATFORM_VARIANT),
        }

    async def user_payload(self, user: User) -> Dict[str, Any]:
        """User payload with one entry per owned or shared model."""
        models = await self.ledger.list_for_user(user.id)
        return {
            "id": str(user.id),
            "email": user.email,
            "name": user.name,
            "permissions": user.permissions,
            "default_lang": user.default_lang,
            "model_ids": [str(model.id) for model in models],
            "model_names": [model.name for model in models],
            "files_exist": [
                self.store.exists(model.id, ArtifactVariant.PRIMARY) for model in models
            ],
            "variant_files_exist": [
                self.store.exists(model.id, ArtifactVariant.PLATFORM_VARIANT) for model in models
            ],
        }

    # ------------------------------------------------------------------
    # Models
    # ------------------------------------------------------------------

    async def list_models(self, user_id: uuid.UUID) -> List[Dict[str, Any]]:
        """Every model the user owns or co-owns."""
        models = await self.ledger.list_for_user(user_id)
        return [self.model_payload(model) for model in models]

    async def get_model(self, user_id: uuid.UUID, model_id: uuid.UUID) -> Dict[str, Any]:
        """One model as seen by one of its owners."""
        try:
            model = await self.ledger.get_for_user_and_model(user_id, model_id)
        except NotFoundError as e:
            raise NotFoundError(READ_NOT_FOUND_DETAIL) from e
        return self.model_payload(model)

    async def create_model(
        self,
        actor: TokenIdentity,
        user_id: uuid.UUID,
        data: ModelCreate,
        ip_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a model owned by exactly the addressed user."""
        data = sanitize_model_create(data)
        model = await self.ledger.create_for_user(user_id, data.name)

        await self.event_store.log(
            event_type=EventType.MODEL_CREATED,
            entity_type="model",
            entity_id=model.id,
            user_id=actor.user_id,
            payload={"name": model.name, "owners": model.owner_ids},
            ip_address=ip_address,
        )
        log_action("User %s created new model %s", actor.email, model.id)

        return self.model_payload(model)

    async def update_model(
        self,
        actor: TokenIdentity,
        user_id: uuid.UUID,
        model_id: uuid.UUID,
        name: str,
        owner_ids: Optional[Sequence[uuid.UUID]] = None,
        ip_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Rename a model and optionally replace its owner list.

        The owner list is validated in full before either change is applied.
        """
        if owner_ids is not None:
            owner_ids = require_owner_ids(owner_ids)

        model = await self.ledger.get_for_user_and_model(user_id, model_id)

        if owner_ids is not None:
            previous = list(model.owner_ids)
            model = await self.ledger.update_owners(model_id, owner_ids, user_id)
            await self.event_store.log(
                event_type=EventType.MODEL_OWNERS_REPLACED,
                entity_type="model",
                entity_id=model.id,
                user_id=actor.user_id,
                payload={"previous": previous, "owners": model.owner_ids},
                ip_address=ip_address,
            )

        if model.name != name:
            old_name = model.name
            await self.ledger.rename(model, name)
            await self.event_store.log(
                event_type=EventType.MODEL_UPDATED,
                entity_type="model",
                entity_id=model.id,
                user_id=actor.user_id,
                payload={"old_name": old_name, "name": name},
                ip_address=ip_address,
            )

        log_action("User %s edited model %s", actor.email, model.id)
        return self.model_payload(model)

    async def remove_owner(
        self,
        actor: TokenIdentity,
        user_id: uuid.UUID,
        model_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Unshare a model from one user.

        When the user was the last owner the model record and both
        artifacts are deleted. The payload then shows an empty owner list
        and the artifact flags as they were before reclamation.
        """
        removal = await self.ledger.remove_owner(model_id, user_id)
        payload = self.model_payload(removal.model, owners=removal.owners)

        await self.event_store.log(
            event_type=EventType.MODEL_OWNER_REMOVED,
            entity_type="model",
            entity_id=removal.model.id,
            user_id=actor.user_id,
            payload={"removed": user_id, "owners": removal.owners},
            ip_address=ip_address,
        )

        if removal.orphaned:
            await self._reclaim([removal], actor, ip_address)

        log_action("User %s deleted model %s", actor.email, removal.model.id)
        return payload

    async def delete_model(
        self,
        actor: TokenIdentity,
        model_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Delete a model regardless of its owners.

        Returns the payload as it was before deletion.
        """
        model = await self.ledger.get_model(model_id)
        payload = self.model_payload(model)

        await self.ledger.delete(model)
        await self.event_store.log(
            event_type=EventType.MODEL_DELETED,
            entity_type="model",
            entity_id=model.id,
            user_id=actor.user_id,
            payload={"name": model.name, "owners": payload["owners"]},
            ip_address=ip_address,
        )
        await self.session.commit()

        await run_in_threadpool(self.store.explicit_delete, model.id)
        log_action("User %s deleted model %s", actor.email, model.id)
        return payload

    async def _reclaim(
        self,
        removals: Sequence[RemovalResult],
        actor: TokenIdentity,
        ip_address: Optional[str] = None,
    ) -> None:
        """Commit the record deletions, then remove the orphaned artifacts."""
        for removal in removals:
            await self.event_store.log(
                event_type=EventType.MODEL_RECLAIMED,
                entity_type="model",
                entity_id=removal.model.id,
                user_id=actor.user_id,
                payload={"name": removal.model.name},
                ip_address=ip_address,
            )
        await self.session.commit()

        for removal in removals:
            await run_in_threadpool(self.store.cascade_delete, removal.model.id)

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    async def open_artifact(
        self,
        actor: TokenIdentity,
        user_id: uuid.UUID,
        model_id: uuid.UUID,
        variant: ArtifactVariant,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Path:
        """Path of an artifact the addressed user may download."""
        model = await self.ledger.get_for_user_and_model(user_id, model_id)
        path = self.store.open(model.id, variant)

        await self.event_store.log(
            event_type=EventType.ARTIFACT_DOWNLOADED,
            entity_type="model",
            entity_id=model.id,
            user_id=actor.user_id,
            payload={"variant": variant.value},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        log_action(
            "User %s started downloading %s file for model %s",
            actor.email, VARIANT_LABELS[variant], model.id,
        )
        return path

    async def upload_artifact(
        self,
        actor: TokenIdentity,
        user_id: uuid.UUID,
        model_id: uuid.UUID,
        variant: ArtifactVariant,
        data: bytes,
        ip_address: Optional[str] = None,
    ) -> None:
        """Store artifact bytes for a model, overwriting any previous upload."""
        model = await self.ledger.get_for_user_and_model(user_id, model_id)

        if not data:
            raise ValidationError(EMPTY_FILE_DETAIL)
        if len(data) > self.max_upload_bytes:
            raise ValidationError(FILE_TOO_LARGE_DETAIL)

        await run_in_threadpool(self.store.write, model.id, variant, data)

        await self.event_store.log(
            event_type=EventType.ARTIFACT_UPLOADED,
            entity_type="model",
            entity_id=model.id,
            user_id=actor.user_id,
            payload={"variant": variant.value, "size": len(data)},
            ip_address=ip_address,
        )
        log_action(
            "User %s uploaded %s file for model %s",
            actor.email, VARIANT_LABELS[variant], model.id,
        )

    async def delete_artifact(
        self,
        actor: TokenIdentity,
        user_id: uuid.UUID,
        model_id: uuid.UUID,
        variant: ArtifactVariant,
        ip_address: Optional[str] = None,
    ) -> None:
        """Delete one artifact of a model. The model record is untouched."""
        model = await self.ledger.get_for_user_and_model(user_id, model_id)
        await run_in_threadpool(self.store.delete, model.id, variant)

        await self.event_store.log(
            event_type=EventType.ARTIFACT_DELETED,
            entity_type="model",
            entity_id=model.id,
            user_id=actor.user_id,
            payload={"variant": variant.value},
            ip_address=ip_address,
        )
        log_action(
            "User %s deleted %s file for model %s",
            actor.email, VARIANT_LABELS[variant], model.id,
        )

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def delete_user(
        self,
        actor: TokenIdentity,
        user_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Delete an account after taking it off every model.

        Models the user owned alone are reclaimed like any other last-owner
        removal. Returns the user payload as it was before deletion.
        """
        user = await self.identity.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError("User not found")
        payload = await self.user_payload(user)

        removals = await self.ledger.remove_user_everywhere(user_id)
        for removal in removals:
            await self.event_store.log(
                event_type=EventType.MODEL_OWNER_REMOVED,
                entity_type="model",
                entity_id=removal.model.id,
                user_id=actor.user_id,
                payload={"removed": user_id, "owners": removal.owners},
                ip_address=ip_address,
            )

        await self.identity.delete_user(user_id, deleted_by=actor.user_id, ip_address=ip_address)
        await self._reclaim([r for r in removals if r.orphaned], actor, ip_address)

        log_action("User %s deleted user %s", actor.email, user.email)
        return payload
