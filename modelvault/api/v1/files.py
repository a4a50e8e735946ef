"""
Artifact file endpoints.

Primary artifacts live under /files, platform variants under
/files/variant. The "me" routes always address the caller.
"""

import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse

from modelvault.api.deps import (
    CurrentIdentity,
    LifecycleService,
    RequireAdmin,
    RequireUser,
    SelfOrAdminUserId,
    get_client_ip,
    get_user_agent,
    parse_model_id,
    parse_user_id,
)
from modelvault.kernel.identity.jwt import TokenIdentity
from modelvault.kernel.storage import ArtifactVariant
from modelvault.services.lifecycle_service import ModelLifecycleService

UPLOADED_MESSAGE = "File successfully uploaded!"
DELETED_MESSAGE = "File successfully deleted!"

router = APIRouter()


async def _download(
    request: Request,
    service: ModelLifecycleService,
    identity: TokenIdentity,
    user_id: uuid.UUID,
    model_id: str,
    variant: ArtifactVariant,
) -> FileResponse:
    path = await service.open_artifact(
        identity,
        user_id,
        parse_model_id(model_id),
        variant,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    return FileResponse(path, media_type="application/octet-stream", filename=path.name)


async def _upload(
    request: Request,
    service: ModelLifecycleService,
    identity: TokenIdentity,
    user_id: str,
    model_id: str,
    variant: ArtifactVariant,
    file: Optional[UploadFile],
) -> PlainTextResponse:
    # One byte past the limit is enough to reject the upload
    data = await file.read(service.max_upload_bytes + 1) if file else b""
    await service.upload_artifact(
        identity,
        parse_user_id(user_id),
        parse_model_id(model_id),
        variant,
        data,
        ip_address=get_client_ip(request),
    )
    return PlainTextResponse(UPLOADED_MESSAGE)


async def _delete(
    request: Request,
    service: ModelLifecycleService,
    identity: TokenIdentity,
    user_id: str,
    model_id: str,
    variant: ArtifactVariant,
) -> PlainTextResponse:
    await service.delete_artifact(
        identity,
        parse_user_id(user_id),
        parse_model_id(model_id),
        variant,
        ip_address=get_client_ip(request),
    )
    return PlainTextResponse(DELETED_MESSAGE)


# "me" routes first so "me" is never taken for a user id


@router.get("/me/{model_id}")
async def download_own_file(
    request: Request,
    model_id: str,
    identity: RequireUser,
    service: LifecycleService,
):
    """Download the primary artifact of one of the caller's models."""
    return await _download(
        request, service, identity, identity.user_id, model_id, ArtifactVariant.PRIMARY
    )


@router.get("/variant/me/{model_id}")
async def download_own_variant_file(
    request: Request,
    model_id: str,
    identity: RequireUser,
    service: LifecycleService,
):
    """Download the platform variant of one of the caller's models."""
    return await _download(
        request, service, identity, identity.user_id, model_id, ArtifactVariant.PLATFORM_VARIANT
    )


@router.get("/variant/{user_id}/{model_id}")
async def download_variant_file(
    request: Request,
    user_id: SelfOrAdminUserId,
    model_id: str,
    identity: CurrentIdentity,
    service: LifecycleService,
):
    return await _download(
        request, service, identity, user_id, model_id, ArtifactVariant.PLATFORM_VARIANT
    )


@router.post("/variant/{user_id}/{model_id}")
async def upload_variant_file(
    request: Request,
    user_id: str,
    model_id: str,
    identity: RequireAdmin,
    service: LifecycleService,
    file: Annotated[Optional[UploadFile], File()] = None,
):
    return await _upload(
        request, service, identity, user_id, model_id, ArtifactVariant.PLATFORM_VARIANT, file
    )


@router.delete("/variant/{user_id}/{model_id}")
async def delete_variant_file(
    request: Request,
    user_id: str,
    model_id: str,
    identity: RequireAdmin,
    service: LifecycleService,
):
    return await _delete(
        request, service, identity, user_id, model_id, ArtifactVariant.PLATFORM_VARIANT
    )


@router.get("/{user_id}/{model_id}")
async def download_file(
    request: Request,
    user_id: SelfOrAdminUserId,
    model_id: str,
    identity: CurrentIdentity,
    service: LifecycleService,
):
    """Download the primary artifact of a user's model."""
    return await _download(
        request, service, identity, user_id, model_id, ArtifactVariant.PRIMARY
    )


@router.post("/{user_id}/{model_id}")
async def upload_file(
    request: Request,
    user_id: str,
    model_id: str,
    identity: RequireAdmin,
    service: LifecycleService,
    file: Annotated[Optional[UploadFile], File()] = None,
):
    """
    Upload the primary artifact of a model.

    Overwrites any previous upload; every co-owner sees the new file.
    """
    return await _upload(
        request, service, identity, user_id, model_id, ArtifactVariant.PRIMARY, file
    )


@router.delete("/{user_id}/{model_id}")
async def delete_file(
    request: Request,
    user_id: str,
    model_id: str,
    identity: RequireAdmin,
    service: LifecycleService,
):
    """Delete the primary artifact of a model."""
    return await _delete(
        request, service, identity, user_id, model_id, ArtifactVariant.PRIMARY
    )
