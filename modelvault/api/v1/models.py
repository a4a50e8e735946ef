"""
Model endpoints.

Read routes are open to admins and to the addressed user; every mutation
requires ADMIN.
"""

from typing import List

from fastapi import APIRouter, Request

from modelvault.api.deps import (
    LifecycleService,
    RequireAdmin,
    SelfOrAdminUserId,
    get_client_ip,
    parse_model_id,
    parse_user_id,
)
from modelvault.schemas.model import ModelCreate, ModelResponse, ModelUpdate

router = APIRouter()


@router.get("/{user_id}", response_model=List[ModelResponse])
async def list_models(
    user_id: SelfOrAdminUserId,
    service: LifecycleService,
):
    """All models owned or co-owned by a user."""
    return await service.list_models(user_id)


@router.get("/{user_id}/{model_id}", response_model=ModelResponse)
async def get_model(
    user_id: SelfOrAdminUserId,
    model_id: str,
    service: LifecycleService,
):
    """One model of a user."""
    return await service.get_model(user_id, parse_model_id(model_id))


@router.post("/{user_id}", response_model=ModelResponse)
async def create_model(
    request: Request,
    user_id: str,
    data: ModelCreate,
    identity: RequireAdmin,
    service: LifecycleService,
):
    """
    Create a model for a user.

    The new model is owned by exactly the addressed user.
    """
    return await service.create_model(
        identity,
        parse_user_id(user_id),
        data,
        ip_address=get_client_ip(request),
    )


@router.put("/{user_id}/{model_id}", response_model=ModelResponse)
async def update_model(
    request: Request,
    user_id: str,
    model_id: str,
    data: ModelUpdate,
    identity: RequireAdmin,
    service: LifecycleService,
):
    """
    Rename a model and optionally replace its owner list.

    This is how models are shared and unshared.
    """
    return await service.update_model(
        identity,
        parse_user_id(user_id),
        parse_model_id(model_id),
        name=data.name,
        owner_ids=data.user,
        ip_address=get_client_ip(request),
    )


@router.delete("/{user_id}/{model_id}", response_model=ModelResponse)
async def remove_model_owner(
    request: Request,
    user_id: str,
    model_id: str,
    identity: RequireAdmin,
    service: LifecycleService,
):
    """
    Take a user off a model.

    Removing the last owner deletes the model and its files.
    """
    return await service.remove_owner(
        identity,
        parse_user_id(user_id),
        parse_model_id(model_id),
        ip_address=get_client_ip(request),
    )


@router.delete("/{model_id}", response_model=ModelResponse)
async def delete_model(
    request: Request,
    model_id: str,
    identity: RequireAdmin,
    service: LifecycleService,
):
    """Delete a model and its files whoever owns it."""
    return await service.delete_model(
        identity,
        parse_model_id(model_id),
        ip_address=get_client_ip(request),
    )
