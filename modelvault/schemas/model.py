"""
Model schemas.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from modelvault.kernel.models.model import MODEL_NAME_MAX_LENGTH, MODEL_NAME_MIN_LENGTH


class ModelCreate(BaseModel):
    """
    Model creation request.

    `user` is accepted for compatibility with update bodies but never used:
    a new model is always owned by the user addressed in the path.
    """

    name: str = Field(..., min_length=MODEL_NAME_MIN_LENGTH, max_length=MODEL_NAME_MAX_LENGTH)
    user: Optional[List[uuid.UUID]] = None


class ModelUpdate(BaseModel):
    """
    Model update request.

    `user`, when given, replaces the owner list wholesale.
    """

    name: str = Field(..., min_length=MODEL_NAME_MIN_LENGTH, max_length=MODEL_NAME_MAX_LENGTH)
    user: Optional[List[uuid.UUID]] = None


class ModelResponse(BaseModel):
    """Model payload."""

    id: str
    name: str
    owners: List[str]
    file_exists: bool
    variant_file_exists: bool
