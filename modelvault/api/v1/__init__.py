"""
API v1 routes.
"""

from fastapi import APIRouter

from modelvault.api.v1 import auth, files, models, users
from modelvault.schemas.common import ErrorResponse, ValidationErrorResponse

# Outcomes shared by every protected route
GUARDED_RESPONSES = {
    400: {"model": ValidationErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"], responses=GUARDED_RESPONSES)
router.include_router(models.router, prefix="/models", tags=["Models"], responses=GUARDED_RESPONSES)
router.include_router(files.router, prefix="/files", tags=["Files"], responses=GUARDED_RESPONSES)
