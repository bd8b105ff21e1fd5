"""API endpoints for PersonaForge."""

from fastapi import APIRouter

from .auth import router as auth_router
from .health import router as health_router
from .identities import router as identities_router
from .tags import router as tags_router

# Create main API router
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(identities_router, prefix="/identities", tags=["Identities"])
api_router.include_router(tags_router, prefix="/tags", tags=["Tags"])

__all__ = ["api_router"]
