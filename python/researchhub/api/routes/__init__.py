"""API route definitions.

Uses a factory pattern to avoid import-time settings loading.
This allows tests to import modules without requiring all environment
variables to be configured upfront.
"""

from fastapi import APIRouter

from researchhub.api.routes.documents import router as documents_router
from researchhub.api.routes.health import router as health_router
from researchhub.api.routes.me import router as me_router
from researchhub.api.routes.reports import router as reports_router
from researchhub.api.routes.tags import router as tags_router


def create_api_router() -> APIRouter:
    """Create and configure the API router.

    Returns:
        Configured APIRouter with all routes registered.
    """
    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(me_router, tags=["user"])
    api_router.include_router(reports_router, tags=["reports"])
    api_router.include_router(documents_router, tags=["documents"])
    api_router.include_router(tags_router, tags=["tags"])
    return api_router


__all__ = ["create_api_router"]
