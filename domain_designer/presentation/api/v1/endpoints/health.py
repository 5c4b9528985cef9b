"""Health check endpoint — always available."""

from fastapi import APIRouter, Depends

from domain_designer.application.services import DesignerSessionRegistry
from domain_designer.config import get_settings
from domain_designer.infrastructure.dependencies import get_session_registry

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    registry: DesignerSessionRegistry = Depends(get_session_registry),
) -> dict:
    """Returns the current application health status."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "open_sessions": registry.session_count,
    }
