"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from domain_designer.presentation.api.v1.endpoints.health import router as health_router
from domain_designer.presentation.api.v1.designer_sessions_controller import router as designer_sessions_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(designer_sessions_router)
