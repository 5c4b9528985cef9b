"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from domain_designer.config import get_settings
from domain_designer.infrastructure.dependencies import get_session_registry
from domain_designer.infrastructure.logging.log_config import setup_logging
from domain_designer.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging, close sessions on shutdown."""
    settings = get_settings()
    setup_logging()
    logger.info("Starting %s %s (%s)", settings.app_title, settings.app_version, settings.app_env)

    yield

    # Shutdown: discard any in-flight saves
    registry = get_session_registry()
    logger.info("Closing %d open designer session(s)", registry.session_count)
    registry.close_all()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "domain_designer.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
