"""
FastAPI service for the company outreach pipeline.

Provides the streamed pipeline trigger, compose-only regeneration, LinkedIn
rephrase, message history, contact result listings and source URL checks.
The MongoDB client, result store and providers are created in the lifespan
and closed on shutdown.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from outreach.common.logger import setup_logging
from version import __version__

from .config import get_settings, validate_config_on_startup
from .dependencies import ServiceContainer, build_container
from .models import HealthResponse
from .routes import contact_results_router, history_router, messaging_router, run_router, sources_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = validate_config_on_startup()
    owns_container = getattr(app.state, "container", None) is None
    if owns_container:
        app.state.container = build_container(settings)
        logger.info("Outreach services initialized")
    try:
        yield
    finally:
        if owns_container:
            app.state.container.close()
            app.state.container = None


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        container: Pre-built services (tests). When omitted, the lifespan
                   builds them from settings.
    """
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="Outreach Pipeline", version=__version__, lifespan=lifespan)
    app.state.container = container

    if settings.cors_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(run_router)
    app.include_router(messaging_router)
    app.include_router(history_router)
    app.include_router(contact_results_router)
    app.include_router(sources_router)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            version=__version__,
            environment=settings.environment,
            timestamp=datetime.now(timezone.utc),
        )

    return app


app = create_app()
