"""FastAPI application factory for the dingerbot status API.

Start with::

    uv run dingerbot serve
    # or directly:
    uvicorn dingerbot.api.app:app
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from dingerbot.api import services
from dingerbot.api.routes.health import router as health_router
from dingerbot.api.routes.messages import router as messages_router
from dingerbot.api.routes.stats import router as stats_router
from dingerbot.api.routes.status import router as status_router
from dingerbot.config import settings
from dingerbot.utils.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the poll engine with the server and stop it on shutdown."""
    svc = services.get_tracker_service()
    if settings.start_engine:
        svc.start()
    yield
    svc.stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_json)
    application = FastAPI(
        title="dingerbot",
        version="1.0.0",
        description="Live home run alerts with adaptive at-bat polling",
        lifespan=lifespan,
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(status_router, prefix="/api", tags=["Status"])
    application.include_router(stats_router, prefix="/api", tags=["Stats"])
    application.include_router(messages_router, prefix="/api", tags=["Messages"])

    return application


app = create_app()
