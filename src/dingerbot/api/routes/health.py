"""Health check endpoint."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from dingerbot.api import services
from dingerbot.api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check() -> dict:
    """Return API health status."""
    status = services.get_tracker_service().status()
    return {
        "status": "ok",
        "service": "dingerbot",
        "engine_running": status.running,
        "tracking_game_pk": status.game_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
