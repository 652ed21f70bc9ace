"""Poll engine status and manual trigger endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from dingerbot.api import services
from dingerbot.api.schemas import PollResponse, StatusResponse

router = APIRouter()


@router.get("/status", response_model=StatusResponse)
def get_status() -> dict:
    """Tracked game, phase, at-bat state and last/next poll times."""
    return services.get_tracker_service().status().to_dict()


@router.post("/poll", response_model=PollResponse)
def poll_now() -> dict:
    """Run a poll cycle now unless one is already in flight."""
    decision = services.get_tracker_service().poll_now()
    if decision is None:
        return {"ran": False, "reason": "cycle_in_flight"}
    return {
        "ran": True,
        "next_poll_in_seconds": decision.delay.total_seconds(),
        "reason": decision.reason,
    }
