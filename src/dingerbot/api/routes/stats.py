"""Subject season stats endpoint."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from dingerbot.api import services
from dingerbot.api.schemas import SeasonStatsResponse
from dingerbot.data.ingest.mlb_api import FeedError

router = APIRouter()


@router.get("/stats", response_model=SeasonStatsResponse)
def get_season_stats() -> dict:
    """Return the tracked hitter's season totals."""
    svc = services.get_tracker_service()
    try:
        stats = svc.season_stats()
    except FeedError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {
        "player_id": stats.player_id,
        "player_name": svc.settings.player_name,
        "season": stats.season,
        "home_runs": stats.home_runs,
        "rbi": stats.rbi,
        "avg": stats.avg,
        "ops": stats.ops,
        "games_played": stats.games_played,
    }
