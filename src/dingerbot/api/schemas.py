"""Pydantic response models for the dingerbot API."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    engine_running: bool
    tracking_game_pk: int | None = None
    timestamp: str


class StatusResponse(BaseModel):
    """Poll engine state, enough to diagnose a stalled loop from outside."""

    running: bool
    game_id: int | None = None
    phase: str
    game_status: str = ""
    engaged: bool
    current_play_index: int | None = None
    last_poll_at: str | None = None
    next_wake_at: str | None = None
    last_decision: str | None = None
    last_error: str | None = None
    notified_events: int = 0


class SeasonStatsResponse(BaseModel):
    player_id: int
    player_name: str
    season: int
    home_runs: int
    rbi: int
    avg: str
    ops: str
    games_played: int | None = None


class PollResponse(BaseModel):
    ran: bool
    next_poll_in_seconds: float | None = None
    reason: str | None = None


class ManualMessageRequest(BaseModel):
    message: str = "🚨 TEST DINGER! 🚨 This is a test from the dinger bot! ⚾💥"


class DeliveryResultResponse(BaseModel):
    target: str
    ok: bool
    error: str | None = None


class ManualMessageResponse(BaseModel):
    ok: bool
    results: list[DeliveryResultResponse]
