"""MLB Stats API wrapper for schedule, live feed and season stats.

Base URL: https://statsapi.mlb.com/api/v1/ (no API key required).
Every request carries a bounded timeout, and responses are held in a
short-lived in-memory cache so the several lookups made inside one poll
cycle cost a single round trip.
"""

from __future__ import annotations

import time
from datetime import date, datetime
from typing import Any, Callable

import httpx

from dingerbot.config import Settings, settings as default_settings
from dingerbot.constants import SPORT_ID_MLB
from dingerbot.data.cache import TTLCache
from dingerbot.data.live.game_feed import (
    LiveFeedSnapshot,
    ScheduleSnapshot,
    SeasonStats,
    parse_live_feed,
    parse_schedule,
    parse_season_stats,
)
from dingerbot.utils.dates import local_today, utc_now
from dingerbot.utils.logging import get_logger

log = get_logger(__name__)


class FeedError(Exception):
    """Base class for Feed Client failures."""


class FeedTimeout(FeedError):
    """The request did not complete within the configured timeout."""


class FeedNetworkError(FeedError):
    """Connection-level failure (DNS, refused, reset)."""


class FeedNotFound(FeedError):
    """The resource does not exist upstream (yet, or any more)."""


class FeedUpstreamError(FeedError):
    """Non-success HTTP status or an unparseable body."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MLBStatsClient:
    """Client for the MLB Stats API with a per-process TTL cache."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
        cache: TTLCache | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or default_settings
        self.base_url = self.settings.mlb_api_base_url.rstrip("/")
        self.live_base_url = self.settings.mlb_live_api_base_url.rstrip("/")
        self.client = httpx.Client(
            timeout=self.settings.request_timeout,
            follow_redirects=True,
            transport=transport,
        )
        self.cache = cache or TTLCache(clock=time.monotonic)
        self._clock = clock

    def _get(self, url: str, params: dict | None = None) -> dict[str, Any]:
        """GET a JSON document, translating httpx failures into FeedErrors."""
        try:
            response = self.client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise FeedTimeout(f"Timed out after {self.settings.request_timeout}s: {url}") from exc
        except httpx.TransportError as exc:
            raise FeedNetworkError(f"Network error for {url}: {exc}") from exc

        if response.status_code == 404:
            raise FeedNotFound(f"Not found: {url}")
        if response.is_error:
            raise FeedUpstreamError(
                f"Fetch failed {response.status_code} {response.reason_phrase}: {url}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise FeedUpstreamError(f"Malformed JSON from {url}") from exc
        if not isinstance(data, dict):
            raise FeedUpstreamError(f"Unexpected payload type from {url}")
        return data

    def today(self) -> date:
        """Today's date in the team's timezone, cached for an hour."""
        return self.cache.get_or_fetch(
            ("today",),
            lambda: local_today(self.settings.timezone, self._clock()),
            ttl=self.settings.today_ttl_seconds,
        )

    def get_schedule(self, game_date: date, team_id: int | None = None) -> ScheduleSnapshot:
        """Get a team's games scheduled for a given date."""
        team_id = team_id or self.settings.team_id
        data = self._get(
            f"{self.base_url}/schedule",
            params={
                "date": game_date.isoformat(),
                "teamId": team_id,
                "sportId": SPORT_ID_MLB,
            },
        )
        schedule = parse_schedule(data, game_date)
        log.debug("schedule_fetched", date=game_date.isoformat(), games=len(schedule.games))
        return schedule

    def get_live_feed(self, game_pk: int) -> LiveFeedSnapshot:
        """Get the live feed for a game, served from cache for a few seconds."""
        if not game_pk:
            raise ValueError("game_pk is required to fetch the live feed")

        def fetch() -> LiveFeedSnapshot:
            data = self._get(f"{self.live_base_url}/game/{game_pk}/feed/live")
            return parse_live_feed(data, game_pk)

        return self.cache.get_or_fetch(
            ("live_feed", game_pk), fetch, ttl=self.settings.live_feed_ttl_seconds
        )

    def get_season_stats(self, player_id: int | None = None, season: int | None = None) -> SeasonStats:
        """Get a hitter's season totals."""
        player_id = player_id or self.settings.player_id
        season = season or self.today().year

        def fetch() -> SeasonStats:
            data = self._get(
                f"{self.base_url}/people/{player_id}/stats",
                params={"stats": "season", "season": season, "group": "hitting"},
            )
            return parse_season_stats(data, player_id, season)

        return self.cache.get_or_fetch(
            ("season_stats", player_id, season),
            fetch,
            ttl=self.settings.season_stats_ttl_seconds,
        )

    def close(self) -> None:
        self.client.close()
