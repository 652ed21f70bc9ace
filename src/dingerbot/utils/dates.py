"""Date, clock and season utility functions."""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def local_today(tz_name: str, now: datetime | None = None) -> date:
    """Return today's calendar date in the given IANA timezone.

    West-coast night games finish after midnight UTC, so "today" has to be
    resolved in the team's timezone rather than UTC.
    """
    now = now or utc_now()
    return now.astimezone(ZoneInfo(tz_name)).date()


def season_date_range(year: int) -> tuple[date, date]:
    """Return approximate (opening_day, last_day) for an MLB regular season."""
    return date(year, 4, 1), date(year, 9, 30)


def season_date_progress(today: date) -> float:
    """Fraction of the regular season elapsed by date, clamped to [0, 1]."""
    start, end = season_date_range(today.year)
    progress = (today - start).days / (end - start).days
    return max(0.0, min(1.0, progress))


def parse_api_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp from the Stats API (``...Z`` suffix).

    Returns None for missing or malformed values.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
