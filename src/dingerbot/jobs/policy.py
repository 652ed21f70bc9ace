"""Poll interval policy.

Rules are evaluated in priority order; the first match wins:

1. subject at bat                     -> batting tier
2. game in progress                   -> live tier
3. game scheduled, start far away     -> sleep until threshold before start
4. game scheduled, start close        -> pregame tier
5. no game today                      -> coarse re-check if a game is coming
                                         up this week, else backoff
Errors use a separate fixed retry delay chosen by the scheduler.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from dingerbot.config import Settings
from dingerbot.data.live.game_feed import GamePhase


@dataclass(frozen=True)
class PollIntervals:
    batting: timedelta = timedelta(seconds=5)
    live: timedelta = timedelta(seconds=15)
    pregame: timedelta = timedelta(seconds=60)
    pregame_threshold: timedelta = timedelta(minutes=15)
    lookahead_recheck: timedelta = timedelta(hours=4)
    no_game_backoff: timedelta = timedelta(minutes=30)

    @classmethod
    def from_settings(cls, settings: Settings) -> PollIntervals:
        return cls(
            batting=timedelta(seconds=settings.batting_poll_seconds),
            live=timedelta(seconds=settings.live_poll_seconds),
            pregame=timedelta(seconds=settings.pregame_poll_seconds),
            pregame_threshold=timedelta(minutes=settings.pregame_threshold_minutes),
            lookahead_recheck=timedelta(hours=settings.lookahead_recheck_hours),
            no_game_backoff=timedelta(minutes=settings.no_game_backoff_minutes),
        )


@dataclass(frozen=True)
class PollDecision:
    delay: timedelta
    reason: str


def next_poll_delay(
    now: datetime,
    intervals: PollIntervals,
    *,
    engaged: bool = False,
    phase: GamePhase | None = None,
    scheduled_start: datetime | None = None,
    upcoming_start: datetime | None = None,
) -> PollDecision:
    """Compute how long to sleep before the next poll cycle.

    ``phase`` is None when no game is tracked; ``upcoming_start`` is the
    start of the next game found by the look-ahead in that case.
    """
    if engaged:
        return PollDecision(intervals.batting, "subject_batting")

    if phase is GamePhase.IN_PROGRESS:
        return PollDecision(intervals.live, "game_in_progress")

    if phase in (GamePhase.SCHEDULED, GamePhase.PREGAME):
        if scheduled_start is not None:
            until_window = scheduled_start - intervals.pregame_threshold - now
            if until_window > timedelta(0):
                return PollDecision(until_window, "waiting_for_first_pitch")
        return PollDecision(intervals.pregame, "pregame")

    if phase is not None:
        # Tracked game in an unclassified state (suspended, odd status string).
        return PollDecision(intervals.pregame, "unknown_phase")

    if upcoming_start is not None:
        until_window = upcoming_start - intervals.pregame_threshold - now
        delay = min(intervals.lookahead_recheck, max(until_window, intervals.pregame))
        return PollDecision(delay, "next_game_upcoming")

    return PollDecision(intervals.no_game_backoff, "no_game_found")
