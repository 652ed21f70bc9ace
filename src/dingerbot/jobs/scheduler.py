"""Adaptive poll scheduler with a watchdog.

Uses APScheduler to run one poll cycle at a time. Each cycle ends by
arming a single one-shot ``date`` job for the next cycle, with the delay
chosen by :func:`dingerbot.jobs.policy.next_poll_delay`. A separate
``interval`` job (the watchdog) checks that the armed wake-up actually
happened and forces a cycle when it did not.

All mutable tracking state (game handle, at-bat tracker, notified event
ids, next wake time) lives on :class:`PollScheduler`; collaborators get
inputs and return results.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

from dingerbot.betting.wager import format_wager_section
from dingerbot.config import Settings, settings as default_settings
from dingerbot.data.ingest.mlb_api import FeedError, FeedNotFound, MLBStatsClient
from dingerbot.data.live.game_feed import GamePhase, LiveFeedSnapshot, ScheduledGame, SeasonStats
from dingerbot.jobs.policy import PollDecision, PollIntervals, next_poll_delay
from dingerbot.messaging.formatting import (
    format_at_bat_entered,
    format_at_bat_result,
    format_home_run_message,
    format_startup_message,
)
from dingerbot.messaging.notifier import Notifier
from dingerbot.tracking.at_bat import AtBatEvent, AtBatTracker, AtBatTransition
from dingerbot.tracking.detector import EventPredicate, detect_notable_events
from dingerbot.utils.dates import utc_now
from dingerbot.utils.logging import get_logger

log = get_logger(__name__)

POLL_JOB_NAME = "poll_cycle"
WATCHDOG_JOB_ID = "poll_watchdog"


@dataclass
class GameHandle:
    """The game currently tracked. ``game_id is None`` means none."""

    game_id: int | None = None
    phase: GamePhase = GamePhase.UNKNOWN
    scheduled_start: datetime | None = None
    status: str = ""
    discovered_on: date | None = None


@dataclass
class SchedulerStatus:
    running: bool
    game_id: int | None
    phase: str
    game_status: str
    engaged: bool
    current_play_index: int | None
    last_poll_at: datetime | None
    next_wake_at: datetime | None
    last_decision: str | None
    last_error: str | None
    notified_events: int

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("last_poll_at", "next_wake_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


class PollScheduler:
    """Owns the poll loop, its state machine and the watchdog."""

    def __init__(
        self,
        client: MLBStatsClient,
        notifier: Notifier,
        settings: Settings | None = None,
        scheduler: BaseScheduler | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or default_settings
        self.client = client
        self.notifier = notifier
        self.intervals = PollIntervals.from_settings(self.settings)
        self.predicate = EventPredicate(
            event_type=self.settings.notable_event_type,
            keywords=tuple(self.settings.notable_keywords),
        )
        self.tracker = AtBatTracker(
            self.settings.player_id,
            timeout=timedelta(minutes=self.settings.at_bat_timeout_minutes),
        )
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self._clock = clock

        self._game = GameHandle()
        self._notified: set[str] = set()
        # Games whose live feed reported a terminal status; never rediscovered.
        self._finished_game_ids: set[int] = set()
        self._timer: Job | None = None
        self._next_wake_at: datetime | None = None
        self._last_poll_at: datetime | None = None
        self._last_decision: PollDecision | None = None
        self._last_error: str | None = None
        self._startup_announced = False
        self._running = False
        self._cycle_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the watchdog and arm the first poll."""
        if self._running:
            return

        self.scheduler.add_job(
            self.watchdog_check,
            "interval",
            minutes=self.settings.watchdog_interval_minutes,
            id=WATCHDOG_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        self._running = True
        self._arm(
            PollDecision(timedelta(seconds=self.settings.startup_delay_seconds), "startup")
        )
        log.info(
            "poll_scheduler_started",
            player_id=self.settings.player_id,
            team_id=self.settings.team_id,
            watchdog_minutes=self.settings.watchdog_interval_minutes,
        )

    def stop(self) -> None:
        """Cancel the armed poll and shut the scheduler down."""
        if not self._running:
            return
        self._running = False
        self._cancel_timer()
        self._next_wake_at = None
        self.scheduler.shutdown(wait=False)
        log.info("poll_scheduler_stopped")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def game(self) -> GameHandle:
        return GameHandle(**asdict(self._game))

    @property
    def notified_event_ids(self) -> frozenset[str]:
        return frozenset(self._notified)

    @property
    def next_wake_at(self) -> datetime | None:
        return self._next_wake_at

    @property
    def cycle_in_flight(self) -> bool:
        return self._cycle_lock.locked()

    def status(self) -> SchedulerStatus:
        at_bat = self.tracker.state
        return SchedulerStatus(
            running=self._running,
            game_id=self._game.game_id,
            phase=self._game.phase.value,
            game_status=self._game.status,
            engaged=at_bat.active,
            current_play_index=at_bat.current_play_index,
            last_poll_at=self._last_poll_at,
            next_wake_at=self._next_wake_at,
            last_decision=self._last_decision.reason if self._last_decision else None,
            last_error=self._last_error,
            notified_events=len(self._notified),
        )

    # ------------------------------------------------------------------
    # Poll cycle
    # ------------------------------------------------------------------

    def run_cycle(self) -> PollDecision | None:
        """Run one poll cycle and re-arm the timer.

        Returns the decision for the next poll, or None when another cycle
        was already in flight (nothing was done). Never raises for upstream
        or detection failures.
        """
        if not self._cycle_lock.acquire(blocking=False):
            log.info("poll_cycle_skipped", reason="cycle_in_flight")
            return None
        try:
            try:
                decision = self._poll(self._clock())
                self._last_error = None
            except Exception as exc:
                log.error("poll_cycle_failed", error=str(exc), error_type=type(exc).__name__)
                self._last_error = f"{type(exc).__name__}: {exc}"
                self._invalidate_game("error")
                decision = PollDecision(
                    timedelta(seconds=self.settings.error_retry_seconds), "error_retry"
                )
            self._last_poll_at = self._clock()
            self._last_decision = decision
            if self._running:
                self._arm(decision)
            return decision
        finally:
            self._cycle_lock.release()

    def _poll(self, now: datetime) -> PollDecision:
        self._announce_startup()

        today = self.client.today()
        self._expire_stale_game(today)

        if self._game.game_id is None:
            if self._discover(today) is None:
                upcoming = self._look_ahead(today)
                return next_poll_delay(
                    now,
                    self.intervals,
                    upcoming_start=upcoming.start_time if upcoming else None,
                )

        try:
            feed = self.client.get_live_feed(self._game.game_id)
        except FeedNotFound:
            if self._game.phase is GamePhase.IN_PROGRESS:
                raise
            log.info("live_feed_not_published", game_pk=self._game.game_id)
            return next_poll_delay(
                now,
                self.intervals,
                phase=self._game.phase,
                scheduled_start=self._game.scheduled_start,
            )

        phase = feed.phase
        self._game.phase = phase
        self._game.status = feed.status

        if phase is GamePhase.FINISHED:
            # One last pass: the final plays may have been batch-finalized.
            self._process_events(feed)
            self._finished_game_ids.add(self._game.game_id)
            log.info("game_finished", game_pk=feed.game_id, status=feed.status)
            self._invalidate_game("finished")
            return PollDecision(
                timedelta(seconds=self.settings.rediscover_seconds), "game_finished"
            )

        if phase is GamePhase.IN_PROGRESS:
            for transition in self.tracker.update(feed, now):
                self._on_transition(transition, feed)
            self._process_events(feed)
        else:
            self.tracker.reset("game_not_in_progress")

        return next_poll_delay(
            now,
            self.intervals,
            engaged=self.tracker.engaged,
            phase=phase,
            scheduled_start=self._game.scheduled_start,
        )

    # ------------------------------------------------------------------
    # Game discovery
    # ------------------------------------------------------------------

    def _expire_stale_game(self, today: date) -> None:
        game = self._game
        if (
            game.game_id is not None
            and game.discovered_on != today
            and game.phase is not GamePhase.IN_PROGRESS
        ):
            self._invalidate_game("new_day")

    def _discover(self, today: date) -> GameHandle | None:
        schedule = self.client.get_schedule(today, self.settings.team_id)
        game = schedule.next_open_game(exclude=self._finished_game_ids)
        if game is None:
            log.info("no_open_game_today", date=today.isoformat(), games=len(schedule.games))
            return None

        self._game = GameHandle(
            game_id=game.game_id,
            phase=game.phase,
            scheduled_start=game.start_time,
            status=game.status,
            discovered_on=today,
        )
        log.info(
            "game_discovered",
            game_pk=game.game_id,
            status=game.status,
            matchup=f"{game.away_team} @ {game.home_team}",
            start=game.start_time.isoformat() if game.start_time else None,
        )
        return self._game

    def _look_ahead(self, today: date) -> ScheduledGame | None:
        for offset in range(1, self.settings.lookahead_days + 1):
            day = today + timedelta(days=offset)
            schedule = self.client.get_schedule(day, self.settings.team_id)
            game = schedule.next_open_game(exclude=self._finished_game_ids)
            if game is not None:
                log.info("next_game_found", game_pk=game.game_id, date=day.isoformat())
                return game
        log.info("no_game_within_lookahead", days=self.settings.lookahead_days)
        return None

    def _invalidate_game(self, reason: str) -> None:
        if self._game.game_id is not None:
            log.info("game_invalidated", game_pk=self._game.game_id, reason=reason)
        self._game = GameHandle()
        self.tracker.reset(reason)

    # ------------------------------------------------------------------
    # Detection and notifications
    # ------------------------------------------------------------------

    def _process_events(self, feed: LiveFeedSnapshot) -> None:
        events = detect_notable_events(
            feed, self.settings.player_id, self._notified, self.predicate
        )
        if not events:
            return

        stats = self._season_stats()
        for ordinal, event in enumerate(events, start=1):
            season_total = stats.home_runs + ordinal if stats else None
            log.info(
                "notable_event_detected",
                event_id=event.event_id,
                game_pk=event.game_id,
                at_bat_index=event.play.at_bat_index,
                description=event.play.description,
            )
            message = format_home_run_message(
                event.play,
                self.settings.player_name,
                season_total=season_total,
                feed=feed,
                subject_id=self.settings.player_id,
                wager_section=self._wager_section(stats, season_total),
            )
            self._deliver(message, kind="notable_event", event_id=event.event_id)
            self._notified.add(event.event_id)

    def _season_stats(self) -> SeasonStats | None:
        try:
            return self.client.get_season_stats(self.settings.player_id)
        except FeedError as exc:
            log.warning("season_stats_unavailable", error=str(exc))
            return None

    def _wager_section(self, stats: SeasonStats | None, season_total: int | None) -> str:
        if not self.settings.wager_ledger or stats is None or season_total is None:
            return ""
        return format_wager_section(
            season_total,
            self.settings.wager_ledger,
            games_played=stats.games_played,
            season_games=self.settings.season_games,
        )

    def _on_transition(self, transition: AtBatTransition, feed: LiveFeedSnapshot) -> None:
        if not self.settings.notify_at_bats:
            return
        name = self.settings.player_name
        if transition.event is AtBatEvent.ENTERED:
            self._deliver(format_at_bat_entered(name, feed), kind="at_bat_entered")
        elif transition.event is AtBatEvent.EXITED and transition.play is not None:
            self._deliver(format_at_bat_result(name, transition.play), kind="at_bat_exited")

    def _announce_startup(self) -> None:
        if self._startup_announced or not self.settings.announce_startup:
            return
        self._startup_announced = True
        self._deliver(
            format_startup_message(self.settings.player_name, self._season_stats()),
            kind="startup",
        )

    def _deliver(self, message: str, **context: Any) -> None:
        """Send through the notifier; delivery failures never touch state."""
        try:
            results = self.notifier.send(message)
        except Exception as exc:
            log.error("notification_failed", error=str(exc), **context)
            return
        failed = [r.target for r in results if not r.ok]
        if failed:
            log.warning("notification_partially_failed", failed=failed, **context)

    # ------------------------------------------------------------------
    # Timer and watchdog
    # ------------------------------------------------------------------

    def _arm(self, decision: PollDecision) -> None:
        """Cancel any armed poll and arm exactly one new one."""
        self._cancel_timer()
        run_at = self._clock() + decision.delay
        try:
            self._timer = self.scheduler.add_job(
                self.run_cycle,
                "date",
                run_date=run_at,
                name=POLL_JOB_NAME,
                misfire_grace_time=None,
            )
        except Exception as exc:
            # No next wake time; the watchdog forces the next cycle.
            self._next_wake_at = None
            log.error("poll_arm_failed", error=str(exc))
            return
        self._next_wake_at = run_at
        log.info(
            "next_poll_scheduled",
            delay_seconds=round(decision.delay.total_seconds(), 1),
            reason=decision.reason,
            run_at=run_at.isoformat(),
        )

    def _cancel_timer(self) -> None:
        if self._timer is None:
            return
        try:
            self._timer.remove()
        except JobLookupError:
            pass  # already fired
        self._timer = None

    def watchdog_check(self) -> bool:
        """Force a poll if the armed one is overdue or missing.

        Returns True when a cycle was forced and ran.
        """
        if not self._running:
            return False
        if self._cycle_lock.locked():
            log.debug("watchdog_cycle_in_flight")
            return False

        now = self._clock()
        next_wake = self._next_wake_at
        if next_wake is None:
            log.error("watchdog_no_next_wake", anomaly="invariant_violation")
        else:
            overdue = now - next_wake
            if overdue <= timedelta(seconds=self.settings.watchdog_buffer_seconds):
                log.debug("watchdog_ok", next_wake_at=next_wake.isoformat())
                return False
            log.warning(
                "watchdog_missed_poll",
                anomaly="missed_poll",
                overdue_seconds=round(overdue.total_seconds(), 1),
                next_wake_at=next_wake.isoformat(),
            )
        return self.run_cycle() is not None

    def trigger_now(self) -> PollDecision | None:
        """Run a cycle immediately (manual trigger); None if one is running."""
        log.info("poll_cycle_triggered", source="manual")
        return self.run_cycle()
