"""At-bat tracker: is the subject the current batter right now?

Two states, Idle and Engaged. While Engaged the scheduler polls at its
fastest tier, so every way out of Engaged matters as much as the way in:

* the recorded at-bat acquires a result in ``allPlays``;
* the engagement outlives ``timeout`` (stale or stuck feed);
* a fetch fails mid at-bat (the scheduler calls :meth:`AtBatTracker.reset`).

The tracker keys on the at-bat index, not just the batter id, so a new
plate appearance by the same hitter is never mistaken for the old one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from dingerbot.data.live.game_feed import LiveFeedSnapshot, Play
from dingerbot.utils.logging import get_logger

log = get_logger(__name__)


class AtBatEvent(str, Enum):
    ENTERED = "entered"
    EXITED = "exited"
    TIMED_OUT = "timed_out"
    RESET = "reset"


@dataclass
class AtBatState:
    """``current_play_index`` is set exactly when ``active`` is True."""

    active: bool = False
    current_play_index: int | None = None
    engaged_since: datetime | None = None


@dataclass(frozen=True)
class AtBatTransition:
    event: AtBatEvent
    at_bat_index: int | None
    play: Play | None = None
    reason: str = ""


class AtBatTracker:
    """Idle/Engaged state machine for one subject."""

    def __init__(self, subject_id: int, timeout: timedelta = timedelta(minutes=10)):
        self.subject_id = subject_id
        self.timeout = timeout
        self._state = AtBatState()
        # Index of the last engagement that ended; never re-entered.
        self._finished_index: int | None = None

    @property
    def state(self) -> AtBatState:
        return AtBatState(
            active=self._state.active,
            current_play_index=self._state.current_play_index,
            engaged_since=self._state.engaged_since,
        )

    @property
    def engaged(self) -> bool:
        return self._state.active

    def update(self, feed: LiveFeedSnapshot, now: datetime) -> list[AtBatTransition]:
        """Advance the state machine with one feed snapshot.

        Only call this while the game is in progress. Returns the
        transitions that happened, in order (an exit can be followed by the
        entry of the subject's next at-bat in the same cycle).
        """
        transitions: list[AtBatTransition] = []

        if self._state.active:
            exit_transition = self._check_exit(feed, now)
            if exit_transition is not None:
                transitions.append(exit_transition)

        current = feed.current_play
        if (
            current is not None
            and current.batter_id == self.subject_id
            and current.at_bat_index is not None
            and not current.has_result
            and current.at_bat_index != self._finished_index
            and (not self._state.active or current.at_bat_index != self._state.current_play_index)
        ):
            if self._state.active:
                # New plate appearance while the old one never resolved.
                transitions.append(self._end(AtBatEvent.TIMED_OUT, reason="superseded"))
            self._state = AtBatState(
                active=True,
                current_play_index=current.at_bat_index,
                engaged_since=now,
            )
            log.info("at_bat_entered", at_bat_index=current.at_bat_index)
            transitions.append(AtBatTransition(AtBatEvent.ENTERED, current.at_bat_index, current))

        return transitions

    def _check_exit(self, feed: LiveFeedSnapshot, now: datetime) -> AtBatTransition | None:
        index = self._state.current_play_index
        play = feed.find_play(index) if index is not None else None
        if play is not None and play.batter_id == self.subject_id and play.has_result:
            return self._end(AtBatEvent.EXITED, play=play, reason=play.event_type or "")

        engaged_since = self._state.engaged_since
        if engaged_since is not None and now - engaged_since > self.timeout:
            return self._end(AtBatEvent.TIMED_OUT, reason="timeout")
        return None

    def _end(self, event: AtBatEvent, play: Play | None = None, reason: str = "") -> AtBatTransition:
        index = self._state.current_play_index
        self._finished_index = index
        self._state = AtBatState()
        log.info("at_bat_finished", at_bat_index=index, outcome=event.value, reason=reason)
        return AtBatTransition(event, index, play, reason)

    def reset(self, reason: str) -> AtBatTransition | None:
        """Force Idle (fetch error, game over). Returns None if already Idle.

        Also forgets the last finished index: at-bat indices restart at 0 in
        every game.
        """
        self._finished_index = None
        if not self._state.active:
            return None
        index = self._state.current_play_index
        self._state = AtBatState()
        log.warning("at_bat_reset", at_bat_index=index, reason=reason)
        return AtBatTransition(AtBatEvent.RESET, index, reason=reason)
