"""Notable event detection for the tracked hitter.

Scans every play in a feed snapshot, not just the current one: the
provider can finalize several plays between two polls, and a home run that
was already replaced as ``currentPlay`` must still be reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from dingerbot.constants import HOME_RUN_EVENT_TYPE, HOME_RUN_KEYWORDS
from dingerbot.data.live.game_feed import LiveFeedSnapshot, Play


@dataclass(frozen=True)
class EventPredicate:
    """Exact ``eventType`` match OR a keyword found in the description.

    ``eventType`` is not always populated, so the free-text description is
    checked as a fallback.
    """

    event_type: str = HOME_RUN_EVENT_TYPE
    keywords: tuple[str, ...] = HOME_RUN_KEYWORDS

    def matches(self, play: Play) -> bool:
        if play.event_type and play.event_type == self.event_type:
            return True
        description = play.description.lower()
        return any(keyword.lower() in description for keyword in self.keywords)


HOME_RUN = EventPredicate()


@dataclass(frozen=True)
class NotableEvent:
    event_id: str
    game_id: int
    play: Play


def stable_event_id(play: Play, game_id: int) -> str | None:
    """Derive an id for a play: event id, then play GUID, then at-bat index.

    The at-bat index is only unique within a game, so it is prefixed with
    the game id.
    """
    if play.event_id:
        return play.event_id
    if play.play_guid:
        return play.play_guid
    if play.at_bat_index is not None:
        return f"{game_id}:{play.at_bat_index}"
    return None


def detect_notable_events(
    feed: LiveFeedSnapshot,
    subject_id: int,
    already_notified: Iterable[str] = (),
    predicate: EventPredicate = HOME_RUN,
) -> list[NotableEvent]:
    """Return the subject's notable events not yet in ``already_notified``.

    Pure function: the caller records returned ids after notifying.
    """
    notified = set(already_notified)
    events: list[NotableEvent] = []
    for play in feed.all_plays:
        if play.batter_id != subject_id or not predicate.matches(play):
            continue
        event_id = stable_event_id(play, feed.game_id)
        if event_id is None or event_id in notified:
            continue
        notified.add(event_id)
        events.append(NotableEvent(event_id=event_id, game_id=feed.game_id, play=play))
    return events
