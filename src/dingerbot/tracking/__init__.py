"""At-bat tracking and notable event detection."""

from dingerbot.tracking.at_bat import AtBatEvent, AtBatState, AtBatTracker, AtBatTransition
from dingerbot.tracking.detector import (
    HOME_RUN,
    EventPredicate,
    NotableEvent,
    detect_notable_events,
    stable_event_id,
)

__all__ = [
    "AtBatEvent",
    "AtBatState",
    "AtBatTracker",
    "AtBatTransition",
    "EventPredicate",
    "HOME_RUN",
    "NotableEvent",
    "detect_notable_events",
    "stable_event_id",
]
