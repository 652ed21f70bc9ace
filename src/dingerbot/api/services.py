"""Tracker service: builds the Feed Client, notifier and poll scheduler once.

Both the FastAPI routes and the CLI obtain the shared instance through
``get_tracker_service()``.
"""

from __future__ import annotations

from dingerbot.config import Settings, settings as default_settings
from dingerbot.data.ingest.mlb_api import MLBStatsClient
from dingerbot.data.live.game_feed import SeasonStats
from dingerbot.jobs.scheduler import PollScheduler, SchedulerStatus
from dingerbot.messaging.notifier import DeliveryResult, Notifier, build_notifier
from dingerbot.utils.logging import get_logger

log = get_logger(__name__)


class TrackerService:
    """Wires collaborators together and exposes what the API needs."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: MLBStatsClient | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.client = client or MLBStatsClient(self.settings)
        self.notifier = notifier or build_notifier(self.settings)
        self.engine = PollScheduler(self.client, self.notifier, self.settings)

    def start(self) -> None:
        self.engine.start()

    def stop(self) -> None:
        self.engine.stop()
        self.client.close()

    def status(self) -> SchedulerStatus:
        return self.engine.status()

    def season_stats(self) -> SeasonStats:
        return self.client.get_season_stats(self.settings.player_id)

    def poll_now(self):
        return self.engine.trigger_now()

    def send_test_message(self, message: str) -> list[DeliveryResult]:
        log.info("test_message_requested")
        return self.notifier.send(message)


_service: TrackerService | None = None


def get_tracker_service() -> TrackerService:
    """Return the process-wide :class:`TrackerService`."""
    global _service
    if _service is None:
        _service = TrackerService()
    return _service
