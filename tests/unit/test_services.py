"""Tests for TrackerService wiring."""

from __future__ import annotations

from unittest.mock import patch

from dingerbot.messaging.notifier import LogNotifier


class TestTrackerService:
    def test_get_tracker_service_singleton(self):
        """Singleton returns the same instance."""
        import dingerbot.api.services as mod

        mod._service = None
        with patch.object(mod, "TrackerService") as factory:
            svc1 = mod.get_tracker_service()
            svc2 = mod.get_tracker_service()
        assert svc1 is svc2
        factory.assert_called_once()

        mod._service = None

    def test_poll_now_runs_a_cycle(self, test_settings, mock_client, feed_factory):
        from dingerbot.api.services import TrackerService

        mock_client.get_live_feed.return_value = feed_factory(plays=[], current={})
        svc = TrackerService(test_settings, client=mock_client, notifier=LogNotifier())
        decision = svc.poll_now()

        assert decision is not None
        mock_client.today.assert_called_once()

    def test_send_test_message_uses_notifier(self, test_settings, mock_client):
        from dingerbot.api.services import TrackerService

        notifier = LogNotifier()
        svc = TrackerService(test_settings, client=mock_client, notifier=notifier)
        results = svc.send_test_message("ping")

        assert results[0].ok
        assert notifier.sent == ["ping"]

    def test_stop_closes_client(self, test_settings, mock_client):
        from dingerbot.api.services import TrackerService

        svc = TrackerService(test_settings, client=mock_client, notifier=LogNotifier())
        svc.stop()
        mock_client.close.assert_called_once()

    def test_season_stats_for_subject(self, test_settings, mock_client):
        from dingerbot.api.services import TrackerService

        svc = TrackerService(test_settings, client=mock_client, notifier=LogNotifier())
        assert svc.season_stats().home_runs == 47
        mock_client.get_season_stats.assert_called_once_with(668939)
