"""Shared pytest fixtures for dingerbot tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from dingerbot.config import Settings
from dingerbot.data.live.game_feed import ScheduleSnapshot, ScheduledGame, SeasonStats, parse_live_feed

SUBJECT_ID = 668939
OTHER_BATTER_ID = 641487
GAME_PK = 745123


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def make_play(
    at_bat_index: int,
    batter_id: int = SUBJECT_ID,
    event_type: str | None = None,
    description: str = "",
    event_id: str | None = None,
    play_guid: str | None = None,
    inning: int = 7,
    is_top_inning: bool = False,
    rbi: int | None = None,
    hit_data: dict | None = None,
) -> dict:
    """Build a raw ``allPlays`` entry as the Stats API returns it."""
    result: dict = {"type": "atBat", "description": description}
    if event_type:
        result["eventType"] = event_type
        result["event"] = event_type.replace("_", " ").title()
    if rbi is not None:
        result["rbi"] = rbi
    play: dict = {
        "result": result,
        "about": {
            "atBatIndex": at_bat_index,
            "inning": inning,
            "isTopInning": is_top_inning,
            "isComplete": bool(event_type),
        },
        "matchup": {"batter": {"id": batter_id, "fullName": "Cal Raleigh"}},
    }
    if event_id:
        play["playEvents"] = [{"details": {"eventId": event_id}}]
    if play_guid:
        play["playGuid"] = play_guid
    if hit_data:
        play["hitData"] = hit_data
    return play


def make_feed(
    plays: list[dict] | None = None,
    current: dict | None = None,
    status: str = "In Progress",
    abstract_state: str = "Live",
    away_runs: int = 3,
    home_runs: int = 4,
) -> dict:
    """Build a raw live feed response."""
    plays = plays or []
    if current is None and plays:
        current = plays[-1]
    return {
        "gameData": {
            "status": {"detailedState": status, "abstractGameState": abstract_state},
            "teams": {"away": {"abbreviation": "PHI"}, "home": {"abbreviation": "SEA"}},
        },
        "liveData": {
            "linescore": {
                "currentInning": 7,
                "inningHalf": "Bottom",
                "teams": {"away": {"runs": away_runs}, "home": {"runs": home_runs}},
            },
            "plays": {"allPlays": plays, "currentPlay": current or {}},
            "boxscore": {
                "teams": {
                    "home": {
                        "players": {
                            f"ID{SUBJECT_ID}": {
                                "person": {"id": SUBJECT_ID},
                                "stats": {"batting": {"atBats": 3, "hits": 2, "runs": 2, "rbi": 3}},
                            }
                        }
                    }
                }
            },
        },
    }


@pytest.fixture
def play_factory():
    return make_play


@pytest.fixture
def raw_feed_factory():
    return make_feed


@pytest.fixture
def feed_factory():
    """Returns ``build(**make_feed kwargs) -> LiveFeedSnapshot``."""

    def build(**kwargs):
        return parse_live_feed(make_feed(**kwargs), GAME_PK)

    return build


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 8, 18, 2, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_settings():
    """Settings isolated from the environment and .env file."""
    return Settings(
        _env_file=None,
        player_id=SUBJECT_ID,
        player_name="Cal Raleigh",
        team_id=136,
        batting_poll_seconds=5,
        live_poll_seconds=15,
        pregame_poll_seconds=60,
        pregame_threshold_minutes=15,
        error_retry_seconds=30,
        rediscover_seconds=60,
        at_bat_timeout_minutes=10,
        watchdog_interval_minutes=30,
        watchdog_buffer_seconds=120,
        startup_delay_seconds=5,
        wager_ledger={},
    )


@pytest.fixture
def schedule_with_game(clock):
    """A schedule holding one in-progress game that started an hour ago."""

    def build(status: str = "In Progress", abstract_state: str = "Live", start: datetime | None = None):
        return ScheduleSnapshot(
            game_date=date(2025, 8, 17),
            games=[
                ScheduledGame(
                    game_id=GAME_PK,
                    status=status,
                    abstract_state=abstract_state,
                    start_time=start or clock.now - timedelta(hours=1),
                    away_team="PHI",
                    home_team="SEA",
                )
            ],
        )

    return build


@pytest.fixture
def mock_client(schedule_with_game):
    """Feed Client double: today's schedule has one live game."""
    client = MagicMock()
    client.today.return_value = date(2025, 8, 17)
    client.get_schedule.return_value = schedule_with_game()
    client.get_season_stats.return_value = SeasonStats(
        player_id=SUBJECT_ID, season=2025, home_runs=47, rbi=102, avg=".251", ops=".956", games_played=123
    )
    return client


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.send.return_value = []
    return notifier


@pytest.fixture
def mock_scheduler():
    """APScheduler stand-in: records jobs, never fires them."""
    return MagicMock()
