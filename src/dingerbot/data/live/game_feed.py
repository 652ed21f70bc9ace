"""Typed snapshots of the MLB Stats API schedule and live game feed.

The provider omits fields freely (no ``hitData`` on strikeouts, no
``result.eventType`` until a play finishes, no ``playEvents`` on some
event types), so every optional field is modelled as ``None`` instead of
being looked up ad hoc on raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable

from dingerbot.constants import (
    ABSTRACT_FINAL,
    ABSTRACT_LIVE,
    ABSTRACT_PREVIEW,
    PREGAME_STATUSES,
    TERMINAL_STATUS_MARKERS,
)
from dingerbot.utils.dates import parse_api_timestamp


class GamePhase(str, Enum):
    SCHEDULED = "Scheduled"
    PREGAME = "Pregame"
    IN_PROGRESS = "InProgress"
    FINISHED = "Finished"
    UNKNOWN = "Unknown"


def is_terminal_status(status: str) -> bool:
    """True for final / completed / cancelled / postponed game states."""
    lowered = (status or "").lower()
    return any(marker in lowered for marker in TERMINAL_STATUS_MARKERS)


def classify_phase(detailed_state: str, abstract_state: str = "") -> GamePhase:
    """Map the provider's status strings onto a :class:`GamePhase`."""
    lowered = (detailed_state or "").lower()
    if is_terminal_status(lowered) or abstract_state == ABSTRACT_FINAL:
        return GamePhase.FINISHED
    if lowered in PREGAME_STATUSES:
        return GamePhase.PREGAME
    if lowered == "scheduled" or abstract_state == ABSTRACT_PREVIEW:
        return GamePhase.SCHEDULED
    if abstract_state == ABSTRACT_LIVE or lowered in ("in progress", "manager challenge"):
        return GamePhase.IN_PROGRESS
    return GamePhase.UNKNOWN


@dataclass
class HitData:
    launch_speed: float | None = None
    launch_angle: float | None = None
    total_distance: float | None = None


@dataclass
class Play:
    """One plate appearance from ``liveData.plays``."""

    at_bat_index: int | None
    batter_id: int | None
    batter_name: str = ""
    event_type: str | None = None
    event: str | None = None
    description: str = ""
    rbi: int | None = None
    inning: int | None = None
    is_top_inning: bool | None = None
    away_score: int | None = None
    home_score: int | None = None
    is_complete: bool = False
    event_id: str | None = None
    play_guid: str | None = None
    hit_data: HitData | None = None

    @property
    def has_result(self) -> bool:
        """A play has a result once the provider fills ``result.eventType``."""
        return bool(self.event_type)

    @property
    def half_label(self) -> str:
        if self.is_top_inning is None:
            return ""
        return "Top" if self.is_top_inning else "Bottom"


@dataclass
class BattingLine:
    """A player's batting totals for the current game (from the boxscore)."""

    at_bats: int = 0
    hits: int = 0
    runs: int = 0
    rbi: int = 0
    home_runs: int = 0


@dataclass
class LiveFeedSnapshot:
    """Parsed ``/game/{pk}/feed/live`` response."""

    game_id: int
    status: str = ""
    abstract_state: str = ""
    away_team: str = ""
    home_team: str = ""
    away_runs: int = 0
    home_runs: int = 0
    current_inning: int | None = None
    inning_half: str = ""
    current_play: Play | None = None
    all_plays: list[Play] = field(default_factory=list)
    batting_lines: dict[int, BattingLine] = field(default_factory=dict)

    @property
    def phase(self) -> GamePhase:
        return classify_phase(self.status, self.abstract_state)

    def find_play(self, at_bat_index: int) -> Play | None:
        for play in self.all_plays:
            if play.at_bat_index == at_bat_index:
                return play
        return None

    @property
    def score_line(self) -> str:
        return f"{self.away_team} {self.away_runs} - {self.home_team} {self.home_runs}"


@dataclass
class ScheduledGame:
    game_id: int
    status: str = ""
    abstract_state: str = ""
    start_time: datetime | None = None
    away_team: str = ""
    home_team: str = ""

    @property
    def phase(self) -> GamePhase:
        return classify_phase(self.status, self.abstract_state)

    @property
    def is_terminal(self) -> bool:
        return self.phase is GamePhase.FINISHED


@dataclass
class ScheduleSnapshot:
    game_date: date
    games: list[ScheduledGame] = field(default_factory=list)

    def next_open_game(self, exclude: Iterable[int] = ()) -> ScheduledGame | None:
        """First game (by start time) that has not reached a terminal state.

        Games in ``exclude`` are skipped even if the schedule still lists
        them as open; the schedule can lag the live feed.
        """
        skipped = set(exclude)
        open_games = [g for g in self.games if not g.is_terminal and g.game_id not in skipped]
        open_games.sort(key=lambda g: (g.start_time is None, g.start_time or datetime.max))
        return open_games[0] if open_games else None


@dataclass
class SeasonStats:
    player_id: int
    season: int
    home_runs: int = 0
    rbi: int = 0
    avg: str = ".000"
    ops: str = ".000"
    games_played: int | None = None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_int(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> float | None:
    try:
        return float(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def parse_play(raw: dict) -> Play:
    """Parse one entry of ``allPlays`` (or ``currentPlay``)."""
    raw = _as_dict(raw)
    about = _as_dict(raw.get("about"))
    result = _as_dict(raw.get("result"))
    batter = _as_dict(_as_dict(raw.get("matchup")).get("batter"))
    play_events = _as_list(raw.get("playEvents"))
    first_event = _as_dict(play_events[0]) if play_events else {}
    event_id = _as_dict(first_event.get("details")).get("eventId")

    hit = _as_dict(raw.get("hitData"))
    if not hit:
        # Batted-ball metrics usually hang off the final pitch event.
        for event in reversed(play_events):
            hit = _as_dict(_as_dict(event).get("hitData"))
            if hit:
                break
    hit_data = None
    if hit:
        hit_data = HitData(
            launch_speed=_as_float(hit.get("launchSpeed")),
            launch_angle=_as_float(hit.get("launchAngle")),
            total_distance=_as_float(hit.get("totalDistance")),
        )

    return Play(
        at_bat_index=_as_int(about.get("atBatIndex")),
        batter_id=_as_int(batter.get("id")),
        batter_name=batter.get("fullName", "") or "",
        event_type=result.get("eventType") or None,
        event=result.get("event") or None,
        description=result.get("description", "") or "",
        rbi=_as_int(result.get("rbi")),
        inning=_as_int(about.get("inning")),
        is_top_inning=about.get("isTopInning"),
        away_score=_as_int(result.get("awayScore")),
        home_score=_as_int(result.get("homeScore")),
        is_complete=bool(about.get("isComplete", False)),
        event_id=str(event_id) if event_id else None,
        play_guid=raw.get("playGuid") or None,
        hit_data=hit_data,
    )


def _parse_batting_lines(boxscore: dict) -> dict[int, BattingLine]:
    lines: dict[int, BattingLine] = {}
    for side in ("away", "home"):
        players = _as_dict(_as_dict(_as_dict(boxscore.get("teams")).get(side)).get("players"))
        for player in players.values():
            player = _as_dict(player)
            player_id = _as_int(_as_dict(player.get("person")).get("id"))
            batting = _as_dict(_as_dict(player.get("stats")).get("batting"))
            if player_id is None or not batting:
                continue
            lines[player_id] = BattingLine(
                at_bats=_as_int(batting.get("atBats")) or 0,
                hits=_as_int(batting.get("hits")) or 0,
                runs=_as_int(batting.get("runs")) or 0,
                rbi=_as_int(batting.get("rbi")) or 0,
                home_runs=_as_int(batting.get("homeRuns")) or 0,
            )
    return lines


def parse_live_feed(feed: dict, game_id: int) -> LiveFeedSnapshot:
    """Parse a live feed response into a :class:`LiveFeedSnapshot`."""
    feed = _as_dict(feed)
    game_data = _as_dict(feed.get("gameData"))
    live_data = _as_dict(feed.get("liveData"))
    status = _as_dict(game_data.get("status"))
    teams = _as_dict(game_data.get("teams"))
    linescore = _as_dict(live_data.get("linescore"))
    line_teams = _as_dict(linescore.get("teams"))
    plays = _as_dict(live_data.get("plays"))

    current_raw = plays.get("currentPlay")
    return LiveFeedSnapshot(
        game_id=game_id,
        status=status.get("detailedState", "") or "",
        abstract_state=status.get("abstractGameState", "") or "",
        away_team=_as_dict(teams.get("away")).get("abbreviation", "") or "",
        home_team=_as_dict(teams.get("home")).get("abbreviation", "") or "",
        away_runs=_as_int(_as_dict(line_teams.get("away")).get("runs")) or 0,
        home_runs=_as_int(_as_dict(line_teams.get("home")).get("runs")) or 0,
        current_inning=_as_int(linescore.get("currentInning")),
        inning_half=linescore.get("inningHalf", "") or "",
        current_play=parse_play(current_raw) if isinstance(current_raw, dict) and current_raw else None,
        all_plays=[parse_play(p) for p in _as_list(plays.get("allPlays"))],
        batting_lines=_parse_batting_lines(_as_dict(live_data.get("boxscore"))),
    )


def parse_schedule(data: dict, game_date: date) -> ScheduleSnapshot:
    """Parse a ``/schedule`` response into a :class:`ScheduleSnapshot`."""
    games = []
    for date_entry in _as_list(_as_dict(data).get("dates")):
        for game in _as_list(_as_dict(date_entry).get("games")):
            game = _as_dict(game)
            game_pk = _as_int(game.get("gamePk"))
            if game_pk is None:
                continue
            status = _as_dict(game.get("status"))
            teams = _as_dict(game.get("teams"))
            games.append(
                ScheduledGame(
                    game_id=game_pk,
                    status=status.get("detailedState", "") or "",
                    abstract_state=status.get("abstractGameState", "") or "",
                    start_time=parse_api_timestamp(game.get("gameDate")),
                    away_team=_team_label(_as_dict(teams.get("away"))),
                    home_team=_team_label(_as_dict(teams.get("home"))),
                )
            )
    return ScheduleSnapshot(game_date=game_date, games=games)


def _team_label(side: dict) -> str:
    team = _as_dict(side.get("team"))
    return team.get("abbreviation") or team.get("name", "") or ""


def parse_season_stats(data: dict, player_id: int, season: int) -> SeasonStats:
    """Parse a ``/people/{id}/stats`` hitting response.

    Missing splits (player has not appeared yet) yield zeroed stats.
    """
    stats = _as_list(_as_dict(data).get("stats"))
    splits = _as_list(_as_dict(stats[0]).get("splits")) if stats else []
    stat = _as_dict(_as_dict(splits[0]).get("stat")) if splits else {}
    return SeasonStats(
        player_id=player_id,
        season=season,
        home_runs=_as_int(stat.get("homeRuns")) or 0,
        rbi=_as_int(stat.get("rbi")) or 0,
        avg=str(stat.get("avg", ".000")),
        ops=str(stat.get("ops", ".000")),
        games_played=_as_int(stat.get("gamesPlayed")),
    )
