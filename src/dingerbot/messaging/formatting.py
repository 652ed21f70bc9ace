"""Plain-text chat messages, laid out for phone screens."""

from __future__ import annotations

from dingerbot.data.live.game_feed import LiveFeedSnapshot, Play, SeasonStats


def _number(value: float) -> str:
    return f"{value:g}"


def format_home_run_message(
    play: Play,
    player_name: str,
    season_total: int | None = None,
    feed: LiveFeedSnapshot | None = None,
    subject_id: int | None = None,
    wager_section: str = "",
) -> str:
    """Alert for one home run: what happened, when, how hard, and context."""
    short_name = player_name.split()[0] if player_name else "Subject"
    lines = [
        f"🚨🚨🚨 {short_name.upper()} DINGER! 🚨🚨🚨",
        f"{play.description or 'Home run!'} ⚾💥",
    ]

    situation = []
    if play.inning:
        situation.append(f"{play.half_label} {play.inning}".strip())
    if play.rbi is not None:
        situation.append(f"{play.rbi} RBI")
    if situation:
        lines.append(" • ".join(situation))

    hit = play.hit_data
    if hit is not None:
        metrics = []
        if hit.launch_speed:
            metrics.append(f"EV {_number(hit.launch_speed)} mph")
        if hit.launch_angle is not None:
            metrics.append(f"LA {_number(hit.launch_angle)}°")
        if hit.total_distance:
            metrics.append(f"{_number(hit.total_distance)} ft 🚀")
        if metrics:
            lines.append(" • ".join(metrics))

    if season_total is not None:
        lines += ["", f"🏆 Season HR #{season_total}"]

    if feed is not None:
        lines += ["", f"📊 {feed.score_line}"]
        line = feed.batting_lines.get(subject_id) if subject_id is not None else None
        if line is not None:
            lines.append(
                f"🏟️ {short_name}: {line.hits}/{line.at_bats} • {line.rbi} RBI • {line.runs} R"
            )

    if wager_section:
        lines += ["", wager_section]
    return "\n".join(lines)


def format_at_bat_entered(player_name: str, feed: LiveFeedSnapshot) -> str:
    half = feed.inning_half or ""
    inning = f"{half} {feed.current_inning}".strip() if feed.current_inning else ""
    return "\n".join(
        part
        for part in (
            f"⚾ {player_name} is up to bat!",
            inning,
            f"📊 {feed.score_line}",
        )
        if part
    )


def format_at_bat_result(player_name: str, play: Play) -> str:
    outcome = play.event or play.event_type or "result"
    lines = [f"{player_name}: {outcome}"]
    if play.description:
        lines.append(play.description)
    return "\n".join(lines)


def format_startup_message(player_name: str, stats: SeasonStats | None) -> str:
    lines = ["🚨 DINGER BOT IS READY! 🚨"]
    if stats is not None:
        lines += [
            f"{player_name} {stats.season}:",
            f"   • HR: {stats.home_runs}",
            f"   • RBI: {stats.rbi}",
            f"   • AVG: {stats.avg}",
            f"   • OPS: {stats.ops}",
        ]
    lines.append(f"Monitoring for {player_name} dingers...")
    return "\n".join(lines)
