"""dingerbot CLI, powered by Typer.

Usage::

    uv run dingerbot serve [--port 3000]
    uv run dingerbot run
    uv run dingerbot poll-once
    uv run dingerbot stats
    uv run dingerbot wager [--current 47 --games-played 123]
"""

from __future__ import annotations

import time

import typer
from rich.console import Console
from rich.table import Table

from dingerbot.config import settings
from dingerbot.utils.logging import configure_logging

app = typer.Typer(name="dingerbot", help="Live home run alerts for one MLB hitter")
console = Console()


@app.callback()
def main(
    log_level: str = typer.Option(None, help="Override LOG_LEVEL"),
) -> None:
    configure_logging(log_level or settings.log_level, settings.log_json)


@app.command("serve")
def serve(
    host: str = typer.Option(None, help="Bind host (default: config)"),
    port: int = typer.Option(None, help="Port (default: config)"),
) -> None:
    """Start the status API with the poll engine running inside it."""
    import uvicorn

    host = host or settings.host
    port = port or settings.port
    console.print("\n[bold green]Starting dingerbot[/bold green]")
    console.print(f"  Tracking: {settings.player_name} ({settings.player_id})")
    console.print(f"  Status:   http://{host}:{port}/api/status\n")

    uvicorn.run("dingerbot.api.app:app", host=host, port=port)


@app.command("run")
def run() -> None:
    """Run the poll engine without the HTTP server (Ctrl+C to stop)."""
    from dingerbot.api.services import get_tracker_service

    svc = get_tracker_service()
    svc.start()
    console.print(f"[green]Polling for {settings.player_name} home runs...[/green]")
    try:
        while svc.engine.running:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopping...[/dim]")
    finally:
        svc.stop()


@app.command("poll-once")
def poll_once(
    dry_run: bool = typer.Option(True, help="Log messages instead of sending them"),
) -> None:
    """Run a single poll cycle and show the resulting engine state."""
    from dingerbot.api.services import TrackerService
    from dingerbot.messaging.notifier import LogNotifier

    svc = TrackerService(notifier=LogNotifier() if dry_run else None)
    decision = svc.poll_now()
    status = svc.status()
    svc.stop()

    table = Table(title="Poll Cycle")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in status.to_dict().items():
        table.add_row(key, "" if value is None else str(value))
    if decision is not None:
        table.add_row("next_poll_in", f"{decision.delay.total_seconds():.0f}s ({decision.reason})")
    console.print(table)


@app.command("stats")
def stats() -> None:
    """Show the tracked hitter's season stats."""
    from dingerbot.data.ingest.mlb_api import FeedError, MLBStatsClient

    client = MLBStatsClient()
    try:
        season = client.get_season_stats(settings.player_id)
    except FeedError as exc:
        console.print(f"[red]Stats unavailable:[/red] {exc}")
        raise typer.Exit(1)
    finally:
        client.close()

    table = Table(title=f"{settings.player_name} {season.season}")
    for column in ("G", "HR", "RBI", "AVG", "OPS"):
        table.add_column(column, justify="right")
    table.add_row(
        "" if season.games_played is None else str(season.games_played),
        str(season.home_runs),
        str(season.rbi),
        season.avg,
        season.ops,
    )
    console.print(table)


@app.command("wager")
def wager(
    current: int = typer.Option(None, help="Current HR total (default: live stats)"),
    games_played: int = typer.Option(None, help="Games played (default: live stats)"),
) -> None:
    """Print the wager pool update for the configured ledger."""
    from dingerbot.betting.wager import format_wager_section

    if not settings.wager_ledger:
        console.print("[red]No WAGER_LEDGER configured.[/red]")
        raise typer.Exit(1)

    if current is None:
        from dingerbot.data.ingest.mlb_api import FeedError, MLBStatsClient

        client = MLBStatsClient()
        try:
            season = client.get_season_stats(settings.player_id)
        except FeedError as exc:
            console.print(f"[red]Stats unavailable:[/red] {exc}")
            raise typer.Exit(1)
        finally:
            client.close()
        current = season.home_runs
        games_played = games_played if games_played is not None else season.games_played

    console.print(
        format_wager_section(
            current,
            settings.wager_ledger,
            games_played=games_played,
            season_games=settings.season_games,
        )
    )


if __name__ == "__main__":
    app()
