"""Season home run projection and wager pool probabilities.

Each participant in the pool owns a set of final home run totals. The
projection extrapolates the subject's current pace to a full season, and
each participant's chance is the Gaussian weight of their totals around
that projection. The spread narrows as the season runs out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import numpy as np

from dingerbot.utils.dates import season_date_progress

NO_WINNER = "No Winner"
MAX_TOTAL_WIN_PROBABILITY = 0.85
MIN_PARTICIPANT_PROBABILITY = 0.01
MIN_NO_WINNER_PROBABILITY = 0.05
IN_RANGE_TOLERANCE = 2


@dataclass
class WagerOdds:
    """One participant's (or "No Winner"'s) share of the pool."""

    name: str
    numbers: list[int]
    probability: float
    in_range: bool = False


def season_progress(
    games_played: int | None,
    season_games: int = 162,
    today: date | None = None,
) -> float:
    """Fraction of the season completed.

    Games-based when games played is known, otherwise date-based.
    """
    if games_played is not None and season_games > 0:
        return max(0.0, min(1.0, games_played / season_games))
    return season_date_progress(today or date.today())


def season_projection(
    current_hr: int,
    games_played: int | None = None,
    season_games: int = 162,
    today: date | None = None,
) -> int:
    """Project the full-season home run total from the current pace."""
    progress = season_progress(games_played, season_games, today)
    if progress == 0 or games_played == 0:
        return current_hr
    return round(current_hr / progress)


def wager_probabilities(
    projected_hr: float,
    ledger: dict[str, list[int]],
    progress: float,
) -> list[WagerOdds]:
    """Probability that each participant's numbers hit, plus "No Winner".

    Returned sorted by probability (highest first), with "No Winner" last.
    """
    if not ledger:
        return []

    std_dev = 2 + (1 - progress) * 6
    raw: dict[str, float] = {}
    for name, numbers in ledger.items():
        distance = np.asarray(numbers, dtype=float) - projected_hr
        raw[name] = float(np.exp(-(distance**2) / (2 * std_dev**2)).sum())

    total = sum(raw.values())
    normalization = min(MAX_TOTAL_WIN_PROBABILITY, total)

    results = []
    for name, weight in raw.items():
        share = (weight / total) * normalization if total > 0 else 0.0
        results.append(
            WagerOdds(
                name=name,
                numbers=list(ledger[name]),
                probability=max(MIN_PARTICIPANT_PROBABILITY, share),
                in_range=any(abs(n - projected_hr) <= IN_RANGE_TOLERANCE for n in ledger[name]),
            )
        )
    results.sort(key=lambda odds: odds.probability, reverse=True)

    assigned = sum(odds.probability for odds in results)
    results.append(
        WagerOdds(
            name=NO_WINNER,
            numbers=[],
            probability=max(MIN_NO_WINNER_PROBABILITY, 1 - assigned),
        )
    )
    return results


def format_wager_section(
    current_hr: int,
    ledger: dict[str, list[int]],
    games_played: int | None = None,
    season_games: int = 162,
    today: date | None = None,
) -> str:
    """Mobile-friendly wager block appended to home run alerts."""
    if not ledger:
        return ""
    progress = season_progress(games_played, season_games, today)
    projected = season_projection(current_hr, games_played, season_games, today)
    odds = wager_probabilities(projected, ledger, progress)

    medals = ["🥇", "🥈", "🥉"]
    lines = ["🎯 WAGER UPDATE", f"Current: {current_hr} HR", f"Projected: {projected} HR", ""]
    rank = 0
    for entry in odds:
        percent = f"{entry.probability * 100:.0f}%"
        if entry.name == NO_WINNER:
            lines.append(f"❌ {NO_WINNER}: {percent}")
            continue
        medal = medals[rank] if rank < len(medals) else "•"
        rank += 1
        marker = " 🎯" if entry.in_range else ""
        lines.append(f"{medal} {entry.name}: {percent}{marker}")
        lines.append(f"   ({','.join(str(n) for n in entry.numbers)})")
    return "\n".join(lines)
