"""
Standings and ranking.

Ranking order (best first):
  1. cumulative total points, descending
  2. average (point differential over submitted matches), descending
  3. name, ascending under Turkish collation

The name tie-break makes this a total order, so the same inputs always
produce the same list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from mexicano.services.tournament_state import SIDE_A, Round, TournamentState
from mexicano.utils.collation import collation_key


@dataclass
class PlayerStats:
    """Per-player aggregates over submitted rounds."""

    name: str
    total: int = 0
    points_for: int = 0
    points_against: int = 0
    matches_played: int = 0

    @property
    def average(self) -> int:
        return self.points_for - self.points_against


@dataclass
class StandingRow:
    position: int
    name: str
    total: int
    average: int
    matches_played: int
    byes: int


def player_stats(
    players: Sequence[str],
    totals: Mapping[str, int],
    rounds: Sequence[Round],
) -> Dict[str, PlayerStats]:
    """Aggregate points for/against and matches played from submitted rounds only."""
    stats = {p: PlayerStats(name=p, total=totals.get(p, 0)) for p in players}

    for rnd in rounds:
        if not rnd.submitted:
            continue
        for match in rnd.matches:
            score_a = match.score_a or 0
            score_b = match.score_b or 0
            for player in match.players:
                entry = stats.get(player)
                if entry is None:
                    # Removed from the roster since this round was played
                    continue
                if match.side_of(player) == SIDE_A:
                    entry.points_for += score_a
                    entry.points_against += score_b
                else:
                    entry.points_for += score_b
                    entry.points_against += score_a
                entry.matches_played += 1

    return stats


def rank_key(entry: PlayerStats) -> tuple:
    """Sort key for ranking. Lower = better."""
    return (-entry.total, -entry.average, collation_key(entry.name))


def compute_ranking(
    players: Sequence[str],
    totals: Mapping[str, int],
    rounds: Sequence[Round],
) -> List[str]:
    """Return players ordered best to worst."""
    stats = player_stats(players, totals, rounds)
    return [entry.name for entry in sorted(stats.values(), key=rank_key)]


def matches_played(players: Sequence[str], rounds: Sequence[Round]) -> Dict[str, int]:
    stats = player_stats(players, {}, rounds)
    return {name: entry.matches_played for name, entry in stats.items()}


def standings(state: TournamentState) -> List[StandingRow]:
    """Ranked standings table for the current state."""
    stats = player_stats(state.players, state.totals, state.rounds)
    ordered = sorted(stats.values(), key=rank_key)
    return [
        StandingRow(
            position=i + 1,
            name=entry.name,
            total=entry.total,
            average=entry.average,
            matches_played=entry.matches_played,
            byes=state.byes_for(entry.name),
        )
        for i, entry in enumerate(ordered)
    ]
