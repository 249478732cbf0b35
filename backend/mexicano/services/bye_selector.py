"""
Bye selection.

Matches are played in groups of four. With an even roster of n >= 8,
n % 4 is either 0 (no byes) or 2 (two players sit out).

Who sits out rotates fairly. Ascending sort key (first = rests first):
  1. matches already played, descending
  2. byes already taken, ascending
  3. ranking position, descending (worse-ranked rests first)
  4. name, ascending (Turkish collation)
"""

from __future__ import annotations

from typing import List, Mapping, Sequence

from mexicano.services.errors import InsufficientPlayersError, OddPlayerCountError
from mexicano.utils.collation import collation_key

PLAYERS_PER_MATCH = 4
MIN_PLAYERS = 8


def ensure_playable_roster(n: int) -> None:
    """Rounds need an even roster of at least MIN_PLAYERS."""
    if n < MIN_PLAYERS:
        raise InsufficientPlayersError(f"At least {MIN_PLAYERS} players are required, got {n}")
    if n % 2 != 0:
        raise OddPlayerCountError(f"Player count must be even (8, 10, 12, ...), got {n}")


def required_byes(n: int) -> int:
    """Number of players who must sit out so the rest divide into matches of 4."""
    if n % 2 != 0:
        raise OddPlayerCountError(f"Player count must be even, got {n}")
    return n % PLAYERS_PER_MATCH


def bye_key(
    player: str,
    rank_index: int,
    bye_counts: Mapping[str, int],
    matches_played: Mapping[str, int],
) -> tuple:
    return (
        -matches_played.get(player, 0),
        bye_counts.get(player, 0),
        -rank_index,
        collation_key(player),
    )


def select_byes(
    ranking: Sequence[str],
    count: int,
    bye_counts: Mapping[str, int],
    matches_played: Mapping[str, int],
) -> List[str]:
    """Pick the `count` players who rest this round, in selection order."""
    if count <= 0:
        return []

    ordered = sorted(
        enumerate(ranking),
        key=lambda item: bye_key(item[1], item[0], bye_counts, matches_played),
    )
    return [player for _, player in ordered[:count]]
