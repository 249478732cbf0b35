"""
Tournament aggregate as immutable values.

TournamentState is the aggregate root ({players, rounds, totals, bye_counts}
plus opaque metadata). Every engine operation takes a state and returns a new
one; nothing here is mutated in place. Persistence happens only at the edges
(see state_store.py).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple, Union

# Race-to-target: the winning team's score must be exactly TARGET
TARGET = 32

SIDE_A = "A"
SIDE_B = "B"
SIDES = (SIDE_A, SIDE_B)

DEFAULT_COURT_COUNT = 2


# -----------------------------------------------------------------------------
# Match score variant
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Unscored:
    """Neither side has a score yet."""


@dataclass(frozen=True)
class PartialScore:
    """Exactly one side has been entered."""

    side: str
    value: int


@dataclass(frozen=True)
class Scored:
    a: int
    b: int


MatchScore = Union[Unscored, PartialScore, Scored]

UNSCORED = Unscored()


def make_score(a: Optional[int], b: Optional[int]) -> MatchScore:
    """Build the score variant from two optional side values."""
    if a is None and b is None:
        return UNSCORED
    if a is None:
        return PartialScore(side=SIDE_B, value=b)
    if b is None:
        return PartialScore(side=SIDE_A, value=a)
    return Scored(a=a, b=b)


def score_sides(score: MatchScore) -> Tuple[Optional[int], Optional[int]]:
    """Inverse of make_score: (score_a, score_b), None where absent."""
    if isinstance(score, Scored):
        return score.a, score.b
    if isinstance(score, PartialScore):
        if score.side == SIDE_A:
            return score.value, None
        return None, score.value
    return None, None


def derive_winner(score: MatchScore) -> Optional[str]:
    """A iff a == TARGET and b < TARGET, B for the mirror, otherwise None."""
    if not isinstance(score, Scored):
        return None
    if score.a == TARGET and score.b < TARGET:
        return SIDE_A
    if score.b == TARGET and score.a < TARGET:
        return SIDE_B
    return None


# -----------------------------------------------------------------------------
# Match / Round
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Match:
    team_a: Tuple[str, str]
    team_b: Tuple[str, str]
    score: MatchScore = UNSCORED
    per_player_points: Optional[Dict[str, int]] = None  # set by settlement only

    @property
    def score_a(self) -> Optional[int]:
        return score_sides(self.score)[0]

    @property
    def score_b(self) -> Optional[int]:
        return score_sides(self.score)[1]

    @property
    def winner(self) -> Optional[str]:
        return derive_winner(self.score)

    @property
    def players(self) -> Tuple[str, str, str, str]:
        return (*self.team_a, *self.team_b)

    def side_of(self, player: str) -> Optional[str]:
        if player in self.team_a:
            return SIDE_A
        if player in self.team_b:
            return SIDE_B
        return None


@dataclass(frozen=True)
class Round:
    number: int
    matches: Tuple[Match, ...]
    ranking_snapshot: Tuple[str, ...]
    byes: Tuple[str, ...] = ()
    submitted: bool = False

    @property
    def players(self) -> Tuple[str, ...]:
        """Players assigned to a match this round, in match order."""
        return tuple(p for m in self.matches for p in m.players)

    def replace_match(self, match_index: int, match: Match) -> "Round":
        matches = list(self.matches)
        matches[match_index] = match
        return replace(self, matches=tuple(matches))


# -----------------------------------------------------------------------------
# Aggregate root
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class TournamentState:
    players: Tuple[str, ...] = ()
    rounds: Tuple[Round, ...] = ()
    totals: Dict[str, int] = field(default_factory=dict)
    bye_counts: Dict[str, int] = field(default_factory=dict)

    # Outer metadata, carried but not interpreted by the engine
    name: Optional[str] = None
    court_count: int = DEFAULT_COURT_COUNT
    settings: Dict[str, Any] = field(default_factory=dict)
    player_pool: Tuple[str, ...] = ()

    # Optimistic concurrency counter, owned by the store
    revision: int = 0

    @property
    def started(self) -> bool:
        return len(self.rounds) > 0

    @property
    def current_round(self) -> int:
        return len(self.rounds)

    @property
    def last_round(self) -> Optional[Round]:
        return self.rounds[-1] if self.rounds else None

    def total_for(self, player: str) -> int:
        return self.totals.get(player, 0)

    def byes_for(self, player: str) -> int:
        return self.bye_counts.get(player, 0)

    def replace_round(self, round_index: int, rnd: Round) -> "TournamentState":
        rounds = list(self.rounds)
        rounds[round_index] = rnd
        return replace(self, rounds=tuple(rounds))
