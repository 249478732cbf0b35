"""
Round pairings: random for round 1, rank-seeded afterwards.

Round 1: uniform shuffle of the active players, consecutive pairs form
teams, consecutive teams form matches.

Round >= 2: `available` is the ranking with byes removed (best first).
Match i pairs
    (available[2i], available[n-1-2i])  vs  (available[2i+1], available[n-2-2i])
so rank 1 & rank n play rank 2 & rank n-1, rank 3 & rank n-2 play
rank 4 & rank n-3, and so on.

Repeated groupings (the same two teams meeting again) are reported,
not avoided: the seeding rule is never altered to dodge them.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from mexicano.services.tournament_state import Match, Round

Team = Tuple[str, str]


@dataclass
class PairingRepeat:
    match_index: int
    previous_round: int
    reason: str


@dataclass
class PairingResult:
    matches: List[Match]
    repeats: List[PairingRepeat] = field(default_factory=list)

    @property
    def teams(self) -> List[Tuple[Team, Team]]:
        return [(m.team_a, m.team_b) for m in self.matches]


def _grouping_signature(team_a: Sequence[str], team_b: Sequence[str]) -> FrozenSet[FrozenSet[str]]:
    """Identity of a match regardless of side and order within a team."""
    return frozenset((frozenset(team_a), frozenset(team_b)))


def find_repeats(matches: Sequence[Match], history: Iterable[Round]) -> List[PairingRepeat]:
    """Report matches whose exact team split already occurred in an earlier round."""
    seen = {}
    for rnd in history:
        for m in rnd.matches:
            seen.setdefault(_grouping_signature(m.team_a, m.team_b), rnd.number)

    repeats: List[PairingRepeat] = []
    for i, m in enumerate(matches):
        previous = seen.get(_grouping_signature(m.team_a, m.team_b))
        if previous is not None:
            repeats.append(PairingRepeat(
                match_index=i,
                previous_round=previous,
                reason=(
                    f"Repeat grouping: {m.team_a[0]} & {m.team_a[1]} vs "
                    f"{m.team_b[0]} & {m.team_b[1]} already played in round {previous}"
                ),
            ))
    return repeats


def _matches_from_order(order: Sequence[str]) -> List[Match]:
    teams: List[Team] = [(order[i], order[i + 1]) for i in range(0, len(order) - 1, 2)]
    return [Match(team_a=teams[i], team_b=teams[i + 1]) for i in range(0, len(teams) - 1, 2)]


def first_round_pairing(
    active: Sequence[str],
    rng: Optional[random.Random] = None,
) -> PairingResult:
    """Random round-1 pairing. `rng` is injectable for deterministic tests."""
    assert len(active) % 4 == 0, f"Active player count must be a multiple of 4, got {len(active)}"

    rng = rng or random.Random()
    order = list(active)
    # random.shuffle is an in-place Fisher-Yates shuffle
    rng.shuffle(order)
    return PairingResult(matches=_matches_from_order(order))


def seeded_pairing(
    available: Sequence[str],
    history: Iterable[Round] = (),
) -> PairingResult:
    """Rank-seeded pairing for round >= 2. `available` is best to worst."""
    n = len(available)
    assert n % 4 == 0, f"Available player count must be a multiple of 4, got {n}"

    matches: List[Match] = []
    for i in range(n // 4):
        hi_x = available[2 * i]
        lo_x = available[n - 1 - 2 * i]
        hi_y = available[2 * i + 1]
        lo_y = available[n - 1 - (2 * i + 1)]
        matches.append(Match(team_a=(hi_x, lo_x), team_b=(hi_y, lo_y)))

    return PairingResult(matches=matches, repeats=find_repeats(matches, history))
