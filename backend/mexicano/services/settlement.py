"""
Round settlement and next-round generation.

Settlement: every player receives their own team's final score (not split),
accumulated into totals by addition. The per-player mapping is stamped on
each match for audit/display.

Generation (only once the latest round is submitted):
  1. ranking from the updated totals
  2. required byes for the roster size
  3. bye selection against that ranking
  4. seeded pairing of the remaining players
  5. ranking snapshot = the ranking from step 1
  6. bye counts +1 for each resting player
  7. append round number previous + 1, not submitted
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from mexicano.services import bye_selector, pairing, ranking
from mexicano.services.errors import (
    IncompleteRoundError,
    RoundNotSubmittedError,
    TournamentNotStartedError,
)
from mexicano.services.tournament_state import Match, Round, Scored, TournamentState

logger = logging.getLogger(__name__)


def match_points(match: Match) -> Dict[str, int]:
    """Points each of the four players earns from a fully scored match."""
    if not isinstance(match.score, Scored):
        raise IncompleteRoundError("Cannot award points for a match without both scores")
    points: Dict[str, int] = {}
    for player in match.team_a:
        points[player] = match.score.a
    for player in match.team_b:
        points[player] = match.score.b
    return points


def settle_round(
    rnd: Round,
    totals: Mapping[str, int],
    roster: Optional[Iterable[str]] = None,
) -> Tuple[Round, Dict[str, int], Dict[str, int]]:
    """
    Apply a fully scored round to the totals.

    Returns (settled round, new totals, per-player deltas). The inputs are
    left untouched. With a `roster`, only its players are credited; every
    match still records all four players' points.
    """
    incomplete = [i + 1 for i, m in enumerate(rnd.matches) if not isinstance(m.score, Scored)]
    if incomplete:
        raise IncompleteRoundError(
            f"Round {rnd.number} has matches without both scores: {incomplete}"
        )

    deltas: Dict[str, int] = {}
    settled_matches: List[Match] = []
    for match in rnd.matches:
        per_player = match_points(match)
        settled_matches.append(replace(match, per_player_points=per_player))
        for player, pts in per_player.items():
            deltas[player] = deltas.get(player, 0) + pts

    credited = None if roster is None else set(roster)
    new_totals = dict(totals)
    for player, pts in deltas.items():
        if credited is not None and player not in credited:
            continue
        new_totals[player] = new_totals.get(player, 0) + pts

    settled = replace(rnd, matches=tuple(settled_matches), submitted=True)
    return settled, new_totals, deltas


def unsettle_round(
    rnd: Round,
    totals: Mapping[str, int],
) -> Tuple[Round, Dict[str, int]]:
    """Reverse a settlement: subtract the recorded per-player points and reopen the round."""
    if not rnd.submitted:
        raise RoundNotSubmittedError(f"Round {rnd.number} is not submitted")

    new_totals = dict(totals)
    reopened: List[Match] = []
    for match in rnd.matches:
        for player, pts in (match.per_player_points or {}).items():
            if player in new_totals:
                new_totals[player] = new_totals[player] - pts
        reopened.append(replace(match, per_player_points=None))

    return replace(rnd, matches=tuple(reopened), submitted=False), new_totals


def generate_next_round(state: TournamentState) -> TournamentState:
    """Append the next seeded round. The latest round must be submitted."""
    last = state.last_round
    if last is None:
        raise TournamentNotStartedError("Start the tournament before generating rounds")
    if not last.submitted:
        raise IncompleteRoundError(
            f"Round {last.number} must be submitted before generating the next round"
        )

    bye_selector.ensure_playable_roster(len(state.players))
    current = ranking.compute_ranking(state.players, state.totals, state.rounds)

    bye_count = bye_selector.required_byes(len(current))
    byes = bye_selector.select_byes(
        current,
        bye_count,
        state.bye_counts,
        ranking.matches_played(state.players, state.rounds),
    )

    resting = set(byes)
    available = [p for p in current if p not in resting]
    result = pairing.seeded_pairing(available, history=state.rounds)
    for repeat in result.repeats:
        logger.info("Round %d: %s", last.number + 1, repeat.reason)

    new_round = Round(
        number=last.number + 1,
        matches=tuple(result.matches),
        ranking_snapshot=tuple(current),
        byes=tuple(byes),
        submitted=False,
    )

    bye_counts = dict(state.bye_counts)
    for player in byes:
        bye_counts[player] = bye_counts.get(player, 0) + 1

    logger.info(
        "Generated round %d: %d matches, byes=%s",
        new_round.number,
        len(new_round.matches),
        list(byes),
    )
    return replace(state, rounds=state.rounds + (new_round,), bye_counts=bye_counts)
