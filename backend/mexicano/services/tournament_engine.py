"""
Tournament operations, the surface callers use.

Each operation is a transform TournamentState -> TournamentState:
validate first, then build the new state. A failed operation raises a
TournamentError and leaves the caller's state exactly as it was.

Submitted rounds are locked. The only way back is unsubmit_round on the
latest round, which subtracts that round's points before reopening it.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence

from mexicano import config
from mexicano.services import bye_selector, match_validator, pairing, ranking, settlement
from mexicano.services.errors import (
    DuplicatePlayerError,
    InvalidPlayerNameError,
    MatchNotFoundError,
    RoundLockedError,
    RoundNotFoundError,
    TournamentAlreadyStartedError,
    UnknownPlayerError,
)
from mexicano.services.tournament_state import (
    DEFAULT_COURT_COUNT,
    Match,
    Round,
    TournamentState,
)
from mexicano.utils.collation import normalize_name

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Construction / ranking
# -----------------------------------------------------------------------------


def new_tournament(
    players: Optional[Iterable[str]] = None,
    pool: Optional[Iterable[str]] = None,
    name: Optional[str] = None,
    court_count: int = DEFAULT_COURT_COUNT,
    settings: Optional[Dict[str, Any]] = None,
) -> TournamentState:
    """
    Empty tournament. `pool` defaults to the configured player pool;
    `players` is the initial roster (validated like add_player).
    """
    state = TournamentState(
        name=name,
        court_count=court_count,
        settings=dict(settings or {}),
        player_pool=tuple(config.default_player_pool() if pool is None else pool),
    )
    for player in players or ():
        state = add_player(state, player)
    return state


def compute_ranking(state: TournamentState) -> List[str]:
    return ranking.compute_ranking(state.players, state.totals, state.rounds)


# -----------------------------------------------------------------------------
# Roster
# -----------------------------------------------------------------------------


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidPlayerNameError("Player name must not be empty")
    return cleaned


def find_player(state: TournamentState, name: str) -> Optional[str]:
    """Roster entry matching `name` under Turkish case-insensitive comparison."""
    if name in state.players:
        return name
    key = normalize_name(name)
    for player in state.players:
        if normalize_name(player) == key:
            return player
    return None


def add_player(state: TournamentState, name: str) -> TournamentState:
    cleaned = _clean_name(name)
    existing = find_player(state, cleaned)
    if existing is not None:
        raise DuplicatePlayerError(f"Player '{cleaned}' already exists as '{existing}'")

    totals = dict(state.totals)
    bye_counts = dict(state.bye_counts)
    totals[cleaned] = 0
    bye_counts[cleaned] = 0
    return replace(state, players=state.players + (cleaned,), totals=totals, bye_counts=bye_counts)


def remove_player(state: TournamentState, name: str) -> TournamentState:
    player = find_player(state, name)
    if player is None:
        raise UnknownPlayerError(f"Player '{name}' not found")

    totals = {p: v for p, v in state.totals.items() if p != player}
    bye_counts = {p: v for p, v in state.bye_counts.items() if p != player}
    players = tuple(p for p in state.players if p != player)
    return replace(state, players=players, totals=totals, bye_counts=bye_counts)


def _rename_in_match(match: Match, old: str, new: str) -> Match:
    def swap(p: str) -> str:
        return new if p == old else p

    per_player = None
    if match.per_player_points is not None:
        per_player = {swap(p): v for p, v in match.per_player_points.items()}
    return replace(
        match,
        team_a=(swap(match.team_a[0]), swap(match.team_a[1])),
        team_b=(swap(match.team_b[0]), swap(match.team_b[1])),
        per_player_points=per_player,
    )


def rename_player(state: TournamentState, old_name: str, new_name: str) -> TournamentState:
    """Rename a player, carrying their total, bye count and match history."""
    old = find_player(state, old_name)
    if old is None:
        raise UnknownPlayerError(f"Player '{old_name}' not found")
    new = _clean_name(new_name)
    if new == old:
        return state

    clash = find_player(state, new)
    if clash is not None and clash != old:
        raise DuplicatePlayerError(f"Player '{new}' already exists as '{clash}'")

    def swap(p: str) -> str:
        return new if p == old else p

    totals = {swap(p): v for p, v in state.totals.items()}
    bye_counts = {swap(p): v for p, v in state.bye_counts.items()}
    rounds = tuple(
        replace(
            rnd,
            matches=tuple(_rename_in_match(m, old, new) for m in rnd.matches),
            ranking_snapshot=tuple(swap(p) for p in rnd.ranking_snapshot),
            byes=tuple(swap(p) for p in rnd.byes),
        )
        for rnd in state.rounds
    )
    return replace(
        state,
        players=tuple(swap(p) for p in state.players),
        totals=totals,
        bye_counts=bye_counts,
        rounds=rounds,
    )


# -----------------------------------------------------------------------------
# Lifecycle
# -----------------------------------------------------------------------------


def start_tournament(state: TournamentState, rng: Optional[random.Random] = None) -> TournamentState:
    """Zero the standings and create round 1 with a random pairing."""
    if state.started:
        raise TournamentAlreadyStartedError("Tournament already has rounds; reset it first")
    bye_selector.ensure_playable_roster(len(state.players))

    totals = {p: 0 for p in state.players}
    bye_counts = {p: 0 for p in state.players}
    initial = ranking.compute_ranking(state.players, totals, ())

    byes = bye_selector.select_byes(
        initial,
        bye_selector.required_byes(len(initial)),
        bye_counts,
        {},
    )
    resting = set(byes)
    active = [p for p in state.players if p not in resting]
    result = pairing.first_round_pairing(active, rng)

    for player in byes:
        bye_counts[player] += 1

    first = Round(
        number=1,
        matches=tuple(result.matches),
        ranking_snapshot=tuple(initial),
        byes=tuple(byes),
        submitted=False,
    )
    logger.info(
        "Tournament started: %d players, %d matches, byes=%s",
        len(state.players),
        len(first.matches),
        byes,
    )
    return replace(state, rounds=(first,), totals=totals, bye_counts=bye_counts)


def generate_next_round(state: TournamentState) -> TournamentState:
    return settlement.generate_next_round(state)


def reset_tournament(state: TournamentState) -> TournamentState:
    """Clear all rounds and zero totals and bye counts; the roster is kept."""
    logger.info("Tournament reset after %d rounds", len(state.rounds))
    return replace(
        state,
        rounds=(),
        totals={p: 0 for p in state.players},
        bye_counts={p: 0 for p in state.players},
    )


# -----------------------------------------------------------------------------
# Scores
# -----------------------------------------------------------------------------


def _get_round(state: TournamentState, round_index: int) -> Round:
    if not 0 <= round_index < len(state.rounds):
        raise RoundNotFoundError(f"Round index {round_index} out of range")
    return state.rounds[round_index]


def update_match_score(
    state: TournamentState,
    round_index: int,
    match_index: int,
    side: str,
    raw_value: Any,
) -> TournamentState:
    """Live score entry on a pending round (clamped, winner re-derived)."""
    rnd = _get_round(state, round_index)
    if rnd.submitted:
        raise RoundLockedError(f"Round {rnd.number} is submitted; unsubmit it to edit scores")
    if not 0 <= match_index < len(rnd.matches):
        raise MatchNotFoundError(f"Match index {match_index} out of range for round {rnd.number}")

    match = match_validator.apply_score(rnd.matches[match_index], side, raw_value)
    return state.replace_round(round_index, rnd.replace_match(match_index, match))


def submit_round(state: TournamentState, round_index: int) -> TournamentState:
    """
    Validate every match, then settle the round into the totals.

    All-or-nothing: the first invalid match is raised and no totals,
    winners or flags change.
    """
    rnd = _get_round(state, round_index)
    if rnd.submitted:
        raise RoundLockedError(f"Round {rnd.number} is already submitted")

    errors = match_validator.round_validation_errors(rnd)
    if errors:
        logger.warning(
            "Round %d submission rejected: %s",
            rnd.number,
            "; ".join(str(e) for e in errors),
        )
        raise errors[0]

    settled, totals, deltas = settlement.settle_round(rnd, state.totals, state.players)
    logger.info("Round %d submitted: %d players scored", rnd.number, len(deltas))
    return replace(state.replace_round(round_index, settled), totals=totals)


def unsubmit_round(state: TournamentState, round_index: int) -> TournamentState:
    """Reopen the latest submitted round, reversing its points."""
    rnd = _get_round(state, round_index)
    if round_index != len(state.rounds) - 1:
        raise RoundLockedError(
            f"Round {rnd.number} cannot be reopened once round {state.rounds[-1].number} exists"
        )

    reopened, totals = settlement.unsettle_round(rnd, state.totals)
    logger.info("Round %d reopened for correction", rnd.number)
    return replace(state.replace_round(round_index, reopened), totals=totals)


def round_errors(state: TournamentState, round_index: int) -> Sequence[Exception]:
    """Per-match validation problems for a pending round (for display)."""
    return match_validator.round_validation_errors(_get_round(state, round_index))
