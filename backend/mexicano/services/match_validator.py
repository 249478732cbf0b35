"""
Race-to-target score entry and validation.

A match ends when one team reaches TARGET (32); the other team must stay
below it. Live edits are clamped into [0, TARGET]; submission checks the
pair strictly.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, List, Optional

from mexicano.services.errors import (
    DoubleWinnerError,
    MatchValidationError,
    MissingScoreError,
    NoWinnerError,
    ScoreOutOfRangeError,
)
from mexicano.services.tournament_state import (
    SIDE_A,
    SIDE_B,
    SIDES,
    TARGET,
    Match,
    Round,
    Scored,
    make_score,
    score_sides,
)


def clamp_score(raw_value: Any) -> Optional[int]:
    """Coerce a raw entry into [0, TARGET]. None/empty clears the side."""
    if raw_value is None or (isinstance(raw_value, str) and not raw_value.strip()):
        return None
    if isinstance(raw_value, bool):
        raise ScoreOutOfRangeError(f"Score must be a number, got {raw_value!r}")
    try:
        value = int(raw_value)
    except (TypeError, ValueError):
        raise ScoreOutOfRangeError(f"Score must be a number, got {raw_value!r}")
    return max(0, min(TARGET, value))


def apply_score(match: Match, side: str, raw_value: Any) -> Match:
    """
    Set one side's score on a copy of `match`.

    If the edited side lands on TARGET while the other side already sits at
    TARGET or above, the other side is pulled down to TARGET - 1 so a live
    edit can never produce a double-target pair.
    """
    if side not in SIDES:
        raise ValueError(f"side must be 'A' or 'B', got {side!r}")

    value = clamp_score(raw_value)
    score_a, score_b = score_sides(match.score)

    if side == SIDE_A:
        score_a = value
        if score_a == TARGET and score_b is not None and score_b >= TARGET:
            score_b = TARGET - 1
    else:
        score_b = value
        if score_b == TARGET and score_a is not None and score_a >= TARGET:
            score_a = TARGET - 1

    return replace(match, score=make_score(score_a, score_b))


def validate_for_submission(match: Match, match_index: Optional[int] = None) -> str:
    """Check the race-to-target rule. Returns the winning side on success."""
    where = f"Match {match_index + 1}" if match_index is not None else "Match"

    if not isinstance(match.score, Scored):
        raise MissingScoreError(f"{where}: both scores are required", match_index)

    a, b = match.score.a, match.score.b
    if not (0 <= a <= TARGET) or not (0 <= b <= TARGET):
        raise ScoreOutOfRangeError(
            f"{where}: scores must be between 0 and {TARGET}, got {a}-{b}", match_index
        )
    if a != TARGET and b != TARGET:
        raise NoWinnerError(f"{where}: one team must reach {TARGET}, got {a}-{b}", match_index)
    if a == TARGET and b == TARGET:
        raise DoubleWinnerError(f"{where}: only the winner may reach {TARGET}", match_index)

    return SIDE_A if a == TARGET else SIDE_B


def round_validation_errors(rnd: Round) -> List[MatchValidationError]:
    """Every match's validation failure, in match order."""
    errors: List[MatchValidationError] = []
    for i, match in enumerate(rnd.matches):
        try:
            validate_for_submission(match, i)
        except MatchValidationError as e:
            errors.append(e)
    return errors
