"""
Round runtime: live score entry, submission and round generation.

Scores are edited only on the pending round. Submission is all-or-nothing:
if any match breaks the race-to-32 rule, nothing is saved and every
offending match is reported.
"""
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator

from mexicano.services import tournament_engine
from mexicano.services.errors import MatchValidationError, TournamentError
from mexicano.services.state_codec import match_to_dict, state_to_dict
from mexicano.services.state_store import TournamentStateStore
from mexicano.services.tournament_state import SIDES
from mexicano.utils.guards import apply_and_save, get_store, http_error, require_tournament

router = APIRouter()


class MatchScoreUpdate(BaseModel):
    side: str
    value: Optional[Union[int, str]] = None  # None or "" clears the side

    @field_validator("side")
    @classmethod
    def validate_side(cls, v):
        side = (v or "").strip().upper()
        if side not in SIDES:
            raise ValueError("side must be 'A' or 'B'")
        return side


class MatchScoreResponse(BaseModel):
    round_index: int
    match_index: int
    match: Dict[str, Any]
    revision: int


class MatchErrorDetail(BaseModel):
    match_index: Optional[int]
    code: str
    message: str


def _error_details(errors: List[MatchValidationError]) -> List[Dict[str, Any]]:
    return [
        MatchErrorDetail(match_index=e.match_index, code=e.code, message=e.message).model_dump()
        for e in errors
    ]


@router.patch(
    "/tournaments/{tournament_id}/rounds/{round_index}/matches/{match_index}",
    response_model=MatchScoreResponse,
)
def update_match_score(
    tournament_id: str,
    round_index: int,
    match_index: int,
    payload: MatchScoreUpdate,
    store: TournamentStateStore = Depends(get_store),
) -> MatchScoreResponse:
    """Set one side's score. The value is clamped to [0, 32] and the winner re-derived."""
    saved = apply_and_save(
        store,
        tournament_id,
        tournament_engine.update_match_score,
        round_index,
        match_index,
        payload.side,
        payload.value,
    )
    return MatchScoreResponse(
        round_index=round_index,
        match_index=match_index,
        match=match_to_dict(saved.rounds[round_index].matches[match_index]),
        revision=saved.revision,
    )


@router.post("/tournaments/{tournament_id}/rounds/{round_index}/submit", response_model=Dict[str, Any])
def submit_round(
    tournament_id: str,
    round_index: int,
    store: TournamentStateStore = Depends(get_store),
):
    """Validate every match and settle the round into the totals."""
    state = require_tournament(store, tournament_id)
    try:
        errors = tournament_engine.round_errors(state, round_index)
        if errors:
            first = errors[0]
            raise HTTPException(
                status_code=first.status_code,
                detail={"code": first.code, "message": first.message, "errors": _error_details(errors)},
            )
        saved = store.save(tournament_id, tournament_engine.submit_round(state, round_index))
    except MatchValidationError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"code": e.code, "message": e.message, "errors": _error_details([e])},
        )
    except TournamentError as e:
        raise http_error(e)
    return state_to_dict(saved)


@router.post("/tournaments/{tournament_id}/rounds/{round_index}/unsubmit", response_model=Dict[str, Any])
def unsubmit_round(
    tournament_id: str,
    round_index: int,
    store: TournamentStateStore = Depends(get_store),
):
    """Reopen the latest round for correction; its points are subtracted from the totals."""
    saved = apply_and_save(store, tournament_id, tournament_engine.unsubmit_round, round_index)
    return state_to_dict(saved)


@router.post("/tournaments/{tournament_id}/rounds/next", response_model=Dict[str, Any])
def generate_next_round(
    tournament_id: str,
    store: TournamentStateStore = Depends(get_store),
):
    """Generate the next seeded round. The latest round must be submitted."""
    saved = apply_and_save(store, tournament_id, tournament_engine.generate_next_round)
    return state_to_dict(saved)
