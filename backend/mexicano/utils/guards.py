"""
Route guards and error mapping.

Provides reusable helpers for the HTTP layer:
- Loading a tournament or raising 404
- Translating TournamentError into HTTPException
- Running an engine operation and saving the result in one step
"""
from typing import Any, Callable, Dict

from fastapi import Depends, HTTPException
from sqlmodel import Session

from mexicano.database import get_session
from mexicano.services.errors import (
    MatchValidationError,
    PersistenceFailureError,
    TournamentError,
    TournamentNotFoundError,
)
from mexicano.services.state_codec import state_to_dict
from mexicano.services.state_store import SqlTournamentStore, TournamentStateStore
from mexicano.services.tournament_state import TournamentState


def get_store(session: Session = Depends(get_session)) -> TournamentStateStore:
    return SqlTournamentStore(session)


def http_error(exc: TournamentError) -> HTTPException:
    """
    Map an engine/persistence error to an HTTPException.

    Persistence failures include the computed state so the client can retry
    the save (PUT /tournaments/{id}) without redoing the operation.
    """
    if isinstance(exc, PersistenceFailureError):
        detail: Dict[str, Any] = {"code": exc.code, "message": exc.message}
        if exc.state is not None:
            detail["state"] = state_to_dict(exc.state)
        return HTTPException(status_code=exc.status_code, detail=detail)
    if isinstance(exc, MatchValidationError):
        return HTTPException(
            status_code=exc.status_code,
            detail={"code": exc.code, "message": exc.message, "match_index": exc.match_index},
        )
    return HTTPException(status_code=exc.status_code, detail=str(exc))


def require_tournament(store: TournamentStateStore, tournament_id: str) -> TournamentState:
    """
    Load a tournament, otherwise raise 404.

    Raises:
        HTTPException 404: Tournament not found
    """
    state = store.load(tournament_id)
    if state is None:
        raise http_error(TournamentNotFoundError(f"Tournament {tournament_id} not found"))
    return state


def apply_and_save(
    store: TournamentStateStore,
    tournament_id: str,
    operation: Callable[..., TournamentState],
    *args: Any,
) -> TournamentState:
    """Load, transform, save. Validation errors leave the stored state untouched."""
    state = require_tournament(store, tournament_id)
    try:
        new_state = operation(state, *args)
        return store.save(tournament_id, new_state)
    except TournamentError as e:
        raise http_error(e)
