from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mexicano.services import ranking, tournament_engine
from mexicano.services.state_store import TournamentStateStore
from mexicano.utils.guards import get_store, require_tournament

router = APIRouter()


class StandingResponse(BaseModel):
    position: int
    name: str
    total: int
    average: int
    matches_played: int
    byes: int


class RankingResponse(BaseModel):
    ranking: List[str]


@router.get("/tournaments/{tournament_id}/ranking", response_model=RankingResponse)
def get_ranking(tournament_id: str, store: TournamentStateStore = Depends(get_store)):
    """Players best to worst: total, then average, then name"""
    state = require_tournament(store, tournament_id)
    return RankingResponse(ranking=tournament_engine.compute_ranking(state))


@router.get("/tournaments/{tournament_id}/standings", response_model=List[StandingResponse])
def get_standings(tournament_id: str, store: TournamentStateStore = Depends(get_store)):
    """Standings table with totals, averages, matches played and byes"""
    state = require_tournament(store, tournament_id)
    return [StandingResponse(**vars(row)) for row in ranking.standings(state)]
