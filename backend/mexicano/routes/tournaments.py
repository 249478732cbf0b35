import random
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mexicano.services import tournament_engine
from mexicano.services.errors import TournamentError
from mexicano.services.state_codec import state_from_dict, state_to_dict
from mexicano.services.state_store import TournamentStateStore
from mexicano.services.tournament_state import TARGET
from mexicano.utils.collation import normalize_name
from mexicano.utils.guards import apply_and_save, get_store, http_error, require_tournament

router = APIRouter()


def _unique_names(names: List[str]) -> List[str]:
    seen = set()
    for name in names:
        key = normalize_name(name)
        if key in seen:
            raise ValueError(f"duplicate player name: {name}")
        seen.add(key)
    return names


class TournamentCreate(BaseModel):
    id: str
    name: Optional[str] = None
    players: List[str] = Field(default_factory=list)
    player_pool: Optional[List[str]] = None
    court_count: int = Field(default=2, ge=1)
    settings: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v):
        if not v or not v.strip():
            raise ValueError("id is required")
        return v.strip()

    @field_validator("players")
    @classmethod
    def validate_players(cls, v):
        return _unique_names(v)


class MatchPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_a: List[str] = Field(alias="teamA", min_length=2, max_length=2)
    team_b: List[str] = Field(alias="teamB", min_length=2, max_length=2)
    score_a: Optional[int] = Field(default=None, alias="scoreA", ge=0, le=TARGET)
    score_b: Optional[int] = Field(default=None, alias="scoreB", ge=0, le=TARGET)
    per_player_points: Optional[Dict[str, int]] = Field(default=None, alias="perPlayerPoints")

    @model_validator(mode="after")
    def validate_distinct_players(self):
        if len(set(self.team_a + self.team_b)) != 4:
            raise ValueError("a match needs four distinct players")
        return self


class RoundPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    number: int = Field(ge=1)
    matches: List[MatchPayload] = Field(default_factory=list)
    ranking_snapshot: List[str] = Field(default_factory=list, alias="rankingSnapshot")
    byes: List[str] = Field(default_factory=list)
    submitted: bool = False


class TournamentPayload(BaseModel):
    """Full tournament state, as returned by GET /tournaments/{id}."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    players: List[str] = Field(default_factory=list)
    rounds: List[RoundPayload] = Field(default_factory=list)
    totals: Dict[str, int] = Field(default_factory=dict)
    bye_counts: Dict[str, int] = Field(default_factory=dict, alias="byeCounts")
    court_count: int = Field(default=2, ge=1, alias="courtCount")
    settings: Dict[str, Any] = Field(default_factory=dict)
    player_pool: List[str] = Field(default_factory=list, alias="playerPool")
    revision: int = Field(default=0, ge=0)

    @field_validator("players")
    @classmethod
    def validate_players(cls, v):
        return _unique_names(v)

    @model_validator(mode="after")
    def validate_rounds(self):
        roster = set(self.players)
        for i, rnd in enumerate(self.rounds):
            if rnd.number != i + 1:
                raise ValueError(f"round numbers must be consecutive from 1, got {rnd.number} at position {i + 1}")
            in_matches = [p for m in rnd.matches for p in m.team_a + m.team_b]
            if len(in_matches) != len(set(in_matches)):
                raise ValueError(f"round {rnd.number}: a player appears in more than one match")
            if set(in_matches) & set(rnd.byes):
                raise ValueError(f"round {rnd.number}: a player cannot both play and sit out")
            unknown = (set(in_matches) | set(rnd.byes)) - roster
            # Players may have been removed since; only the latest round must match the roster
            if unknown and i == len(self.rounds) - 1 and not rnd.submitted:
                raise ValueError(f"round {rnd.number}: unknown players {sorted(unknown)}")
        return self


class TournamentSummary(BaseModel):
    id: str
    name: Optional[str] = None
    player_count: int
    tournament_started: bool
    current_round: int
    court_count: int
    revision: int


class PlayerCreate(BaseModel):
    name: str


class PlayerRename(BaseModel):
    name: str


@router.get("/tournaments", response_model=List[TournamentSummary])
def list_tournaments(store: TournamentStateStore = Depends(get_store)):
    """List all tournaments (newest first)"""
    summaries = []
    for tournament_id in store.list_ids():
        state = store.load(tournament_id)
        if state is None:
            continue
        summaries.append(
            TournamentSummary(
                id=tournament_id,
                name=state.name,
                player_count=len(state.players),
                tournament_started=state.started,
                current_round=state.current_round,
                court_count=state.court_count,
                revision=state.revision,
            )
        )
    return summaries


@router.post("/tournaments", response_model=Dict[str, Any], status_code=201)
def create_tournament(payload: TournamentCreate, store: TournamentStateStore = Depends(get_store)):
    """Create an empty tournament with an optional initial roster"""
    if store.load(payload.id) is not None:
        raise HTTPException(status_code=409, detail=f"Tournament {payload.id} already exists")
    try:
        state = tournament_engine.new_tournament(
            players=payload.players,
            pool=payload.player_pool,
            name=payload.name,
            court_count=payload.court_count,
            settings=payload.settings,
        )
        saved = store.save(payload.id, state)
    except TournamentError as e:
        raise http_error(e)
    return state_to_dict(saved)


@router.get("/tournaments/{tournament_id}", response_model=Dict[str, Any])
def get_tournament(tournament_id: str, store: TournamentStateStore = Depends(get_store)):
    """Get the full tournament state"""
    return state_to_dict(require_tournament(store, tournament_id))


@router.put("/tournaments/{tournament_id}", response_model=Dict[str, Any])
def save_tournament(
    tournament_id: str,
    payload: TournamentPayload,
    store: TournamentStateStore = Depends(get_store),
):
    """Create or replace the whole tournament state (409 if `revision` is stale)"""
    state = state_from_dict(payload.model_dump(by_alias=True))
    try:
        saved = store.save(tournament_id, state)
    except TournamentError as e:
        raise http_error(e)
    return state_to_dict(saved)


@router.delete("/tournaments/{tournament_id}", status_code=204)
def delete_tournament(tournament_id: str, store: TournamentStateStore = Depends(get_store)):
    """Delete a tournament with its players, rounds and matches"""
    try:
        store.delete(tournament_id)
    except TournamentError as e:
        raise http_error(e)
    return Response(status_code=204)


# ============================================================================
# Roster
# ============================================================================


@router.post("/tournaments/{tournament_id}/players", response_model=Dict[str, Any], status_code=201)
def add_player(tournament_id: str, payload: PlayerCreate, store: TournamentStateStore = Depends(get_store)):
    saved = apply_and_save(store, tournament_id, tournament_engine.add_player, payload.name)
    return state_to_dict(saved)


@router.delete("/tournaments/{tournament_id}/players/{player_name}", response_model=Dict[str, Any])
def remove_player(tournament_id: str, player_name: str, store: TournamentStateStore = Depends(get_store)):
    """Remove a player together with their total and bye count"""
    saved = apply_and_save(store, tournament_id, tournament_engine.remove_player, player_name)
    return state_to_dict(saved)


@router.patch("/tournaments/{tournament_id}/players/{player_name}", response_model=Dict[str, Any])
def rename_player(
    tournament_id: str,
    player_name: str,
    payload: PlayerRename,
    store: TournamentStateStore = Depends(get_store),
):
    """Rename a player; total, bye count and match history follow the new name"""
    saved = apply_and_save(store, tournament_id, tournament_engine.rename_player, player_name, payload.name)
    return state_to_dict(saved)


# ============================================================================
# Lifecycle
# ============================================================================


@router.post("/tournaments/{tournament_id}/start", response_model=Dict[str, Any])
def start_tournament(tournament_id: str, store: TournamentStateStore = Depends(get_store)):
    """Zero the standings and create round 1 (random pairing)"""
    saved = apply_and_save(store, tournament_id, tournament_engine.start_tournament, random.Random())
    return state_to_dict(saved)


@router.post("/tournaments/{tournament_id}/reset", response_model=Dict[str, Any])
def reset_tournament(tournament_id: str, store: TournamentStateStore = Depends(get_store)):
    """Clear all rounds and zero totals and bye counts"""
    saved = apply_and_save(store, tournament_id, tournament_engine.reset_tournament)
    return state_to_dict(saved)
