"""
JSON layout of a tournament.

{
  "players": [...], "rounds": [...], "totals": {...}, "byeCounts": {...},
  "courtCount": 2, "settings": {...}, "name": ..., "playerPool": [...],
  "revision": 0, "tournamentStarted": bool, "currentRound": int
}

Rounds: {"number", "matches", "rankingSnapshot", "byes", "submitted"}.
Matches: {"teamA", "teamB", "scoreA", "scoreB", "winner", "perPlayerPoints"};
absent scores/winner serialize as null.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from mexicano.services.tournament_state import (
    DEFAULT_COURT_COUNT,
    Match,
    Round,
    TournamentState,
    make_score,
)


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def match_to_dict(match: Match) -> Dict[str, Any]:
    return {
        "teamA": list(match.team_a),
        "teamB": list(match.team_b),
        "scoreA": match.score_a,
        "scoreB": match.score_b,
        "winner": match.winner,
        "perPlayerPoints": dict(match.per_player_points) if match.per_player_points is not None else None,
    }


def match_from_dict(data: Dict[str, Any]) -> Match:
    # winner is derived from the scores, never trusted from input
    team_a = data["teamA"]
    team_b = data["teamB"]
    per_player = data.get("perPlayerPoints")
    return Match(
        team_a=(team_a[0], team_a[1]),
        team_b=(team_b[0], team_b[1]),
        score=make_score(_opt_int(data.get("scoreA")), _opt_int(data.get("scoreB"))),
        per_player_points={k: int(v) for k, v in per_player.items()} if per_player else None,
    )


def round_to_dict(rnd: Round) -> Dict[str, Any]:
    return {
        "number": rnd.number,
        "matches": [match_to_dict(m) for m in rnd.matches],
        "rankingSnapshot": list(rnd.ranking_snapshot),
        "byes": list(rnd.byes),
        "submitted": rnd.submitted,
    }


def round_from_dict(data: Dict[str, Any]) -> Round:
    return Round(
        number=int(data["number"]),
        matches=tuple(match_from_dict(m) for m in data.get("matches") or []),
        ranking_snapshot=tuple(data.get("rankingSnapshot") or []),
        byes=tuple(data.get("byes") or []),
        submitted=bool(data.get("submitted", False)),
    )


def state_to_dict(state: TournamentState) -> Dict[str, Any]:
    return {
        "name": state.name,
        "players": list(state.players),
        "rounds": [round_to_dict(r) for r in state.rounds],
        "totals": {p: state.total_for(p) for p in state.players},
        "byeCounts": {p: state.byes_for(p) for p in state.players},
        "courtCount": state.court_count,
        "settings": dict(state.settings),
        "playerPool": list(state.player_pool),
        "revision": state.revision,
        "tournamentStarted": state.started,
        "currentRound": state.current_round,
    }


def state_from_dict(data: Dict[str, Any]) -> TournamentState:
    """Inverse of state_to_dict. Derived fields (tournamentStarted, currentRound) are ignored."""
    players = tuple(data.get("players") or [])
    totals = data.get("totals") or {}
    bye_counts = data.get("byeCounts") or {}
    return TournamentState(
        players=players,
        rounds=tuple(round_from_dict(r) for r in data.get("rounds") or []),
        totals={p: int(totals.get(p, 0)) for p in players},
        bye_counts={p: int(bye_counts.get(p, 0)) for p in players},
        name=data.get("name"),
        court_count=int(data.get("courtCount") or DEFAULT_COURT_COUNT),
        settings=dict(data.get("settings") or {}),
        player_pool=tuple(data.get("playerPool") or []),
        revision=int(data.get("revision") or 0),
    )
