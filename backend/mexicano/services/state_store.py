"""
Persistence collaborator for TournamentState.

The engine never talks to storage; callers load a state, run an operation,
and save the result. Stores implement load/save/delete plus list_ids.

Concurrency: compare-and-swap on `revision`. A save succeeds only when the
state's revision equals the stored one; the store then bumps it and returns
the stamped state. A mismatch raises ConcurrentModificationError. Any other
storage failure raises PersistenceFailureError carrying the computed state so
the caller can retry the write.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Protocol

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from mexicano.models.round_match import RoundMatch
from mexicano.models.tournament import Tournament, utc_now
from mexicano.models.tournament_player import TournamentPlayer
from mexicano.models.tournament_round import TournamentRound
from mexicano.services.errors import (
    ConcurrentModificationError,
    PersistenceFailureError,
    TournamentNotFoundError,
)
from mexicano.services.tournament_state import Match, Round, TournamentState, make_score

logger = logging.getLogger(__name__)


class TournamentStateStore(Protocol):
    def load(self, tournament_id: str) -> Optional[TournamentState]:
        ...

    def save(self, tournament_id: str, state: TournamentState) -> TournamentState:
        ...

    def delete(self, tournament_id: str) -> None:
        ...

    def list_ids(self) -> List[str]:
        ...


def _conflict(tournament_id: str, state: TournamentState, stored_revision: int) -> ConcurrentModificationError:
    logger.warning(
        "Save conflict on tournament %s: state revision %d, stored revision %d",
        tournament_id,
        state.revision,
        stored_revision,
    )
    return ConcurrentModificationError(
        f"Tournament {tournament_id} was modified concurrently "
        f"(expected revision {state.revision}, found {stored_revision}); reload and retry",
        state=state,
    )


# -----------------------------------------------------------------------------
# In-memory store
# -----------------------------------------------------------------------------


class InMemoryTournamentStore:
    """Dict-backed store (local/offline mode and tests)."""

    def __init__(self) -> None:
        self._states: Dict[str, TournamentState] = {}

    def load(self, tournament_id: str) -> Optional[TournamentState]:
        return self._states.get(tournament_id)

    def save(self, tournament_id: str, state: TournamentState) -> TournamentState:
        stored = self._states.get(tournament_id)
        if stored is not None and stored.revision != state.revision:
            raise _conflict(tournament_id, state, stored.revision)
        next_revision = (stored.revision if stored is not None else 0) + 1
        saved = replace(state, revision=next_revision)
        self._states[tournament_id] = saved
        return saved

    def delete(self, tournament_id: str) -> None:
        if tournament_id not in self._states:
            raise TournamentNotFoundError(f"Tournament {tournament_id} not found")
        del self._states[tournament_id]

    def list_ids(self) -> List[str]:
        return sorted(self._states)


# -----------------------------------------------------------------------------
# Relational store (SQLModel)
# -----------------------------------------------------------------------------


class SqlTournamentStore:
    """
    Stores one tournament across the tournament / tournamentplayer /
    tournamentround / roundmatch tables. A save replaces all child rows
    inside a single transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    def _get_row(self, tournament_id: str) -> Optional[Tournament]:
        return self.session.exec(select(Tournament).where(Tournament.external_id == tournament_id)).first()

    def _delete_children(self, pk: int) -> None:
        round_ids = select(TournamentRound.id).where(TournamentRound.tournament_id == pk)
        self.session.execute(delete(RoundMatch).where(RoundMatch.round_id.in_(round_ids)))
        self.session.execute(delete(TournamentRound).where(TournamentRound.tournament_id == pk))
        self.session.execute(delete(TournamentPlayer).where(TournamentPlayer.tournament_id == pk))

    # -- load ------------------------------------------------------------------

    def load(self, tournament_id: str) -> Optional[TournamentState]:
        row = self._get_row(tournament_id)
        if row is None:
            return None

        player_rows = self.session.exec(
            select(TournamentPlayer)
            .where(TournamentPlayer.tournament_id == row.id)
            .order_by(TournamentPlayer.position)
        ).all()
        round_rows = self.session.exec(
            select(TournamentRound)
            .where(TournamentRound.tournament_id == row.id)
            .order_by(TournamentRound.number)
        ).all()

        matches_by_round: Dict[int, List[Match]] = {r.id: [] for r in round_rows}
        if round_rows:
            match_rows = self.session.exec(
                select(RoundMatch)
                .where(RoundMatch.round_id.in_(list(matches_by_round)))
                .order_by(RoundMatch.round_id, RoundMatch.sequence)
            ).all()
            for m in match_rows:
                matches_by_round[m.round_id].append(
                    Match(
                        team_a=(m.team_a[0], m.team_a[1]),
                        team_b=(m.team_b[0], m.team_b[1]),
                        score=make_score(m.score_a, m.score_b),
                        per_player_points=dict(m.per_player_points) if m.per_player_points is not None else None,
                    )
                )

        rounds = tuple(
            Round(
                number=r.number,
                matches=tuple(matches_by_round[r.id]),
                ranking_snapshot=tuple(r.ranking_snapshot or []),
                byes=tuple(r.byes or []),
                submitted=r.submitted,
            )
            for r in round_rows
        )

        return TournamentState(
            players=tuple(p.name for p in player_rows),
            rounds=rounds,
            totals={p.name: p.total_points for p in player_rows},
            bye_counts={p.name: p.bye_count for p in player_rows},
            name=row.name,
            court_count=row.court_count,
            settings=dict(row.settings_json or {}),
            player_pool=tuple(row.player_pool or []),
            revision=row.revision,
        )

    # -- save ------------------------------------------------------------------

    def save(self, tournament_id: str, state: TournamentState) -> TournamentState:
        try:
            row = self._get_row(tournament_id)
            if row is None:
                row = Tournament(external_id=tournament_id, revision=0)
                self.session.add(row)
                try:
                    self.session.flush()
                except IntegrityError as e:
                    # Lost a race creating the same tournament id
                    raise ConcurrentModificationError(
                        f"Tournament {tournament_id} was created concurrently; reload and retry",
                        state=state,
                    ) from e
                stored_revision = 0
                expected_revision = 0
            else:
                stored_revision = row.revision
                expected_revision = state.revision
                if stored_revision != expected_revision:
                    raise _conflict(tournament_id, state, stored_revision)

            next_revision = expected_revision + 1
            result = self.session.execute(
                update(Tournament)
                .where(Tournament.id == row.id, Tournament.revision == expected_revision)
                .values(
                    name=state.name,
                    court_count=state.court_count,
                    settings_json=dict(state.settings),
                    player_pool=list(state.player_pool),
                    revision=next_revision,
                    updated_at=utc_now(),
                )
            )
            if result.rowcount != 1:
                raise _conflict(tournament_id, state, stored_revision)

            self._delete_children(row.id)
            self._insert_children(row.id, state)
            self.session.commit()
        except ConcurrentModificationError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to save tournament %s", tournament_id)
            raise PersistenceFailureError(f"Failed to save tournament {tournament_id}: {e}", state=state) from e

        return replace(state, revision=next_revision)

    def _insert_children(self, pk: int, state: TournamentState) -> None:
        for position, name in enumerate(state.players):
            self.session.add(
                TournamentPlayer(
                    tournament_id=pk,
                    name=name,
                    position=position,
                    total_points=state.total_for(name),
                    bye_count=state.byes_for(name),
                )
            )

        for rnd in state.rounds:
            round_row = TournamentRound(
                tournament_id=pk,
                number=rnd.number,
                ranking_snapshot=list(rnd.ranking_snapshot),
                byes=list(rnd.byes),
                submitted=rnd.submitted,
            )
            self.session.add(round_row)
            self.session.flush()  # Get the ID

            for sequence, match in enumerate(rnd.matches):
                self.session.add(
                    RoundMatch(
                        round_id=round_row.id,
                        sequence=sequence,
                        team_a=list(match.team_a),
                        team_b=list(match.team_b),
                        score_a=match.score_a,
                        score_b=match.score_b,
                        winner=match.winner,
                        per_player_points=dict(match.per_player_points)
                        if match.per_player_points is not None
                        else None,
                    )
                )

    # -- delete / list ---------------------------------------------------------

    def delete(self, tournament_id: str) -> None:
        row = self._get_row(tournament_id)
        if row is None:
            raise TournamentNotFoundError(f"Tournament {tournament_id} not found")
        try:
            self._delete_children(row.id)
            self.session.execute(delete(Tournament).where(Tournament.id == row.id))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to delete tournament %s", tournament_id)
            raise PersistenceFailureError(f"Failed to delete tournament {tournament_id}: {e}") from e

    def list_ids(self) -> List[str]:
        statement = select(Tournament.external_id).order_by(Tournament.created_at.desc(), Tournament.id.desc())
        return list(self.session.exec(statement).all())
