"""
Tests for round settlement, its reversal and next-round generation.
"""

import pytest

from mexicano.services.errors import (
    IncompleteRoundError,
    OddPlayerCountError,
    RoundNotSubmittedError,
    TournamentNotStartedError,
)
from mexicano.services.settlement import (
    generate_next_round,
    match_points,
    settle_round,
    unsettle_round,
)
from mexicano.services.tournament_state import UNSCORED, Match, Round, Scored, TournamentState

PLAYERS_8 = ["Mesut", "Mumtaz", "Berk", "Erdem", "Hulusi", "Emre", "Ahmet", "Batuhan"]


def _round(scores, submitted=False):
    """Round 1 over PLAYERS_8 in roster order with the given (a, b) scores."""
    p = PLAYERS_8
    matches = (
        Match(team_a=(p[0], p[1]), team_b=(p[2], p[3]), score=scores[0]),
        Match(team_a=(p[4], p[5]), team_b=(p[6], p[7]), score=scores[1]),
    )
    return Round(number=1, matches=matches, ranking_snapshot=tuple(p), submitted=submitted)


def test_match_points_give_each_player_their_team_score():
    m = Match(team_a=("Mesut", "Mumtaz"), team_b=("Berk", "Erdem"), score=Scored(a=32, b=20))
    assert match_points(m) == {"Mesut": 32, "Mumtaz": 32, "Berk": 20, "Erdem": 20}


class TestSettleRound:

    def test_points_are_conserved(self):
        rnd = _round([Scored(a=32, b=20), Scored(a=15, b=32)])
        totals = {p: 10 for p in PLAYERS_8}
        settled, new_totals, deltas = settle_round(rnd, totals)

        # sum over players of delta == 2 * sum of both team scores per match
        assert sum(deltas.values()) == 2 * (32 + 20 + 15 + 32)
        assert sum(new_totals.values()) == sum(totals.values()) + sum(deltas.values())
        assert new_totals["Mesut"] == 42
        assert new_totals["Batuhan"] == 42
        assert new_totals["Hulusi"] == 25

    def test_settled_round_is_marked_and_stamped(self):
        rnd = _round([Scored(a=32, b=20), Scored(a=15, b=32)])
        settled, _, _ = settle_round(rnd, {})
        assert settled.submitted
        assert settled.matches[0].per_player_points == {
            "Mesut": 32, "Mumtaz": 32, "Berk": 20, "Erdem": 20,
        }
        assert [m.winner for m in settled.matches] == ["A", "B"]

    def test_inputs_untouched(self):
        rnd = _round([Scored(a=32, b=20), Scored(a=15, b=32)])
        totals = {"Mesut": 5}
        settle_round(rnd, totals)
        assert totals == {"Mesut": 5}
        assert not rnd.submitted
        assert rnd.matches[0].per_player_points is None

    def test_incomplete_round_rejected(self):
        rnd = _round([Scored(a=32, b=20), UNSCORED])
        with pytest.raises(IncompleteRoundError):
            settle_round(rnd, {})


class TestUnsettleRound:

    def test_reverses_settlement(self):
        rnd = _round([Scored(a=32, b=20), Scored(a=15, b=32)])
        totals = {p: 7 for p in PLAYERS_8}
        settled, new_totals, _ = settle_round(rnd, totals)

        reopened, restored = unsettle_round(settled, new_totals)
        assert restored == totals
        assert not reopened.submitted
        assert all(m.per_player_points is None for m in reopened.matches)
        # scores are kept for correction
        assert reopened.matches[0].score == Scored(a=32, b=20)

    def test_pending_round_cannot_be_unsettled(self):
        with pytest.raises(RoundNotSubmittedError):
            unsettle_round(_round([Scored(a=32, b=20), Scored(a=15, b=32)]), {})


class TestGenerateNextRound:

    def test_requires_a_started_tournament(self):
        with pytest.raises(TournamentNotStartedError):
            generate_next_round(TournamentState(players=tuple(PLAYERS_8)))

    def test_requires_submitted_latest_round(self):
        state = TournamentState(
            players=tuple(PLAYERS_8),
            rounds=(_round([Scored(a=32, b=20), Scored(a=15, b=32)]),),
        )
        with pytest.raises(IncompleteRoundError):
            generate_next_round(state)

    def test_roster_must_still_be_playable(self):
        settled, totals, _ = settle_round(_round([Scored(a=32, b=20), Scored(a=15, b=32)]), {})
        state = TournamentState(
            players=tuple(PLAYERS_8) + ("Sercan",),
            rounds=(settled,),
            totals=totals,
        )
        with pytest.raises(OddPlayerCountError):
            generate_next_round(state)

    def test_appends_seeded_round(self):
        settled, totals, _ = settle_round(_round([Scored(a=32, b=20), Scored(a=15, b=32)]), {})
        state = TournamentState(players=tuple(PLAYERS_8), rounds=(settled,), totals=totals)

        new_state = generate_next_round(state)
        assert len(new_state.rounds) == 2
        r2 = new_state.rounds[1]
        assert r2.number == 2
        assert not r2.submitted
        assert r2.byes == ()
        assert len(r2.matches) == 2

        snap = r2.ranking_snapshot
        assert r2.matches[0].team_a == (snap[0], snap[7])
        assert r2.matches[0].team_b == (snap[1], snap[6])
        assert r2.matches[1].team_a == (snap[2], snap[5])
        assert r2.matches[1].team_b == (snap[3], snap[4])
        # input state unchanged
        assert len(state.rounds) == 1


def test_settle_credits_roster_players_only():
    rnd = _round([Scored(a=32, b=20), Scored(a=15, b=32)])
    roster = [p for p in PLAYERS_8 if p != "Mesut"]
    settled, new_totals, _ = settle_round(rnd, {p: 0 for p in roster}, roster)

    assert "Mesut" not in new_totals
    assert new_totals["Mumtaz"] == 32
    # the match history still shows all four players
    assert settled.matches[0].per_player_points["Mesut"] == 32
