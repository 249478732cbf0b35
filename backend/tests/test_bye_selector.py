"""
Tests for bye selection: how many players rest, and who.
"""

import pytest

from mexicano.services.bye_selector import ensure_playable_roster, required_byes, select_byes
from mexicano.services.errors import InsufficientPlayersError, OddPlayerCountError


class TestRequiredByes:

    def test_multiples_of_four_have_no_byes(self):
        for n in (8, 12, 16, 20):
            assert required_byes(n) == 0

    def test_remaining_even_counts_have_two_byes(self):
        for n in (10, 14, 18, 22):
            assert required_byes(n) == 2

    def test_active_players_always_divide_into_matches(self):
        for n in range(8, 101, 2):
            byes = required_byes(n)
            assert byes in (0, 2)
            assert (n - byes) % 4 == 0

    def test_odd_count_rejected(self):
        with pytest.raises(OddPlayerCountError):
            required_byes(9)


class TestPlayableRoster:

    def test_seven_players_is_insufficient(self):
        with pytest.raises(InsufficientPlayersError) as exc:
            ensure_playable_roster(7)
        assert exc.value.code == "INSUFFICIENT_PLAYERS"

    def test_nine_players_is_odd(self):
        with pytest.raises(OddPlayerCountError) as exc:
            ensure_playable_roster(9)
        assert exc.value.code == "ODD_PLAYER_COUNT"

    def test_even_rosters_accepted(self):
        for n in (8, 10, 12, 30):
            ensure_playable_roster(n)


class TestSelectByes:

    RANKING = ["P1", "P2", "P3", "P4", "P5", "P6", "P7", "P8", "P9", "P10"]

    def test_zero_count_selects_nobody(self):
        assert select_byes(self.RANKING, 0, {}, {}) == []

    def test_fresh_field_rests_lowest_ranked(self):
        assert select_byes(self.RANKING, 2, {}, {}) == ["P10", "P9"]

    def test_most_matches_played_rests_first(self):
        played = {p: 3 for p in self.RANKING}
        played["P1"] = 4
        played["P2"] = 4
        assert select_byes(self.RANKING, 2, {}, played) == ["P2", "P1"]

    def test_fewer_byes_rest_before_more_byes(self):
        played = {p: 2 for p in self.RANKING}
        byes = {p: 1 for p in self.RANKING}
        byes["P3"] = 0
        byes["P4"] = 0
        assert select_byes(self.RANKING, 2, byes, played) == ["P4", "P3"]

    def test_matches_played_outranks_bye_count(self):
        played = {p: 2 for p in self.RANKING}
        played["P5"] = 3
        byes = {"P5": 2}
        assert select_byes(self.RANKING, 1, byes, played)[0] == "P5"

    def test_selection_is_deterministic(self):
        played = {p: 1 for p in self.RANKING}
        first = select_byes(self.RANKING, 2, {}, played)
        assert select_byes(self.RANKING, 2, {}, played) == first
