"""
Tests for Turkish-aware name comparison and ordering.
"""

from mexicano.utils.collation import collation_key, names_equal, normalize_name, turkish_lower


class TestTurkishCasePairs:

    def test_dotless_capital_i_lowers_to_dotless(self):
        assert turkish_lower("I") == "ı"

    def test_dotted_capital_i_lowers_to_dotted(self):
        assert turkish_lower("İ") == "i"

    def test_names_equal_uses_turkish_pairs(self):
        assert names_equal("ILKER", "ılker")
        assert names_equal("İlker", "ilker")
        assert not names_equal("ILKER", "ilker")

    def test_names_equal_ignores_surrounding_whitespace(self):
        assert names_equal("  Mesut ", "MESUT")

    def test_normalize_name(self):
        assert normalize_name(" IŞIK ") == "ışık"


class TestCollationOrder:

    def _sorted(self, names):
        return sorted(names, key=collation_key)

    def test_turkish_letters_follow_their_base_letter(self):
        names = ["Zeynep", "Şule", "Sema", "Çağla", "Cem", "Deniz"]
        assert self._sorted(names) == ["Cem", "Çağla", "Deniz", "Sema", "Şule", "Zeynep"]

    def test_dotless_i_sorts_before_dotted_i(self):
        assert self._sorted(["iz", "ız"]) == ["ız", "iz"]

    def test_o_umlaut_after_o(self):
        assert self._sorted(["Özge", "Pınar", "Okan"]) == ["Okan", "Özge", "Pınar"]

    def test_case_insensitive_primary_order(self):
        assert self._sorted(["batuhan", "Ahmet", "berk"]) == ["Ahmet", "batuhan", "berk"]

    def test_lowercase_first_on_identical_letters(self):
        assert self._sorted(["Berk", "berk"]) == ["berk", "Berk"]

    def test_distinct_names_never_compare_equal(self):
        assert collation_key("Emre") != collation_key("emre")
        assert collation_key("Emre") != collation_key("Emre ")

    def test_digits_and_spaces_before_letters(self):
        assert self._sorted(["Ali B", "Ali2", "AliA"]) == ["Ali B", "Ali2", "AliA"]
