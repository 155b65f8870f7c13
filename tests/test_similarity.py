"""Tests for src/linkmap_mcp/similarity.py."""

import pytest

from linkmap_mcp.similarity import similarity


class TestSimilarity:
    @pytest.mark.parametrize("value", ["a", "docs", "Example.COM", "/api/v1"])
    def test_identical_strings_score_one(self, value):
        assert similarity(value, value) == 1.0

    def test_case_insensitive_exact_match(self):
        assert similarity("Docs", "dOCS") == 1.0

    def test_inclusion_is_length_ratio(self):
        assert similarity("ab", "abc") == pytest.approx(2 / 3)
        assert similarity("abc", "ab") == pytest.approx(2 / 3)

    def test_inclusion_with_empty_string(self):
        assert similarity("", "abc") == 0.0
        assert similarity("abc", "") == 0.0

    def test_both_empty_is_zero(self):
        assert similarity("", "") == 0.0

    def test_character_overlap(self):
        # 'a' and 'c' of "axc" occur in "abcd"; no inclusion either way
        assert similarity("axc", "abcd") == pytest.approx(2 / 4)

    def test_character_overlap_is_order_dependent(self):
        # Repeated characters of the first argument are all counted
        assert similarity("aaab", "abx") == pytest.approx(4 / 4)
        assert similarity("abx", "aaab") == pytest.approx(2 / 4)

    def test_no_common_characters(self):
        assert similarity("xyz", "abc") == 0.0

    def test_result_in_unit_interval(self):
        for a, b in [("docs", "documentation"), ("react", "reactjs.org"), ("q", "zzz")]:
            assert 0.0 <= similarity(a, b) <= 1.0
