"""Tests for src/linkmap_mcp/sources/classifier.py."""

import pytest

from linkmap_mcp.sources.classifier import is_excluded, is_plausible_doc, score_pattern


class TestScorePattern:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://docs.acme.com", 10),
            ("https://doc.acme.com", 10),
            ("https://developer.acme.com", 8),
            ("https://api.acme.com", 7),
            ("https://support.acme.com", 4),
            ("https://help.acme.com", 4),
            ("https://wiki.acme.com", 3),
            ("https://acme.github.io", 3),
            ("https://acme.com/docs/start", 7),
            ("https://acme.com/documentation/start", 7),
            ("https://acme.com/api/v1", 6),
            ("https://acme.com/reference/x", 6),
            ("https://acme.com/guide/x", 5),
            ("https://acme.com/manual/x", 5),
            ("https://acme.com/", 0),
        ],
    )
    def test_single_pattern_weights(self, url, expected):
        assert score_pattern(url) == expected

    def test_weights_are_summed(self):
        # docs. (10) + /api/ (6) + /reference/ (6)
        assert score_pattern("https://docs.acme.com/api/reference/x") == 22

    def test_case_insensitive(self):
        assert score_pattern("https://DOCS.acme.com/Guide/x") == 15

    def test_unparseable_url_scores_zero(self):
        assert score_pattern("http://[::1") == 0


class TestIsPlausibleDoc:
    def test_keyword_and_pattern(self):
        assert is_plausible_doc("https://docs.acme.com/guide/intro", "acme")

    def test_keyword_case_insensitive(self):
        assert is_plausible_doc("https://docs.ACME.com/", "Acme")

    def test_keyword_missing(self):
        assert not is_plausible_doc("https://docs.other.com/guide/intro", "acme")

    def test_no_pattern(self):
        assert not is_plausible_doc("https://acme.com/blog/post", "acme")

    def test_excluded_site(self):
        assert not is_plausible_doc("https://youtube.com/watch?v=acme", "acme")

    def test_excluded_even_when_pattern_matches(self):
        assert not is_plausible_doc("https://developer.amazon.com/acme/docs/", "acme")
        assert not is_plausible_doc("https://www.google.com/search?q=acme+docs/api/", "acme")

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.facebook.com/acme",
            "https://twitter.com/acme",
            "https://instagram.com/acme",
            "https://LinkedIn.com/company/acme",
            "https://www.google.com/search?q=acme",
            "https://amazon.com/acme",
        ],
    )
    def test_exclusion_list(self, url):
        assert is_excluded(url)
