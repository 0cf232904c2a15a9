"""Tests for the fuzzy matcher."""

from __future__ import annotations

from logscout.matcher import SCORE_THRESHOLD, filter_candidates, fuzzy_match

GROUPS = ["api-gateway", "auth-service", "billing"]


class TestFuzzyMatch:
    def test_empty_term(self) -> None:
        assert fuzzy_match("anything", "") == (0, ())

    def test_not_a_subsequence(self) -> None:
        assert fuzzy_match("billing", "xyz") is None
        assert fuzzy_match("billing", "gb") is None

    def test_prefix_match(self) -> None:
        result = fuzzy_match("auth-service", "au")
        assert result is not None
        score, indices = result
        assert indices == (0, 1)
        assert score > SCORE_THRESHOLD

    def test_indices_point_at_term_characters(self) -> None:
        candidate = "/aws/lambda/orders-api"
        result = fuzzy_match(candidate, "ordapi")
        assert result is not None
        _, indices = result
        assert "".join(candidate[i] for i in indices) == "ordapi"
        assert list(indices) == sorted(indices)

    def test_prefers_word_boundaries(self) -> None:
        result = fuzzy_match("xsvc-service", "se")
        assert result is not None
        _, indices = result
        # "se" at the start of "service" beats the scattered s/e in "xsvc".
        assert indices == (5, 6)

    def test_boundary_beats_mid_word(self) -> None:
        boundary = fuzzy_match("my-orders", "or")
        mid_word = fuzzy_match("majorette", "or")
        assert boundary is not None
        assert mid_word is not None
        assert boundary[0] > mid_word[0]

    def test_gaps_are_penalised(self) -> None:
        tight = fuzzy_match("xab", "ab")
        loose = fuzzy_match("xa" + "c" * 10 + "b", "ab")
        assert tight is not None
        assert loose is not None
        assert tight[0] > loose[0]

    def test_long_gap_score(self) -> None:
        assert fuzzy_match("xa" + "c" * 25 + "b", "ab") == (5, (1, 27))
        assert fuzzy_match("xa" + "c" * 24 + "b", "ab") == (6, (1, 26))

    def test_case_insensitive_lowercase_term(self) -> None:
        assert fuzzy_match("AuthService", "auth") is not None

    def test_smart_case_uppercase_term(self) -> None:
        assert fuzzy_match("auth-service", "Au") is None
        assert fuzzy_match("Auth-service", "Au") is not None


class TestFilterCandidates:
    def test_empty_term_keeps_everything_in_order(self) -> None:
        results = filter_candidates(GROUPS, "")
        assert [r.candidate for r in results] == GROUPS
        assert all(r.indices == () for r in results)

    def test_filters_by_term(self) -> None:
        results = filter_candidates(GROUPS, "au")
        assert [r.candidate for r in results] == ["auth-service"]
        assert results[0].indices == (0, 1)

    def test_keeps_original_order(self) -> None:
        candidates = ["zeta-logs", "alpha-logs", "beta-logs"]
        results = filter_candidates(candidates, "logs")
        assert [r.candidate for r in results] == candidates

    def test_every_result_is_above_threshold(self) -> None:
        candidates = [*GROUPS, "a-very-long-name-with-an-s-somewhere", "xa" + "c" * 25 + "b"]
        for term in ("a", "as", "ab", "bil", "sv"):
            for result in filter_candidates(candidates, term):
                assert result.score > SCORE_THRESHOLD

    def test_low_score_excluded(self) -> None:
        weak = "xa" + "c" * 25 + "b"
        barely = "xa" + "c" * 24 + "b"
        results = filter_candidates([weak, barely], "ab")
        assert [r.candidate for r in results] == [barely]

    def test_no_match(self) -> None:
        assert filter_candidates(GROUPS, "qqq") == []

    def test_refiltering_is_idempotent(self) -> None:
        first = filter_candidates(GROUPS, "i")
        second = filter_candidates(GROUPS, "i")
        assert first == second

    def test_empty_candidates(self) -> None:
        assert filter_candidates([], "a") == []
