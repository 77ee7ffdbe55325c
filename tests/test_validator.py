"""
Tests for the relevance validator.
"""
from app.modules.matching import validateMatches, MAX_GEMS_TO_MATCH, MIN_RELEVANCE_SCORE


VALID_IDS = {"a", "b", "c", "d", "e", "f", "g"}


def entry(gemId, score, reason="Applies to this situation"):
    return {"gem_id": gemId, "relevance_score": score, "relevance_reason": reason}


class TestValidateMatchesShape:
    """Input shape handling."""

    def test_non_list_returns_empty(self):
        """Should return [] for objects, strings and None."""
        assert validateMatches({"gem_id": "a"}, VALID_IDS) == []
        assert validateMatches("a", VALID_IDS) == []
        assert validateMatches(None, VALID_IDS) == []

    def test_skips_non_object_entries(self):
        """Should skip entries that are not objects."""
        matches = validateMatches([None, "a", 3, ["a"], entry("a", 0.8)], VALID_IDS)

        assert [m.gem_id for m in matches] == ["a"]

    def test_all_rejected_is_empty_list(self):
        """Should return [] when nothing survives."""
        assert validateMatches([entry("zzz", 0.9), entry("a", 0.1)], VALID_IDS) == []


class TestValidateMatchesRules:
    """Field-level whitelist rules."""

    def test_drops_unknown_ids(self):
        """Should drop hallucinated ids even with a valid score and reason."""
        matches = validateMatches([entry("not-a-candidate", 0.99), entry("b", 0.7)], VALID_IDS)

        assert [m.gem_id for m in matches] == ["b"]

    def test_score_floor(self):
        """Should drop scores below MIN_RELEVANCE_SCORE and keep the boundary."""
        matches = validateMatches(
            [entry("a", 0.49), entry("b", MIN_RELEVANCE_SCORE), entry("c", 0.3)],
            VALID_IDS
        )

        assert [m.gem_id for m in matches] == ["b"]
        assert all(m.relevance_score >= MIN_RELEVANCE_SCORE for m in matches)

    def test_score_above_one_dropped(self):
        """Should drop scores above 1."""
        assert validateMatches([entry("a", 1.2)], VALID_IDS) == []

    def test_score_coerced_from_string(self):
        """Should coerce numeric strings."""
        matches = validateMatches([entry("a", "0.75")], VALID_IDS)

        assert matches[0].relevance_score == 0.75

    def test_non_numeric_scores_dropped(self):
        """Should drop NaN, booleans and garbage scores."""
        matches = validateMatches(
            [entry("a", "high"), entry("b", float("nan")), entry("c", True), entry("d", None)],
            VALID_IDS
        )

        assert matches == []

    def test_blank_reason_dropped(self):
        """Should drop entries whose reason is empty after trimming."""
        matches = validateMatches([entry("a", 0.9, "   "), entry("b", 0.9, None)], VALID_IDS)

        assert matches == []

    def test_reason_trimmed_and_truncated(self):
        """Should trim the reason and cap it at 500 characters."""
        matches = validateMatches([entry("a", 0.9, "  " + "x" * 800 + "  ")], VALID_IDS)

        assert len(matches[0].relevance_reason) == 500
        assert matches[0].relevance_reason == "x" * 500

    def test_score_rounded_to_two_decimals(self):
        """Should round scores to 2 decimals."""
        matches = validateMatches([entry("a", 0.87654)], VALID_IDS)

        assert matches[0].relevance_score == 0.88

    def test_half_rounds_up(self):
        matches = validateMatches([entry("a", 0.625), entry("b", 0.555)], VALID_IDS)

        assert [m.relevance_score for m in matches] == [0.63, 0.56]

    def test_integer_ids_coerced(self):
        """Should compare ids as strings."""
        matches = validateMatches([entry(7, 0.8)], {"7"})

        assert matches[0].gem_id == "7"

    def test_thought_id_alias(self):
        """Should accept thought_id when gem_id is missing."""
        matches = validateMatches(
            [{"thought_id": "a", "relevance_score": 0.8, "relevance_reason": "fits"}],
            VALID_IDS
        )

        assert matches[0].gem_id == "a"


class TestValidateMatchesOrdering:
    """Sorting, capping and de-duplication."""

    def test_sorted_descending_and_capped(self):
        """Should keep at most 5, highest first."""
        scores = [0.55, 0.9, 0.6, 0.95, 0.7, 0.8, 0.65]
        parsed = [entry(gemId, score) for gemId, score in zip(sorted(VALID_IDS), scores)]

        matches = validateMatches(parsed, VALID_IDS)

        assert len(matches) == MAX_GEMS_TO_MATCH
        assert [m.relevance_score for m in matches] == [0.95, 0.9, 0.8, 0.7, 0.65]

    def test_ties_keep_input_order(self):
        """Should be a stable sort."""
        matches = validateMatches([entry("c", 0.8), entry("a", 0.8), entry("b", 0.9)], VALID_IDS)

        assert [m.gem_id for m in matches] == ["b", "c", "a"]

    def test_duplicate_ids_keep_highest(self):
        """Should return one match per thought."""
        matches = validateMatches([entry("a", 0.6), entry("a", 0.9, "better")], VALID_IDS)

        assert len(matches) == 1
        assert matches[0].relevance_score == 0.9
        assert matches[0].relevance_reason == "better"
