"""
Tests for pattern extraction.
"""
import hashlib

from app.modules.moments.patterns import (
    PatternKey,
    attendeeKey,
    extractKeywords,
    extractPatterns,
    recurringKey,
)


class TestExtractKeywords:

    def test_stop_words_and_short_tokens_removed(self):
        """Should lower-case, strip punctuation and drop stop words."""
        keywords = extractKeywords("Quarterly Business Review about financials!!")

        assert keywords == ["quarterly", "business", "review", "financials"]

    def test_short_tokens_dropped(self):
        """Should drop tokens of 3 characters or fewer."""
        assert extractKeywords("Weekly 1:1 with manager") == ["weekly", "manager"]

    def test_first_five_in_order(self):
        """Should keep the first five keywords."""
        text = "alpha bravo charlie delta foxtrot hotel india"

        assert extractKeywords(text) == ["alpha", "bravo", "charlie", "delta", "foxtrot"]

    def test_deduplicates(self):
        assert extractKeywords("Budget budget BUDGET planning") == ["budget", "planning"]

    def test_empty(self):
        assert extractKeywords("") == []
        assert extractKeywords(None) == []

    def test_deterministic(self):
        text = "Performance review prep, compensation & growth"

        assert extractKeywords(text) == extractKeywords(text)


class TestRecurringKey:

    def test_base_id_before_first_underscore(self):
        """Should key the series on the text before the first '_'."""
        assert recurringKey("google_abc123_20240115") == "event:google"

    def test_id_without_suffix(self):
        assert recurringKey("abc123") == "event:abc123"

    def test_missing(self):
        assert recurringKey(None) is None
        assert recurringKey("") is None


class TestExtractPatterns:

    def test_all_pattern_types(self):
        """Should derive event type, keywords, recurring and attendee keys."""
        patterns = extractPatterns(
            description="Performance review",
            userContext="promotion timeline",
            detectedEventType="review",
            externalEventId="abc123_20240115T100000Z",
            attendees=["Boss@Example.com "],
        )

        expectedAttendee = "attendee:" + hashlib.sha256(b"boss@example.com").hexdigest()[:16]
        assert set(patterns) == {
            PatternKey("event_type", "review"),
            PatternKey("keyword", "performance"),
            PatternKey("keyword", "review"),
            PatternKey("keyword", "promotion"),
            PatternKey("keyword", "timeline"),
            PatternKey("recurring", "event:abc123"),
            PatternKey("attendee", expectedAttendee),
        }

    def test_unknown_event_type_skipped(self):
        patterns = extractPatterns("Dentist", detectedEventType="unknown")

        assert all(p.type != "event_type" for p in patterns)

    def test_no_recurring_without_event_id(self):
        patterns = extractPatterns("Planning session")

        assert all(p.type != "recurring" for p in patterns)

    def test_no_duplicates(self):
        patterns = extractPatterns("budget budget", userContext="budget")

        assert patterns == [PatternKey("keyword", "budget")]

    def test_blank_attendees_ignored(self):
        assert attendeeKey("  ") is None
        assert extractPatterns("x", attendees=["", "  "]) == []

    def test_source_label(self):
        assert PatternKey("keyword", "budget").source == "keyword:budget"
