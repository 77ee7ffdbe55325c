"""
Pattern Extractor
Derives learning lookup keys (event type, keywords, recurring series, attendees)
from a moment's description and metadata.
"""
import hashlib
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional


PATTERN_TYPES = ("event_type", "keyword", "recurring", "attendee")

MAX_KEYWORDS = 5
MIN_KEYWORD_LENGTH = 4  # tokens of 3 chars or fewer are dropped

STOP_WORDS = frozenset([
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would",
    "could", "should", "may", "might", "must", "shall", "can", "need",
    "about", "into", "through", "during", "before", "after", "above",
    "below", "between", "under", "again", "further", "then", "once",
    "here", "there", "when", "where", "why", "how", "all", "each",
    "few", "more", "most", "other", "some", "such", "no", "nor", "not",
    "only", "own", "same", "so", "than", "too", "very", "just", "also",
    "my", "your", "his", "her", "its", "our", "their", "this", "that",
    "these", "those", "am", "being", "both", "i", "me", "we",
    "you", "he", "she", "it", "they", "what", "which", "who", "whom",
])

_PUNCTUATION = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class PatternKey:
    type: str
    key: str

    @property
    def source(self) -> str:
        """'type:key' label used in hints and logs"""
        return f"{self.type}:{self.key}"


def extractKeywords(text: Optional[str], limit: int = MAX_KEYWORDS) -> List[str]:
    """
    Crude keyword extraction, deterministic on purpose

    lower-case -> punctuation to spaces -> split -> drop short tokens and
    stop words -> de-duplicate -> first `limit` in original order

    >>> extractKeywords("Quarterly Business Review about financials!!")
    ['quarterly', 'business', 'review', 'financials']
    """
    if not text:
        return []

    tokens = _PUNCTUATION.sub(" ", text.lower()).split()
    keywords = [
        token for token in tokens
        if len(token) >= MIN_KEYWORD_LENGTH and token not in STOP_WORDS
    ]
    return list(dict.fromkeys(keywords))[:limit]


def recurringKey(externalEventId: Optional[str]) -> Optional[str]:
    """
    Recurring series key from a calendar event id

    Providers append instance suffixes after '_' to a stable base id, so
    everything before the first '_' identifies the series.
    """
    if not externalEventId:
        return None
    baseEventId = externalEventId.split("_")[0]
    if not baseEventId:
        return None
    return f"event:{baseEventId}"


def attendeeKey(email: str) -> Optional[str]:
    """Hashed attendee key, emails are never stored in clear"""
    normalized = (email or "").strip().lower()
    if not normalized:
        return None
    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()
    return f"attendee:{digest[:16]}"


def extractPatterns(
    description: Optional[str],
    userContext: Optional[str] = None,
    detectedEventType: Optional[str] = None,
    externalEventId: Optional[str] = None,
    attendees: Optional[Iterable[str]] = None
) -> List[PatternKey]:
    """
    All pattern keys for a moment

    Keywords come from description + user context. Order is not meaningful;
    duplicates are removed here and again by the learning store.
    """
    patterns: List[PatternKey] = []

    if detectedEventType and detectedEventType != "unknown":
        patterns.append(PatternKey("event_type", detectedEventType))

    combined = f"{description or ''} {userContext or ''}"
    for keyword in extractKeywords(combined):
        patterns.append(PatternKey("keyword", keyword))

    seriesKey = recurringKey(externalEventId)
    if seriesKey:
        patterns.append(PatternKey("recurring", seriesKey))

    for email in attendees or []:
        key = attendeeKey(email)
        if key:
            patterns.append(PatternKey("attendee", key))

    return list(dict.fromkeys(patterns))


def extractMomentPatterns(moment) -> List[PatternKey]:
    """Patterns for a persisted Moment row"""
    return extractPatterns(
        description=moment.description,
        userContext=moment.user_context,
        detectedEventType=moment.detected_event_type,
        externalEventId=moment.calendar_event_id,
        attendees=moment.calendar_attendees,
    )
