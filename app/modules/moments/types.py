"""
Moment Pipeline Types
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from app.models import Moment, MomentThought


MOMENT_SOURCES = ("manual", "calendar")
MOMENT_STATUSES = ("active", "completed", "dismissed")
MAX_MOMENT_DESCRIPTION_LENGTH = 500


@dataclass
class CalendarEventData:
    event_id: str
    title: str
    start_time: Optional[datetime] = None
    attendees: List[str] = field(default_factory=list)


@dataclass
class MomentWithMatches:
    """
    A moment joined with its persisted matches (score descending)

    degraded lists the best-effort steps that fell back, e.g.
    ["thoughts", "hints", "matching", "persist_matches"].
    """
    moment: Moment
    matches: List[MomentThought]
    processing_time_ms: int = 0
    degraded: List[str] = field(default_factory=list)


@dataclass
class RecurringMatch:
    isRecurring: bool
    matchType: Optional[str] = None  # exact_event_id | fuzzy_pattern
    previousMomentId: Optional[str] = None
    previousHelpfulThoughts: List[str] = field(default_factory=list)
