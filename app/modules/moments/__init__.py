from app.modules.moments.service import MomentService
from app.modules.moments.feedback import FeedbackRecorder
from app.modules.moments.learning import (
    LearningStore,
    aggregateLearnedThoughts,
    LEARNING_HELPFUL_THRESHOLD,
    LEARNING_CONFIDENCE_THRESHOLD,
)
from app.modules.moments.merger import planMerge, mergeMatches
from app.modules.moments.patterns import extractKeywords, extractPatterns, PatternKey
from app.modules.moments.repository import MomentStore
from app.modules.moments.types import CalendarEventData, MomentWithMatches, RecurringMatch

__all__ = [
    "MomentService",
    "FeedbackRecorder",
    "LearningStore",
    "aggregateLearnedThoughts",
    "LEARNING_HELPFUL_THRESHOLD",
    "LEARNING_CONFIDENCE_THRESHOLD",
    "planMerge",
    "mergeMatches",
    "extractKeywords",
    "extractPatterns",
    "PatternKey",
    "MomentStore",
    "CalendarEventData",
    "MomentWithMatches",
    "RecurringMatch",
]
