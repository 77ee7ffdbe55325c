from app.modules.matching.client import GemMatcher, RelevanceScorer, parseScorerResponse
from app.modules.matching.validator import validateMatches
from app.modules.matching.types import GemForMatching, GemMatch, LearnedThought, MatchingResult
from app.modules.matching.constants import (
    MAX_GEMS_TO_MATCH,
    MIN_RELEVANCE_SCORE,
    MAX_REASON_LENGTH,
    MATCHING_TIMEOUT_MS,
)

__all__ = [
    "GemMatcher",
    "RelevanceScorer",
    "parseScorerResponse",
    "validateMatches",
    "GemForMatching",
    "GemMatch",
    "LearnedThought",
    "MatchingResult",
    "MAX_GEMS_TO_MATCH",
    "MIN_RELEVANCE_SCORE",
    "MAX_REASON_LENGTH",
    "MATCHING_TIMEOUT_MS",
]
