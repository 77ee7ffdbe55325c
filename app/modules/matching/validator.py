"""
Relevance Validator
Whitelist sanitizer for scorer output: the model is untrusted, every field is
coerced explicitly and anything that does not fit is dropped.
"""
import math
from typing import Any, Iterable, List, Optional, Set

from app.modules.matching.constants import (
    MAX_GEMS_TO_MATCH,
    MIN_RELEVANCE_SCORE,
    MAX_REASON_LENGTH,
)
from app.modules.matching.types import GemMatch


def _coerceId(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)):
        return str(value)
    return None


def _coerceScore(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(score) or math.isinf(score):
        return None
    return score


def _roundScore(score: float) -> float:
    """2 decimals, halves round up (0.625 -> 0.63)"""
    return math.floor(score * 100 + 0.5) / 100


def _coerceReason(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        reason = str(value).strip()
        return reason or None
    return None


def validateMatches(parsed: Any, validGemIds: Iterable[str]) -> List[GemMatch]:
    """
    Turn a parsed scorer response into at most MAX_GEMS_TO_MATCH matches

    Args:
        parsed: JSON value of unknown shape (expected: list of objects)
        validGemIds: ids of the thoughts that were actually sent to the scorer

    Returns:
        Matches sorted by score descending (ties keep input order).
        Empty list when nothing survives; never raises.

    An entry survives only if:
    - it is an object
    - its gem_id (or thought_id) is one of validGemIds
    - its relevance_score is a finite number in [MIN_RELEVANCE_SCORE, 1]
    - its relevance_reason is non-blank (truncated to MAX_REASON_LENGTH)
    """
    if not isinstance(parsed, list):
        return []

    allowedIds: Set[str] = {str(gemId) for gemId in validGemIds}
    matches: List[GemMatch] = []

    for item in parsed:
        if not isinstance(item, dict):
            continue

        rawId = item.get("gem_id")
        if rawId is None:
            rawId = item.get("thought_id")
        gemId = _coerceId(rawId)
        if gemId is None or gemId not in allowedIds:
            continue

        score = _coerceScore(item.get("relevance_score"))
        if score is None or score < MIN_RELEVANCE_SCORE or score > 1:
            continue

        reason = _coerceReason(item.get("relevance_reason"))
        if reason is None:
            continue

        matches.append(GemMatch(
            gem_id=gemId,
            relevance_score=_roundScore(score),
            relevance_reason=reason[:MAX_REASON_LENGTH],
        ))

    # Stable sort: equal scores keep scorer order
    matches.sort(key=lambda m: m.relevance_score, reverse=True)

    # One match per thought (moment_gems is unique on moment + gem)
    seen: Set[str] = set()
    unique: List[GemMatch] = []
    for match in matches:
        if match.gem_id in seen:
            continue
        seen.add(match.gem_id)
        unique.append(match)

    return unique[:MAX_GEMS_TO_MATCH]
