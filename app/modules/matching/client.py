"""
AI Matching Client
Scores candidate thoughts against a moment with the relevance scorer.
Fail-open: timeouts, provider errors and malformed output all degrade to
zero matches with the elapsed time still reported.
"""
import asyncio
import json
import time
from typing import Any, List, Optional, Protocol

from app.modules.matching.constants import MATCHING_TIMEOUT_MS
from app.modules.matching.prompts import buildMatchingPrompt
from app.modules.matching.types import GemForMatching, LearnedThought, MatchingResult
from app.modules.matching.validator import validateMatches
from app.utils.logger import logger


class RelevanceScorer(Protocol):
    """Anything that turns a prompt into JSON text (OpenRouterService in production)"""

    async def completeJson(self, prompt: str) -> str:
        ...


def _elapsedMs(startTime: float) -> int:
    return int((time.time() - startTime) * 1000)


def parseScorerResponse(content: str) -> Any:
    """
    Parse scorer text into JSON

    - Strips a markdown code fence if the model added one
    - Unwraps {"matches": [...]} into the bare list
    Raises ValueError when the text is not JSON.
    """
    text = (content or "").strip()

    if text.startswith("```"):
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]

    parsed = json.loads(text.strip())

    if isinstance(parsed, dict) and "matches" in parsed:
        return parsed["matches"]
    return parsed


class GemMatcher:
    """
    Relevance matching for one moment

    The scorer is injected so tests can substitute a fake without touching
    module state.
    """

    def __init__(self, scorer: Optional[RelevanceScorer], timeoutMs: int = MATCHING_TIMEOUT_MS):
        self.scorer = scorer
        self.timeoutMs = timeoutMs

    async def match(
        self,
        momentDescription: str,
        gems: List[GemForMatching],
        learnedThoughts: Optional[List[LearnedThought]] = None
    ) -> MatchingResult:
        """
        Args:
            momentDescription: enriched description used for matching
            gems: candidate thoughts
            learnedThoughts: hints from the learning store (optional)

        Returns:
            MatchingResult; never raises
        """
        startTime = time.time()

        # Never call the scorer for zero candidates
        if not gems:
            return MatchingResult(matches=[], processing_time_ms=_elapsedMs(startTime))

        if self.scorer is None:
            logger.warning("⚠️  No relevance scorer configured, skipping matching")
            return MatchingResult(
                matches=[],
                processing_time_ms=_elapsedMs(startTime),
                error="scorer not configured"
            )

        validGemIds = {gem.id for gem in gems}
        prompt = buildMatchingPrompt(momentDescription, gems, learnedThoughts)

        try:
            content = await asyncio.wait_for(
                self.scorer.completeJson(prompt),
                timeout=self.timeoutMs / 1000
            )
        except asyncio.TimeoutError:
            logger.error(f"❌ Matching timeout after {self.timeoutMs}ms")
            return MatchingResult(
                matches=[],
                processing_time_ms=_elapsedMs(startTime),
                error="timeout"
            )
        except Exception as e:
            logger.error(f"❌ Matching error: {e}")
            return MatchingResult(
                matches=[],
                processing_time_ms=_elapsedMs(startTime),
                error=str(e) or type(e).__name__
            )

        try:
            parsed = parseScorerResponse(content)
        except (ValueError, TypeError, IndexError):
            logger.error(f"❌ Failed to parse matching response: {str(content)[:200]}")
            return MatchingResult(
                matches=[],
                processing_time_ms=_elapsedMs(startTime),
                error="malformed response"
            )

        matches = validateMatches(parsed, validGemIds)

        received = len(parsed) if isinstance(parsed, list) else 0
        if received > len(matches):
            logger.info(f"🧹 Dropped {received - len(matches)} of {received} scorer entries")

        processingTime = _elapsedMs(startTime)
        logger.info(f"🎯 Matched {len(matches)}/{len(gems)} thoughts in {processingTime}ms")

        return MatchingResult(matches=matches, processing_time_ms=processingTime)
