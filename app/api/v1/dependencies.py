"""
Shared endpoint dependencies
"""
from app.core.config import settings
from app.modules.matching import GemMatcher
from app.services import getOpenRouterService


def getGemMatcher() -> GemMatcher:
    """
    Matcher wired to the process-wide OpenRouter scorer

    Tests override this dependency with a matcher around a fake scorer.
    """
    service = getOpenRouterService()
    return GemMatcher(
        scorer=service if service.isConfigured else None,
        timeoutMs=settings.MATCHING_TIMEOUT_MS
    )
