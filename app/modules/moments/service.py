"""
Moment Service
Moment pipeline: create a moment, match thoughts to it, re-match on enrichment.

Failure policy:
- bad input -> ValidationException, nothing persisted
- moment row not stored -> MomentPersistenceException
- everything after the moment exists is best-effort: missing thoughts, learning
  store errors, scorer failures and match write errors only reduce the matches
"""
from typing import List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Moment, MomentThought, Thought
from app.modules.matching import GemMatcher, GemForMatching, LearnedThought, MatchingResult
from app.modules.moments.learning import LearningStore
from app.modules.moments.merger import mergeMatches
from app.modules.moments.patterns import extractPatterns, recurringKey
from app.modules.moments.repository import MomentStore
from app.modules.moments.title_analysis import analyzeEventTitle, combineContextForMatching
from app.modules.moments.types import (
    CalendarEventData,
    MomentWithMatches,
    RecurringMatch,
    MOMENT_SOURCES,
    MOMENT_STATUSES,
    MAX_MOMENT_DESCRIPTION_LENGTH,
)
from app.utils.exceptions import MomentPersistenceException, NotFoundException, ValidationException
from app.utils.logger import logger


def _toGemsForMatching(thoughts: List[Thought]) -> List[GemForMatching]:
    return [
        GemForMatching(
            id=str(thought.id),
            content=thought.content,
            context_tag=thought.context_tag,
            source=thought.source,
        )
        for thought in thoughts
    ]


def validateDescription(description) -> str:
    """Trimmed description, ValidationException when empty or too long"""
    if not isinstance(description, str) or not description.strip():
        raise ValidationException("Description is required")

    trimmed = description.strip()
    if len(trimmed) > MAX_MOMENT_DESCRIPTION_LENGTH:
        raise ValidationException(
            f"Description must be {MAX_MOMENT_DESCRIPTION_LENGTH} characters or less"
        )
    return trimmed


def validateUserContext(userContext: Optional[str]) -> Optional[str]:
    if userContext is None:
        return None
    if len(userContext.strip()) > MAX_MOMENT_DESCRIPTION_LENGTH:
        raise ValidationException(
            f"Context must be {MAX_MOMENT_DESCRIPTION_LENGTH} characters or less"
        )
    return userContext.strip() or None


class MomentService:
    """
    Orchestrates the moment pipeline

    Per moment: created -> matching -> matched. Status (active/completed/
    dismissed) is independent of matching and any status can be re-matched.
    """

    def __init__(self, db: AsyncSession, matcher: Optional[GemMatcher]):
        self.db = db
        self.matcher = matcher
        self.store = MomentStore(db)
        self.learning = LearningStore(db)

    # ============================================
    # CREATE
    # ============================================

    async def createAndMatch(
        self,
        userId: UUID,
        description: str,
        source: str = "manual",
        calendarData: Optional[CalendarEventData] = None,
        userContext: Optional[str] = None,
        detectedEventType: Optional[str] = None
    ) -> MomentWithMatches:
        """
        Create a moment and match the user's thoughts to it

        Flow:
        1. Validate description (non-empty, <= 500 chars)
        2. Persist the moment (gems_matched_count = 0), fatal on failure
        3. description + user context -> matching description
        4. Eligible thoughts; none -> done with zero matches
        5. Patterns -> learned hints (failure = no hints)
        6. Scorer matching (fail-open)
        7. Persist one moment_gems row per match
        8. Update match count + processing time
        9. Return moment + matches, score descending
        """
        # 1. Validate
        trimmed = validateDescription(description)
        userContext = validateUserContext(userContext)
        if source not in MOMENT_SOURCES:
            raise ValidationException(f"Invalid source: {source}")

        # 2. Persist moment
        momentResult = await self.store.insertMoment(
            userId=userId,
            description=trimmed,
            source=source,
            calendarData=calendarData,
            userContext=userContext,
            detectedEventType=detectedEventType,
        )
        if not momentResult.ok:
            raise MomentPersistenceException("Failed to create moment")

        moment = momentResult.value
        # Scalar id: a failed write later on rolls back and expires the row
        momentId = moment.id
        degraded: List[str] = []
        processingTimeMs = 0

        try:
            # 3. Matching description
            matchingDescription = combineContextForMatching(trimmed, userContext)

            # 4. Candidate thoughts
            thoughts = await self._loadThoughts(userId, degraded)
            if not thoughts:
                logger.info(f"📭 No eligible thoughts for moment {momentId}")
                return await self._finalize(moment, momentId, processingTimeMs, degraded)

            # 5-6. Hints + scorer
            matchResult, learnedIds = await self._matchThoughts(userId, moment, momentId, matchingDescription, thoughts, degraded)
            processingTimeMs = matchResult.processing_time_ms

            # 7. Persist matches
            persisted = 0
            if matchResult.matches:
                insertResult = await self.store.insertMatches(
                    momentId, userId, matchResult.matches, learnedIds
                )
                if insertResult.ok:
                    persisted = insertResult.value
                else:
                    degraded.append("persist_matches")

            # 8. Match count + timing
            await self._recordMatchCount(momentId, persisted, processingTimeMs, degraded)

        except Exception as e:
            logger.error(f"❌ Matching pipeline failed for moment {momentId}: {e}", exc_info=True)
            degraded.append("pipeline")

        # 9. Moment + matches
        return await self._finalize(moment, momentId, processingTimeMs, degraded)

    async def createFromCalendarEvent(
        self,
        userId: UUID,
        calendarData: CalendarEventData,
        description: Optional[str] = None,
        userContext: Optional[str] = None,
        detectedEventType: Optional[str] = None,
        eventDescription: Optional[str] = None
    ) -> MomentWithMatches:
        """
        Calendar variant of createAndMatch

        The event title is the description unless one is given; the event
        type comes from title analysis when the caller did not detect one.
        """
        if not detectedEventType:
            detectedEventType = analyzeEventTitle(calendarData.title, eventDescription).detectedEventType

        return await self.createAndMatch(
            userId=userId,
            description=description or calendarData.title,
            source="calendar",
            calendarData=calendarData,
            userContext=userContext,
            detectedEventType=detectedEventType,
        )

    # ============================================
    # ENRICH + RE-MATCH
    # ============================================

    async def enrichAndRematch(
        self,
        userId: UUID,
        momentId: UUID,
        userContext: Optional[str],
        detectedEventType: Optional[str] = None
    ) -> MomentWithMatches:
        """
        Store added context and re-run matching without losing earlier matches

        Existing rows are never deleted and never lowered; new thoughts are
        added; gems_matched_count becomes the total row count.
        """
        userContext = validateUserContext(userContext)
        moment = await self._requireMoment(userId, momentId)
        momentId = moment.id

        contextResult = await self.store.updateMomentContext(moment, userContext, detectedEventType)
        if not contextResult.ok:
            raise MomentPersistenceException("Failed to update moment")

        degraded: List[str] = []
        processingTimeMs = moment.ai_processing_time_ms or 0

        try:
            matchingDescription = combineContextForMatching(moment.description, userContext)

            thoughts = await self._loadThoughts(userId, degraded)
            if not thoughts:
                return await self._finalize(moment, momentId, processingTimeMs, degraded)

            existingResult = await self.store.getMatches(momentId)
            if not existingResult.ok:
                # Without the current rows a merge could duplicate them
                degraded.append("existing_matches")
                return await self._finalize(moment, momentId, processingTimeMs, degraded)

            matchResult, learnedIds = await self._matchThoughts(userId, moment, momentId, matchingDescription, thoughts, degraded)
            processingTimeMs = matchResult.processing_time_ms

            outcome = await mergeMatches(
                self.store,
                momentId,
                userId,
                existingResult.value,
                matchResult.matches,
                learnedIds,
            )
            if outcome.errors:
                degraded.append("persist_matches")

            await self._recordMatchCount(momentId, outcome.totalMatches, processingTimeMs, degraded)

        except Exception as e:
            logger.error(f"❌ Re-matching failed for moment {momentId}: {e}", exc_info=True)
            degraded.append("pipeline")

        return await self._finalize(moment, momentId, processingTimeMs, degraded)

    # ============================================
    # READ / STATUS
    # ============================================

    async def getMomentWithMatches(self, userId: UUID, momentId: UUID) -> MomentWithMatches:
        moment = await self._requireMoment(userId, momentId)
        return await self._finalize(moment, moment.id, moment.ai_processing_time_ms or 0, [], refresh=False)

    async def listMoments(self, userId: UUID, limit: int = 20) -> List[Moment]:
        result = await self.store.listRecentMoments(userId, limit)
        if not result.ok:
            raise MomentPersistenceException("Failed to load moments")
        return result.value

    async def updateStatus(self, userId: UUID, momentId: UUID, status: str) -> Moment:
        """active | completed | dismissed"""
        if status not in MOMENT_STATUSES:
            raise ValidationException(f"Invalid status: {status}")

        moment = await self._requireMoment(userId, momentId)
        result = await self.store.updateMomentStatus(moment, status)
        if not result.ok:
            raise MomentPersistenceException("Failed to update moment")

        logger.info(f"📌 Moment {moment.id} -> {status}")
        return result.value

    async def findRecurringMoment(
        self,
        userId: UUID,
        externalEventId: Optional[str] = None,
        title: Optional[str] = None
    ) -> RecurringMatch:
        """
        Earlier moment of the same situation and the thoughts that helped there

        1. Same recurring series (same base event id, different instance)
        2. Otherwise a fuzzy title match among the 50 most recent calendar moments
        """
        if externalEventId and recurringKey(externalEventId):
            seriesResult = await self.store.findPreviousSeriesMoment(userId, externalEventId)
            if seriesResult.ok and seriesResult.value:
                previous = seriesResult.value
                helpful = await self.store.getHelpfulThoughtIds(previous.id)
                return RecurringMatch(
                    isRecurring=True,
                    matchType="exact_event_id",
                    previousMomentId=str(previous.id),
                    previousHelpfulThoughts=helpful.valueOr([]),
                )

        normalized = (title or "").strip().lower()
        if normalized:
            titledResult = await self.store.listTitledMoments(userId)
            for candidate in titledResult.valueOr([]):
                previousTitle = (candidate.calendar_event_title or "").strip().lower()
                if not previousTitle:
                    continue
                if previousTitle == normalized or previousTitle in normalized or normalized in previousTitle:
                    helpful = await self.store.getHelpfulThoughtIds(candidate.id)
                    return RecurringMatch(
                        isRecurring=True,
                        matchType="fuzzy_pattern",
                        previousMomentId=str(candidate.id),
                        previousHelpfulThoughts=helpful.valueOr([]),
                    )

        return RecurringMatch(isRecurring=False)

    # ============================================
    # HELPERS
    # ============================================

    async def _requireMoment(self, userId: UUID, momentId: UUID) -> Moment:
        result = await self.store.getMoment(userId, momentId)
        if not result.ok:
            raise MomentPersistenceException("Failed to load moment")
        if result.value is None:
            raise NotFoundException("Moment not found")
        return result.value

    async def _loadThoughts(self, userId: UUID, degraded: List[str]) -> List[Thought]:
        result = await self.store.getEligibleThoughts(userId)
        if not result.ok:
            degraded.append("thoughts")
            return []
        return result.value

    async def _loadHints(
        self,
        userId: UUID,
        moment: Moment,
        thoughts: List[Thought],
        degraded: List[str]
    ) -> List[LearnedThought]:
        patterns = extractPatterns(
            description=moment.description,
            userContext=moment.user_context,
            detectedEventType=moment.detected_event_type,
            externalEventId=moment.calendar_event_id,
            attendees=moment.calendar_attendees,
        )
        if not patterns:
            return []

        contents = {str(thought.id): thought.content for thought in thoughts}
        result = await self.learning.getLearnedThoughts(userId, patterns, contents)
        if not result.ok:
            logger.error(f"❌ Error fetching learned thoughts: {result.error}")
            degraded.append("hints")
            return []
        return result.value

    async def _matchThoughts(
        self,
        userId: UUID,
        moment: Moment,
        momentId: UUID,
        matchingDescription: str,
        thoughts: List[Thought],
        degraded: List[str]
    ) -> Tuple[MatchingResult, Set[str]]:
        hints = await self._loadHints(userId, moment, thoughts, degraded)

        logger.info(
            f"🔎 Moment {momentId}: matching {len(thoughts)} thoughts "
            f"({len(hints)} learned hints)"
        )
        matchResult = await self.matcher.match(
            matchingDescription,
            _toGemsForMatching(thoughts),
            hints,
        )
        if matchResult.error:
            degraded.append("matching")

        return matchResult, {hint.gem_id for hint in hints}

    async def _recordMatchCount(
        self,
        momentId: UUID,
        matchCount: int,
        processingTimeMs: int,
        degraded: List[str]
    ):
        result = await self.store.updateMoment(momentId, matchCount, processingTimeMs)
        if not result.ok:
            degraded.append("match_count")
        else:
            logger.info(f"✅ Moment {momentId} matched: {matchCount} thoughts, {processingTimeMs}ms")

    async def _finalize(
        self,
        moment: Moment,
        momentId: UUID,
        processingTimeMs: int,
        degraded: List[str],
        refresh: bool = True
    ) -> MomentWithMatches:
        """Reload the moment (a failed write may have expired it) and its matches"""
        if refresh:
            moment = await self.store.refreshMoment(moment)

        matchesResult = await self.store.getMatches(momentId)
        matches: List[MomentThought] = matchesResult.valueOr([])
        if not matchesResult.ok:
            degraded.append("load_matches")

        if degraded:
            logger.warning(f"⚠️  Moment {momentId} degraded: {', '.join(degraded)}")

        return MomentWithMatches(
            moment=moment,
            matches=matches,
            processing_time_ms=processingTimeMs,
            degraded=degraded,
        )
