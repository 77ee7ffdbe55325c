"""
Moment Store
Persistence operations used by the moment pipeline. Every call returns a
Result instead of raising, the caller decides whether a failure is fatal.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import select, desc, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Moment, MomentThought, Thought, ELIGIBLE_THOUGHT_STATUSES
from app.modules.matching.types import GemMatch
from app.modules.moments.types import CalendarEventData
from app.utils.logger import logger
from app.utils.result import Result


def _toUuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


class MomentStore:
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def _rollback(self):
        try:
            await self.db.rollback()
        except Exception as e:
            logger.error(f"❌ Rollback failed: {e}")
    
    # ============================================
    # MOMENTS
    # ============================================
    
    async def insertMoment(
        self,
        userId: UUID,
        description: str,
        source: str = "manual",
        calendarData: Optional[CalendarEventData] = None,
        userContext: Optional[str] = None,
        detectedEventType: Optional[str] = None
    ) -> Result[Moment]:
        """Insert and commit a new moment with gems_matched_count = 0"""
        try:
            moment = Moment(
                user_id=userId,
                description=description,
                source=source,
                status="active",
                gems_matched_count=0,
                user_context=userContext or None,
                detected_event_type=detectedEventType or None,
            )
            
            if calendarData:
                moment.calendar_event_id = calendarData.event_id
                moment.calendar_event_title = calendarData.title
                moment.calendar_event_start = calendarData.start_time
                moment.calendar_attendees = list(calendarData.attendees) or None
            
            self.db.add(moment)
            await self.db.commit()
            await self.db.refresh(moment)
            
            logger.info(f"📝 New moment: {moment.id} (source: {source})")
            return Result.success(moment)
        
        except Exception as e:
            logger.error(f"❌ Moment creation error: {e}")
            await self._rollback()
            return Result.failure(str(e))
    
    async def getMoment(self, userId: UUID, momentId: UUID) -> Result[Optional[Moment]]:
        """Moment owned by userId, None when missing or owned by someone else"""
        try:
            result = await self.db.execute(
                select(Moment)
                .where(Moment.id == _toUuid(momentId))
                .where(Moment.user_id == userId)
            )
            return Result.success(result.scalar_one_or_none())
        except Exception as e:
            logger.error(f"❌ Moment fetch error: {e}")
            return Result.failure(str(e))
    
    async def listRecentMoments(self, userId: UUID, limit: int = 20) -> Result[List[Moment]]:
        try:
            result = await self.db.execute(
                select(Moment)
                .where(Moment.user_id == userId)
                .order_by(desc(Moment.created_at))
                .limit(limit)
            )
            return Result.success(list(result.scalars().all()))
        except Exception as e:
            logger.error(f"❌ Moment list error: {e}")
            return Result.failure(str(e))
    
    async def updateMoment(self, momentId: UUID, matchCount: int, processingTimeMs: int) -> Result[None]:
        """Store match count and AI processing time (the loaded Moment is not synced, refresh it)"""
        try:
            await self.db.execute(
                update(Moment)
                .where(Moment.id == momentId)
                .values(
                    gems_matched_count=matchCount,
                    ai_processing_time_ms=processingTimeMs,
                    updated_at=datetime.utcnow()
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return Result.success()
        except Exception as e:
            logger.error(f"❌ Moment match-count update error: {e}")
            await self._rollback()
            return Result.failure(str(e))
    
    async def updateMomentContext(
        self,
        moment: Moment,
        userContext: Optional[str],
        detectedEventType: Optional[str] = None
    ) -> Result[Moment]:
        try:
            moment.user_context = userContext or None
            if detectedEventType:
                moment.detected_event_type = detectedEventType
            moment.updated_at = datetime.utcnow()
            await self.db.commit()
            return Result.success(moment)
        except Exception as e:
            logger.error(f"❌ Failed to update moment context: {e}")
            await self._rollback()
            return Result.failure(str(e))
    
    async def updateMomentStatus(self, moment: Moment, status: str) -> Result[Moment]:
        """active | completed | dismissed; completed stamps completed_at"""
        try:
            now = datetime.utcnow()
            moment.status = status
            moment.updated_at = now
            if status == "completed":
                moment.completed_at = now
            await self.db.commit()
            return Result.success(moment)
        except Exception as e:
            logger.error(f"❌ Failed to update moment status: {e}")
            await self._rollback()
            return Result.failure(str(e))
    
    async def refreshMoment(self, moment: Moment) -> Moment:
        """Reload counters written through Core updates; keeps the stale copy on failure"""
        try:
            await self.db.refresh(moment)
        except Exception as e:
            logger.error(f"❌ Moment refresh error: {e}")
        return moment
    
    # ============================================
    # THOUGHTS
    # ============================================
    
    async def getEligibleThoughts(self, userId: UUID) -> Result[List[Thought]]:
        """Thoughts that take part in matching (active + passive)"""
        try:
            result = await self.db.execute(
                select(Thought)
                .where(Thought.user_id == userId)
                .where(Thought.status.in_(ELIGIBLE_THOUGHT_STATUSES))
                .order_by(Thought.created_at)
            )
            return Result.success(list(result.scalars().all()))
        except Exception as e:
            logger.error(f"❌ Thoughts fetch error: {e}")
            return Result.failure(str(e))
    
    async def getThought(self, userId: UUID, thoughtId: UUID) -> Result[Optional[Thought]]:
        try:
            result = await self.db.execute(
                select(Thought)
                .where(Thought.id == _toUuid(thoughtId))
                .where(Thought.user_id == userId)
            )
            return Result.success(result.scalar_one_or_none())
        except Exception as e:
            logger.error(f"❌ Thought fetch error: {e}")
            return Result.failure(str(e))
    
    async def getThoughtContents(self, userId: UUID, thoughtIds: Iterable[str]) -> Result[Dict[str, str]]:
        """id -> content for eligible thoughts among thoughtIds"""
        ids = [_toUuid(thoughtId) for thoughtId in thoughtIds]
        if not ids:
            return Result.success({})
        try:
            result = await self.db.execute(
                select(Thought.id, Thought.content)
                .where(Thought.user_id == userId)
                .where(Thought.id.in_(ids))
                .where(Thought.status.in_(ELIGIBLE_THOUGHT_STATUSES))
            )
            return Result.success({str(row.id): row.content for row in result.all()})
        except Exception as e:
            logger.error(f"❌ Thought content fetch error: {e}")
            return Result.failure(str(e))
    
    # ============================================
    # MATCHES (moment_gems)
    # ============================================
    
    async def getMatches(self, momentId: UUID) -> Result[List[MomentThought]]:
        """Matches with their thought loaded, score descending"""
        try:
            result = await self.db.execute(
                select(MomentThought)
                .where(MomentThought.moment_id == momentId)
                .options(selectinload(MomentThought.thought))
                .order_by(desc(MomentThought.relevance_score), MomentThought.created_at)
                .execution_options(populate_existing=True)
            )
            return Result.success(list(result.scalars().all()))
        except Exception as e:
            logger.error(f"❌ Match fetch error: {e}")
            return Result.failure(str(e))
    
    async def insertMatches(
        self,
        momentId: UUID,
        userId: UUID,
        matches: List[GemMatch],
        learnedGemIds: Optional[Set[str]] = None
    ) -> Result[int]:
        """One row per match, unrated and unreviewed"""
        if not matches:
            return Result.success(0)
        
        learnedGemIds = learnedGemIds or set()
        try:
            for match in matches:
                self.db.add(MomentThought(
                    moment_id=momentId,
                    gem_id=_toUuid(match.gem_id),
                    user_id=userId,
                    relevance_score=match.relevance_score,
                    relevance_reason=match.relevance_reason,
                    match_source="both" if match.gem_id in learnedGemIds else "ai",
                    was_helpful=None,
                    was_reviewed=False,
                ))
            await self.db.commit()
            return Result.success(len(matches))
        except Exception as e:
            logger.error(f"❌ Failed to persist {len(matches)} matches: {e}")
            await self._rollback()
            return Result.failure(str(e))
    
    async def upgradeMatches(self, upgrades: List[Tuple[MomentThought, GemMatch]]) -> Result[int]:
        """Raise score and replace reason on existing rows"""
        if not upgrades:
            return Result.success(0)
        try:
            for row, match in upgrades:
                row.relevance_score = match.relevance_score
                row.relevance_reason = match.relevance_reason
            await self.db.commit()
            return Result.success(len(upgrades))
        except Exception as e:
            logger.error(f"❌ Failed to upgrade {len(upgrades)} matches: {e}")
            await self._rollback()
            return Result.failure(str(e))
    
    async def markMatchFeedback(self, momentId: UUID, thoughtId: UUID, helpful: bool) -> Result[bool]:
        """was_reviewed = True, was_helpful = helpful; value is False when no match row exists"""
        try:
            result = await self.db.execute(
                update(MomentThought)
                .where(MomentThought.moment_id == momentId)
                .where(MomentThought.gem_id == _toUuid(thoughtId))
                .values(was_helpful=helpful, was_reviewed=True)
            )
            await self.db.commit()
            return Result.success(result.rowcount > 0)
        except Exception as e:
            logger.error(f"❌ Failed to record match feedback: {e}")
            await self._rollback()
            return Result.failure(str(e))
    
    # ============================================
    # RECURRING LOOKUP
    # ============================================
    
    async def findPreviousSeriesMoment(self, userId: UUID, externalEventId: str) -> Result[Optional[Moment]]:
        """Latest moment of the same recurring series, excluding this exact instance"""
        baseEventId = externalEventId.split("_")[0]
        try:
            result = await self.db.execute(
                select(Moment)
                .where(Moment.user_id == userId)
                .where(Moment.calendar_event_id.like(f"{baseEventId}%"))
                .where(Moment.calendar_event_id != externalEventId)
                .order_by(desc(Moment.created_at))
                .limit(1)
            )
            return Result.success(result.scalar_one_or_none())
        except Exception as e:
            logger.error(f"❌ Recurring lookup error: {e}")
            return Result.failure(str(e))
    
    async def listTitledMoments(self, userId: UUID, limit: int = 50) -> Result[List[Moment]]:
        try:
            result = await self.db.execute(
                select(Moment)
                .where(Moment.user_id == userId)
                .where(Moment.calendar_event_title.is_not(None))
                .order_by(desc(Moment.created_at))
                .limit(limit)
            )
            return Result.success(list(result.scalars().all()))
        except Exception as e:
            logger.error(f"❌ Titled moment lookup error: {e}")
            return Result.failure(str(e))
    
    async def getHelpfulThoughtIds(self, momentId: UUID) -> Result[List[str]]:
        try:
            result = await self.db.execute(
                select(MomentThought.gem_id)
                .where(MomentThought.moment_id == momentId)
                .where(MomentThought.was_helpful.is_(True))
            )
            return Result.success([str(gemId) for gemId in result.scalars().all()])
        except Exception as e:
            logger.error(f"❌ Helpful thought lookup error: {e}")
            return Result.failure(str(e))
