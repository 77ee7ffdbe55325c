"""
Feedback Recorder
The only write path into the learning records.
"""
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.moments.learning import LearningStore
from app.modules.moments.patterns import extractMomentPatterns
from app.modules.moments.repository import MomentStore
from app.utils.exceptions import NotFoundException
from app.utils.logger import logger
from app.utils.result import Result


class FeedbackRecorder:

    def __init__(self, db: AsyncSession):
        self.store = MomentStore(db)
        self.learning = LearningStore(db)

    async def recordFeedback(
        self,
        userId: UUID,
        momentId: UUID,
        thoughtId: UUID,
        helpful: bool
    ) -> Result[int]:
        """
        Mark a matched thought helpful / not helpful and learn from it

        Flow:
        1. Moment and thought must both belong to userId (404 otherwise)
        2. moment_gems row -> was_reviewed = True, was_helpful = helpful
        3. Patterns of the moment -> one learning upsert per pattern

        Returns:
            Result with the number of patterns written; failure when the
            learning write failed
        """
        momentResult = await self.store.getMoment(userId, momentId)
        if not momentResult.ok:
            return Result.failure(momentResult.error)
        moment = momentResult.value
        if moment is None:
            raise NotFoundException("Moment not found")

        thoughtResult = await self.store.getThought(userId, thoughtId)
        if not thoughtResult.ok:
            return Result.failure(thoughtResult.error)
        thought = thoughtResult.value
        if thought is None:
            raise NotFoundException("Thought not found")

        markResult = await self.store.markMatchFeedback(moment.id, thought.id, helpful)
        if not markResult.ok:
            logger.error(f"❌ Match feedback not stored for moment {moment.id}: {markResult.error}")
        elif not markResult.value:
            logger.info(f"ℹ️ No match row for moment {moment.id} / thought {thought.id}, learning only")

        patterns = extractMomentPatterns(moment)
        return await self.learning.recordFeedback(userId, thought.id, patterns, helpful)
