"""
Learning Store
Pattern -> thought helpfulness records.

- getLearnedThoughts: thoughts that were reliably helpful for the moment's patterns
- recordFeedback: one feedback event fans out into one record per pattern,
  written as a single batched upsert with in-SQL increments
"""
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import MomentLearning
from app.modules.matching.types import LearnedThought
from app.modules.moments.patterns import PATTERN_TYPES, PatternKey
from app.modules.moments.repository import MomentStore
from app.utils.logger import logger
from app.utils.result import Result


LEARNING_HELPFUL_THRESHOLD = 3
LEARNING_CONFIDENCE_THRESHOLD = 0.7

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def aggregateLearnedThoughts(
    records: Iterable[MomentLearning],
    contents: Optional[Dict[str, str]] = None,
    helpfulThreshold: int = LEARNING_HELPFUL_THRESHOLD,
    confidenceThreshold: float = LEARNING_CONFIDENCE_THRESHOLD
) -> List[LearnedThought]:
    """
    Pool pattern-matched records per thought and keep the trustworthy ones

    A thought qualifies when at least one of its records has
    helpful_count >= helpfulThreshold; its confidence is then
    sum(helpful) / sum(helpful + not_helpful) over all of its records and
    must reach confidenceThreshold.

    Args:
        records: learning records already filtered to the moment's patterns
        contents: id -> content; thoughts missing from it are skipped
            (retired, deleted). None keeps every thought with empty content.

    Returns:
        LearnedThought list, confidence descending
    """
    pooled: Dict[str, dict] = {}

    for record in records:
        gemId = str(record.gem_id)
        helpful = record.helpful_count or 0
        notHelpful = record.not_helpful_count or 0

        entry = pooled.setdefault(gemId, {
            "helpful": 0,
            "notHelpful": 0,
            "established": False,
            "sources": [],
        })
        entry["helpful"] += helpful
        entry["notHelpful"] += notHelpful
        entry["established"] = entry["established"] or helpful >= helpfulThreshold
        entry["sources"].append(f"{record.pattern_type}:{record.pattern_key}")

    learned: List[LearnedThought] = []
    for gemId, entry in pooled.items():
        if not entry["established"]:
            continue

        total = entry["helpful"] + entry["notHelpful"]
        if total <= 0:
            continue

        confidence = entry["helpful"] / total
        if confidence < confidenceThreshold:
            continue

        if contents is not None and gemId not in contents:
            continue

        learned.append(LearnedThought(
            gem_id=gemId,
            gem_content=contents.get(gemId, "") if contents is not None else "",
            confidence_score=confidence,
            pattern_sources=entry["sources"],
            helpful_count=entry["helpful"],
        ))

    learned.sort(key=lambda t: t.confidence_score, reverse=True)
    return learned


class LearningStore:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = MomentStore(db)

    async def getLearningRecords(self, userId: UUID, patterns: List[PatternKey]) -> Result[List[MomentLearning]]:
        """Records of userId whose (pattern_type, pattern_key) is one of patterns"""
        wanted = set(patterns)
        if not wanted:
            return Result.success([])

        try:
            result = await self.db.execute(
                select(MomentLearning)
                .where(MomentLearning.user_id == userId)
                .where(MomentLearning.pattern_key.in_({p.key for p in wanted}))
                .execution_options(populate_existing=True)
            )
            records = [
                record for record in result.scalars().all()
                if PatternKey(record.pattern_type, record.pattern_key) in wanted
            ]
            return Result.success(records)
        except Exception as e:
            logger.error(f"❌ Learning records fetch error: {e}")
            return Result.failure(str(e))

    async def getLearnedThoughts(
        self,
        userId: UUID,
        patterns: List[PatternKey],
        contents: Optional[Dict[str, str]] = None
    ) -> Result[List[LearnedThought]]:
        """
        Hints for matching

        contents (id -> thought content) is normally the candidate set of the
        current matching call; when omitted, contents are loaded from the store.
        """
        recordsResult = await self.getLearningRecords(userId, patterns)
        if not recordsResult.ok:
            return Result.failure(recordsResult.error)

        records = recordsResult.value
        if not records:
            return Result.success([])

        if contents is None:
            contentsResult = await self.store.getThoughtContents(
                userId, {str(record.gem_id) for record in records}
            )
            if not contentsResult.ok:
                return Result.failure(contentsResult.error)
            contents = contentsResult.value

        learned = aggregateLearnedThoughts(records, contents)
        if learned:
            logger.info(f"🧠 {len(learned)} learned thoughts from {len(records)} records")
        return Result.success(learned)

    async def recordFeedback(
        self,
        userId: UUID,
        gemId: UUID,
        patterns: List[PatternKey],
        helpful: bool
    ) -> Result[int]:
        """
        Upsert one record per pattern for (userId, gemId)

        helpful=True increments helpful_count and stamps last_helpful_at,
        helpful=False increments not_helpful_count. Missing records are
        created starting from zero. Value is the number of patterns written.
        """
        unique = list(dict.fromkeys(p for p in patterns if p.type in PATTERN_TYPES))
        if not unique:
            return Result.success(0)

        try:
            insert = _UPSERT_INSERTS.get(self.db.get_bind().dialect.name)
            if insert is None:
                return Result.failure(f"upsert not supported on {self.db.get_bind().dialect.name}")

            now = datetime.utcnow()
            gemUuid = gemId if isinstance(gemId, UUID) else UUID(str(gemId))
            rows = [
                {
                    "id": uuid.uuid4(),
                    "user_id": userId,
                    "pattern_type": pattern.type,
                    "pattern_key": pattern.key,
                    "gem_id": gemUuid,
                    "helpful_count": 1 if helpful else 0,
                    "not_helpful_count": 0 if helpful else 1,
                    "last_helpful_at": now if helpful else None,
                    "created_at": now,
                    "updated_at": now,
                }
                for pattern in unique
            ]

            stmt = insert(MomentLearning).values(rows)
            setValues = {
                "helpful_count": MomentLearning.helpful_count + stmt.excluded.helpful_count,
                "not_helpful_count": MomentLearning.not_helpful_count + stmt.excluded.not_helpful_count,
                "updated_at": stmt.excluded.updated_at,
            }
            if helpful:
                setValues["last_helpful_at"] = stmt.excluded.last_helpful_at

            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "pattern_type", "pattern_key", "gem_id"],
                set_=setValues
            )

            await self.db.execute(stmt)
            await self.db.commit()

            logger.info(
                f"📚 Learning recorded ({'helpful' if helpful else 'not helpful'}): "
                f"gem {gemUuid}, {len(unique)} patterns"
            )
            return Result.success(len(unique))

        except Exception as e:
            logger.error(f"❌ Learning upsert error: {e}")
            try:
                await self.db.rollback()
            except Exception as rollbackError:
                logger.error(f"❌ Rollback failed: {rollbackError}")
            return Result.failure(str(e))

    async def getLearningStats(self, userId: UUID) -> Result[dict]:
        """Record totals per pattern type and the 10 thoughts with most helpful marks"""
        try:
            result = await self.db.execute(
                select(
                    MomentLearning.pattern_type,
                    MomentLearning.gem_id,
                    MomentLearning.helpful_count
                ).where(MomentLearning.user_id == userId)
            )
            rows = result.all()
        except Exception as e:
            logger.error(f"❌ Learning stats error: {e}")
            return Result.failure(str(e))

        byPatternType = {patternType: 0 for patternType in PATTERN_TYPES}
        thoughtHelpful: Dict[str, int] = {}

        for row in rows:
            byPatternType[row.pattern_type] = byPatternType.get(row.pattern_type, 0) + 1
            gemId = str(row.gem_id)
            thoughtHelpful[gemId] = thoughtHelpful.get(gemId, 0) + (row.helpful_count or 0)

        topThoughts = sorted(
            ({"gemId": gemId, "totalHelpful": total} for gemId, total in thoughtHelpful.items()),
            key=lambda item: item["totalHelpful"],
            reverse=True
        )[:10]

        return Result.success({
            "totalLearnings": len(rows),
            "byPatternType": byPatternType,
            "topThoughts": topThoughts,
        })
