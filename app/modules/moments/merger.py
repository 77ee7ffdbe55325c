"""
Match Merger
Folds a fresh matching result into a moment's persisted matches.

Enrichment is additive:
- thought in both: keep the row, take the new score/reason only if strictly higher
- thought only in the new result: insert
- thought only in the old rows: untouched
"""
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple
from uuid import UUID

from app.models import MomentThought
from app.modules.matching.types import GemMatch
from app.modules.moments.repository import MomentStore
from app.utils.logger import logger


@dataclass
class MergePlan:
    toInsert: List[GemMatch] = field(default_factory=list)
    toUpgrade: List[Tuple[MomentThought, GemMatch]] = field(default_factory=list)
    unchanged: int = 0


@dataclass
class MergeOutcome:
    inserted: int
    upgraded: int
    totalMatches: int
    errors: List[str] = field(default_factory=list)


def planMerge(existing: List[MomentThought], fresh: List[GemMatch]) -> MergePlan:
    """Pure merge decision, no I/O"""
    byGemId = {str(row.gem_id): row for row in existing}
    plan = MergePlan()
    planned: Set[str] = set()

    for match in fresh:
        if match.gem_id in planned:
            continue
        planned.add(match.gem_id)

        row = byGemId.get(match.gem_id)
        if row is None:
            plan.toInsert.append(match)
        elif match.relevance_score > (row.relevance_score or 0):
            plan.toUpgrade.append((row, match))
        else:
            plan.unchanged += 1

    return plan


async def mergeMatches(
    store: MomentStore,
    momentId: UUID,
    userId: UUID,
    existing: List[MomentThought],
    fresh: List[GemMatch],
    learnedGemIds: Optional[Set[str]] = None
) -> MergeOutcome:
    """
    Apply planMerge through the store

    totalMatches is the moment's row count after the merge (existing rows plus
    the inserts that were actually persisted). Write failures are reported in
    errors, never raised.
    """
    plan = planMerge(existing, fresh)
    errors: List[str] = []

    upgraded = 0
    if plan.toUpgrade:
        upgradeResult = await store.upgradeMatches(plan.toUpgrade)
        if upgradeResult.ok:
            upgraded = upgradeResult.value
        else:
            errors.append(upgradeResult.error)

    inserted = 0
    if plan.toInsert:
        insertResult = await store.insertMatches(momentId, userId, plan.toInsert, learnedGemIds)
        if insertResult.ok:
            inserted = insertResult.value
        else:
            errors.append(insertResult.error)

    logger.info(
        f"🔀 Merge for moment {momentId}: +{inserted} new, {upgraded} upgraded, "
        f"{plan.unchanged} kept"
    )

    return MergeOutcome(
        inserted=inserted,
        upgraded=upgraded,
        totalMatches=len(existing) + inserted,
        errors=errors,
    )
