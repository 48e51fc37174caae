"""
Progress Store - DB-backed get/put for performance records and current tiers.

The engine itself is pure; this store is the caller that loads a record,
runs it through the tracker and evaluator, and persists the result.
"""

import uuid
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.engines.progression.mastery_evaluator import check_mastery
from src.engines.progression.records import GateDecision, PerformanceRecord
from src.engines.progression.streak_tracker import record_attempt, reset_record
from src.engines.progression.thresholds import ThresholdTable
from src.engines.progression.tiers import DifficultyTier
from src.kernel.errors import InvalidTransitionError
from src.kernel.events.event_store import EventStore
from src.kernel.models.event_log import EventType
from src.kernel.models.progress import LearnerSkillTier, PerformanceRecordRow
from src.logging_config import get_logger

logger = get_logger(__name__)


class AttemptOutcome(BaseModel):
    """What recording one attempt produced."""

    tier: DifficultyTier
    record: PerformanceRecord
    decision: Optional[GateDecision] = None  # None at the terminal tier


class ProgressStore:
    """
    Loads and saves the engine's per-(learner, skill, tier) state.

    Every record mutation goes through record_attempt(); tier changes go through
    advance_tier() or set_tier(), both of which reset the records involved.
    """

    def __init__(self, session: AsyncSession, table: Optional[ThresholdTable] = None):
        self.session = session
        self.table = table
        self.event_store = EventStore(session)

    async def _get_tier_row(self, learner_id: uuid.UUID, skill_id: uuid.UUID) -> Optional[LearnerSkillTier]:
        q = select(LearnerSkillTier).where(
            LearnerSkillTier.learner_id == learner_id,
            LearnerSkillTier.skill_id == skill_id,
        )
        result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def _get_record_row(
        self,
        learner_id: uuid.UUID,
        skill_id: uuid.UUID,
        tier: DifficultyTier,
    ) -> Optional[PerformanceRecordRow]:
        q = select(PerformanceRecordRow).where(
            PerformanceRecordRow.learner_id == learner_id,
            PerformanceRecordRow.skill_id == skill_id,
            PerformanceRecordRow.tier == tier.value,
        )
        result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def get_current_tier(self, learner_id: uuid.UUID, skill_id: uuid.UUID) -> DifficultyTier:
        """Current tier for the skill; learners start at easy."""
        row = await self._get_tier_row(learner_id, skill_id)
        return DifficultyTier(row.tier) if row else DifficultyTier.EASY

    async def get_record(
        self,
        learner_id: uuid.UUID,
        skill_id: uuid.UUID,
        tier: DifficultyTier,
    ) -> PerformanceRecord:
        """Stored record, or an empty one if the learner has not attempted this tier."""
        row = await self._get_record_row(learner_id, skill_id, tier)
        if row is None:
            return reset_record()
        return PerformanceRecord(
            consecutive_correct=row.consecutive_correct,
            total_attempts=row.total_attempts,
            correct_attempts=row.correct_attempts,
            recent_outcomes=tuple(row.recent_outcomes or ()),
        )

    async def put_record(
        self,
        learner_id: uuid.UUID,
        skill_id: uuid.UUID,
        tier: DifficultyTier,
        record: PerformanceRecord,
    ) -> None:
        row = await self._get_record_row(learner_id, skill_id, tier)
        if row is None:
            row = PerformanceRecordRow(learner_id=learner_id, skill_id=skill_id, tier=tier.value)
            self.session.add(row)
        row.consecutive_correct = record.consecutive_correct
        row.total_attempts = record.total_attempts
        row.correct_attempts = record.correct_attempts
        row.recent_outcomes = list(record.recent_outcomes)
        await self.session.flush()

    def evaluate(self, tier: DifficultyTier, record: PerformanceRecord) -> Optional[GateDecision]:
        if tier.is_terminal:
            return None
        return check_mastery(tier, record, self.table)

    async def check(self, learner_id: uuid.UUID, skill_id: uuid.UUID) -> AttemptOutcome:
        """Current tier, record and decision without mutating anything."""
        tier = await self.get_current_tier(learner_id, skill_id)
        record = await self.get_record(learner_id, skill_id, tier)
        return AttemptOutcome(tier=tier, record=record, decision=self.evaluate(tier, record))

    async def record_attempt(
        self,
        learner_id: uuid.UUID,
        skill_id: uuid.UUID,
        is_correct: bool,
    ) -> AttemptOutcome:
        """Fold one graded attempt into the learner's record at their current tier."""
        tier = await self.get_current_tier(learner_id, skill_id)
        record = record_attempt(await self.get_record(learner_id, skill_id, tier), is_correct)
        await self.put_record(learner_id, skill_id, tier, record)
        decision = self.evaluate(tier, record)

        await self.event_store.log(
            event_type=EventType.ATTEMPT_RECORDED,
            entity_type="skill",
            entity_id=skill_id,
            learner_id=learner_id,
            payload={
                "tier": tier,
                "is_correct": is_correct,
                "can_advance": decision.can_advance if decision else False,
            },
        )
        return AttemptOutcome(tier=tier, record=record, decision=decision)

    async def set_tier(
        self,
        learner_id: uuid.UUID,
        skill_id: uuid.UUID,
        tier: DifficultyTier,
    ) -> DifficultyTier:
        """Move the learner to `tier`, resetting the records of both the old and new tier."""
        row = await self._get_tier_row(learner_id, skill_id)
        previous = DifficultyTier(row.tier) if row else DifficultyTier.EASY
        if row is None:
            row = LearnerSkillTier(learner_id=learner_id, skill_id=skill_id, tier=tier.value)
            self.session.add(row)
        if previous is tier:
            await self.session.flush()
            return tier

        row.tier = tier.value
        for affected in (previous, tier):
            await self.put_record(learner_id, skill_id, affected, reset_record())
        logger.info(
            "Tier changed",
            extra={
                "learner_id": str(learner_id),
                "skill_id": str(skill_id),
                "from_tier": previous.value,
                "to_tier": tier.value,
            },
        )
        return tier

    async def advance_tier(self, learner_id: uuid.UUID, skill_id: uuid.UUID) -> DifficultyTier:
        """
        Promote one tier if the current record meets the bar.

        Raises:
            InvalidTransitionError: at the terminal tier or when the bar is not met
        """
        outcome = await self.check(learner_id, skill_id)
        above = outcome.tier.next_tier()
        if above is None or outcome.decision is None:
            raise InvalidTransitionError(f"No tier above {outcome.tier.value}")
        if not outcome.decision.can_advance:
            raise InvalidTransitionError(
                f"Advancement bar for {outcome.tier.value} not met: {outcome.decision.message}"
            )

        await self.event_store.log(
            event_type=EventType.TIER_ADVANCED,
            entity_type="skill",
            entity_id=skill_id,
            learner_id=learner_id,
            payload={
                "from_tier": outcome.tier,
                "to_tier": above,
                "path_used": outcome.decision.path_used,
            },
        )
        return await self.set_tier(learner_id, skill_id, above)
