"""
Difficulty Drift Controller - retunes item difficulty within one practice session.

Reacts faster than the cross-session mastery record: two right in a row
promotes, two wrong in a row demotes, and everything tied to the tier resets
on every change. It never blocks progress, so it has no error states.
"""

from typing import List

from src.engines.progression.records import (
    DriftDecision,
    DriftDirection,
    PerformanceRecord,
    TierChange,
)
from src.engines.progression.tiers import DifficultyTier
from src.logging_config import get_logger

logger = get_logger(__name__)


class DifficultyDriftController:
    """
    Session-scoped promote/hold/demote decisions, one call per graded answer.

    Promote: 2 correct in a row, or 3+ exercises at the tier with >= 70% accuracy.
    Demote:  2 incorrect in a row.
    Promotion is tested first; demotion only when promotion did not fire,
    which includes a promotion blocked at max_tier.
    """

    PROMOTE_STREAK = 2
    PROMOTE_MIN_EXERCISES = 3
    PROMOTE_ACCURACY = 0.7
    DEMOTE_STREAK = 2

    def __init__(
        self,
        start_tier: DifficultyTier = DifficultyTier.EASY,
        max_tier: DifficultyTier = DifficultyTier.EXAM,
    ):
        if start_tier > max_tier:
            raise ValueError(f"start_tier {start_tier.value} is above max_tier {max_tier.value}")
        self.tier = start_tier
        self.max_tier = max_tier
        self.consecutive_correct = 0
        self.consecutive_incorrect = 0
        self.exercises_at_tier = 0
        self.correct_at_tier = 0
        self.exercises_answered = 0
        self.exercises_correct = 0
        self.progressions: List[TierChange] = []

    @property
    def tier_accuracy(self) -> float:
        if self.exercises_at_tier == 0:
            return 0.0
        return self.correct_at_tier / self.exercises_at_tier

    @property
    def tier_record(self) -> PerformanceRecord:
        """Snapshot of performance at the current tier in this session."""
        return PerformanceRecord(
            consecutive_correct=self.consecutive_correct,
            total_attempts=self.exercises_at_tier,
            correct_attempts=self.correct_at_tier,
        )

    def _promotion_earned(self) -> bool:
        if self.consecutive_correct >= self.PROMOTE_STREAK:
            return True
        return (
            self.exercises_at_tier >= self.PROMOTE_MIN_EXERCISES
            and self.tier_accuracy >= self.PROMOTE_ACCURACY
        )

    def _move_to(self, tier: DifficultyTier) -> None:
        self.progressions.append(
            TierChange(from_tier=self.tier, to_tier=tier, after_exercise=self.exercises_answered)
        )
        logger.debug(
            "Session difficulty changed",
            extra={"from_tier": self.tier.value, "to_tier": tier.value},
        )
        self.tier = tier
        self.consecutive_correct = 0
        self.consecutive_incorrect = 0
        self.exercises_at_tier = 0
        self.correct_at_tier = 0

    def on_answer(self, is_correct: bool) -> DriftDecision:
        """Record one graded answer and decide whether the session tier moves."""
        self.exercises_answered += 1
        self.exercises_at_tier += 1
        if is_correct:
            self.exercises_correct += 1
            self.correct_at_tier += 1
            self.consecutive_correct += 1
            self.consecutive_incorrect = 0
        else:
            self.consecutive_correct = 0
            self.consecutive_incorrect += 1

        above = self.tier.next_tier()
        # A promotion blocked by the cap is a no-op, so demotion is still tested
        if self._promotion_earned() and above is not None and above <= self.max_tier:
            self._move_to(above)
            return DriftDecision(tier=self.tier, changed=True, direction=DriftDirection.UP)

        below = self.tier.previous_tier()
        if self.consecutive_incorrect >= self.DEMOTE_STREAK and below is not None:
            self._move_to(below)
            return DriftDecision(tier=self.tier, changed=True, direction=DriftDirection.DOWN)

        return DriftDecision(tier=self.tier, changed=False, direction=DriftDirection.NONE)
