"""
Mastery Evaluator - decides whether a learner has met the advancement bar for a tier.

Two ways through:
- Streak path: required_streak consecutive correct answers.
- Accuracy path: required_accuracy over at least min_attempts attempts.

The streak path wins ties. The attempt floor keeps a lucky 2-for-2 off the
accuracy path.
"""

import math
from typing import Optional

from src.engines.progression.records import AdvancePath, GateDecision, PerformanceRecord
from src.engines.progression.thresholds import ThresholdSpec, ThresholdTable, default_table
from src.engines.progression.tiers import DifficultyTier


# Points below required_accuracy that still count as borderline
BORDERLINE_MARGIN = 5

# Share of the accuracy bar credited for attempts made before the floor is reached
PRE_FLOOR_CREDIT = 0.5


def accuracy_percent(record: PerformanceRecord) -> int:
    """Correct share of all attempts, rounded half-up to a whole percent."""
    if record.total_attempts == 0:
        return 0
    return int(math.floor(100 * record.correct_attempts / record.total_attempts + 0.5))


def _progress_message(
    spec: ThresholdSpec,
    record: PerformanceRecord,
    streak_progress: float,
    accuracy_progress: float,
) -> str:
    if streak_progress > accuracy_progress:
        remaining = spec.required_streak - record.consecutive_correct
        return f"{remaining} more correct in a row to advance"
    if record.total_attempts < spec.min_attempts:
        return f"{spec.min_attempts - record.total_attempts} more attempts needed"
    needed = math.ceil(spec.required_accuracy * record.total_attempts / 100 - record.correct_attempts)
    return f"Need {needed} more correct for {spec.required_accuracy:g}% accuracy"


def check_mastery(
    tier: DifficultyTier,
    record: PerformanceRecord,
    table: Optional[ThresholdTable] = None,
) -> GateDecision:
    """
    Evaluate a performance record against the tier's threshold.

    Pure: the same tier, record and table always give the same decision.

    Args:
        tier: Non-terminal tier the record belongs to
        record: Rolling performance at that tier
        table: Threshold table to use (defaults to the shared table)

    Returns:
        GateDecision with the path used, a 0-1 progress fraction for progress
        bars, the borderline flag and a short message for the learner.
    """
    spec = (table or default_table()).get_threshold(tier)

    accuracy = accuracy_percent(record)
    has_floor = record.total_attempts >= spec.min_attempts
    streak_path = record.consecutive_correct >= spec.required_streak
    accuracy_path = has_floor and accuracy >= spec.required_accuracy

    if streak_path:
        return GateDecision(
            can_advance=True,
            path_used=AdvancePath.STREAK,
            progress_fraction=1.0,
            is_borderline=False,
            accuracy=accuracy,
            message=f"{spec.required_streak} correct in a row! Level up!",
        )
    if accuracy_path:
        return GateDecision(
            can_advance=True,
            path_used=AdvancePath.ACCURACY,
            progress_fraction=1.0,
            is_borderline=False,
            accuracy=accuracy,
            message=f"{accuracy}% accuracy achieved! Level up!",
        )

    streak_progress = min(record.consecutive_correct / spec.required_streak, 1.0)
    if has_floor:
        accuracy_progress = min(accuracy / spec.required_accuracy, 1.0)
    else:
        accuracy_progress = PRE_FLOOR_CREDIT * record.total_attempts / spec.min_attempts

    return GateDecision(
        can_advance=False,
        path_used=AdvancePath.NONE,
        progress_fraction=max(streak_progress, accuracy_progress),
        is_borderline=has_floor and accuracy >= spec.required_accuracy - BORDERLINE_MARGIN,
        accuracy=accuracy,
        message=_progress_message(spec, record, streak_progress, accuracy_progress),
    )
