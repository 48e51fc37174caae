"""
Learner-facing helpers: tier-calibrated feedback, fast-track start tier, exam readiness.
"""

import random
from typing import Optional

from src.engines.progression.thresholds import EXAM_READY_THRESHOLD, FAST_TRACK_THRESHOLD
from src.engines.progression.tiers import DifficultyTier


# Existing mastery (%) at which an easy start becomes a medium start
MEDIUM_START_THRESHOLD = 60

ENCOURAGEMENTS = [
    "Let's work through this together.",
    "Good attempt! Let's see where to adjust.",
    "Almost there! Let's review the approach.",
]


def calibrated_feedback(
    is_correct: bool,
    tier: DifficultyTier,
    consecutive_correct: int,
    rng: Optional[random.Random] = None,
) -> str:
    """Celebration scaled to how hard the item was; steady encouragement otherwise."""
    if not is_correct:
        return (rng or random).choice(ENCOURAGEMENTS)
    if tier is DifficultyTier.EASY:
        return "Nice streak!" if consecutive_correct >= 3 else "Correct!"
    if tier is DifficultyTier.MEDIUM:
        return "Excellent work!" if consecutive_correct >= 3 else "Nice work!"
    if consecutive_correct >= 2:
        return "Outstanding! That was challenging!"
    return "Excellent! That was a tough one!"


def fast_track_tier(current_tier: DifficultyTier, existing_mastery: float) -> DifficultyTier:
    """Starting tier for a learner who already shows mastery of the topic."""
    if existing_mastery >= FAST_TRACK_THRESHOLD:
        return max(current_tier, DifficultyTier.HARD)
    if existing_mastery >= MEDIUM_START_THRESHOLD and current_tier is DifficultyTier.EASY:
        return DifficultyTier.MEDIUM
    return current_tier


def is_exam_ready(exam_score: float) -> bool:
    return exam_score >= EXAM_READY_THRESHOLD
