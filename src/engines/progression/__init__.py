"""
Progression Engine - tier advancement and in-session difficulty drift.

Tiers: easy < medium < hard < exam

Advancement (cross-session, per learner/skill/tier):
- Streak path: required_streak consecutive correct
- Accuracy path: required_accuracy over min_attempts or more
- Two misses in a row reset the streak

Drift (one practice session):
- 2 correct in a row, or 3+ at the tier with >= 70%: up one tier
- 2 incorrect in a row: down one tier
"""

from src.engines.progression.tiers import DifficultyTier, NON_TERMINAL_TIERS
from src.engines.progression.records import (
    AdvancePath,
    DriftDecision,
    DriftDirection,
    GateDecision,
    PerformanceRecord,
    TierChange,
)
from src.engines.progression.thresholds import (
    DEFAULT_THRESHOLDS,
    EXAM_READY_THRESHOLD,
    FAST_TRACK_THRESHOLD,
    ThresholdSpec,
    ThresholdTable,
    default_table,
    get_threshold,
)
from src.engines.progression.streak_tracker import is_struggling, record_attempt, reset_record
from src.engines.progression.mastery_evaluator import accuracy_percent, check_mastery
from src.engines.progression.drift_controller import DifficultyDriftController
from src.engines.progression.feedback import calibrated_feedback, fast_track_tier, is_exam_ready

__all__ = [
    "DifficultyTier",
    "NON_TERMINAL_TIERS",
    "AdvancePath",
    "DriftDecision",
    "DriftDirection",
    "GateDecision",
    "PerformanceRecord",
    "TierChange",
    "DEFAULT_THRESHOLDS",
    "EXAM_READY_THRESHOLD",
    "FAST_TRACK_THRESHOLD",
    "ThresholdSpec",
    "ThresholdTable",
    "default_table",
    "get_threshold",
    "is_struggling",
    "record_attempt",
    "reset_record",
    "accuracy_percent",
    "check_mastery",
    "DifficultyDriftController",
    "calibrated_feedback",
    "fast_track_tier",
    "is_exam_ready",
]
