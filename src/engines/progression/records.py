"""
Value types shared by the progression engine.
"""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.engines.progression.tiers import DifficultyTier


RECENT_WINDOW = 5


class PerformanceRecord(BaseModel):
    """
    Rolling performance for one learner, one skill unit, one tier.

    Immutable: updates produce a new record via record_attempt().
    """

    model_config = ConfigDict(frozen=True)

    consecutive_correct: int = Field(default=0, ge=0)
    total_attempts: int = Field(default=0, ge=0)
    correct_attempts: int = Field(default=0, ge=0)
    recent_outcomes: Tuple[bool, ...] = Field(default=(), max_length=RECENT_WINDOW)  # most recent last

    @model_validator(mode="after")
    def _check_counts(self) -> "PerformanceRecord":
        if self.correct_attempts > self.total_attempts:
            raise ValueError("correct_attempts cannot exceed total_attempts")
        return self


class AdvancePath(str, Enum):
    """Which qualification path (if any) satisfied the advancement bar."""
    STREAK = "streak"
    ACCURACY = "accuracy"
    NONE = "none"


class GateDecision(BaseModel):
    """Result of a mastery check."""

    model_config = ConfigDict(frozen=True)

    can_advance: bool
    path_used: AdvancePath
    progress_fraction: float = Field(ge=0.0, le=1.0)
    is_borderline: bool
    accuracy: int  # rounded percent
    message: str


class DriftDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    NONE = "none"


class DriftDecision(BaseModel):
    """Outcome of one answer fed to the drift controller."""

    model_config = ConfigDict(frozen=True)

    tier: DifficultyTier
    changed: bool
    direction: DriftDirection


class TierChange(BaseModel):
    """One step in a session's difficulty history."""

    model_config = ConfigDict(frozen=True)

    from_tier: DifficultyTier
    to_tier: DifficultyTier
    after_exercise: int
