"""
Threshold Table - advancement requirements per difficulty tier.

Easy -> Medium:  3 consecutive correct OR 75% over 5+ attempts
Medium -> Hard:  3 consecutive correct OR 75% over 5+ attempts
Hard -> Exam:    4 consecutive correct OR 80% over 7+ attempts (higher bar)

The table is validated when it is built and again at application startup;
lookups never fail for a validated table.
"""

import math
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from src.engines.progression.tiers import NON_TERMINAL_TIERS, DifficultyTier
from src.kernel.errors import ConfigurationError


# Topic exam score (%) that counts as exam-ready
EXAM_READY_THRESHOLD = 70

# Existing mastery (%) at or above which a learner skips straight to hard
FAST_TRACK_THRESHOLD = 80


class ThresholdSpec(BaseModel):
    """Advancement requirements for one tier."""

    model_config = ConfigDict(frozen=True)

    required_streak: int
    required_accuracy: float  # percent, (0, 100]
    min_attempts: int

    @property
    def required_passes(self) -> int:
        """Correct answers needed to hit required_accuracy at min_attempts."""
        return math.ceil(self.required_accuracy * self.min_attempts / 100)

    def problems(self) -> List[str]:
        """Consistency problems with these requirements; empty when valid."""
        found = []
        if self.required_streak <= 0:
            found.append(f"required_streak must be > 0 (got {self.required_streak})")
        if not 0 < self.required_accuracy <= 100:
            found.append(f"required_accuracy must be in (0, 100] (got {self.required_accuracy})")
        if self.min_attempts < self.required_streak:
            found.append(
                f"min_attempts ({self.min_attempts}) must be >= required_streak ({self.required_streak})"
            )
        if self.required_passes > self.min_attempts:
            found.append(
                f"{self.required_accuracy}% of {self.min_attempts} attempts is not achievable"
            )
        return found


DEFAULT_THRESHOLDS: Dict[DifficultyTier, ThresholdSpec] = {
    DifficultyTier.EASY: ThresholdSpec(required_streak=3, required_accuracy=75, min_attempts=5),
    DifficultyTier.MEDIUM: ThresholdSpec(required_streak=3, required_accuracy=75, min_attempts=5),
    DifficultyTier.HARD: ThresholdSpec(required_streak=4, required_accuracy=80, min_attempts=7),
}


class ThresholdTable:
    """Maps each non-terminal tier to its ThresholdSpec."""

    def __init__(self, thresholds: Optional[Mapping[DifficultyTier, ThresholdSpec]] = None):
        self._thresholds = dict(DEFAULT_THRESHOLDS if thresholds is None else thresholds)
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError unless every non-terminal tier has a consistent spec."""
        errors = []
        for tier in NON_TERMINAL_TIERS:
            spec = self._thresholds.get(tier)
            if spec is None:
                errors.append(f"{tier.value}: missing threshold entry")
                continue
            errors.extend(f"{tier.value}: {p}" for p in spec.problems())
        for tier in self._thresholds:
            if tier.is_terminal:
                errors.append(f"{tier.value}: terminal tier cannot have a threshold")
        if errors:
            raise ConfigurationError("Invalid threshold table: " + "; ".join(errors))

    def get_threshold(self, tier: DifficultyTier) -> ThresholdSpec:
        """Get the advancement requirements for a non-terminal tier."""
        try:
            return self._thresholds[tier]
        except KeyError:
            raise ConfigurationError(f"No threshold for tier {tier.value!r}") from None

    def items(self):
        return self._thresholds.items()


_default_table: Optional[ThresholdTable] = None


def default_table() -> ThresholdTable:
    """The shared default table, built (and validated) on first use."""
    global _default_table
    if _default_table is None:
        _default_table = ThresholdTable()
    return _default_table


def get_threshold(tier: DifficultyTier) -> ThresholdSpec:
    """Look up a tier in the default table."""
    return default_table().get_threshold(tier)
