"""
Difficulty tiers - ordered and bounded.
"""

from enum import Enum
from typing import List, Optional


class DifficultyTier(str, Enum):
    """Difficulty tiers, declared easiest first."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXAM = "exam"  # terminal: nothing to advance to

    @classmethod
    def ordered(cls) -> List["DifficultyTier"]:
        return list(cls)

    @property
    def rank(self) -> int:
        return DifficultyTier.ordered().index(self)

    @property
    def is_terminal(self) -> bool:
        return self is DifficultyTier.EXAM

    def next_tier(self) -> Optional["DifficultyTier"]:
        """The tier above this one, or None at the top."""
        tiers = DifficultyTier.ordered()
        return tiers[self.rank + 1] if self.rank + 1 < len(tiers) else None

    def previous_tier(self) -> Optional["DifficultyTier"]:
        """The tier below this one, or None at the bottom."""
        return DifficultyTier.ordered()[self.rank - 1] if self.rank > 0 else None

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, DifficultyTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, DifficultyTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, DifficultyTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, DifficultyTier):
            return NotImplemented
        return self.rank >= other.rank


NON_TERMINAL_TIERS = [t for t in DifficultyTier if not t.is_terminal]
