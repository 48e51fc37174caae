"""
Streak Tracker - consecutive-correct and accuracy counters with a recency penalty.

Two misses in a row reset the streak even when older history was strong, so a
learner cannot average a fresh slump out against a long stale run.
"""

from typing import Sequence

from src.engines.progression.records import RECENT_WINDOW, PerformanceRecord


# Trailing misses that force the streak back to zero
RECENCY_RESET_COUNT = 2


def reset_record() -> PerformanceRecord:
    """Empty record used at first attempt and after any tier change."""
    return PerformanceRecord()


def _ends_in_misses(outcomes: Sequence[bool]) -> bool:
    if len(outcomes) < RECENCY_RESET_COUNT:
        return False
    return not any(outcomes[-RECENCY_RESET_COUNT:])


def is_struggling(record: PerformanceRecord) -> bool:
    """True when the last RECENCY_RESET_COUNT outcomes were all wrong."""
    return _ends_in_misses(record.recent_outcomes)


def record_attempt(record: PerformanceRecord, is_correct: bool) -> PerformanceRecord:
    """Fold one graded attempt into the record. Returns a new record; the caller persists it."""
    recent = (record.recent_outcomes + (is_correct,))[-RECENT_WINDOW:]

    if _ends_in_misses(recent):
        consecutive = 0
    elif is_correct:
        consecutive = record.consecutive_correct + 1
    else:
        consecutive = 0

    return PerformanceRecord(
        consecutive_correct=consecutive,
        total_attempts=record.total_attempts + 1,
        correct_attempts=record.correct_attempts + (1 if is_correct else 0),
        recent_outcomes=recent,
    )
