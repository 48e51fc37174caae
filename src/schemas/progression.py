"""
Pydantic schemas for the progression API (mastery records and practice sessions).
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from src.engines.progression.records import (
    AdvancePath,
    DriftDirection,
    GateDecision,
    PerformanceRecord,
    TierChange,
)
from src.engines.progression.tiers import DifficultyTier


class PerformanceRecordSchema(BaseModel):
    consecutive_correct: int
    total_attempts: int
    correct_attempts: int
    recent_outcomes: List[bool]

    @classmethod
    def from_record(cls, record: PerformanceRecord) -> "PerformanceRecordSchema":
        return cls(
            consecutive_correct=record.consecutive_correct,
            total_attempts=record.total_attempts,
            correct_attempts=record.correct_attempts,
            recent_outcomes=list(record.recent_outcomes),
        )


class GateDecisionSchema(BaseModel):
    can_advance: bool
    path_used: AdvancePath
    progress_fraction: float
    is_borderline: bool
    accuracy: int
    message: str

    @classmethod
    def from_decision(cls, decision: GateDecision) -> "GateDecisionSchema":
        return cls(**decision.model_dump())


class MasteryStatusResponse(BaseModel):
    """Learner's tier and standing for one skill unit."""

    learner_id: uuid.UUID
    skill_id: uuid.UUID
    tier: DifficultyTier
    record: PerformanceRecordSchema
    decision: Optional[GateDecisionSchema] = None  # None at the exam tier
    # Only set at the exam tier once there are attempts to judge
    exam_ready: Optional[bool] = None


class AttemptRequest(BaseModel):
    is_correct: bool


class AttemptResponse(MasteryStatusResponse):
    feedback: str


class AdvanceResponse(BaseModel):
    learner_id: uuid.UUID
    skill_id: uuid.UUID
    tier: DifficultyTier


class PracticeSessionCreate(BaseModel):
    start_tier: DifficultyTier = DifficultyTier.EASY
    existing_mastery: Optional[float] = Field(default=None, ge=0, le=100)
    max_tier: DifficultyTier = DifficultyTier.EXAM


class PracticeAnswerRequest(BaseModel):
    is_correct: bool


class PracticeSessionResponse(BaseModel):
    session_id: uuid.UUID
    tier: DifficultyTier
    exercises_answered: int
    exercises_correct: int
    progressions: List[TierChange] = []


class PracticeAnswerResponse(PracticeSessionResponse):
    changed: bool
    direction: DriftDirection
    feedback: str
