"""
Pydantic schemas for the skip-ahead (prerequisite gate) API.

Question views never carry the expected answer.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from src.engines.prerequisites.types import PrerequisiteTopic
from src.orchestration.prerequisite_gate import GateState, PrerequisiteGate


class SkipAheadCreate(BaseModel):
    learner_id: uuid.UUID
    target_topic_id: uuid.UUID
    target_topic_name: str = Field(min_length=1, max_length=255)


class SkipAheadAnswer(BaseModel):
    answer: str = Field(min_length=1, max_length=2000)


class PrerequisiteSchema(BaseModel):
    id: str
    name: str
    mastery_percentage: float
    is_weak: bool

    @classmethod
    def from_topic(cls, topic: PrerequisiteTopic) -> "PrerequisiteSchema":
        return cls(**topic.model_dump())


class QuestionView(BaseModel):
    id: str
    question: str
    prerequisite_topic_name: str
    index: int
    total: int


class SkipAheadResponse(BaseModel):
    """Snapshot of a gate for the skip-ahead dialog."""

    gate_id: uuid.UUID
    state: GateState
    target_topic_id: str
    target_topic_name: str
    prerequisites: List[PrerequisiteSchema] = []
    question_count: int = 0
    current_question: Optional[QuestionView] = None
    answered: int = 0
    correct: int = 0
    score: float = 0.0  # share of questions answered correctly with high confidence
    error_message: Optional[str] = None
    can_proceed: bool = False
    # Review target when the quiz failed
    redirect_topic: Optional[PrerequisiteSchema] = None

    @classmethod
    def from_gate(cls, gate: PrerequisiteGate) -> "SkipAheadResponse":
        question = gate.current_question
        weakest = gate.weakest_prerequisite()
        show_redirect = gate.state in (GateState.FAILED, GateState.ERROR)
        return cls(
            gate_id=gate.id,
            state=gate.state,
            target_topic_id=gate.target_topic_id,
            target_topic_name=gate.target_topic_name,
            prerequisites=[PrerequisiteSchema.from_topic(p) for p in gate.prerequisites],
            question_count=len(gate.questions),
            current_question=QuestionView(
                id=question.id,
                question=question.question,
                prerequisite_topic_name=question.prerequisite_topic_name,
                index=gate.current_index,
                total=len(gate.questions),
            ) if question else None,
            answered=len(gate.answers),
            correct=gate.correct_count,
            score=gate.score_fraction,
            error_message=gate.error_message,
            can_proceed=gate.can_proceed,
            redirect_topic=PrerequisiteSchema.from_topic(weakest) if show_redirect and weakest else None,
        )
