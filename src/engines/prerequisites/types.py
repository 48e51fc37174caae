"""
Prerequisite gate value types.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# Recorded mastery (%) below which a prerequisite counts as weak
WEAK_MASTERY_THRESHOLD = 60.0


class Confidence(str, Enum):
    """How sure the grader is about its verdict."""
    HIGH = "high"
    UNCERTAIN = "uncertain"


class PrerequisiteInfo(BaseModel):
    """A prerequisite as returned by a PrerequisiteSource."""

    id: str
    name: str
    mastery_percentage: float = Field(default=0.0, ge=0.0, le=100.0)


class PrerequisiteTopic(BaseModel):
    """A prerequisite with its weakness flag resolved."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    mastery_percentage: float
    is_weak: bool

    @classmethod
    def from_info(
        cls,
        info: PrerequisiteInfo,
        weak_threshold: float = WEAK_MASTERY_THRESHOLD,
    ) -> "PrerequisiteTopic":
        return cls(
            id=info.id,
            name=info.name,
            mastery_percentage=info.mastery_percentage,
            is_weak=info.mastery_percentage < weak_threshold,
        )


class DiagnosticQuestion(BaseModel):
    """One generated check question; fixed for the life of a gate."""

    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    correct_answer: str
    prerequisite_topic_id: str
    prerequisite_topic_name: str


class GradeResult(BaseModel):
    """Grader verdict. `is_correct` only counts when confidence is high."""

    model_config = ConfigDict(frozen=True)

    is_correct: bool
    confidence: Confidence


class QuizAnswer(BaseModel):
    """A graded diagnostic answer as recorded by the gate."""

    model_config = ConfigDict(frozen=True)

    answer: str
    is_correct: bool
    confidence: Confidence

    @property
    def counts_as_correct(self) -> bool:
        return self.is_correct and self.confidence is Confidence.HIGH
