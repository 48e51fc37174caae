"""
External collaborator contracts for the prerequisite gate.

Implementations live outside the engine (database lookup, OpenAI generation
and grading). Each raises its own error type on failure; the gate never
retries on its own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from src.engines.prerequisites.types import (
    Confidence,
    DiagnosticQuestion,
    GradeResult,
    PrerequisiteInfo,
    PrerequisiteTopic,
)
from src.kernel.errors import GradingError


class PrerequisiteSource(ABC):
    """Looks up a topic's prerequisites with the learner's recorded mastery."""

    @abstractmethod
    async def fetch_prerequisites(self, learner_id: str, topic_id: str) -> List[PrerequisiteInfo]:
        """Raises PrerequisiteLookupError on failure."""


class DiagnosticGenerator(ABC):
    """Writes short check questions for weak prerequisites."""

    @abstractmethod
    async def generate_diagnostic(
        self,
        weak_prerequisites: List[PrerequisiteTopic],
        target_topic_name: str,
    ) -> List[DiagnosticQuestion]:
        """Raises GenerationError on failure. An empty list is also a failure for the caller."""


class AnswerGrader(ABC):
    """Judges a free-text answer to a diagnostic question."""

    @abstractmethod
    async def grade_answer(self, question: DiagnosticQuestion, answer_text: str) -> GradeResult:
        """Raises GradingError on failure."""


@dataclass
class GateCollaborators:
    """Everything a PrerequisiteGate talks to."""

    prerequisites: PrerequisiteSource
    generator: DiagnosticGenerator
    grader: AnswerGrader


def parse_grade_payload(
    payload: Optional[Mapping[str, Any]],
    missing_confidence: Confidence = Confidence.UNCERTAIN,
) -> GradeResult:
    """
    Turn a raw grader response into a GradeResult.

    A missing `confidence` becomes `missing_confidence`, which stays UNCERTAIN
    unless the grader guarantees a HIGH default. Unknown confidence values are
    UNCERTAIN. Only a literal True counts as correct.

    Raises:
        GradingError: payload is empty or not a mapping
    """
    if not payload or not isinstance(payload, Mapping):
        raise GradingError("Grader returned no data")

    raw_confidence = payload.get("confidence")
    if raw_confidence is None:
        confidence = missing_confidence
    else:
        try:
            confidence = Confidence(str(raw_confidence).strip().lower())
        except ValueError:
            confidence = Confidence.UNCERTAIN

    is_correct = payload.get("isCorrect", payload.get("is_correct")) is True
    return GradeResult(is_correct=is_correct, confidence=confidence)
