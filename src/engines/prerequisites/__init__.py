"""
Prerequisite checks - value types and collaborator contracts for skip-ahead gating.

The state machine itself lives in src.orchestration.prerequisite_gate.
"""

from src.engines.prerequisites.types import (
    WEAK_MASTERY_THRESHOLD,
    Confidence,
    DiagnosticQuestion,
    GradeResult,
    PrerequisiteInfo,
    PrerequisiteTopic,
    QuizAnswer,
)
from src.engines.prerequisites.collaborators import (
    AnswerGrader,
    DiagnosticGenerator,
    GateCollaborators,
    PrerequisiteSource,
    parse_grade_payload,
)

__all__ = [
    "WEAK_MASTERY_THRESHOLD",
    "Confidence",
    "DiagnosticQuestion",
    "GradeResult",
    "PrerequisiteInfo",
    "PrerequisiteTopic",
    "QuizAnswer",
    "AnswerGrader",
    "DiagnosticGenerator",
    "GateCollaborators",
    "PrerequisiteSource",
    "parse_grade_payload",
]
