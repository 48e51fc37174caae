"""
Pydantic schemas for API request/response validation.
"""

from src.schemas.common import ErrorDetail, ErrorResponse, HealthResponse
from src.schemas.progression import (
    AdvanceResponse,
    AttemptRequest,
    AttemptResponse,
    GateDecisionSchema,
    MasteryStatusResponse,
    PerformanceRecordSchema,
    PracticeAnswerRequest,
    PracticeAnswerResponse,
    PracticeSessionCreate,
    PracticeSessionResponse,
)
from src.schemas.skip_ahead import (
    PrerequisiteSchema,
    QuestionView,
    SkipAheadAnswer,
    SkipAheadCreate,
    SkipAheadResponse,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "AdvanceResponse",
    "AttemptRequest",
    "AttemptResponse",
    "GateDecisionSchema",
    "MasteryStatusResponse",
    "PerformanceRecordSchema",
    "PracticeAnswerRequest",
    "PracticeAnswerResponse",
    "PracticeSessionCreate",
    "PracticeSessionResponse",
    "PrerequisiteSchema",
    "QuestionView",
    "SkipAheadAnswer",
    "SkipAheadCreate",
    "SkipAheadResponse",
]
