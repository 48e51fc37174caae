"""
Progression endpoints - mastery status, graded attempts, tier advancement.
"""

import uuid

from fastapi import APIRouter, HTTPException, status

from src.api.deps import DbSession, Thresholds
from src.engines.progression.feedback import calibrated_feedback, is_exam_ready
from src.engines.progression.mastery_evaluator import accuracy_percent
from src.engines.progression.progress_store import AttemptOutcome, ProgressStore
from src.kernel.errors import InvalidTransitionError
from src.schemas.common import ErrorResponse
from src.schemas.progression import (
    AdvanceResponse,
    AttemptRequest,
    AttemptResponse,
    GateDecisionSchema,
    MasteryStatusResponse,
    PerformanceRecordSchema,
)

router = APIRouter(responses={409: {"model": ErrorResponse}})


def _status_fields(learner_id: uuid.UUID, skill_id: uuid.UUID, outcome: AttemptOutcome) -> dict:
    exam_ready = None
    if outcome.tier.is_terminal and outcome.record.total_attempts:
        exam_ready = is_exam_ready(accuracy_percent(outcome.record))
    return {
        "learner_id": learner_id,
        "skill_id": skill_id,
        "tier": outcome.tier,
        "record": PerformanceRecordSchema.from_record(outcome.record),
        "decision": GateDecisionSchema.from_decision(outcome.decision) if outcome.decision else None,
        "exam_ready": exam_ready,
    }


@router.get("/mastery", response_model=MasteryStatusResponse)
async def get_mastery(
    learner_id: uuid.UUID,
    skill_id: uuid.UUID,
    db: DbSession,
    table: Thresholds,
):
    """Current tier, record and advancement decision for a skill."""
    outcome = await ProgressStore(db, table).check(learner_id, skill_id)
    return MasteryStatusResponse(**_status_fields(learner_id, skill_id, outcome))


@router.post("/attempts", response_model=AttemptResponse, status_code=status.HTTP_201_CREATED)
async def record_attempt(
    learner_id: uuid.UUID,
    skill_id: uuid.UUID,
    data: AttemptRequest,
    db: DbSession,
    table: Thresholds,
):
    """Record one graded attempt at the learner's current tier."""
    outcome = await ProgressStore(db, table).record_attempt(learner_id, skill_id, data.is_correct)
    return AttemptResponse(
        **_status_fields(learner_id, skill_id, outcome),
        feedback=calibrated_feedback(data.is_correct, outcome.tier, outcome.record.consecutive_correct),
    )


@router.post("/advance", response_model=AdvanceResponse)
async def advance_tier(
    learner_id: uuid.UUID,
    skill_id: uuid.UUID,
    db: DbSession,
    table: Thresholds,
):
    """Move up one tier. 409 when the bar is not met or the learner is at the exam tier."""
    try:
        tier = await ProgressStore(db, table).advance_tier(learner_id, skill_id)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return AdvanceResponse(learner_id=learner_id, skill_id=skill_id, tier=tier)
