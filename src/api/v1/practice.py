"""
Practice session endpoints - in-session difficulty drift.
"""

import uuid

from fastapi import APIRouter, HTTPException, status

from src.api.deps import PracticeSessions
from src.engines.progression.drift_controller import DifficultyDriftController
from src.engines.progression.feedback import calibrated_feedback, fast_track_tier
from src.logging_config import get_logger
from src.schemas.common import ErrorResponse
from src.schemas.progression import (
    PracticeAnswerRequest,
    PracticeAnswerResponse,
    PracticeSessionCreate,
    PracticeSessionResponse,
)

router = APIRouter(responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
logger = get_logger(__name__)


def _session_fields(session_id: uuid.UUID, controller: DifficultyDriftController) -> dict:
    return {
        "session_id": session_id,
        "tier": controller.tier,
        "exercises_answered": controller.exercises_answered,
        "exercises_correct": controller.exercises_correct,
        "progressions": list(controller.progressions),
    }


def _get_controller(sessions: PracticeSessions, session_id: uuid.UUID) -> DifficultyDriftController:
    controller = sessions.get(session_id)
    if controller is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Practice session not found")
    return controller


@router.post("", response_model=PracticeSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(data: PracticeSessionCreate, sessions: PracticeSessions):
    """Open a practice session, fast-tracking the start tier when mastery is already shown."""
    start_tier = data.start_tier
    if data.existing_mastery is not None:
        start_tier = fast_track_tier(start_tier, data.existing_mastery)
    start_tier = min(start_tier, data.max_tier)

    session_id = uuid.uuid4()
    controller = sessions.add(session_id, DifficultyDriftController(start_tier, data.max_tier))
    logger.info(
        "Practice session opened",
        extra={"session_id": str(session_id), "start_tier": start_tier.value},
    )
    return PracticeSessionResponse(**_session_fields(session_id, controller))


@router.get("/{session_id}", response_model=PracticeSessionResponse)
async def get_session(session_id: uuid.UUID, sessions: PracticeSessions):
    return PracticeSessionResponse(**_session_fields(session_id, _get_controller(sessions, session_id)))


@router.post("/{session_id}/answers", response_model=PracticeAnswerResponse)
async def submit_answer(session_id: uuid.UUID, data: PracticeAnswerRequest, sessions: PracticeSessions):
    """Feed one graded answer to the session's drift controller."""
    controller = _get_controller(sessions, session_id)
    answered_at = controller.tier
    # The controller zeroes its streak on a tier change, so count it here
    streak = controller.consecutive_correct + 1 if data.is_correct else 0
    decision = controller.on_answer(data.is_correct)
    return PracticeAnswerResponse(
        **_session_fields(session_id, controller),
        changed=decision.changed,
        direction=decision.direction,
        feedback=calibrated_feedback(data.is_correct, answered_at, streak),
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: uuid.UUID, sessions: PracticeSessions):
    if sessions.discard(session_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Practice session not found")
