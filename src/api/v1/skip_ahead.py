"""
Skip-ahead endpoints - prerequisite check and diagnostic quiz for jumping ahead.

Each gate lives in the app's GateRegistry between calls. Terminal outcomes
are written to the event log.
"""

import uuid

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import AppSettings, Collaborators, DbSession, Gates
from src.kernel.errors import GateBusyError, InvalidTransitionError
from src.kernel.events.event_store import EventStore
from src.kernel.models.event_log import EventType
from src.logging_config import get_logger
from src.orchestration.prerequisite_gate import GateState, PrerequisiteGate
from src.schemas.common import ErrorResponse
from src.schemas.skip_ahead import SkipAheadAnswer, SkipAheadCreate, SkipAheadResponse

router = APIRouter(responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
logger = get_logger(__name__)

_OUTCOME_EVENTS = {
    GateState.PASSED: EventType.SKIP_AHEAD_PASSED,
    GateState.FAILED: EventType.SKIP_AHEAD_FAILED,
}


def _get_gate(gates: Gates, gate_id: uuid.UUID) -> PrerequisiteGate:
    gate = gates.get(gate_id)
    if gate is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Skip-ahead gate not found")
    return gate


def _conflict(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


async def _log_outcome(db: AsyncSession, gate: PrerequisiteGate, before: GateState) -> None:
    """Record passed/failed the moment the gate reaches it."""
    event_type = _OUTCOME_EVENTS.get(gate.state)
    if event_type is None or gate.state is before:
        return
    weakest = gate.weakest_prerequisite()
    await EventStore(db).log(
        event_type=event_type,
        entity_type="topic",
        entity_id=uuid.UUID(gate.target_topic_id),
        learner_id=uuid.UUID(gate.learner_id),
        payload={
            "gate_id": gate.id,
            "weak_prerequisites": [p.id for p in gate.weak_prerequisites()],
            "questions": len(gate.questions),
            "correct": gate.correct_count,
            "redirect_topic_id": weakest.id if gate.state is GateState.FAILED and weakest else None,
        },
    )


@router.post("", response_model=SkipAheadResponse, status_code=status.HTTP_201_CREATED)
async def open_gate(
    data: SkipAheadCreate,
    db: DbSession,
    gates: Gates,
    collaborators: Collaborators,
    settings: AppSettings,
):
    """Open a gate and run the prerequisite check straight away."""
    gate = PrerequisiteGate(
        learner_id=str(data.learner_id),
        target_topic_id=str(data.target_topic_id),
        target_topic_name=data.target_topic_name,
        collaborators=collaborators,
        weak_threshold=settings.weak_prerequisite_threshold,
        pass_rate=settings.diagnostic_pass_rate,
    )
    gates.add(gate.id, gate)
    await gate.check()
    await _log_outcome(db, gate, GateState.CHECKING)
    return SkipAheadResponse.from_gate(gate)


@router.get("/{gate_id}", response_model=SkipAheadResponse)
async def get_gate(gate_id: uuid.UUID, gates: Gates):
    return SkipAheadResponse.from_gate(_get_gate(gates, gate_id))


@router.post("/{gate_id}/start", response_model=SkipAheadResponse)
async def start_quiz(gate_id: uuid.UUID, gates: Gates):
    """Begin the diagnostic quiz (ready -> quiz)."""
    gate = _get_gate(gates, gate_id)
    try:
        gate.start_quiz()
    except (InvalidTransitionError, GateBusyError) as e:
        raise _conflict(e)
    return SkipAheadResponse.from_gate(gate)


@router.post("/{gate_id}/answers", response_model=SkipAheadResponse)
async def submit_answer(gate_id: uuid.UUID, data: SkipAheadAnswer, db: DbSession, gates: Gates):
    """Grade an answer to the current diagnostic question."""
    gate = _get_gate(gates, gate_id)
    before = gate.state
    try:
        await gate.submit_answer(data.answer)
    except (InvalidTransitionError, GateBusyError) as e:
        raise _conflict(e)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await _log_outcome(db, gate, before)
    return SkipAheadResponse.from_gate(gate)


@router.post("/{gate_id}/retry", response_model=SkipAheadResponse)
async def retry_gate(gate_id: uuid.UUID, db: DbSession, gates: Gates):
    """Start over from the prerequisite check after an error or a failed quiz."""
    gate = _get_gate(gates, gate_id)
    try:
        await gate.retry()
    except (InvalidTransitionError, GateBusyError) as e:
        raise _conflict(e)
    await _log_outcome(db, gate, GateState.CHECKING)
    return SkipAheadResponse.from_gate(gate)


@router.delete("/{gate_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_gate(gate_id: uuid.UUID, gates: Gates):
    """Dismiss the skip-ahead dialog. Any result still in flight is dropped."""
    if gates.discard(gate_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Skip-ahead gate not found")
    logger.info("Skip-ahead gate closed", extra={"gate_id": str(gate_id)})
