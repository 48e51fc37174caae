"""
Prerequisite gate for topic skip-ahead.

A learner who wants to jump to a topic must show their weak prerequisites are
good enough, either by recorded mastery or by a short diagnostic quiz. The
gate fails closed: lookup, generation or grading failures and uncertain
grades all end in `error` or `failed`, never in `passed`.

Valid transitions are defined here; every state change goes through
PrerequisiteGate._transition.
"""

import math
import uuid
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Set, TypeVar

from src.engines.prerequisites.collaborators import GateCollaborators
from src.engines.prerequisites.types import (
    WEAK_MASTERY_THRESHOLD,
    Confidence,
    DiagnosticQuestion,
    PrerequisiteTopic,
    QuizAnswer,
)
from src.kernel.errors import CollaboratorError, GateBusyError, InvalidTransitionError
from src.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class GateState(str, Enum):
    """Skip-ahead gate states."""
    CHECKING = "checking"  # fetching prerequisites / generating questions
    READY = "ready"        # quiz generated, waiting for the learner to start
    QUIZ = "quiz"          # answering diagnostic questions
    PASSED = "passed"      # may proceed to the target topic
    FAILED = "failed"      # must review the weakest prerequisite
    ERROR = "error"        # something could not be verified


# Valid transitions: from_state -> allowed to_states
_TRANSITIONS: Dict[GateState, Set[GateState]] = {
    GateState.CHECKING: {GateState.PASSED, GateState.READY, GateState.ERROR},
    GateState.READY: {GateState.QUIZ},
    GateState.QUIZ: {GateState.QUIZ, GateState.PASSED, GateState.FAILED, GateState.ERROR},
    GateState.ERROR: {GateState.CHECKING},
    GateState.FAILED: {GateState.CHECKING},
    GateState.PASSED: set(),
}

DEFAULT_PASS_RATE = 0.70

MSG_LOOKUP_FAILED = "Failed to check prerequisites. Please try again."
MSG_GENERATION_FAILED = "Could not generate prerequisite quiz. Please review prerequisites first."
MSG_GRADING_FAILED = "Unable to verify your answer. Please try again."
MSG_UNCERTAIN = "Could not verify answer with confidence. Please rephrase your answer."


def valid_transitions(from_state: GateState) -> List[GateState]:
    """Return list of valid target states from given state."""
    return sorted(_TRANSITIONS.get(from_state, set()), key=lambda s: s.value)


def can_transition(from_state: GateState, to_state: GateState) -> bool:
    return to_state in _TRANSITIONS.get(from_state, set())


class _Interrupted(Exception):
    """An external call failed or its gate was closed while it was in flight."""


class PrerequisiteGate:
    """
    One skip-ahead attempt for one learner and target topic.

    Lives only as long as the skip-ahead dialog; nothing here is persisted.
    At most one external call is outstanding at a time, and results that
    arrive after close() are dropped.
    """

    def __init__(
        self,
        learner_id: str,
        target_topic_id: str,
        target_topic_name: str,
        collaborators: GateCollaborators,
        weak_threshold: float = WEAK_MASTERY_THRESHOLD,
        pass_rate: float = DEFAULT_PASS_RATE,
        gate_id: Optional[uuid.UUID] = None,
    ):
        self.id = gate_id or uuid.uuid4()
        self.learner_id = learner_id
        self.target_topic_id = target_topic_id
        self.target_topic_name = target_topic_name
        self.collaborators = collaborators
        self.weak_threshold = weak_threshold
        self.pass_rate = pass_rate

        self.state = GateState.CHECKING
        self.prerequisites: List[PrerequisiteTopic] = []
        self.questions: List[DiagnosticQuestion] = []
        self.answers: List[QuizAnswer] = []
        self.current_index = 0
        self.error_message: Optional[str] = None
        self.closed = False
        self._busy = False

    # ── State plumbing ──────────────────────────────────────────────────

    def _transition(self, to_state: GateState) -> None:
        if not can_transition(self.state, to_state):
            raise InvalidTransitionError(
                f"Invalid transition: {self.state.value} -> {to_state.value}"
            )
        if to_state is not self.state:
            logger.info(
                "Skip-ahead gate transition",
                extra={
                    "gate_id": str(self.id),
                    "from_state": self.state.value,
                    "to_state": to_state.value,
                },
            )
        self.state = to_state

    def _require(self, *states: GateState) -> None:
        if self.closed:
            raise InvalidTransitionError("Gate is closed")
        if self._busy:
            raise GateBusyError("A verification call is already in progress")
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvalidTransitionError(f"Gate is {self.state.value}; expected {allowed}")

    def _to_error(self, message: str) -> None:
        self.error_message = message
        self._transition(GateState.ERROR)

    async def _external(self, call: Callable[[], Awaitable[T]], failure_message: str) -> T:
        """
        Run one collaborator call.

        Any exception moves the gate to ERROR with `failure_message`. If the
        gate was closed while waiting, nothing is mutated either way.
        """
        if self._busy:
            raise GateBusyError("A verification call is already in progress")
        self._busy = True
        try:
            result = await call()
        except Exception as exc:
            if self.closed:
                raise _Interrupted() from exc
            if isinstance(exc, CollaboratorError):
                logger.warning(
                    "Skip-ahead collaborator failed: %s",
                    exc,
                    extra={"gate_id": str(self.id), "state": self.state.value},
                )
            else:
                logger.exception("Unexpected skip-ahead collaborator failure", extra={"gate_id": str(self.id)})
            self._to_error(failure_message)
            raise _Interrupted() from exc
        finally:
            self._busy = False
        if self.closed:
            raise _Interrupted()
        return result

    # ── Operations ──────────────────────────────────────────────────────

    async def check(self) -> GateState:
        """
        Fetch prerequisites and, if any are weak, generate the diagnostic quiz.

        checking -> passed (no prerequisites, or none weak)
        checking -> ready  (quiz generated for the weak ones)
        checking -> error  (lookup or generation failed, or no questions)
        """
        self._require(GateState.CHECKING)
        try:
            infos = await self._external(
                lambda: self.collaborators.prerequisites.fetch_prerequisites(
                    self.learner_id, self.target_topic_id
                ),
                MSG_LOOKUP_FAILED,
            )
            self.prerequisites = [PrerequisiteTopic.from_info(i, self.weak_threshold) for i in infos]
            weak = self.weak_prerequisites()
            if not weak:
                self._transition(GateState.PASSED)
                return self.state

            questions = await self._external(
                lambda: self.collaborators.generator.generate_diagnostic(weak, self.target_topic_name),
                MSG_GENERATION_FAILED,
            )
        except _Interrupted:
            return self.state

        if not questions:
            logger.warning("Diagnostic generation returned no questions", extra={"gate_id": str(self.id)})
            self._to_error(MSG_GENERATION_FAILED)
            return self.state

        self.questions = list(questions)
        self._transition(GateState.READY)
        return self.state

    def start_quiz(self) -> GateState:
        """ready -> quiz. Only ever on an explicit learner action."""
        self._require(GateState.READY)
        self.current_index = 0
        self.answers = []
        self.error_message = None
        self._transition(GateState.QUIZ)
        return self.state

    async def submit_answer(self, answer_text: str) -> GateState:
        """
        Grade the answer to the current question.

        High-confidence grades are recorded and the quiz moves on (or is
        scored after the last question). A failed call, an empty result or an
        uncertain grade sends the gate to ERROR without recording or advancing.
        """
        self._require(GateState.QUIZ)
        answer_text = (answer_text or "").strip()
        if not answer_text:
            raise ValueError("Answer must not be empty")

        question = self.questions[self.current_index]
        try:
            result = await self._external(
                lambda: self.collaborators.grader.grade_answer(question, answer_text),
                MSG_GRADING_FAILED,
            )
        except _Interrupted:
            return self.state

        if result is None:
            self._to_error(MSG_GRADING_FAILED)
            return self.state
        if result.confidence is not Confidence.HIGH:
            self._to_error(MSG_UNCERTAIN)
            return self.state

        self.answers.append(
            QuizAnswer(answer=answer_text, is_correct=result.is_correct, confidence=result.confidence)
        )
        if self.current_index < len(self.questions) - 1:
            self.current_index += 1
            self._transition(GateState.QUIZ)
        elif self.correct_count >= self.required_correct:
            self._transition(GateState.PASSED)
        else:
            self._transition(GateState.FAILED)
        return self.state

    async def retry(self) -> GateState:
        """error | failed -> checking, then run the whole check again."""
        self._require(GateState.ERROR, GateState.FAILED)
        self.prerequisites = []
        self.questions = []
        self.answers = []
        self.current_index = 0
        self.error_message = None
        self._transition(GateState.CHECKING)
        return await self.check()

    def close(self) -> None:
        """Discard the gate. In-flight results are ignored from here on."""
        self.closed = True

    # ── Views ───────────────────────────────────────────────────────────

    def weak_prerequisites(self) -> List[PrerequisiteTopic]:
        return [p for p in self.prerequisites if p.is_weak]

    def weakest_prerequisite(self) -> Optional[PrerequisiteTopic]:
        """Where a failed learner is sent to review: the weak prerequisite with the lowest mastery."""
        weak = self.weak_prerequisites()
        if not weak:
            return None
        return min(weak, key=lambda p: p.mastery_percentage)

    @property
    def current_question(self) -> Optional[DiagnosticQuestion]:
        if self.state is not GateState.QUIZ or not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def correct_count(self) -> int:
        return sum(1 for a in self.answers if a.counts_as_correct)

    @property
    def required_correct(self) -> int:
        """High-confidence correct answers needed to pass."""
        # round() absorbs float noise such as 0.7 * 10 == 7.000000000000001
        return math.ceil(round(self.pass_rate * len(self.questions), 9))

    @property
    def score_fraction(self) -> float:
        if not self.questions:
            return 0.0
        return self.correct_count / len(self.questions)

    @property
    def can_proceed(self) -> bool:
        return self.state is GateState.PASSED and not self.closed
