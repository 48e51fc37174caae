"""Unit tests for the skip-ahead prerequisite gate state machine."""

import asyncio

import pytest

from src.engines.prerequisites.collaborators import AnswerGrader, GateCollaborators
from src.engines.prerequisites.types import Confidence, GradeResult
from src.kernel.errors import GateBusyError, InvalidTransitionError
from src.orchestration.prerequisite_gate import (
    MSG_GENERATION_FAILED,
    MSG_GRADING_FAILED,
    MSG_LOOKUP_FAILED,
    MSG_UNCERTAIN,
    GateState,
    PrerequisiteGate,
    can_transition,
    valid_transitions,
)


def make_gate(collaborators, **kwargs):
    return PrerequisiteGate("learner-1", "topic-9", "Quadratic Equations", collaborators, **kwargs)


async def quiz_gate(make_collaborators, masteries=(30, 45), question_count=10):
    collaborators, parts = make_collaborators(masteries, question_count=question_count)
    gate = make_gate(collaborators)
    assert await gate.check() is GateState.READY
    gate.start_quiz()
    return gate, parts


async def answer(gate, right, wrong):
    for _ in range(right):
        await gate.submit_answer("right")
    for _ in range(wrong):
        await gate.submit_answer("wrong")


class BlockingGrader(AnswerGrader):
    def __init__(self):
        self.release = asyncio.Event()

    async def grade_answer(self, question, answer_text):
        await self.release.wait()
        return GradeResult(is_correct=True, confidence=Confidence.HIGH)


class TestTransitionTable:
    def test_passed_is_final(self):
        assert valid_transitions(GateState.PASSED) == []

    def test_ready_only_goes_to_quiz(self):
        assert valid_transitions(GateState.READY) == [GateState.QUIZ]
        assert not can_transition(GateState.READY, GateState.PASSED)

    def test_error_and_failed_only_retry(self):
        assert valid_transitions(GateState.ERROR) == [GateState.CHECKING]
        assert valid_transitions(GateState.FAILED) == [GateState.CHECKING]


class TestCheck:
    async def test_no_prerequisites_passes_without_quiz(self, make_collaborators):
        collaborators, parts = make_collaborators(())
        gate = make_gate(collaborators)
        assert await gate.check() is GateState.PASSED
        assert parts["generator"].calls == 0
        assert gate.can_proceed

    async def test_all_strong_prerequisites_pass(self, make_collaborators):
        collaborators, parts = make_collaborators((60, 95))
        gate = make_gate(collaborators)
        assert await gate.check() is GateState.PASSED
        assert parts["generator"].calls == 0

    async def test_weak_prerequisites_need_a_quiz(self, make_collaborators):
        collaborators, _ = make_collaborators((80, 40))
        gate = make_gate(collaborators)
        assert await gate.check() is GateState.READY
        assert [p.id for p in gate.weak_prerequisites()] == ["p2"]
        assert gate.current_question is None
        assert not gate.can_proceed

    async def test_custom_weak_threshold(self, make_collaborators):
        collaborators, _ = make_collaborators((65,))
        gate = make_gate(collaborators, weak_threshold=70)
        assert await gate.check() is GateState.READY

    async def test_lookup_failure_is_error(self, make_collaborators):
        collaborators, parts = make_collaborators((30,), lookup_fails=True)
        gate = make_gate(collaborators)
        assert await gate.check() is GateState.ERROR
        assert gate.error_message == MSG_LOOKUP_FAILED
        assert parts["generator"].calls == 0

    async def test_generation_failure_is_error(self, make_collaborators):
        collaborators, _ = make_collaborators((30,), generation_fails=True)
        gate = make_gate(collaborators)
        assert await gate.check() is GateState.ERROR
        assert gate.error_message == MSG_GENERATION_FAILED

    async def test_empty_quiz_is_error(self, make_collaborators):
        collaborators, _ = make_collaborators((30,), question_count=0)
        gate = make_gate(collaborators)
        assert await gate.check() is GateState.ERROR

    async def test_check_only_from_checking(self, make_collaborators):
        collaborators, _ = make_collaborators(())
        gate = make_gate(collaborators)
        await gate.check()
        with pytest.raises(InvalidTransitionError):
            await gate.check()


class TestQuiz:
    async def test_quiz_only_starts_on_request(self, make_collaborators):
        collaborators, _ = make_collaborators((30,))
        gate = make_gate(collaborators)
        await gate.check()
        with pytest.raises(InvalidTransitionError):
            await gate.submit_answer("right")
        assert gate.start_quiz() is GateState.QUIZ
        assert gate.current_question.id == "q1"

    async def test_seven_of_ten_passes(self, make_collaborators):
        gate, _ = await quiz_gate(make_collaborators)
        await answer(gate, right=7, wrong=3)
        assert gate.state is GateState.PASSED
        assert gate.correct_count == 7
        assert gate.required_correct == 7
        assert gate.score_fraction == pytest.approx(0.7)

    async def test_six_of_ten_fails_and_points_at_weakest(self, make_collaborators):
        gate, _ = await quiz_gate(make_collaborators, masteries=(45, 30))
        await answer(gate, right=6, wrong=4)
        assert gate.state is GateState.FAILED
        assert gate.weakest_prerequisite().id == "p2"
        assert not gate.can_proceed

    async def test_questions_advance_in_order(self, make_collaborators):
        gate, _ = await quiz_gate(make_collaborators, question_count=3)
        await gate.submit_answer("right")
        assert gate.current_question.id == "q2"
        assert len(gate.answers) == 1

    async def test_empty_answer_rejected(self, make_collaborators):
        gate, parts = await quiz_gate(make_collaborators)
        with pytest.raises(ValueError):
            await gate.submit_answer("   ")
        assert parts["grader"].calls == 0
        assert gate.state is GateState.QUIZ

    async def test_uncertain_grade_is_error_and_not_recorded(self, make_collaborators):
        gate, _ = await quiz_gate(make_collaborators, question_count=1)
        assert await gate.submit_answer("unsure") is GateState.ERROR
        assert gate.error_message == MSG_UNCERTAIN
        assert gate.answers == []
        assert gate.current_index == 0
        assert not gate.can_proceed

    async def test_uncertain_never_counts_toward_pass(self, make_collaborators):
        """Even a one-question quiz cannot be passed with an uncertain grade."""
        gate, _ = await quiz_gate(make_collaborators, question_count=1)
        await gate.submit_answer("unsure")
        for _ in range(3):
            await gate.retry()
            gate.start_quiz()
            await gate.submit_answer("unsure")
            assert gate.state is GateState.ERROR

    async def test_grader_failure_is_error(self, make_collaborators):
        gate, _ = await quiz_gate(make_collaborators)
        assert await gate.submit_answer("boom") is GateState.ERROR
        assert gate.error_message == MSG_GRADING_FAILED


class TestRetryAndClose:
    async def test_retry_after_failure_rechecks(self, make_collaborators):
        gate, parts = await quiz_gate(make_collaborators, question_count=2)
        await answer(gate, right=0, wrong=2)
        assert gate.state is GateState.FAILED
        assert await gate.retry() is GateState.READY
        assert parts["source"].calls == 2
        assert gate.answers == []

    async def test_retry_after_lookup_error(self, make_collaborators):
        collaborators, parts = make_collaborators((30,), lookup_fails=True)
        gate = make_gate(collaborators)
        await gate.check()
        parts["source"].fail = False
        assert await gate.retry() is GateState.READY
        assert gate.error_message is None

    async def test_passed_cannot_retry(self, make_collaborators):
        collaborators, _ = make_collaborators(())
        gate = make_gate(collaborators)
        await gate.check()
        with pytest.raises(InvalidTransitionError):
            await gate.retry()

    async def test_concurrent_submit_is_busy(self, make_collaborators):
        collaborators, parts = make_collaborators((30,), question_count=2)
        grader = BlockingGrader()
        gate = make_gate(GateCollaborators(parts["source"], parts["generator"], grader))
        await gate.check()
        gate.start_quiz()

        pending = asyncio.create_task(gate.submit_answer("right"))
        await asyncio.sleep(0)
        with pytest.raises(GateBusyError):
            await gate.submit_answer("right")
        grader.release.set()
        assert await pending is GateState.QUIZ
        assert len(gate.answers) == 1

    async def test_result_after_close_is_dropped(self, make_collaborators):
        collaborators, parts = make_collaborators((30,), question_count=1)
        grader = BlockingGrader()
        gate = make_gate(GateCollaborators(parts["source"], parts["generator"], grader))
        await gate.check()
        gate.start_quiz()

        pending = asyncio.create_task(gate.submit_answer("right"))
        await asyncio.sleep(0)
        gate.close()
        grader.release.set()
        assert await pending is GateState.QUIZ
        assert gate.answers == []
        assert not gate.can_proceed
        with pytest.raises(InvalidTransitionError):
            gate.start_quiz()
