"""
Pytest fixtures for the progression engine tests.
"""

import os
from typing import AsyncGenerator, Dict, List, Optional, Sequence

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("OPENAI_API_KEY", "")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.engines.prerequisites.collaborators import (
    AnswerGrader,
    DiagnosticGenerator,
    GateCollaborators,
    PrerequisiteSource,
)
from src.engines.prerequisites.types import (
    Confidence,
    DiagnosticQuestion,
    GradeResult,
    PrerequisiteInfo,
    PrerequisiteTopic,
)
from src.kernel.errors import GenerationError, GradingError, PrerequisiteLookupError
from src.kernel.models import Base

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session
        await session.rollback()


# ── Fake collaborators ─────────────────────────────────────────────────


class FakePrerequisiteSource(PrerequisiteSource):
    def __init__(self, prerequisites: Optional[List[PrerequisiteInfo]] = None, fail: bool = False):
        self.prerequisites = prerequisites or []
        self.fail = fail
        self.calls = 0

    async def fetch_prerequisites(self, learner_id: str, topic_id: str) -> List[PrerequisiteInfo]:
        self.calls += 1
        if self.fail:
            raise PrerequisiteLookupError("lookup down")
        return list(self.prerequisites)


class FakeDiagnosticGenerator(DiagnosticGenerator):
    def __init__(self, count: int = 10, fail: bool = False):
        self.count = count
        self.fail = fail
        self.calls = 0

    async def generate_diagnostic(
        self,
        weak_prerequisites: List[PrerequisiteTopic],
        target_topic_name: str,
    ) -> List[DiagnosticQuestion]:
        self.calls += 1
        if self.fail:
            raise GenerationError("model down")
        return [
            DiagnosticQuestion(
                id=f"q{i + 1}",
                question=f"Question {i + 1}",
                correct_answer="42",
                prerequisite_topic_id=weak_prerequisites[i % len(weak_prerequisites)].id,
                prerequisite_topic_name=weak_prerequisites[i % len(weak_prerequisites)].name,
            )
            for i in range(self.count)
        ]


class ScriptedGrader(AnswerGrader):
    """
    Grades by answer text: "right" is correct, "unsure" is uncertain,
    "boom" raises, anything else is wrong.
    """

    def __init__(self):
        self.calls = 0

    async def grade_answer(self, question: DiagnosticQuestion, answer_text: str) -> GradeResult:
        self.calls += 1
        if answer_text == "boom":
            raise GradingError("grader down")
        if answer_text == "unsure":
            return GradeResult(is_correct=True, confidence=Confidence.UNCERTAIN)
        return GradeResult(is_correct=answer_text == "right", confidence=Confidence.HIGH)


def make_prereqs(masteries: Sequence[float]) -> List[PrerequisiteInfo]:
    return [
        PrerequisiteInfo(id=f"p{i + 1}", name=f"Prereq {i + 1}", mastery_percentage=m)
        for i, m in enumerate(masteries)
    ]


@pytest.fixture
def make_collaborators():
    """Build GateCollaborators from fakes; returns (collaborators, parts)."""

    def _make(
        masteries: Sequence[float] = (),
        question_count: int = 10,
        lookup_fails: bool = False,
        generation_fails: bool = False,
    ):
        parts: Dict[str, object] = {
            "source": FakePrerequisiteSource(make_prereqs(masteries), fail=lookup_fails),
            "generator": FakeDiagnosticGenerator(question_count, fail=generation_fails),
            "grader": ScriptedGrader(),
        }
        collaborators = GateCollaborators(
            prerequisites=parts["source"],
            generator=parts["generator"],
            grader=parts["grader"],
        )
        return collaborators, parts

    return _make
