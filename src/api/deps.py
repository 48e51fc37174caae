"""
FastAPI dependencies for database sessions, registries and collaborators.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.ai.answer_grader import OpenAIAnswerGrader
from src.ai.diagnostic_generator import OpenAIDiagnosticGenerator
from src.config import Settings, get_settings
from src.database import async_session_maker
from src.engines.prerequisites.collaborators import GateCollaborators
from src.engines.prerequisites.prerequisite_source import SqlPrerequisiteSource
from src.engines.progression.thresholds import ThresholdTable
from src.orchestration.registry import GateRegistry, PracticeSessionRegistry


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_session_maker


async def get_db(
    session_maker: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_maker)],
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields database sessions."""
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_threshold_table(request: Request) -> ThresholdTable:
    return request.app.state.threshold_table


def get_gate_registry(request: Request) -> GateRegistry:
    return request.app.state.gate_registry


def get_practice_registry(request: Request) -> PracticeSessionRegistry:
    return request.app.state.practice_registry


def get_gate_collaborators(
    settings: AppSettings,
    session_maker: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_maker)],
) -> GateCollaborators:
    """Production collaborators: database lookup plus OpenAI generation and grading."""
    return GateCollaborators(
        prerequisites=SqlPrerequisiteSource(session_maker),
        generator=OpenAIDiagnosticGenerator(settings),
        grader=OpenAIAnswerGrader(settings),
    )


Thresholds = Annotated[ThresholdTable, Depends(get_threshold_table)]
Gates = Annotated[GateRegistry, Depends(get_gate_registry)]
PracticeSessions = Annotated[PracticeSessionRegistry, Depends(get_practice_registry)]
Collaborators = Annotated[GateCollaborators, Depends(get_gate_collaborators)]
