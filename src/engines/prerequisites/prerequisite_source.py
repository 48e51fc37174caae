"""
Database-backed PrerequisiteSource.
"""

import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.engines.prerequisites.collaborators import PrerequisiteSource
from src.engines.prerequisites.types import PrerequisiteInfo
from src.kernel.errors import PrerequisiteLookupError
from src.kernel.models.topic import LearnerTopicProgress, TopicPrerequisite


class SqlPrerequisiteSource(PrerequisiteSource):
    """
    Reads topic_prerequisites joined with the learner's topic progress.

    Opens its own session per lookup, since a gate outlives the request that
    created it. A prerequisite the learner never studied has mastery 0.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def fetch_prerequisites(self, learner_id: str, topic_id: str) -> List[PrerequisiteInfo]:
        try:
            topic_uuid = uuid.UUID(str(topic_id))
            learner_uuid = uuid.UUID(str(learner_id))
        except ValueError as exc:
            raise PrerequisiteLookupError(f"Invalid id for prerequisite lookup: {exc}") from exc

        try:
            async with self.session_maker() as session:
                edges_q = (
                    select(TopicPrerequisite)
                    .where(TopicPrerequisite.topic_id == topic_uuid)
                    .order_by(TopicPrerequisite.id)
                )
                edges = list((await session.execute(edges_q)).scalars().unique().all())
                if not edges:
                    return []

                progress_q = select(LearnerTopicProgress).where(
                    LearnerTopicProgress.learner_id == learner_uuid,
                    LearnerTopicProgress.topic_id.in_([e.prerequisite_topic_id for e in edges]),
                )
                progress_rows = (await session.execute(progress_q)).scalars().all()
        except SQLAlchemyError as exc:
            raise PrerequisiteLookupError(f"Could not load prerequisites for topic {topic_id}") from exc

        mastery = {p.topic_id: p.mastery_percentage for p in progress_rows}
        return [
            PrerequisiteInfo(
                id=str(e.prerequisite_topic_id),
                name=e.prerequisite.name if e.prerequisite else "Unknown Topic",
                mastery_percentage=mastery.get(e.prerequisite_topic_id, 0.0),
            )
            for e in edges
        ]
