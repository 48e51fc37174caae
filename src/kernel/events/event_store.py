"""
Event Store service for append-only audit logging.

Progression state changes are logged here before the session commits.
"""

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for writing and reading the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.TIER_ADVANCED,
            entity_type="skill",
            entity_id=skill_id,
            learner_id=learner_id,
            payload={"from_tier": "easy", "to_tier": "medium"},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: uuid.UUID,
        learner_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> EventLog:
        """
        Add an event to the log. The caller flushes/commits with its other changes.

        Args:
            event_type: The type of event
            entity_type: "skill" or "topic"
            entity_id: The ID of the entity
            learner_id: Learner the event concerns
            payload: Additional event data (made JSON-safe here)
        """
        event = EventLog(
            event_type=event_type.value,
            entity_type=entity_type,
            entity_id=entity_id,
            learner_id=learner_id,
            payload=self._serialize_payload(payload or {}),
        )
        self.session.add(event)
        return event

    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: uuid.UUID,
        event_types: Optional[List[EventType]] = None,
        limit: int = 100,
    ) -> List[EventLog]:
        """Events for one entity, newest first."""
        query = select(EventLog).where(
            and_(
                EventLog.entity_type == entity_type,
                EventLog.entity_id == entity_id,
            )
        )
        if event_types:
            query = query.where(EventLog.event_type.in_([e.value for e in event_types]))
        query = query.order_by(desc(EventLog.created_at)).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_events(
        self,
        event_type: Optional[EventType] = None,
        learner_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Count events matching the given criteria."""
        query = select(func.count(EventLog.id))
        if event_type:
            query = query.where(EventLog.event_type == event_type.value)
        if learner_id:
            query = query.where(EventLog.learner_id == learner_id)
        result = await self.session.execute(query)
        return result.scalar() or 0

    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Make UUIDs and enums JSON-safe."""
        result: Dict[str, Any] = {}
        for key, value in payload.items():
            if isinstance(value, uuid.UUID):
                result[key] = str(value)
            elif isinstance(value, Enum):
                result[key] = value.value
            elif isinstance(value, dict):
                result[key] = self._serialize_payload(value)
            elif isinstance(value, (list, tuple)):
                result[key] = [
                    str(v) if isinstance(v, uuid.UUID) else v.value if isinstance(v, Enum) else v
                    for v in value
                ]
            else:
                result[key] = value
        return result
