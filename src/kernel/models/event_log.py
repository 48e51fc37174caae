"""
Append-only event log for progression decisions.

Rows are inserted, never updated or deleted.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.kernel.models.base import Base, generate_uuid


class EventType(str, Enum):
    """All event types for the audit log."""

    # Cross-session mastery
    ATTEMPT_RECORDED = "progression.attempt_recorded"
    TIER_ADVANCED = "progression.tier_advanced"

    # Skip-ahead gate outcomes
    SKIP_AHEAD_PASSED = "skip_ahead.passed"
    SKIP_AHEAD_FAILED = "skip_ahead.failed"


class EventLog(Base):
    """Immutable audit event."""

    __tablename__ = "event_logs"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # What the event is about (skill unit or topic)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)

    learner_id: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True, index=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
    )
