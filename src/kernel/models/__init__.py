"""
Kernel data models.

SQLAlchemy models for the fields the progression engine reads and writes,
the topic prerequisite graph and the audit event log.
"""

from src.kernel.models.base import Base, TimestampMixin, LearnerOwnedMixin, generate_uuid
from src.kernel.models.event_log import EventLog, EventType
from src.kernel.models.progress import LearnerSkillTier, PerformanceRecordRow
from src.kernel.models.topic import LearnerTopicProgress, Topic, TopicPrerequisite

__all__ = [
    "Base",
    "TimestampMixin",
    "LearnerOwnedMixin",
    "generate_uuid",
    "EventLog",
    "EventType",
    "LearnerSkillTier",
    "PerformanceRecordRow",
    "LearnerTopicProgress",
    "Topic",
    "TopicPrerequisite",
]
