"""
Topic models - the prerequisite graph and per-learner topic mastery.
"""

import uuid

from sqlalchemy import Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.kernel.models.base import Base, LearnerOwnedMixin, TimestampMixin, generate_uuid


class Topic(Base, TimestampMixin):
    """A curriculum topic."""

    __tablename__ = "topics"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class TopicPrerequisite(Base):
    """Edge: `topic_id` builds on `prerequisite_topic_id`."""

    __tablename__ = "topic_prerequisites"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    topic_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    prerequisite_topic_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"),
        nullable=False,
    )

    prerequisite: Mapped["Topic"] = relationship(foreign_keys=[prerequisite_topic_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint("topic_id", "prerequisite_topic_id", name="uq_topic_prerequisites_pair"),
    )


class LearnerTopicProgress(Base, LearnerOwnedMixin, TimestampMixin):
    """Recorded mastery (0-100) of a topic for one learner."""

    __tablename__ = "learner_topic_progress"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    topic_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mastery_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    __table_args__ = (
        UniqueConstraint("learner_id", "topic_id", name="uq_learner_topic_progress_learner_topic"),
    )
