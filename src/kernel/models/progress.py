"""
Progress models - per-tier performance records and the learner's current tier per skill.

Only the fields the progression engine reads and writes are stored.
"""

import uuid
from typing import List

from sqlalchemy import JSON, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.kernel.models.base import Base, LearnerOwnedMixin, TimestampMixin, generate_uuid


class PerformanceRecordRow(Base, LearnerOwnedMixin, TimestampMixin):
    """
    Rolling performance for one (learner, skill unit, tier).
    Reset to zero whenever the learner's tier for the skill changes.
    """

    __tablename__ = "performance_records"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    skill_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    tier: Mapped[str] = mapped_column(String(20), nullable=False)

    consecutive_correct: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    correct_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Up to 5 booleans, most recent last
    recent_outcomes: Mapped[List[bool]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("learner_id", "skill_id", "tier", name="uq_performance_records_learner_skill_tier"),
    )


class LearnerSkillTier(Base, LearnerOwnedMixin, TimestampMixin):
    """The tier a learner is currently working at for a skill unit."""

    __tablename__ = "learner_skill_tiers"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    skill_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    tier: Mapped[str] = mapped_column(String(20), nullable=False, default="easy")

    __table_args__ = (
        UniqueConstraint("learner_id", "skill_id", name="uq_learner_skill_tiers_learner_skill"),
    )
