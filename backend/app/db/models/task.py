"""Task ORM model."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text as sa_text,
)

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_id", "user_id"),
        Index("ix_tasks_goal_id", "goal_id"),
        Index("ix_tasks_completed", "completed"),
        Index("ix_tasks_user_id_ai_generated_created_at", "user_id", "ai_generated", "created_at"),
        CheckConstraint(
            "duration_minutes IS NULL OR (duration_minutes >= 5 AND duration_minutes <= 480)",
            name="ck_tasks_duration_minutes_range",
        ),
        CheckConstraint(
            "time_slot IS NULL OR time_slot IN ('morning', 'afternoon', 'night')",
            name="ck_tasks_time_slot_values",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Deleting a goal orphans its tasks instead of removing them.
    goal_id = Column(Integer, ForeignKey("goals.id", ondelete="SET NULL"), nullable=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    time_slot = Column(String(length=20), nullable=True)
    specific_time = Column(DateTime(timezone=True), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    fixed = Column(Boolean, nullable=False, server_default=sa_text("false"), default=False)
    completed = Column(Boolean, nullable=False, server_default=sa_text("false"), default=False)
    ai_generated = Column(Boolean, nullable=False, server_default=sa_text("false"), default=False)
    ai_validated = Column(Boolean, nullable=False, server_default=sa_text("false"), default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), default=_utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        default=_utcnow,
        onupdate=_utcnow,
    )
