"""Agent action log ORM model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Text, func

from app.db.base import Base
from app.db.types import JSONBCompat


class AgentActionLog(Base):
    __tablename__ = "agent_actions_log"
    __table_args__ = (Index("ix_agent_actions_log_user_id", "user_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    action_type = Column(Text, nullable=False)
    action_payload = Column(JSONBCompat, nullable=False, default=dict)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
