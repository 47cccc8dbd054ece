"""User ORM model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, Text, func, text as sa_text

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    user_context = Column(Text, nullable=True)
    # JSON-encoded list of slot names; parsed by parse_preferred_time_slots.
    preferred_time_slots = Column(
        Text,
        nullable=True,
        server_default=sa_text("'[\"morning\", \"afternoon\", \"night\"]'"),
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
