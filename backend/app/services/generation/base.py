"""Text-generation service interface for daily schedules."""
from __future__ import annotations

from typing import Any, List, Sequence

from pydantic import BaseModel, Field, field_validator

from app.db.models.goal import Goal
from app.services.stores.base import UserPreferences

DEFAULT_REASONING = "Generated daily schedule"


class GenerationError(Exception):
    """The generator failed or produced output that cannot be used."""


class GeneratedSchedule(BaseModel):
    """Generator response: raw, unvalidated task records plus free-text reasoning."""

    tasks: List[Any] = Field(..., description="Raw task records; parsed later by parse_generated_tasks.")
    reasoning: str = DEFAULT_REASONING

    @field_validator("reasoning", mode="before")
    @classmethod
    def _default_reasoning(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip():
            return value
        return DEFAULT_REASONING


class ScheduleGenerator:
    """Base interface for schedule generators."""

    def generate(self, goals: Sequence[Goal], preferences: UserPreferences) -> GeneratedSchedule:
        raise NotImplementedError
