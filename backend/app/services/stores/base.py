"""Store interfaces consumed by the daily schedule pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Tuple

from app.db.models.goal import Goal
from app.db.models.task import Task
from app.services.time_slots import VALID_TIME_SLOTS


@dataclass(frozen=True)
class UserPreferences:
    user_context: str = ""
    preferred_time_slots: Tuple[str, ...] = field(default=VALID_TIME_SLOTS)


class GoalStore:
    """Read access to a user's goals."""

    def list_goals_for_user(self, user_id: int) -> List[Goal]:
        raise NotImplementedError


class TaskStore:
    """Task persistence used by the gate and the bulk writer."""

    def insert_task(self, task_data: Mapping[str, Any]) -> Task:
        """Insert one task in its own unit of work; raise if it cannot be stored."""
        raise NotImplementedError

    def query_generated_tasks_in_window(self, user_id: int, start: datetime, end: datetime) -> List[Task]:
        """Return AI-generated tasks of the user created in ``[start, end)``."""
        raise NotImplementedError


class PreferenceStore:
    def get_preferences(self, user_id: int) -> UserPreferences:
        raise NotImplementedError
