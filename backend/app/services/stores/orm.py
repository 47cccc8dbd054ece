"""SQLAlchemy-backed store implementations."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Mapping

from sqlalchemy.orm import Session

from app.db.models.goal import Goal
from app.db.models.task import Task
from app.db.models.user import User
from app.services.stores.base import GoalStore, PreferenceStore, TaskStore, UserPreferences
from app.services.time_slots import parse_preferred_time_slots

logger = logging.getLogger(__name__)


class SqlAlchemyGoalStore(GoalStore):
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_goals_for_user(self, user_id: int) -> List[Goal]:
        return (
            self.db.query(Goal)
            .filter(Goal.user_id == user_id)
            .order_by(Goal.created_at.asc(), Goal.id.asc())
            .all()
        )


class SqlAlchemyTaskStore(TaskStore):
    def __init__(self, db: Session) -> None:
        self.db = db

    def insert_task(self, task_data: Mapping[str, Any]) -> Task:
        task = Task(**task_data)
        self.db.add(task)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(task)
        logger.debug("Inserted task %s for user %s", task.id, task.user_id)
        return task

    def query_generated_tasks_in_window(self, user_id: int, start: datetime, end: datetime) -> List[Task]:
        return (
            self.db.query(Task)
            .filter(
                Task.user_id == user_id,
                Task.ai_generated.is_(True),
                Task.created_at >= start,
                Task.created_at < end,
            )
            .order_by(Task.created_at.asc())
            .all()
        )


class SqlAlchemyPreferenceStore(PreferenceStore):
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_preferences(self, user_id: int) -> UserPreferences:
        user = self.db.get(User, user_id)
        if not user:
            return UserPreferences()
        return UserPreferences(
            user_context=user.user_context or "",
            preferred_time_slots=parse_preferred_time_slots(user.preferred_time_slots),
        )
