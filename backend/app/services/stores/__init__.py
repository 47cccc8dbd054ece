"""Store interfaces and their SQLAlchemy implementations."""
from app.services.stores.base import GoalStore, PreferenceStore, TaskStore, UserPreferences
from app.services.stores.orm import (
    SqlAlchemyGoalStore,
    SqlAlchemyPreferenceStore,
    SqlAlchemyTaskStore,
)

__all__ = [
    "GoalStore",
    "PreferenceStore",
    "SqlAlchemyGoalStore",
    "SqlAlchemyPreferenceStore",
    "SqlAlchemyTaskStore",
    "TaskStore",
    "UserPreferences",
]
