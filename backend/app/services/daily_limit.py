"""Once-per-UTC-day quota on AI-generated schedules."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Tuple

from app.services.stores.base import TaskStore

CAN_GENERATE_MESSAGE = "You can generate tasks today"
LIMIT_REACHED_MESSAGE = "Daily limit reached. You have already generated tasks for today."


@dataclass(frozen=True)
class DailyLimitStatus:
    can_generate: bool
    message: str


def utc_day_window(reference_now: datetime) -> Tuple[datetime, datetime]:
    """Return ``[midnight, next midnight)`` in UTC for the reference instant's day."""
    if reference_now.tzinfo is None:
        reference_now = reference_now.replace(tzinfo=timezone.utc)
    day_start = reference_now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    return day_start, day_start + timedelta(days=1)


def check_daily_limit(task_store: TaskStore, user_id: int, reference_now: datetime) -> DailyLimitStatus:
    """
    Report whether the user may run generation today.

    The state is read from the tasks table each time: one AI-generated task
    created in today's window is enough to block, and the window rolls over
    at UTC midnight on its own. Nothing is written here.
    """
    start, end = utc_day_window(reference_now)
    existing = task_store.query_generated_tasks_in_window(user_id, start, end)
    if existing:
        return DailyLimitStatus(can_generate=False, message=LIMIT_REACHED_MESSAGE)
    return DailyLimitStatus(can_generate=True, message=CAN_GENERATE_MESSAGE)
