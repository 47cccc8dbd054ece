"""Field-level validation rules shared by every path that creates tasks."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping

from app.services.time_slots import (
    VALID_TIME_SLOTS,
    format_minute_of_day,
    is_within_slot,
    minute_of_day,
)

MIN_DURATION_MINUTES = 5
MAX_DURATION_MINUTES = 480

TITLE_REQUIRED = "Title is required"
INVALID_USER_ID = "Valid userId is required"
INVALID_GOAL_ID = "goalId must be a number if provided"
INVALID_DURATION = f"Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes"
INVALID_TIME_SLOT = "timeSlot must be morning, afternoon, or night"


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _is_integral(value: Any) -> bool:
    # bool is an int subclass but never a valid id or duration
    return isinstance(value, int) and not isinstance(value, bool)


def validate_task_data(task: Mapping[str, Any]) -> ValidationResult:
    """
    Run every task rule and collect all violations in a fixed order.

    Goal existence is not checked here; callers that know the user's goals
    (see bulk_persistence) do that separately.
    """
    errors: List[str] = []

    title = task.get("title")
    if not isinstance(title, str) or not title.strip():
        errors.append(TITLE_REQUIRED)

    if not _is_integral(task.get("user_id")):
        errors.append(INVALID_USER_ID)

    goal_id = task.get("goal_id")
    if goal_id is not None and not _is_integral(goal_id):
        errors.append(INVALID_GOAL_ID)

    duration = task.get("duration_minutes")
    if duration is not None and (
        not _is_integral(duration) or not MIN_DURATION_MINUTES <= duration <= MAX_DURATION_MINUTES
    ):
        errors.append(INVALID_DURATION)

    time_slot = task.get("time_slot")
    if time_slot and time_slot not in VALID_TIME_SLOTS:
        errors.append(INVALID_TIME_SLOT)
    else:
        specific_time = task.get("specific_time")
        if time_slot and isinstance(specific_time, datetime):
            minute = minute_of_day(specific_time)
            if not is_within_slot(time_slot, minute):
                errors.append(f"Time {format_minute_of_day(minute)} doesn't match {time_slot} time slot")

    return ValidationResult(is_valid=not errors, errors=errors)
