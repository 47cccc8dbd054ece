"""Deterministic keyword-based generator used when no model is configured."""
from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from app.db.models.goal import Goal
from app.services.generation.base import GeneratedSchedule, GenerationError, ScheduleGenerator
from app.services.stores.base import UserPreferences
from app.services.time_slots import AFTERNOON, MORNING, NIGHT

KEYWORD_TEMPLATES: Tuple[Tuple[Tuple[str, ...], Dict[str, Any]], ...] = (
    (
        ("fitness", "exercise", "workout"),
        {
            "title": "Morning workout routine",
            "description": "Spend 30 minutes on physical exercise",
            "timeSlot": MORNING,
            "durationMinutes": 30,
        },
    ),
    (
        ("sleep", "rest"),
        {
            "title": "Evening wind-down routine",
            "description": "Start preparing for sleep 1 hour before bedtime",
            "timeSlot": NIGHT,
            "durationMinutes": 60,
        },
    ),
    (
        ("study", "learn"),
        {
            "title": "Dedicated study time",
            "description": "Spend 45 minutes focused on learning activities",
            "timeSlot": AFTERNOON,
            "durationMinutes": 45,
        },
    ),
)

GENERIC_TEMPLATE: Dict[str, Any] = {
    "title": "Morning goal planning",
    "description": "Spend 10 minutes planning specific actions for today",
    "timeSlot": MORNING,
    "durationMinutes": 10,
}

REVIEW_TEMPLATE: Dict[str, Any] = {
    "title": "Review daily progress",
    "description": "Spend 5 minutes reviewing your progress toward your goals",
    "timeSlot": NIGHT,
    "durationMinutes": 5,
}

# Candidate start times per slot, tried in order.
SLOT_START_TIMES: Dict[str, Tuple[time, ...]] = {
    MORNING: tuple(time(hour=hour) for hour in range(7, 12)),
    AFTERNOON: tuple(time(hour=hour) for hour in range(13, 18)),
    NIGHT: tuple(time(hour=hour) for hour in range(19, 23)),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _pick_template(goal: Goal) -> Dict[str, Any]:
    text = f"{goal.title} {goal.description or ''}".lower()
    for keywords, template in KEYWORD_TEMPLATES:
        if any(keyword in text for keyword in keywords):
            return template
    return GENERIC_TEMPLATE


def _reserve_start(slot: str, day: datetime, occupied: Dict[str, Set[time]]) -> Optional[datetime]:
    used = occupied.setdefault(slot, set())
    for start in SLOT_START_TIMES[slot]:
        if start not in used:
            used.add(start)
            return datetime.combine(day.date(), start, tzinfo=timezone.utc)
    return None


class FallbackScheduleGenerator(ScheduleGenerator):
    """One keyword-matched task per goal plus an evening review, placed in preferred slots."""

    def __init__(self, *, now: Callable[[], datetime] = _utcnow) -> None:
        self._now = now

    def generate(self, goals: Sequence[Goal], preferences: UserPreferences) -> GeneratedSchedule:
        if not goals:
            raise GenerationError("No goals provided for task generation")

        today = self._now().astimezone(timezone.utc)
        preferred = preferences.preferred_time_slots
        occupied: Dict[str, Set[time]] = {}
        tasks: List[Dict[str, Any]] = []

        for goal in goals:
            template = _pick_template(goal)
            tasks.append(self._materialize(template, goal, preferred, today, occupied))
        tasks.append(self._materialize(REVIEW_TEMPLATE, goals[0], preferred, today, occupied))

        titles = ", ".join(goal.title for goal in goals)
        return GeneratedSchedule(
            tasks=tasks,
            reasoning=f"Created {len(tasks)} daily routine tasks to help achieve: {titles}",
        )

    @staticmethod
    def _materialize(
        template: Dict[str, Any],
        goal: Goal,
        preferred: Sequence[str],
        today: datetime,
        occupied: Dict[str, Set[time]],
    ) -> Dict[str, Any]:
        slot = template["timeSlot"]
        if preferred and slot not in preferred:
            slot = preferred[0]
        start = _reserve_start(slot, today, occupied)
        return {
            **template,
            "timeSlot": slot,
            "specificTime": start.isoformat() if start else None,
            "goalId": goal.id,
            "fixed": False,
        }
