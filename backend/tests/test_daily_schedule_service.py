"""Tests for the daily schedule pipeline over in-memory stores."""
from __future__ import annotations

from datetime import datetime, timezone
from itertools import count
from typing import Any, Dict, List

import pytest

from app.db.models.goal import Goal
from app.db.models.task import Task
from app.services.daily_schedule import (
    FAILURE_MESSAGES,
    DailyScheduleService,
    FailureKind,
    ScheduleFailure,
    ScheduleSuccess,
)
from app.services.generation.base import (
    DEFAULT_REASONING,
    GeneratedSchedule,
    GenerationError,
    ScheduleGenerator,
)
from app.services.stores.base import GoalStore, PreferenceStore, TaskStore, UserPreferences

NOW = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


class _Goals(GoalStore):
    def __init__(self, goals: List[Goal]):
        self.goals = goals

    def list_goals_for_user(self, user_id):
        return [goal for goal in self.goals if goal.user_id == user_id]


class _Tasks(TaskStore):
    def __init__(self, fail_titles=()):
        self.rows: List[Task] = []
        self.fail_titles = set(fail_titles)
        self._ids = count(1)

    def insert_task(self, task_data):
        if task_data["title"] in self.fail_titles:
            raise RuntimeError("insert rejected")
        task = Task(id=next(self._ids), created_at=NOW, **task_data)
        self.rows.append(task)
        return task

    def query_generated_tasks_in_window(self, user_id, start, end):
        return [
            row
            for row in self.rows
            if row.user_id == user_id and row.ai_generated and start <= row.created_at < end
        ]


class _Preferences(PreferenceStore):
    def get_preferences(self, user_id):
        return UserPreferences(user_context="", preferred_time_slots=("morning", "night"))


class _BrokenPreferences(PreferenceStore):
    def get_preferences(self, user_id):
        raise RuntimeError("db down")


class _StaticGenerator(ScheduleGenerator):
    def __init__(self, tasks: List[Any], reasoning: str = "Because goals"):
        self.tasks = tasks
        self.reasoning = reasoning
        self.calls = 0

    def generate(self, goals, preferences):
        self.calls += 1
        return GeneratedSchedule(tasks=self.tasks, reasoning=self.reasoning)


class _BrokenGenerator(ScheduleGenerator):
    def generate(self, goals, preferences):
        raise GenerationError("OpenAI API key not found")


def _service(goals=None, tasks=None, generator=None) -> DailyScheduleService:
    return DailyScheduleService(
        goal_store=_Goals(goals if goals is not None else [Goal(id=1, user_id=7, title="Get fit")]),
        task_store=tasks or _Tasks(),
        preference_store=_Preferences(),
        generator=generator or _StaticGenerator([]),
        now=lambda: NOW,
    )


def _record(title: str, **fields: Any) -> Dict[str, Any]:
    return {
        "title": title,
        "timeSlot": "morning",
        "specificTime": "2024-05-01T08:00:00Z",
        "durationMinutes": 30,
        "goalId": 1,
        **fields,
    }


def test_user_without_goals_gets_no_goals_and_no_inserts() -> None:
    tasks = _Tasks()
    generator = _StaticGenerator([_record("Run")])

    outcome = _service(goals=[], tasks=tasks, generator=generator).generate_daily_schedule(7)

    assert outcome == ScheduleFailure(FailureKind.NO_GOALS, FAILURE_MESSAGES[FailureKind.NO_GOALS])
    assert tasks.rows == []
    assert generator.calls == 0


def test_durations_are_clamped_before_saving() -> None:
    generator = _StaticGenerator(
        [
            _record("Short", durationMinutes=2, specificTime="2024-05-01T07:00:00Z"),
            _record("Normal", durationMinutes=30, specificTime="2024-05-01T08:00:00Z"),
            _record("Long", durationMinutes=900, specificTime="2024-05-01T09:00:00Z"),
        ]
    )

    outcome = _service(generator=generator).generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleSuccess)
    assert [task.duration_minutes for task in outcome.tasks] == [5, 30, 480]
    assert outcome.total_generated == 3
    assert outcome.failed_tasks == 0
    assert outcome.goals_processed == 1


def test_second_generation_same_day_is_blocked() -> None:
    tasks = _Tasks()
    tasks.insert_task(
        {"user_id": 7, "goal_id": 1, "title": "Earlier", "ai_generated": True}
    )
    generator = _StaticGenerator([_record("Run")])

    outcome = _service(tasks=tasks, generator=generator).generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleFailure)
    assert outcome.kind is FailureKind.DAILY_LIMIT_REACHED
    assert len(tasks.rows) == 1
    assert generator.calls == 0


def test_manual_tasks_do_not_count_against_limit() -> None:
    tasks = _Tasks()
    tasks.insert_task({"user_id": 7, "goal_id": 1, "title": "Manual", "ai_generated": False})

    service = _service(tasks=tasks)

    assert service.check_daily_limit(7).can_generate is True


def test_identical_candidates_persist_once() -> None:
    generator = _StaticGenerator([_record("Read"), _record("Read", description="again")])

    outcome = _service(generator=generator).generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleSuccess)
    assert outcome.total_generated == 1
    assert outcome.attempted_tasks == 1


def test_time_outside_slot_is_reported_not_saved() -> None:
    generator = _StaticGenerator([_record("Lunch prep", specificTime="2024-05-01T12:00:00Z")])

    outcome = _service(generator=generator).generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleSuccess)
    assert outcome.tasks == []
    assert outcome.failed_tasks == 1
    assert outcome.failures[0].errors == ["Time 12:00 doesn't match morning time slot"]


def test_run_with_nothing_saved_leaves_limit_open() -> None:
    tasks = _Tasks()
    generator = _StaticGenerator([_record("Late", specificTime="2024-05-01T20:00:00Z")])
    service = _service(tasks=tasks, generator=generator)

    outcome = service.generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleSuccess)
    assert outcome.total_generated == 0
    assert service.check_daily_limit(7).can_generate is True


def test_partial_insert_failure_keeps_other_tasks() -> None:
    tasks = _Tasks(fail_titles={"Broken"})
    generator = _StaticGenerator(
        [
            _record("Good", specificTime="2024-05-01T07:00:00Z"),
            _record("Broken", specificTime="2024-05-01T08:00:00Z"),
        ]
    )

    outcome = _service(tasks=tasks, generator=generator).generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleSuccess)
    assert [task.title for task in outcome.tasks] == ["Good"]
    assert outcome.failures[0].errors == ["insert rejected"]
    assert _service(tasks=tasks).check_daily_limit(7).can_generate is False


def test_hallucinated_goal_and_date_are_repaired() -> None:
    generator = _StaticGenerator([_record("Run", goalId=999, specificTime="2022-12-25T07:15:00Z")])

    outcome = _service(generator=generator).generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleSuccess)
    [task] = outcome.tasks
    assert task.goal_id == 1
    assert task.specific_time == datetime(2024, 5, 1, 7, 15, tzinfo=timezone.utc)


def test_generator_error_becomes_generation_failed() -> None:
    tasks = _Tasks()

    outcome = _service(tasks=tasks, generator=_BrokenGenerator()).generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleFailure)
    assert outcome.kind is FailureKind.GENERATION_FAILED
    assert tasks.rows == []


def test_non_object_records_are_skipped_and_valid_ones_saved() -> None:
    tasks = _Tasks()
    generator = _StaticGenerator([_record("Run"), "oops"])

    outcome = _service(tasks=tasks, generator=generator).generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleSuccess)
    assert [task.title for task in outcome.tasks] == ["Run"]
    assert outcome.attempted_tasks == 1
    assert len(tasks.rows) == 1


def test_preference_read_failure_becomes_generation_failed() -> None:
    tasks = _Tasks()
    generator = _StaticGenerator([_record("Run")])
    service = DailyScheduleService(
        goal_store=_Goals([Goal(id=1, user_id=7, title="Get fit")]),
        task_store=tasks,
        preference_store=_BrokenPreferences(),
        generator=generator,
        now=lambda: NOW,
    )

    outcome = service.generate_daily_schedule(7)

    assert outcome == ScheduleFailure.of(FailureKind.GENERATION_FAILED)
    assert generator.calls == 0
    assert tasks.rows == []


def test_blank_reasoning_falls_back_to_default() -> None:
    outcome = _service(generator=_StaticGenerator([_record("Run")], reasoning="  ")).generate_daily_schedule(7)

    assert isinstance(outcome, ScheduleSuccess)
    assert outcome.reasoning == DEFAULT_REASONING


@pytest.mark.parametrize("kind", list(FailureKind))
def test_every_failure_kind_has_a_message(kind: FailureKind) -> None:
    assert ScheduleFailure.of(kind).message == FAILURE_MESSAGES[kind]
