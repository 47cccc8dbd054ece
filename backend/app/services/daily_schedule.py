"""AI-assisted daily schedule generation.

One call walks a fixed sequence and stops at the first hard failure:

1. load the user's goals (none -> NO_GOALS)
2. check the daily generation gate (used -> DAILY_LIMIT_REACHED)
3. read preferences, ask the generator for raw tasks and parse them
   (any error -> GENERATION_FAILED)
4. normalize the proposals against the goal ids loaded in step 1
5. persist each candidate independently

Steps 1-3 never write. Once step 5 starts the call is a success, even if
every candidate ends up in the failed list.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Union

from app.db.models.task import Task
from app.observability.tracing import trace
from app.services.bulk_persistence import FailedCandidate, persist_candidates
from app.services.candidate_normalizer import normalize_candidates
from app.services.daily_limit import DailyLimitStatus, check_daily_limit
from app.services.generation.base import ScheduleGenerator
from app.services.schedule_candidates import parse_generated_tasks
from app.services.stores.base import GoalStore, PreferenceStore, TaskStore

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    NO_GOALS = "NO_GOALS"
    DAILY_LIMIT_REACHED = "DAILY_LIMIT_REACHED"
    GENERATION_FAILED = "GENERATION_FAILED"


FAILURE_MESSAGES = {
    FailureKind.NO_GOALS: "No goals found for user. Add a goal before generating a schedule.",
    FailureKind.DAILY_LIMIT_REACHED: (
        "You have already generated tasks for today. You can only generate AI tasks once per day."
    ),
    FailureKind.GENERATION_FAILED: "Failed to generate tasks from your goals. Please try again later.",
}


@dataclass(frozen=True)
class ScheduleFailure:
    kind: FailureKind
    message: str

    @classmethod
    def of(cls, kind: FailureKind) -> "ScheduleFailure":
        return cls(kind=kind, message=FAILURE_MESSAGES[kind])


@dataclass
class ScheduleSuccess:
    tasks: List[Task]
    reasoning: str
    goals_processed: int
    attempted_tasks: int
    failures: List[FailedCandidate] = field(default_factory=list)

    @property
    def total_generated(self) -> int:
        return len(self.tasks)

    @property
    def failed_tasks(self) -> int:
        return self.attempted_tasks - self.total_generated


ScheduleOutcome = Union[ScheduleSuccess, ScheduleFailure]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DailyScheduleService:
    """Runs the daily schedule pipeline over explicitly supplied stores and generator."""

    def __init__(
        self,
        *,
        goal_store: GoalStore,
        task_store: TaskStore,
        preference_store: PreferenceStore,
        generator: ScheduleGenerator,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.goal_store = goal_store
        self.task_store = task_store
        self.preference_store = preference_store
        self.generator = generator
        self._now = now

    def check_daily_limit(self, user_id: int) -> DailyLimitStatus:
        return check_daily_limit(self.task_store, user_id, self._now())

    def generate_daily_schedule(self, user_id: int, *, request_id: Optional[str] = None) -> ScheduleOutcome:
        reference_now = self._now()

        goals = self.goal_store.list_goals_for_user(user_id)
        if not goals:
            logger.info("User %s has no goals; skipping generation", user_id)
            return ScheduleFailure.of(FailureKind.NO_GOALS)

        limit = check_daily_limit(self.task_store, user_id, reference_now)
        if not limit.can_generate:
            logger.info("User %s already generated a schedule today", user_id)
            return ScheduleFailure.of(FailureKind.DAILY_LIMIT_REACHED)

        try:
            preferences = self.preference_store.get_preferences(user_id)
            with trace(
                "daily_schedule.generate",
                metadata={
                    "goal_count": len(goals),
                    "preferred_time_slots": list(preferences.preferred_time_slots),
                },
                user_id=user_id,
                request_id=request_id,
            ):
                generated = self.generator.generate(goals, preferences)
                raw_candidates = parse_generated_tasks(generated.tasks)
        except Exception:
            logger.exception("Schedule generation failed for user %s", user_id)
            return ScheduleFailure.of(FailureKind.GENERATION_FAILED)

        goal_ids = [goal.id for goal in goals]
        candidates = normalize_candidates(raw_candidates, goal_ids, reference_now)
        report = persist_candidates(self.task_store, candidates, user_id, set(goal_ids))

        logger.info(
            "Daily schedule for user %s: %d raw, %d candidates, %d saved, %d failed",
            user_id,
            len(raw_candidates),
            len(candidates),
            len(report.saved),
            len(report.failed),
        )
        return ScheduleSuccess(
            tasks=report.saved,
            reasoning=generated.reasoning,
            goals_processed=len(goals),
            attempted_tasks=len(candidates),
            failures=report.failed,
        )
