"""Candidate-by-candidate persistence with partial-failure bookkeeping."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Collection, List, Sequence

from app.db.models.task import Task
from app.services.schedule_candidates import TaskCandidate
from app.services.stores.base import TaskStore
from app.services.task_validation import validate_task_data

logger = logging.getLogger(__name__)

GOAL_NOT_FOUND = "Goal not found"


@dataclass
class FailedCandidate:
    candidate: TaskCandidate
    errors: List[str]


@dataclass
class PersistenceReport:
    saved: List[Task] = field(default_factory=list)
    failed: List[FailedCandidate] = field(default_factory=list)


def persist_candidates(
    task_store: TaskStore,
    candidates: Sequence[TaskCandidate],
    user_id: Any,
    valid_goal_ids: Collection[int],
) -> PersistenceReport:
    """
    Validate and insert each candidate independently, in order.

    A candidate that fails validation or whose insert raises is recorded in
    ``failed`` and the loop moves on; earlier inserts stay committed and
    nothing is retried.
    """
    report = PersistenceReport()
    for candidate in candidates:
        task_data = candidate.to_task_data(user_id)
        errors = list(validate_task_data(task_data).errors)
        if candidate.goal_id is not None and candidate.goal_id not in valid_goal_ids:
            errors.append(GOAL_NOT_FOUND)
        if errors:
            report.failed.append(FailedCandidate(candidate=candidate, errors=errors))
            continue

        try:
            report.saved.append(task_store.insert_task(task_data))
        except Exception as exc:
            logger.warning("Insert failed for candidate %r", candidate.title, exc_info=True)
            report.failed.append(FailedCandidate(candidate=candidate, errors=[str(exc) or type(exc).__name__]))

    if report.failed:
        logger.warning(
            "%d of %d candidates failed to save",
            len(report.failed),
            len(candidates),
        )
        for index, failed in enumerate(report.failed, start=1):
            logger.warning("Failed candidate %d: %s errors=%s", index, failed.candidate.summary(), failed.errors)
    return report
