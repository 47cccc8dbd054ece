"""Daily schedule generation endpoints."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.daily_schedule import (
    DailyLimitResponse,
    DailyScheduleRequest,
    DailyScheduleResponse,
    GeneratedTaskPayload,
)
from app.core.context import bind_user_id
from app.db.deps import get_db
from app.db.models.agent_action_log import AgentActionLog
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.daily_schedule import (
    DailyScheduleService,
    FailureKind,
    ScheduleFailure,
    ScheduleSuccess,
)
from app.services.generation.base import ScheduleGenerator
from app.services.generation.factory import get_schedule_generator
from app.services.stores import SqlAlchemyGoalStore, SqlAlchemyPreferenceStore, SqlAlchemyTaskStore

logger = logging.getLogger(__name__)

router = APIRouter()

FAILURE_STATUS_CODES = {
    FailureKind.NO_GOALS: status.HTTP_404_NOT_FOUND,
    FailureKind.DAILY_LIMIT_REACHED: status.HTTP_429_TOO_MANY_REQUESTS,
    FailureKind.GENERATION_FAILED: status.HTTP_502_BAD_GATEWAY,
}


def get_daily_schedule_service(
    db: Session = Depends(get_db),
    generator: ScheduleGenerator = Depends(get_schedule_generator),
) -> DailyScheduleService:
    return DailyScheduleService(
        goal_store=SqlAlchemyGoalStore(db),
        task_store=SqlAlchemyTaskStore(db),
        preference_store=SqlAlchemyPreferenceStore(db),
        generator=generator,
    )


@router.post("/daily-schedule/generate", response_model=DailyScheduleResponse, tags=["daily-schedule"])
def generate_daily_schedule(
    payload: DailyScheduleRequest,
    http_request: Request,
    service: DailyScheduleService = Depends(get_daily_schedule_service),
    db: Session = Depends(get_db),
) -> DailyScheduleResponse:
    """Generate, normalize and store today's AI-authored tasks for a user."""
    request_id = getattr(http_request.state, "request_id", None)
    user_id = payload.user_id
    bind_user_id(user_id)
    metric_metadata: Dict[str, Any] = {"user_id": str(user_id)}

    start = perf_counter()
    with trace(
        "daily_schedule.run",
        metadata={"route": "/daily-schedule/generate"},
        user_id=user_id,
        request_id=request_id,
    ) as run_trace:
        outcome = service.generate_daily_schedule(user_id, request_id=request_id)
        if run_trace:
            run_trace.update(metadata=_trace_summary(outcome))
    latency_ms = (perf_counter() - start) * 1000
    log_metric("daily_schedule.generate.latency_ms", latency_ms, metadata=metric_metadata)

    if isinstance(outcome, ScheduleFailure):
        log_metric(
            "daily_schedule.generate.failure",
            1,
            metadata={**metric_metadata, "kind": outcome.kind.value},
        )
        raise HTTPException(
            status_code=FAILURE_STATUS_CODES[outcome.kind],
            detail={"code": outcome.kind.value, "message": outcome.message},
        )

    log_metric("daily_schedule.generate.success", 1, metadata=metric_metadata)
    log_metric("daily_schedule.generate.tasks_saved", outcome.total_generated, metadata=metric_metadata)
    log_metric("daily_schedule.generate.tasks_failed", outcome.failed_tasks, metadata=metric_metadata)
    response = DailyScheduleResponse(
        tasks=[GeneratedTaskPayload.model_validate(task) for task in outcome.tasks],
        reasoning=outcome.reasoning,
        total_generated=outcome.total_generated,
        goals_processed=outcome.goals_processed,
        attempted_tasks=outcome.attempted_tasks,
        failed_tasks=outcome.failed_tasks,
        request_id=request_id or "",
    )
    _record_generation(db, user_id, outcome, request_id)
    return response


@router.get("/daily-schedule/limit", response_model=DailyLimitResponse, tags=["daily-schedule"])
def daily_limit_check(
    http_request: Request,
    user_id: int = Query(..., description="User ID to check"),
    service: DailyScheduleService = Depends(get_daily_schedule_service),
) -> DailyLimitResponse:
    """Report whether the user can still generate a schedule today."""
    request_id = getattr(http_request.state, "request_id", None)
    bind_user_id(user_id)
    with trace("daily_schedule.limit_check", user_id=user_id, request_id=request_id):
        limit = service.check_daily_limit(user_id)

    log_metric(
        "daily_schedule.limit_check.can_generate",
        1 if limit.can_generate else 0,
        metadata={"user_id": str(user_id)},
    )
    return DailyLimitResponse(
        can_generate=limit.can_generate,
        message=limit.message,
        request_id=request_id or "",
    )


def _trace_summary(outcome: ScheduleSuccess | ScheduleFailure) -> Dict[str, Any]:
    if isinstance(outcome, ScheduleFailure):
        return {"outcome": outcome.kind.value}
    return {
        "outcome": "success",
        "tasks_saved": outcome.total_generated,
        "tasks_failed": outcome.failed_tasks,
        "llm_output_text": outcome.reasoning[:500],
    }


def _record_generation(db: Session, user_id: int, outcome: ScheduleSuccess, request_id: str | None) -> None:
    """Keep an operator-facing audit row, including per-candidate failure reasons."""
    log = AgentActionLog(
        user_id=user_id,
        action_type="daily_schedule_generated",
        action_payload={
            "reasoning": outcome.reasoning,
            "goals_processed": outcome.goals_processed,
            "attempted_tasks": outcome.attempted_tasks,
            "created_task_ids": [task.id for task in outcome.tasks],
            "failures": [
                {"candidate": failed.candidate.summary(), "errors": failed.errors}
                for failed in outcome.failures
            ],
            "request_id": request_id or "",
        },
        reason="AI daily schedule generated",
    )
    db.add(log)
    try:
        db.commit()
    except Exception:
        db.rollback()
        # Tasks are already committed; the response must still reflect them.
        logger.exception("Failed to record daily schedule audit log for user %s", user_id)
