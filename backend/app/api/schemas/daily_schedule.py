"""Schemas for daily schedule generation.

Responses are serialized with camelCase keys (``totalGenerated``,
``failedTasks``...), which clients treat as a stable contract.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DailyScheduleRequest(CamelModel):
    user_id: int


class GeneratedTaskPayload(CamelModel):
    id: int
    user_id: int
    goal_id: Optional[int]
    title: str
    description: Optional[str]
    time_slot: Optional[str]
    specific_time: Optional[datetime]
    duration_minutes: Optional[int]
    fixed: bool
    completed: bool
    ai_generated: bool
    ai_validated: bool
    created_at: datetime
    updated_at: datetime


class DailyScheduleResponse(CamelModel):
    tasks: List[GeneratedTaskPayload]
    reasoning: str
    total_generated: int
    goals_processed: int
    attempted_tasks: int
    failed_tasks: int
    request_id: str


class DailyLimitResponse(CamelModel):
    can_generate: bool
    message: str
    request_id: str
