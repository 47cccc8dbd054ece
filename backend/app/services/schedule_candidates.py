"""Typed views over generator output, before and after normalization."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# Time-only values are pinned to this date; correct_date moves them onto the schedule day.
TIME_ONLY_ANCHOR = date(1970, 1, 1)
_TIME_ONLY_FORMATS = ("%I:%M %p", "%I:%M%p", "%H:%M", "%H:%M:%S")


def _coerce_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
    if isinstance(value, (float, str)):
        try:
            return round(float(value))
        except (ValueError, OverflowError):
            return None
    return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            parsed = None
            for fmt in _TIME_ONLY_FORMATS:
                try:
                    clock = datetime.strptime(text.upper(), fmt).time()
                except ValueError:
                    continue
                parsed = datetime.combine(TIME_ONLY_ANCHOR, clock)
                break
            if parsed is None:
                logger.debug("Dropping unparseable specificTime %r", value)
                return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class RawTaskCandidate(BaseModel):
    """
    One task proposal exactly as the generator sent it.

    Every field is optional and coerced leniently: a value that cannot be
    read becomes None so normalization can default it, instead of failing
    the whole response over one bad field.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    time_slot: Optional[str] = Field(default=None, validation_alias=AliasChoices("timeSlot", "time_slot"))
    specific_time: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("specificTime", "specific_time"),
    )
    duration_minutes: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("durationMinutes", "duration", "duration_minutes"),
    )
    goal_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("goalId", "goal_id"))
    fixed: Optional[bool] = None

    @field_validator("title", "description", "time_slot", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Optional[str]:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return None

    @field_validator("specific_time", mode="before")
    @classmethod
    def _timestamp_or_none(cls, value: Any) -> Optional[datetime]:
        return _parse_timestamp(value)

    @field_validator("duration_minutes", "goal_id", mode="before")
    @classmethod
    def _int_or_none(cls, value: Any) -> Optional[int]:
        return _coerce_int(value)

    @field_validator("fixed", mode="before")
    @classmethod
    def _bool_or_none(cls, value: Any) -> Optional[bool]:
        return value if isinstance(value, bool) else None


@dataclass(frozen=True)
class TaskCandidate:
    """A normalized proposal, ready for validation and insertion."""

    title: str
    description: str
    time_slot: Optional[str]
    specific_time: Optional[datetime]
    duration_minutes: Optional[int]
    goal_id: Optional[int]
    fixed: bool = False

    @property
    def dedupe_key(self) -> Tuple[str, Optional[int], Optional[datetime]]:
        return (self.title, self.goal_id, self.specific_time)

    def to_task_data(self, user_id: Any) -> Dict[str, Any]:
        """Build the row payload for an AI-authored task owned by ``user_id``."""
        return {
            "user_id": user_id,
            "goal_id": self.goal_id,
            "title": self.title,
            "description": self.description or None,
            "time_slot": self.time_slot,
            "specific_time": self.specific_time,
            "duration_minutes": self.duration_minutes,
            "fixed": self.fixed,
            "completed": False,
            "ai_generated": True,
            "ai_validated": False,
        }

    def summary(self) -> Dict[str, Any]:
        """JSON-safe description used in logs and audit payloads."""
        return {
            "title": self.title,
            "goal_id": self.goal_id,
            "time_slot": self.time_slot,
            "specific_time": self.specific_time.isoformat() if self.specific_time else None,
            "duration_minutes": self.duration_minutes,
        }


def parse_generated_tasks(records: Iterable[Any]) -> List[RawTaskCandidate]:
    """Parse raw generator records, skipping any entry that is not a JSON object."""
    parsed: List[RawTaskCandidate] = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            logger.warning("Skipping generated task %d: expected an object, got %s", index, type(record).__name__)
            continue
        parsed.append(RawTaskCandidate.model_validate(record))
    return parsed
