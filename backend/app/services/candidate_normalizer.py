"""Repair and default generator proposals into well-formed task candidates.

Generator output is untrusted. Nothing here rejects a proposal: missing
fields get defaults, out-of-range durations are clamped, hallucinated dates
are moved onto the schedule day, and unknown goal ids are re-pointed at one
of the user's own goals. Only exact duplicates are dropped.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from app.services.schedule_candidates import RawTaskCandidate, TaskCandidate
from app.services.task_validation import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES
from app.services.time_slots import MORNING

DEFAULT_TITLE = "Task"
DEFAULT_TIME_SLOT = MORNING
DEFAULT_DURATION_MINUTES = 30


def clamp_duration(duration: Optional[int]) -> int:
    if duration is None:
        return DEFAULT_DURATION_MINUTES
    return min(max(duration, MIN_DURATION_MINUTES), MAX_DURATION_MINUTES)


def correct_date(raw: Optional[datetime], reference_now: datetime) -> Optional[datetime]:
    """
    Move a timestamp onto the reference day, keeping its UTC time-of-day.

    Timestamps already on the reference day are returned unchanged.
    """
    if raw is None:
        return None
    raw_utc = _as_utc(raw)
    today = _as_utc(reference_now).date()
    if raw_utc.date() == today:
        return raw_utc
    return raw_utc.replace(year=today.year, month=today.month, day=today.day)


def heal_goal_id(goal_id: Optional[int], valid_goal_ids: Sequence[int]) -> int:
    if goal_id in valid_goal_ids:
        return goal_id
    return valid_goal_ids[0]


def normalize_candidate(
    raw: RawTaskCandidate,
    valid_goal_ids: Sequence[int],
    reference_now: datetime,
) -> TaskCandidate:
    time_slot = (raw.time_slot or "").strip().lower() or DEFAULT_TIME_SLOT
    return TaskCandidate(
        title=raw.title if raw.title is not None else DEFAULT_TITLE,
        description=raw.description if raw.description is not None else "",
        time_slot=time_slot,
        specific_time=correct_date(raw.specific_time, reference_now),
        duration_minutes=clamp_duration(raw.duration_minutes),
        goal_id=heal_goal_id(raw.goal_id, valid_goal_ids),
        fixed=bool(raw.fixed),
    )


def dedupe_candidates(candidates: Iterable[TaskCandidate]) -> List[TaskCandidate]:
    seen: Set[Tuple] = set()
    unique: List[TaskCandidate] = []
    for candidate in candidates:
        key = candidate.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def normalize_candidates(
    raw_candidates: Iterable[RawTaskCandidate],
    valid_goal_ids: Sequence[int],
    reference_now: datetime,
) -> List[TaskCandidate]:
    """Normalize every proposal in order, then drop later exact duplicates."""
    if not valid_goal_ids:
        raise ValueError("valid_goal_ids must contain at least one goal id")
    goal_ids = list(valid_goal_ids)
    normalized = [normalize_candidate(raw, goal_ids, reference_now) for raw in raw_candidates]
    return dedupe_candidates(normalized)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
