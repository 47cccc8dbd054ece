"""Time-of-day slot arithmetic.

Every function here works on minute-of-day values (``hour * 60 + minute``,
0-1439) taken in UTC. Slot windows are half-open, so 12:00 belongs to the
afternoon and 18:00 to the night. The night slot wraps past midnight and
covers both 18:00-24:00 and 00:00-04:30.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

MORNING = "morning"
AFTERNOON = "afternoon"
NIGHT = "night"

VALID_TIME_SLOTS: Tuple[str, ...] = (MORNING, AFTERNOON, NIGHT)

MINUTES_PER_DAY = 24 * 60

# Half-open [start, end) windows in minutes since midnight.
SLOT_WINDOWS: Dict[str, Tuple[Tuple[int, int], ...]] = {
    MORNING: ((270, 720),),
    AFTERNOON: ((720, 1080),),
    NIGHT: ((1080, MINUTES_PER_DAY), (0, 270)),
}


def minute_of_day(timestamp: datetime) -> int:
    """Return the UTC minute-of-day of a timestamp; naive values are taken as UTC."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.hour * 60 + timestamp.minute


def classify(minute: int) -> str:
    """Return the slot a minute-of-day falls in."""
    if 270 <= minute < 720:
        return MORNING
    if 720 <= minute < 1080:
        return AFTERNOON
    return NIGHT


def is_within_slot(slot: Optional[str], minute: Optional[int]) -> bool:
    """
    Check that a minute-of-day lies inside the named slot.

    Missing data is not a violation: with no slot or no minute there is
    nothing to compare, so the check passes. An unknown slot name fails.
    """
    if not slot or minute is None:
        return True
    windows = SLOT_WINDOWS.get(slot)
    if windows is None:
        return False
    return any(start <= minute < end for start, end in windows)


def format_minute_of_day(minute: int) -> str:
    """Render a minute-of-day as a zero-padded 24-hour ``HH:MM`` string."""
    hours, minutes = divmod(minute % MINUTES_PER_DAY, 60)
    return f"{hours:02d}:{minutes:02d}"


def parse_preferred_time_slots(raw: object) -> Tuple[str, ...]:
    """Decode the stored preference list, keeping known slots in canonical order."""
    values: object = raw
    if isinstance(raw, str):
        try:
            values = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unparseable preferred_time_slots value %r", raw)
            return VALID_TIME_SLOTS
    if not isinstance(values, (list, tuple, set, frozenset)):
        return VALID_TIME_SLOTS

    requested = {value.strip().lower() for value in values if isinstance(value, str)}
    preferred = tuple(slot for slot in VALID_TIME_SLOTS if slot in requested)
    return preferred or VALID_TIME_SLOTS
