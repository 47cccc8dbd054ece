"""Tests for time-slot arithmetic."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.services.time_slots import (
    AFTERNOON,
    MORNING,
    NIGHT,
    VALID_TIME_SLOTS,
    classify,
    format_minute_of_day,
    is_within_slot,
    minute_of_day,
    parse_preferred_time_slots,
)


@pytest.mark.parametrize(
    "minute, expected",
    [
        (0, NIGHT),
        (269, NIGHT),
        (270, MORNING),
        (719, MORNING),
        (720, AFTERNOON),
        (1079, AFTERNOON),
        (1080, NIGHT),
        (1439, NIGHT),
    ],
)
def test_classify_uses_half_open_windows(minute: int, expected: str) -> None:
    assert classify(minute) == expected


def test_every_minute_belongs_to_exactly_one_slot() -> None:
    for minute in range(24 * 60):
        owners = [slot for slot in VALID_TIME_SLOTS if is_within_slot(slot, minute)]
        assert owners == [classify(minute)]


def test_noon_is_not_morning() -> None:
    assert is_within_slot(MORNING, 720) is False
    assert is_within_slot(AFTERNOON, 720) is True


def test_night_wraps_past_midnight() -> None:
    assert is_within_slot(NIGHT, 30) is True
    assert is_within_slot(NIGHT, 1200) is True
    assert is_within_slot(NIGHT, 300) is False


def test_missing_inputs_pass_and_unknown_slot_fails() -> None:
    assert is_within_slot(None, 100) is True
    assert is_within_slot(MORNING, None) is True
    assert is_within_slot("", 100) is True
    assert is_within_slot("evening", 100) is False


def test_minute_of_day_converts_to_utc() -> None:
    plus_two = timezone(timedelta(hours=2))
    assert minute_of_day(datetime(2024, 5, 1, 14, 15, tzinfo=plus_two)) == 12 * 60 + 15
    assert minute_of_day(datetime(2024, 5, 1, 9, 5)) == 9 * 60 + 5


def test_format_minute_of_day_is_zero_padded() -> None:
    assert format_minute_of_day(0) == "00:00"
    assert format_minute_of_day(270) == "04:30"
    assert format_minute_of_day(720) == "12:00"
    assert format_minute_of_day(1439) == "23:59"


def test_parse_preferred_time_slots() -> None:
    assert parse_preferred_time_slots('["night", "Morning"]') == (MORNING, NIGHT)
    assert parse_preferred_time_slots(["afternoon", "unknown"]) == (AFTERNOON,)
    assert parse_preferred_time_slots("not json") == VALID_TIME_SLOTS
    assert parse_preferred_time_slots(None) == VALID_TIME_SLOTS
    assert parse_preferred_time_slots("[]") == VALID_TIME_SLOTS
