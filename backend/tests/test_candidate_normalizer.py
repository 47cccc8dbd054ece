"""Tests for parsing and normalizing generator proposals."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.services.candidate_normalizer import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_TITLE,
    clamp_duration,
    correct_date,
    heal_goal_id,
    normalize_candidates,
)
from app.services.schedule_candidates import RawTaskCandidate, parse_generated_tasks

NOW = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def test_parse_reads_camel_case_and_aliases() -> None:
    [raw] = parse_generated_tasks(
        [
            {
                "title": "Run",
                "timeSlot": "morning",
                "specificTime": "2024-05-01T07:00:00Z",
                "duration": "45",
                "goalId": "7",
                "fixed": True,
            }
        ]
    )

    assert raw.time_slot == "morning"
    assert raw.specific_time == datetime(2024, 5, 1, 7, 0, tzinfo=timezone.utc)
    assert raw.duration_minutes == 45
    assert raw.goal_id == 7
    assert raw.fixed is True


def test_unreadable_fields_become_none() -> None:
    raw = RawTaskCandidate.model_validate(
        {
            "title": ["nope"],
            "timeSlot": 3,
            "specificTime": "sometime soon",
            "durationMinutes": "long",
            "goalId": True,
            "fixed": "yes",
        }
    )

    assert raw.title is None
    assert raw.time_slot == "3"
    assert raw.specific_time is None
    assert raw.duration_minutes is None
    assert raw.goal_id is None
    assert raw.fixed is None


def test_non_object_records_are_skipped() -> None:
    parsed = parse_generated_tasks([{"title": "Run"}, "oops", 3, None, ["nested"], {"title": "Read"}])

    assert [raw.title for raw in parsed] == ["Run", "Read"]


def test_time_only_values_land_on_reference_day() -> None:
    [raw] = parse_generated_tasks([{"title": "Walk", "specificTime": "7:30 PM"}])

    [candidate] = normalize_candidates([raw], [1], NOW)

    assert candidate.specific_time == datetime(2024, 5, 1, 19, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw, expected", [(None, 30), (2, 5), (5, 5), (30, 30), (480, 480), (900, 480), (-10, 5)])
def test_clamp_duration(raw, expected) -> None:
    assert clamp_duration(raw) == expected


def test_correct_date_keeps_time_of_day() -> None:
    stale = datetime(2023, 1, 15, 8, 45, tzinfo=timezone.utc)

    assert correct_date(stale, NOW) == datetime(2024, 5, 1, 8, 45, tzinfo=timezone.utc)
    assert correct_date(None, NOW) is None


def test_correct_date_leaves_today_alone() -> None:
    today = datetime(2024, 5, 1, 21, 0, tzinfo=timezone.utc)

    assert correct_date(today, NOW) == today


def test_heal_goal_id_points_unknown_ids_at_first_goal() -> None:
    assert heal_goal_id(9, [4, 5]) == 4
    assert heal_goal_id(None, [4, 5]) == 4
    assert heal_goal_id(5, [4, 5]) == 5


def test_defaults_fill_missing_fields() -> None:
    [candidate] = normalize_candidates([RawTaskCandidate()], [11], NOW)

    assert candidate.title == DEFAULT_TITLE
    assert candidate.description == ""
    assert candidate.time_slot == "morning"
    assert candidate.specific_time is None
    assert candidate.duration_minutes == DEFAULT_DURATION_MINUTES
    assert candidate.goal_id == 11
    assert candidate.fixed is False


def test_time_slot_is_trimmed_and_lower_cased() -> None:
    [candidate] = normalize_candidates(parse_generated_tasks([{"timeSlot": "  Night "}]), [1], NOW)

    assert candidate.time_slot == "night"


def test_duplicates_are_dropped_keeping_first() -> None:
    records = [
        {"title": "Read", "goalId": 1, "specificTime": "2024-05-01T20:00:00Z", "description": "first"},
        {"title": "Read", "goalId": 1, "specificTime": "2024-05-01T20:00:00Z", "description": "second"},
        {"title": "Read", "goalId": 1, "specificTime": "2024-05-01T21:00:00Z"},
    ]

    candidates = normalize_candidates(parse_generated_tasks(records), [1], NOW)

    assert [c.description for c in candidates] == ["first", ""]


def test_duplicates_detected_after_goal_healing() -> None:
    records = [{"title": "Plan", "goalId": 99}, {"title": "Plan", "goalId": 1}]

    candidates = normalize_candidates(parse_generated_tasks(records), [1], NOW)

    assert len(candidates) == 1


def test_requires_at_least_one_goal() -> None:
    with pytest.raises(ValueError):
        normalize_candidates([RawTaskCandidate()], [], NOW)
