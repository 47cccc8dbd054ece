"""OpenAI chat-completions schedule generator."""
from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence, Tuple

import openai
from pydantic import ValidationError

from app.core.config import Settings
from app.db.models.goal import Goal
from app.observability.tracing import trace
from app.services.generation.base import GeneratedSchedule, GenerationError, ScheduleGenerator
from app.services.stores.base import UserPreferences
from app.services.task_validation import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES
from app.services.time_slots import SLOT_WINDOWS, format_minute_of_day

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_EMBEDDED_OBJECT = re.compile(r"\{[\s\S]*\}")
_EMBEDDED_ARRAY = re.compile(r"\[[\s\S]*\]")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _describe_slot_windows() -> str:
    lines = []
    for slot, windows in SLOT_WINDOWS.items():
        spans = ", ".join(
            f"{format_minute_of_day(start)}-{format_minute_of_day(end)}" for start, end in windows
        )
        lines.append(f"- {slot}: {spans} UTC")
    return "\n".join(lines)


def build_prompts(
    goals: Sequence[Goal],
    preferences: UserPreferences,
    today: str,
) -> Tuple[str, str]:
    """Return the (system, user) prompt pair for one schedule request."""
    system_prompt = (
        "You are a daily routine planner. Turn the user's goals into concrete tasks for one day.\n"
        "Respond with a single JSON object of the form:\n"
        '{"tasks": [{"title": str, "description": str, "timeSlot": "morning|afternoon|night", '
        '"specificTime": ISO-8601 UTC timestamp, "durationMinutes": int, "goalId": int, "fixed": bool}], '
        '"reasoning": str}\n'
        "Rules:\n"
        "- Generate 3-8 actionable tasks in total, each tied to one of the listed goal ids.\n"
        f"- durationMinutes must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES}.\n"
        f"- Every specificTime must fall on {today} and inside its timeSlot:\n"
        f"{_describe_slot_windows()}\n"
        "- Prefer the user's preferred time slots and avoid overlapping tasks."
    )
    goals_json = json.dumps(
        [
            {"id": goal.id, "title": goal.title, "description": goal.description or ""}
            for goal in goals
        ]
    )
    user_prompt = (
        f"Date: {today}\n"
        f"Goals JSON: {goals_json}\n"
        f"Preferred time slots: {', '.join(preferences.preferred_time_slots)}\n"
        f"Additional context: {preferences.user_context or ''}\n"
        "Respond with valid JSON only."
    )
    return system_prompt, user_prompt


def extract_json_payload(content: str) -> Optional[Any]:
    """Decode a JSON payload, tolerating code fences or prose around it."""
    try:
        return json.loads(content)
    except ValueError:
        pass

    for pattern in (_FENCED_JSON, _EMBEDDED_OBJECT, _EMBEDDED_ARRAY):
        match = pattern.search(content)
        if not match:
            continue
        text = match.group(1) if match.groups() else match.group(0)
        try:
            return json.loads(text)
        except ValueError:
            continue
    return None


class OpenAIScheduleGenerator(ScheduleGenerator):
    """Ask an OpenAI chat model for a day of tasks; raise GenerationError on any failure."""

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout_seconds: float = 30.0,
        client: Any = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._now = now

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIScheduleGenerator":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
            timeout_seconds=settings.openai_timeout_seconds,
        )

    def _get_client(self) -> Any:
        if self._client is None:
            # Retries are left to the caller; one request per generation attempt.
            self._client = openai.OpenAI(
                api_key=self.api_key,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
        return self._client

    def generate(self, goals: Sequence[Goal], preferences: UserPreferences) -> GeneratedSchedule:
        if not goals:
            raise GenerationError("No goals provided for task generation")
        if not self.api_key:
            raise GenerationError("OpenAI API key not found")

        today = self._now().astimezone(timezone.utc).date().isoformat()
        system_prompt, user_prompt = build_prompts(goals, preferences, today)

        with trace(
            "daily_schedule.llm",
            metadata={
                "model": self.model,
                "goal_count": len(goals),
                "llm_input_text": user_prompt[:500],
            },
        ) as llm_trace:
            try:
                completion = self._get_client().chat.completions.create(
                    model=self.model,
                    response_format={"type": "json_object"},
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                )
            except openai.OpenAIError as exc:
                logger.error("OpenAI request failed: %s", exc)
                raise GenerationError("Failed to generate daily schedule") from exc

            content = completion.choices[0].message.content if completion.choices else None
            if not content:
                raise GenerationError("No response content from OpenAI")

            payload = extract_json_payload(content)
            if payload is None:
                logger.warning("OpenAI response was not JSON: %s", content[:200])
                raise GenerationError("OpenAI response was not valid JSON")
            if isinstance(payload, list):
                payload = {"tasks": payload}

            try:
                schedule = GeneratedSchedule.model_validate(payload)
            except ValidationError as exc:
                raise GenerationError("OpenAI response did not match the schedule format") from exc

            if llm_trace:
                llm_trace.update(
                    metadata={
                        "llm_output_text": schedule.reasoning[:500],
                        "raw_task_count": len(schedule.tasks),
                    }
                )
        return schedule
