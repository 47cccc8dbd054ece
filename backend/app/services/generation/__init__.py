"""Text-generation backends for daily schedules."""
from app.services.generation.base import (
    DEFAULT_REASONING,
    GeneratedSchedule,
    GenerationError,
    ScheduleGenerator,
)

__all__ = [
    "DEFAULT_REASONING",
    "GeneratedSchedule",
    "GenerationError",
    "ScheduleGenerator",
]
