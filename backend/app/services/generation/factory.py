"""Schedule generator factory."""
from __future__ import annotations

import logging
from functools import lru_cache

from app.core.config import settings
from app.services.generation.base import ScheduleGenerator
from app.services.generation.fallback import FallbackScheduleGenerator
from app.services.generation.openai_generator import OpenAIScheduleGenerator

logger = logging.getLogger(__name__)


@lru_cache
def get_schedule_generator() -> ScheduleGenerator:
    provider = settings.schedule_generator.lower()
    if provider == "fallback":
        return FallbackScheduleGenerator()
    if provider != "openai":
        logger.warning("Unknown schedule generator %r, using openai", settings.schedule_generator)
    return OpenAIScheduleGenerator.from_settings(settings)
