"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Routinely Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://postgres@localhost:5432/routinely"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "routinely"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-2024-08-06"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 2000
    openai_timeout_seconds: float = 30.0
    # "openai" or "fallback" (keyword-based, no network)
    schedule_generator: str = "openai"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
