"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "LifePlan Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://lifeplan@localhost:5432/lifeplan"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "lifeplan"

    # OpenAI-compatible chat completion endpoint (DeepSeek by default).
    llm_api_key: str | None = None
    llm_base_url: str | None = "https://api.deepseek.com/v1"
    llm_model: str = "deepseek-chat"
    llm_tasks_model: str | None = None
    llm_temperature: float = 0.6
    llm_max_tokens: int = 1200
    llm_timeout_seconds: float = 30.0
    llm_max_retries: int = 0

    default_timezone: str = "UTC"
    plan_update_locking: bool = True


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
