from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    PORT: int = 8000
    APP_NAME: str = "PickNext"
    APP_ENV: Literal["development", "production", "test"] = "production"

    REDIS_URL: str = "redis://redis:6379/0"
    # Maximum number of connections Redis client will open per process
    REDIS_MAX_CONNECTIONS: int = 20

    # "memory" keeps everything in-process, "redis" shares it across workers
    CACHE_BACKEND: Literal["memory", "redis"] = "memory"
    STORE_BACKEND: Literal["memory", "redis"] = "memory"

    # Deployment variant. CN web fitness swaps "nearby place" for "theory article".
    DEPLOYMENT_REGION: Literal["CN", "INTL"] = "INTL"
    FITNESS_THEORY_VARIANT: bool = True

    RECOMMENDATION_CACHE_TTL_MINUTES: int = 30
    RECOMMENDATION_CACHE_MAX_ENTRIES: int = 2048
    GENERATOR_TIMEOUT_SECONDS: float = 25.0
    HISTORY_MAX_ENTRIES: int = 200

    # 0 disables the per-client limiter
    RATE_LIMIT_PER_MINUTE: int = 30

    # AI
    DEFAULT_GEMINI_MODEL: str = "gemma-3-27b-it"
    GEMINI_API_KEY: str | None = None


settings = Settings()
