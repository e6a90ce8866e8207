"""Application settings loaded from environment variables.

Environment Configuration:
    JWT_SECRET: Token signing secret (required, startup aborts without it)
    DATABASE_URL: SQLAlchemy connection string (defaults to a local SQLite file)
    CORS_ORIGIN: Frontend origin allowed by CORS
    AI_WEBHOOK_URL: Optional AI summarization webhook
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    env: str = Field(default="dev", alias="ENV")
    jwt_secret: str = Field(..., min_length=1, alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    token_expire_days: int = Field(default=7, ge=1, alias="TOKEN_EXPIRE_DAYS")
    bcrypt_rounds: int = Field(default=10, ge=4, le=31, alias="BCRYPT_ROUNDS")

    database_url: str = Field(default="sqlite:///./notes.db", alias="DATABASE_URL")
    cors_origin: str = Field(default="http://localhost:5173", alias="CORS_ORIGIN")

    ai_webhook_url: Optional[str] = Field(default=None, alias="AI_WEBHOOK_URL")
    ai_timeout_seconds: float = Field(default=25.0, gt=0, alias="AI_TIMEOUT_SECONDS")

    log_json: bool = Field(default=True, alias="LOG_JSON")


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process.

    Raises:
        pydantic.ValidationError: If JWT_SECRET is missing or invalid values are set.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
