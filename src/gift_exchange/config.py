"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    max_draw_attempts: int = Field(default=100, ge=1)
    precompute_draw: bool = True
    feasibility_precheck: bool = False
    session_id_bytes: int = Field(default=12, ge=12)
    allowed_origins: str = "*"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse a comma-separated CORS origin list from env."""
    if raw is None:
        return ["*"]
    origins = [chunk.strip() for chunk in raw.split(",") if chunk.strip()]
    return origins or ["*"]
