"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    calorie_mama_api_url: str | None = None
    calorie_mama_api_key: str | None = None
    calorie_request_timeout_seconds: float = 15.0
    max_upload_bytes: int = 8 * 1024 * 1024
    image_target_size: int = 544
    image_jpeg_quality: int = 80
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def normalize_api_key(raw: str | None) -> str | None:
    """Treat blank API keys from env files as unset."""
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None
