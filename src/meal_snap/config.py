"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    analysis_api_key: str | None = None
    analysis_base_url: str = "https://ai.gateway.lovable.dev/v1"
    analysis_model: str = "google/gemini-2.5-flash"
    analysis_timeout: float = 60.0
    default_timezone: str = "America/Sao_Paulo"
    cors_allowed_origins: str = "*"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse CORS origins from env; empty or "*" allows any origin."""
    if raw is None:
        return ["*"]
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return ["*"]
    return [chunk.strip() for chunk in cleaned.split(",") if chunk.strip()] or ["*"]
