"""Application configuration for HealthSpeak.

Configuration is loaded from environment variables (or a local ``.env`` file),
making the service suitable for container-based deployments. ``DATABASE_URL``
has no default: a process started without it fails at startup.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str

    app_version: str = "1.0.0"
    environment: str = "production"
    log_level: str = "INFO"

    max_file_size_mb: int = 5
    tts_max_text_length: int = 5000

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"

    @property
    def async_database_uri(self) -> str:
        uri = self.database_url
        if uri.startswith("postgresql+asyncpg://"):
            return uri
        if uri.startswith("postgresql+psycopg2://"):
            return uri.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
        if uri.startswith("postgresql://"):
            return uri.replace("postgresql://", "postgresql+asyncpg://", 1)
        if uri.startswith("postgres://"):
            return uri.replace("postgres://", "postgresql+asyncpg://", 1)
        return uri


@lru_cache
def get_settings() -> Settings:
    return Settings()
