"""Tests for environment-driven settings."""

from healthspeak.core.config import Settings


class TestSettings:
    def test_defaults_to_production(self, monkeypatch):
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        settings = Settings(database_url="sqlite+aiosqlite:///history.db")

        assert settings.environment == "production"
        assert not settings.is_development

    def test_development_flag(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", " Development ")

        assert Settings(database_url="sqlite+aiosqlite:///history.db").is_development

    def test_postgres_urls_use_asyncpg(self):
        settings = Settings(database_url="postgres://user:pw@db:5432/healthspeak")

        assert settings.async_database_uri == "postgresql+asyncpg://user:pw@db:5432/healthspeak"
