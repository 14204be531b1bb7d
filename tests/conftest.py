"""Shared fixtures.

``healthspeak.main`` builds a module-level app from the environment, so a
``DATABASE_URL`` must exist before anything imports it. Each test still gets
its own SQLite file under ``tmp_path``.
"""

import asyncio
import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./healthspeak-import.db")

import pytest
from fastapi.testclient import TestClient

from healthspeak.core.config import Settings
from healthspeak.db.async_session import Database
from healthspeak.main import create_app
from healthspeak.repositories.history_repository import HistoryRepository


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{(tmp_path / 'history.db').as_posix()}"


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def run_with_repository(database_url, clock):
    """Run ``scenario(repository)`` on a fresh database inside one event loop."""

    def runner(scenario):
        async def main():
            database = Database(database_url)
            await database.create_all()
            try:
                return await scenario(HistoryRepository(database, clock=clock))
            finally:
                await database.dispose()

        return asyncio.run(main())

    return runner


@pytest.fixture
def settings(database_url):
    return Settings(database_url=database_url, environment="test", log_level="WARNING")


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def dev_client(database_url):
    settings = Settings(database_url=database_url, environment="development", log_level="WARNING")
    with TestClient(create_app(settings)) as test_client:
        yield test_client


def sample_prescription(medicine: str = "amoxicillin", diagnosis: str = "Sinusitis") -> dict:
    return {
        "patientInfo": {"name": "Jane Doe", "age": 34},
        "doctorInfo": {"name": "Dr. Rao"},
        "items": [
            {
                "medicine": {"name": medicine, "form": "capsule", "strength": "500mg"},
                "dosage": {"amount": "1", "frequency": "tid", "duration": "7 days"},
                "quantity": 21,
            }
        ],
        "diagnosis": diagnosis,
    }
