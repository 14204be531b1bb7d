"""Request-scoped accessors for objects owned by the application lifespan."""

from __future__ import annotations

from fastapi import Request

from healthspeak.core.config import Settings
from healthspeak.db.async_session import Database
from healthspeak.repositories.history_repository import HistoryRepository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_history_repository(request: Request) -> HistoryRepository:
    return request.app.state.history_repository
