"""Async SQLAlchemy engine and session management.

The :class:`Database` client is built explicitly by the process entry point
(FastAPI lifespan or admin CLI) and handed to the repositories; nothing here
connects at import time.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from healthspeak.db.base import Base

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, uri: str, *, engine: AsyncEngine | None = None) -> None:
        self.uri = uri
        self.engine = engine or create_async_engine(
            uri,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @property
    def is_postgres(self) -> bool:
        return self.dialect_name == "postgresql"

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.sessionmaker() as db:
            yield db

    async def create_all(self) -> None:
        # Import registers the models on Base.metadata.
        from healthspeak.db import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready (dialect=%s)", self.dialect_name)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")
