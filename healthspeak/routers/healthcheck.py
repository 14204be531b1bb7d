"""Liveness and readiness probe.

The database check is a real round trip (``SELECT 1`` plus the statistics
aggregate). Any service reported ``down`` makes the whole check unhealthy and
the endpoint answers 503.
"""

from __future__ import annotations

import logging
import shutil
import sys
import time
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.exc import SQLAlchemyError

from healthspeak.core.config import Settings
from healthspeak.core.errors import StorageError
from healthspeak.db.async_session import Database
from healthspeak.repositories.history_repository import HistoryRepository
from healthspeak.routers.dependencies import get_app_settings, get_database, get_history_repository
from healthspeak.schemas.envelope import format_success_response, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/healthcheck", tags=["health"])


def format_bytes(num_bytes: float) -> str:
    if num_bytes <= 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB", "TB"]
    value = float(num_bytes)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


def _peak_memory_bytes() -> Optional[int]:
    try:
        import resource
    except ImportError:
        # Not available on Windows.
        return None

    usage = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS, kilobytes elsewhere.
    return usage if sys.platform == "darwin" else usage * 1024


def _format_peak_memory() -> str:
    peak = _peak_memory_bytes()
    return format_bytes(peak) if peak is not None else "unavailable"


@router.get("")
async def healthcheck(
    request: Request,
    detailed: bool = Query(default=False),
    settings: Settings = Depends(get_app_settings),
    database: Database = Depends(get_database),
    repository: HistoryRepository = Depends(get_history_repository),
):
    started = time.perf_counter()

    health: dict[str, Any] = {
        "status": "healthy",
        "timestamp": utc_now_iso(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "version": settings.app_version,
        "environment": settings.environment,
        "services": {
            "database": {"status": "up", "type": database.dialect_name, "connection": "configured"},
            "fileSystem": {"status": "up"},
            "memory": {"peak": _format_peak_memory()},
        },
    }

    try:
        db_started = time.perf_counter()
        await database.ping()
        stats = await repository.stats()
        health["services"]["database"]["responseTime"] = round((time.perf_counter() - db_started) * 1000, 2)
        if detailed:
            health["stats"] = {"totalPrescriptions": stats.total, "recentActivity": stats.this_week}
    except (SQLAlchemyError, StorageError, OSError) as exc:
        logger.error("Database health check failed: %s", exc)
        health["services"]["database"]["status"] = "down"
        health["services"]["database"]["connection"] = (
            f"error: {exc}" if settings.is_development else "error"
        )

    try:
        disk = shutil.disk_usage(Path.cwd())
        health["services"]["fileSystem"]["freeSpace"] = format_bytes(disk.free)
    except OSError:
        logger.exception("File system health check failed")
        health["services"]["fileSystem"]["status"] = "down"

    if any(service.get("status") == "down" for service in health["services"].values()):
        health["status"] = "unhealthy"

    health["responseTime"] = f"{round((time.perf_counter() - started) * 1000)}ms"
    http_status = 503 if health["status"] == "unhealthy" else 200
    logger.info("Health check completed: %s (%s)", health["status"], health["responseTime"])
    return format_success_response(health, status_code=http_status)


@router.head("")
async def healthcheck_head(database: Database = Depends(get_database)) -> Response:
    headers = {"X-Timestamp": utc_now_iso()}
    try:
        await database.ping()
    except (SQLAlchemyError, OSError):
        logger.exception("Quick database health check failed")
        headers.update({"X-Health-Status": "unhealthy", "X-Database-Status": "down"})
        return Response(status_code=503, headers=headers)

    headers.update(
        {"X-Health-Status": "healthy", "X-Database-Status": "up", "X-Database-Type": database.dialect_name}
    )
    return Response(status_code=200, headers=headers)
