"""HealthSpeak FastAPI application.

Backend for the HealthSpeak prescription reader: prescription history storage,
the medical abbreviation and drug dictionary, text-to-speech configuration and
a health probe. Every JSON response uses the same success/error envelope.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from healthspeak.clinical.medical_dictionary.router import router as dictionary_router
from healthspeak.core.config import Settings, get_settings
from healthspeak.core.errors import HealthSpeakError, StorageError, UnknownError
from healthspeak.db.async_session import Database
from healthspeak.repositories.history_repository import HistoryRepository
from healthspeak.routers import healthcheck, history, tts, uploads
from healthspeak.schemas.envelope import error_response_for, format_error_response

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _describe_validation_errors(exc: RequestValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return messages


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings.async_database_uri)
        await database.create_all()

        app.state.settings = settings
        app.state.database = database
        app.state.history_repository = HistoryRepository(database)
        app.state.started_at = time.monotonic()
        logger.info("HealthSpeak started (environment=%s)", settings.environment)
        try:
            yield
        finally:
            await database.dispose()

    app = FastAPI(
        title="HealthSpeak",
        version=settings.app_version,
        description="Prescription history, medical dictionary and voice playback APIs.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %s (%.1fms) ua=%s",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            request.headers.get("user-agent", "-"),
        )
        return response

    @app.exception_handler(HealthSpeakError)
    async def handle_healthspeak_error(request: Request, exc: HealthSpeakError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)

        if isinstance(exc, StorageError) and settings.is_development and exc.details is None:
            exc.details = str(exc.__cause__) if exc.__cause__ else None
        return error_response_for(exc, include_details=settings.is_development)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        messages = _describe_validation_errors(exc)
        logger.warning("%s %s invalid request: %s", request.method, request.url.path, messages)
        return format_error_response(
            "Invalid request: " + "; ".join(messages),
            status_code=400,
            code="VALIDATION_ERROR",
            details=messages if settings.is_development else None,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        code = "NOT_FOUND" if exc.status_code == 404 else None
        return format_error_response(str(exc.detail), status_code=exc.status_code, code=code)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = UnknownError(
            "An unexpected error occurred",
            details=str(exc) if settings.is_development else None,
        )
        return error_response_for(error, include_details=settings.is_development)

    app.include_router(history.router)
    app.include_router(dictionary_router)
    app.include_router(tts.router)
    app.include_router(healthcheck.router)
    app.include_router(uploads.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
