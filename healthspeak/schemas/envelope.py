from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from healthspeak.core.errors import HealthSpeakError


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_success_response(data: Any, message: str | None = None, *, status_code: int = 200) -> JSONResponse:
    content: dict[str, Any] = {"success": True, "data": jsonable_encoder(data, by_alias=True)}
    if message is not None:
        content["message"] = message
    content["timestamp"] = utc_now_iso()
    return JSONResponse(status_code=status_code, content=content)


def format_error_response(
    message: str,
    *,
    status_code: int = 400,
    code: str | None = None,
    details: Any = None,
) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": message}
    if code is not None:
        content["code"] = code
    if details is not None:
        content["details"] = jsonable_encoder(details)
    content["timestamp"] = utc_now_iso()
    return JSONResponse(status_code=status_code, content=content)


def error_response_for(exc: HealthSpeakError, *, include_details: bool = False) -> JSONResponse:
    return format_error_response(
        exc.message,
        status_code=exc.status_code,
        code=exc.code,
        details=exc.details if include_details else None,
    )
