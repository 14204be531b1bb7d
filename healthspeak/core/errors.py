"""Error taxonomy shared by the HTTP layer and the history store.

Every error carries an HTTP status and a stable machine-readable code so the
exception handlers in :mod:`healthspeak.main` can render the uniform error
envelope without inspecting the exception type.
"""

from __future__ import annotations

from typing import Any, Iterable


class HealthSpeakError(Exception):
    status_code = 500
    code = "UNKNOWN_ERROR"

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(HealthSpeakError):
    status_code = 400
    code = "VALIDATION_ERROR"

    @classmethod
    def from_errors(cls, errors: Iterable[str], *, prefix: str | None = None) -> "ValidationError":
        message = ", ".join(errors)
        if prefix:
            message = f"{prefix}: {message}"
        return cls(message)


class NotFoundError(HealthSpeakError):
    status_code = 404
    code = "NOT_FOUND"


class StorageError(HealthSpeakError):
    status_code = 500
    code = "STORAGE_ERROR"


class UnknownError(HealthSpeakError):
    status_code = 500
    code = "UNKNOWN_ERROR"
