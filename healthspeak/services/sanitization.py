"""Input sanitization and validation helpers.

These are pure functions: they never raise on bad input. Validators return a
:class:`ValidationResult` and callers must check ``is_valid``; warnings alone
never make a result invalid.
"""

from __future__ import annotations

import re
import secrets
import time
from dataclasses import dataclass, field
from typing import Any

_TAG_RE = re.compile(r"<[^>]+>")
_DANGEROUS_CHARS_RE = re.compile(r"[<>'\"&]")
_FILE_NAME_CHARS_RE = re.compile(r'[/\\:*?"<>|]')
_EXTENSION_RE = re.compile(r"\.[^/.]+$")

SUSPICIOUS_PATTERNS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"})

DEFAULT_MAX_TEXT_LENGTH = 10000
MIN_TEXT_LENGTH_WARNING = 10
MAX_FILE_NAME_LENGTH = 255
LARGE_FILE_WARNING_BYTES = 2 * 1024 * 1024


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def sanitize_input(value: Any) -> str:
    if not value or not isinstance(value, str):
        return ""

    cleaned = _TAG_RE.sub("", value)
    cleaned = _DANGEROUS_CHARS_RE.sub("", cleaned)
    return cleaned.strip()


def sanitize_file_name(file_name: Any) -> str:
    if not file_name or not isinstance(file_name, str):
        return ""

    cleaned = _FILE_NAME_CHARS_RE.sub("", file_name)
    return cleaned.replace("..", "").strip()


def generate_unique_file_name(original_name: str) -> str:
    """Storage name for an upload: ``<sanitized stem>_<epoch ms>_<6 hex chars>.<ext>``."""
    name = original_name or ""
    stem = sanitize_file_name(_EXTENSION_RE.sub("", name)) or "upload"
    extension = sanitize_file_name(name.rsplit(".", 1)[1].lower()) if "." in name else ""
    unique = f"{stem}_{time.time_ns() // 1_000_000}_{secrets.token_hex(3)}"
    return f"{unique}.{extension}" if extension else unique


def validate_text_input(text: Any, max_length: int = DEFAULT_MAX_TEXT_LENGTH) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if not text or not isinstance(text, str):
        return ValidationResult(is_valid=False, errors=["Text input is required"])

    if len(text) > max_length:
        errors.append(f"Text exceeds maximum length of {max_length} characters")

    if len(text) < MIN_TEXT_LENGTH_WARNING:
        warnings.append("Text seems very short, results may not be accurate")

    if any(pattern.search(text) for pattern in SUSPICIOUS_PATTERNS):
        errors.append("Text contains potentially harmful content")

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_file_upload(file: Any, max_size_mb: float = 5) -> ValidationResult:
    """Validate uploaded file metadata.

    ``file`` is any object exposing ``filename``, ``size`` (bytes) and
    ``content_type``; Starlette's ``UploadFile`` fits.
    """
    errors: list[str] = []
    warnings: list[str] = []

    size = int(getattr(file, "size", None) or 0)
    content_type = (getattr(file, "content_type", None) or "").lower()
    filename = getattr(file, "filename", None) or ""

    max_size_bytes = max_size_mb * 1024 * 1024
    if size > max_size_bytes:
        errors.append(f"File size exceeds {max_size_mb}MB limit")

    if content_type not in ALLOWED_IMAGE_TYPES:
        errors.append("File type not supported. Please upload JPEG, PNG, GIF, or WebP images.")

    if not filename or len(filename) > MAX_FILE_NAME_LENGTH:
        errors.append("Invalid file name")

    if size > LARGE_FILE_WARNING_BYTES:
        warnings.append("Large file may take longer to process")

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
