"""Upload pre-flight router.

Clients post the metadata of an image before uploading it; the same rules the
upload pipeline applies (size, MIME type, file name) are checked here.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import Field

from healthspeak.core.config import Settings
from healthspeak.core.errors import ValidationError
from healthspeak.routers.dependencies import get_app_settings
from healthspeak.schemas.base import CamelModel
from healthspeak.schemas.envelope import format_success_response
from healthspeak.services.sanitization import (
    generate_unique_file_name,
    sanitize_file_name,
    validate_file_upload,
)

router = APIRouter(prefix="/uploads", tags=["uploads"])


class UploadMetadata(CamelModel):
    filename: str = ""
    size: int = Field(..., ge=0)
    content_type: str = ""


@router.post("/validate")
async def validate_upload(payload: UploadMetadata, settings: Settings = Depends(get_app_settings)):
    result = validate_file_upload(payload, settings.max_file_size_mb)
    if not result.is_valid:
        raise ValidationError.from_errors(result.errors, prefix="File validation failed")

    return format_success_response(
        {
            "filename": sanitize_file_name(payload.filename),
            "storageName": generate_unique_file_name(payload.filename),
            "size": payload.size,
            "contentType": payload.content_type.lower(),
            "warnings": result.warnings,
        },
        "File is valid for upload",
    )
