"""Prescription history router.

Every body and query value is sanitized before it reaches the repository;
validation failures are raised as :class:`ValidationError` and rendered by the
application-level handlers in :mod:`healthspeak.main`.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from healthspeak.core.errors import NotFoundError, ValidationError
from healthspeak.repositories.history_repository import HistoryRepository
from healthspeak.routers.dependencies import get_history_repository
from healthspeak.schemas.envelope import format_success_response
from healthspeak.schemas.history import (
    HistoryCreateRequest,
    HistoryPage,
    HistoryUpdateRequest,
    Pagination,
)
from healthspeak.services.sanitization import sanitize_input, validate_text_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/history", tags=["history"])

MAX_QUERY_LENGTH = 100


def _require_valid_text(value: Optional[str], label: str, max_length: int = 10000) -> None:
    result = validate_text_input(value, max_length)
    if not result.is_valid:
        raise ValidationError.from_errors(result.errors, prefix=f"{label} validation failed")


@router.get("")
async def get_history(
    q: Optional[str] = Query(default=None, description="Search query"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    id: Optional[str] = Query(default=None, description="Return a single history item"),
    stats: bool = Query(default=False, description="Return aggregate statistics"),
    repository: HistoryRepository = Depends(get_history_repository),
):
    if stats:
        return format_success_response(await repository.stats())

    if id is not None:
        item = await repository.get_by_id(sanitize_input(id))
        if item is None:
            raise NotFoundError("History item not found")
        return format_success_response(item)

    skip = (page - 1) * limit
    if q:
        query = sanitize_input(q)
        _require_valid_text(query, "Search query", MAX_QUERY_LENGTH)
        items = await repository.search(query, limit=limit, skip=skip)
        total = await repository.count(query)
    else:
        items = await repository.list_items(limit=limit, skip=skip)
        total = await repository.count()

    result = HistoryPage(
        items=items,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
            has_next=page * limit < total,
            has_prev=page > 1,
        ),
    )
    return format_success_response(result)


@router.post("")
async def create_history(
    payload: HistoryCreateRequest,
    repository: HistoryRepository = Depends(get_history_repository),
):
    _require_valid_text(payload.original_text, "Original text")
    _require_valid_text(payload.simplified_text, "Simplified text")

    item = await repository.add(payload.to_new_item())
    return format_success_response(
        item,
        "Prescription saved to history successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.put("")
async def update_history(
    payload: HistoryUpdateRequest,
    repository: HistoryRepository = Depends(get_history_repository),
):
    changes = payload.changes()
    if "original_text" in changes:
        _require_valid_text(payload.original_text, "Original text")
    if "simplified_text" in changes:
        _require_valid_text(payload.simplified_text, "Simplified text")

    item = await repository.update(payload.id, changes)
    if item is None:
        raise NotFoundError("History item not found")
    return format_success_response(item, "History item updated successfully")


@router.delete("")
async def delete_history(
    id: Optional[str] = Query(default=None),
    repository: HistoryRepository = Depends(get_history_repository),
):
    record_id = sanitize_input(id)
    if not record_id:
        raise ValidationError("ID is required for deletion")

    if not await repository.delete(record_id):
        raise NotFoundError("History item not found")
    return format_success_response(None, "History item deleted successfully")
