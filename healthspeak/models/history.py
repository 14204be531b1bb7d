"""SQLAlchemy model for prescription history records.

``prescription`` and ``tags`` are stored as JSON documents. ``search_terms``
is derived on every write (diagnosis, medicine names and tags, one per line)
so substring search does not need dialect-specific JSON operators.

Timestamps are fixed-width UTC ISO-8601 strings, so ordering and range filters
work as plain string comparisons on every backend.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from healthspeak.db.base import Base


class HistoryRecord(Base):
    __tablename__ = "history"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    simplified_text: Mapped[str] = mapped_column(Text, nullable=False)
    prescription: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    processing_status: Mapped[str] = mapped_column(String(16), nullable=False, index=True, default="completed")
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    search_terms: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    updated_at: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (
        Index("ix_history_status_created_at", "processing_status", "created_at"),
    )
