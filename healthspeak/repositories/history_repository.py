"""Persistence and query layer for prescription history records.

Search strategy:
- Case-insensitive literal substring ("contains") over the original text, the
  simplified text and the derived ``search_terms`` column (diagnosis, medicine
  names, tags).
- On PostgreSQL, native full-text search (``to_tsvector @@ plainto_tsquery``)
  is OR-ed with the substring match inside the same statement, so a record
  matching both ways is returned once and ``limit``/``offset`` apply to the
  de-duplicated set.

No locking is done here: concurrent updates to one record are last-write-wins
at the database, and every database failure surfaces as :class:`StorageError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Mapping, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import ColumnElement, case, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from healthspeak.core.errors import StorageError, ValidationError
from healthspeak.db.async_session import Database
from healthspeak.models.history import HistoryRecord
from healthspeak.schemas.history import (
    HistoryCreateRequest,
    HistoryItem,
    HistoryStats,
    NewHistoryItem,
    Prescription,
    ProcessingStatus,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"original_text", "simplified_text", "prescription", "image_url", "processing_status", "tags"}
)
CLEANUP_TEST_TAGS = frozenset({"test", "sample", "demo"})
_LIKE_ESCAPE = "/"


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Render ``moment`` as a fixed-width, lexicographically sortable UTC string."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def normalize_timestamp(value: object) -> Optional[str]:
    if isinstance(value, datetime):
        return utc_timestamp(value)
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return utc_timestamp(datetime.fromisoformat(raw))
    except ValueError:
        return None


def _parse_id(value: object) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except (ValueError, TypeError, AttributeError):
        return None


def _like_pattern(value: str) -> str:
    escaped = (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


def _prescription_model(value: object) -> Optional[Prescription]:
    if value is None:
        return None
    if isinstance(value, Prescription):
        return value
    return Prescription.model_validate(value)


def _search_terms(prescription: Optional[Prescription], tags: Iterable[str]) -> str:
    lines: list[str] = []
    if prescription is not None:
        if prescription.diagnosis:
            lines.append(prescription.diagnosis)
        lines.extend(prescription.medicine_names())
    lines.extend(tag for tag in tags if tag)
    return "\n".join(lines)


def _status_value(value: object) -> str:
    if isinstance(value, ProcessingStatus):
        return value.value
    return ProcessingStatus(str(value)).value


def _to_item(row: HistoryRecord) -> HistoryItem:
    return HistoryItem(
        id=str(row.id),
        original_text=row.original_text,
        simplified_text=row.simplified_text,
        prescription=_prescription_model(row.prescription),
        image_url=row.image_url,
        processing_status=ProcessingStatus(row.processing_status),
        tags=list(row.tags or []),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


@dataclass
class RestoreResult:
    requested: int
    inserted: int

    @property
    def success(self) -> bool:
        return self.inserted == self.requested


@dataclass
class CleanupResult:
    test_records_removed: int
    failed_records_removed: int


class HistoryRepository:
    def __init__(self, database: Database, *, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.database = database
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now(self) -> datetime:
        return self._clock()

    def _build_row(self, item: NewHistoryItem, *, created_at: str, updated_at: str) -> HistoryRecord:
        prescription = _prescription_model(item.prescription)
        tags = list(item.tags)
        return HistoryRecord(
            id=uuid4(),
            original_text=item.original_text,
            simplified_text=item.simplified_text,
            prescription=(
                prescription.model_dump(mode="json", by_alias=True, exclude_none=True) if prescription else None
            ),
            image_url=item.image_url,
            processing_status=_status_value(item.processing_status),
            tags=tags,
            search_terms=_search_terms(prescription, tags),
            created_at=created_at,
            updated_at=updated_at,
        )

    def _match_clause(self, query: str) -> ColumnElement[bool]:
        pattern = _like_pattern(query)
        contains = or_(
            HistoryRecord.original_text.ilike(pattern, escape=_LIKE_ESCAPE),
            HistoryRecord.simplified_text.ilike(pattern, escape=_LIKE_ESCAPE),
            HistoryRecord.search_terms.ilike(pattern, escape=_LIKE_ESCAPE),
        )
        if not self.database.is_postgres:
            return contains

        document = func.to_tsvector(
            "simple",
            func.concat_ws(" ", HistoryRecord.original_text, HistoryRecord.simplified_text, HistoryRecord.search_terms),
        )
        full_text = document.bool_op("@@")(func.plainto_tsquery("simple", query))
        return or_(full_text, contains)

    # -- create / read ----------------------------------------------------

    async def add(self, item: NewHistoryItem) -> HistoryItem:
        timestamp = utc_timestamp(self._now())
        row = self._build_row(item, created_at=timestamp, updated_at=timestamp)

        try:
            async with self.database.session() as db:
                db.add(row)
                await db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to insert history record")
            raise StorageError("Failed to save prescription to database") from exc

        logger.info("Added history record id=%s", row.id)
        return _to_item(row)

    async def get_by_id(self, record_id: str) -> Optional[HistoryItem]:
        uid = _parse_id(record_id)
        if uid is None:
            return None

        try:
            async with self.database.session() as db:
                row = await db.get(HistoryRecord, uid)
        except SQLAlchemyError as exc:
            logger.exception("Failed to fetch history record id=%s", record_id)
            raise StorageError("Failed to fetch prescription from database") from exc

        return _to_item(row) if row is not None else None

    async def list_items(self, limit: int = 100, skip: int = 0) -> list[HistoryItem]:
        stmt = (
            select(HistoryRecord)
            .order_by(HistoryRecord.created_at.desc(), HistoryRecord.id.desc())
            .offset(max(skip, 0))
            .limit(limit)
        )
        try:
            async with self.database.session() as db:
                rows = (await db.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to list history records")
            raise StorageError("Failed to fetch history from database") from exc

        logger.debug("Listed %s history records (limit=%s skip=%s)", len(rows), limit, skip)
        return [_to_item(row) for row in rows]

    async def search(self, query: str, limit: int = 50, skip: int = 0) -> list[HistoryItem]:
        needle = (query or "").strip()
        if not needle:
            return []

        stmt = (
            select(HistoryRecord)
            .where(self._match_clause(needle))
            .order_by(HistoryRecord.created_at.desc(), HistoryRecord.id.desc())
            .offset(max(skip, 0))
            .limit(limit)
        )
        try:
            async with self.database.session() as db:
                rows = (await db.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to search history records")
            raise StorageError("Failed to search prescriptions in database") from exc

        logger.debug("Found %s history records matching %r", len(rows), needle)
        return [_to_item(row) for row in rows]

    async def count(self, query: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(HistoryRecord)
        if query is not None:
            needle = query.strip()
            if not needle:
                return 0
            stmt = stmt.where(self._match_clause(needle))

        try:
            async with self.database.session() as db:
                return int((await db.execute(stmt)).scalar_one() or 0)
        except SQLAlchemyError as exc:
            logger.exception("Failed to count history records")
            raise StorageError("Failed to count prescriptions in database") from exc

    # -- mutate -----------------------------------------------------------

    async def update(self, record_id: str, changes: Mapping[str, Any]) -> Optional[HistoryItem]:
        uid = _parse_id(record_id)
        if uid is None:
            return None

        # id / created_at / updated_at and unknown keys are silently dropped.
        accepted = {key: value for key, value in changes.items() if key in UPDATABLE_FIELDS}

        try:
            async with self.database.session() as db:
                row = await db.get(HistoryRecord, uid)
                if row is None:
                    return None

                prescription = _prescription_model(row.prescription)
                for key, value in accepted.items():
                    if key == "prescription":
                        prescription = _prescription_model(value)
                        row.prescription = (
                            prescription.model_dump(mode="json", by_alias=True, exclude_none=True)
                            if prescription
                            else None
                        )
                    elif key == "processing_status":
                        row.processing_status = _status_value(value)
                    elif key == "tags":
                        row.tags = [str(tag) for tag in value or []]
                    else:
                        setattr(row, key, value)

                row.search_terms = _search_terms(prescription, row.tags or [])
                row.updated_at = utc_timestamp(self._now())
                await db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to update history record id=%s", record_id)
            raise StorageError("Failed to update prescription in database") from exc

        logger.info("Updated history record id=%s fields=%s", uid, sorted(accepted))
        return _to_item(row)

    async def delete(self, record_id: str) -> bool:
        uid = _parse_id(record_id)
        if uid is None:
            return False

        try:
            async with self.database.session() as db:
                result = await db.execute(delete(HistoryRecord).where(HistoryRecord.id == uid))
                await db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to delete history record id=%s", record_id)
            raise StorageError("Failed to delete prescription from database") from exc

        deleted = (result.rowcount or 0) > 0
        if deleted:
            logger.info("Deleted history record id=%s", uid)
        else:
            logger.info("History record not found for deletion id=%s", uid)
        return deleted

    # -- aggregates -------------------------------------------------------

    async def stats(self) -> HistoryStats:
        now = self._now()
        week_cutoff = utc_timestamp(now - timedelta(days=7))
        month_cutoff = utc_timestamp(now - timedelta(days=30))

        def count_when(condition: ColumnElement[bool]) -> ColumnElement[int]:
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = select(
            func.count().label("total"),
            count_when(HistoryRecord.created_at >= week_cutoff).label("this_week"),
            count_when(HistoryRecord.created_at >= month_cutoff).label("this_month"),
            count_when(HistoryRecord.processing_status == ProcessingStatus.COMPLETED.value).label("completed"),
            count_when(HistoryRecord.processing_status == ProcessingStatus.FAILED.value).label("failed"),
            count_when(HistoryRecord.processing_status == ProcessingStatus.PENDING.value).label("pending"),
        ).select_from(HistoryRecord)

        try:
            async with self.database.session() as db:
                row = (await db.execute(stmt)).one()
        except SQLAlchemyError as exc:
            logger.exception("Failed to compute history statistics")
            raise StorageError("Failed to compute prescription statistics") from exc

        return HistoryStats(
            total=int(row.total or 0),
            this_week=int(row.this_week or 0),
            this_month=int(row.this_month or 0),
            completed=int(row.completed or 0),
            failed=int(row.failed or 0),
            pending=int(row.pending or 0),
        )

    # -- maintenance ------------------------------------------------------

    async def backup(self) -> list[HistoryItem]:
        stmt = select(HistoryRecord).order_by(HistoryRecord.created_at.asc(), HistoryRecord.id.asc())
        try:
            async with self.database.session() as db:
                rows = (await db.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to export history records")
            raise StorageError("Failed to create backup of prescription data") from exc

        logger.info("Exported %s history records", len(rows))
        return [_to_item(row) for row in rows]

    async def restore(self, records: Iterable[Mapping[str, Any] | BaseModel], *, batch_size: int = 500) -> RestoreResult:
        """Re-insert exported records under fresh ids.

        Every record goes through the same sanitizing rules as a new API
        record and is validated before anything is written. Batches are
        committed one at a time; the first failing batch stops the restore and
        already committed batches stay in place.
        """
        fallback = utc_timestamp(self._now())
        rows: list[HistoryRecord] = []
        for index, record in enumerate(records):
            data = record.model_dump() if isinstance(record, BaseModel) else dict(record)
            data.pop("id", None)
            data.pop("_id", None)
            created_at = normalize_timestamp(data.pop("created_at", None) or data.pop("createdAt", None)) or fallback
            updated_at = normalize_timestamp(data.pop("updated_at", None) or data.pop("updatedAt", None)) or created_at
            try:
                item = HistoryCreateRequest.model_validate(data).to_new_item()
            except PydanticValidationError as exc:
                raise ValidationError(
                    f"Backup record {index} is invalid",
                    details=exc.errors(include_url=False, include_context=False),
                ) from exc
            if not item.original_text or not item.simplified_text:
                raise ValidationError(f"Backup record {index} is invalid: text is empty after sanitizing")
            rows.append(self._build_row(item, created_at=created_at, updated_at=updated_at))

        inserted = 0
        for start in range(0, len(rows), max(batch_size, 1)):
            batch = rows[start : start + max(batch_size, 1)]
            try:
                async with self.database.session() as db:
                    db.add_all(batch)
                    await db.commit()
            except SQLAlchemyError:
                logger.exception("Failed inserting history restore batch starting at %s", start)
                break
            inserted += len(batch)

        result = RestoreResult(requested=len(rows), inserted=inserted)
        if result.success:
            logger.info("Restored %s history records", inserted)
        else:
            logger.warning("Partial restore: %s/%s history records", inserted, result.requested)
        return result

    async def cleanup(self, now: Optional[datetime] = None) -> CleanupResult:
        """Remove stale test data (>30 days) and failed records (>7 days)."""
        now = now or self._now()
        month_cutoff = utc_timestamp(now - timedelta(days=30))
        week_cutoff = utc_timestamp(now - timedelta(days=7))

        try:
            async with self.database.session() as db:
                candidates = (
                    await db.execute(
                        select(HistoryRecord.id, HistoryRecord.tags).where(HistoryRecord.created_at < month_cutoff)
                    )
                ).all()
                test_ids = [
                    r.id for r in candidates if CLEANUP_TEST_TAGS.intersection(str(t).lower() for t in r.tags or [])
                ]

                test_removed = 0
                if test_ids:
                    result = await db.execute(delete(HistoryRecord).where(HistoryRecord.id.in_(test_ids)))
                    test_removed = result.rowcount or 0

                result = await db.execute(
                    delete(HistoryRecord).where(
                        HistoryRecord.processing_status == ProcessingStatus.FAILED.value,
                        HistoryRecord.created_at < week_cutoff,
                    )
                )
                failed_removed = result.rowcount or 0
                await db.commit()
        except SQLAlchemyError as exc:
            logger.exception("History cleanup failed")
            raise StorageError("Failed to clean up prescription history") from exc

        logger.info("Cleanup removed test=%s failed=%s history records", test_removed, failed_removed)
        return CleanupResult(test_records_removed=test_removed, failed_records_removed=failed_removed)
