from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from healthspeak.schemas.base import CamelModel
from healthspeak.services.sanitization import sanitize_input


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Structured prescription
# ---------------------------------------------------------------------------

class Medicine(CamelModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    generic_name: Optional[str] = None
    brand_name: Optional[str] = None
    strength: Optional[str] = None
    form: Optional[Literal["tablet", "capsule", "syrup", "injection", "cream", "drops", "inhaler", "other"]] = None
    category: Optional[str] = None
    description: Optional[str] = None


class Dosage(CamelModel):
    amount: Optional[str] = None
    unit: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[str] = None
    instructions: Optional[str] = None
    timings: List[str] = Field(default_factory=list)
    before_after_meal: Optional[Literal["before", "after", "with", "anytime"]] = None
    special_instructions: Optional[str] = None


class PrescriptionItem(CamelModel):
    id: Optional[str] = None
    medicine: Medicine
    dosage: Dosage
    quantity: str = Field(..., min_length=1)
    refills: int = Field(default=0, ge=0)
    warnings: List[str] = Field(default_factory=list)
    side_effects: List[str] = Field(default_factory=list)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class DoctorInfo(CamelModel):
    name: str = Field(..., min_length=1)
    specialization: Optional[str] = None
    license: Optional[str] = None
    contact: Optional[str] = None
    hospital: Optional[str] = None


class PatientInfo(CamelModel):
    name: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    weight: Optional[str] = None
    allergies: List[str] = Field(default_factory=list)

    @field_validator("age", "weight", mode="before")
    @classmethod
    def _coerce_number(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class Prescription(CamelModel):
    id: Optional[str] = None
    patient_info: PatientInfo = Field(default_factory=PatientInfo)
    doctor_info: Optional[DoctorInfo] = None
    prescription_date: Optional[str] = None
    items: List[PrescriptionItem] = Field(..., min_length=1)
    diagnosis: Optional[str] = None
    notes: Optional[str] = None
    follow_up_date: Optional[str] = None
    emergency_contact: Optional[str] = None

    def medicine_names(self) -> list[str]:
        return [item.medicine.name for item in self.items if item.medicine.name]


# ---------------------------------------------------------------------------
# History records
# ---------------------------------------------------------------------------

class NewHistoryItem(CamelModel):
    """A history record as handed to the store: no id, no timestamps."""

    original_text: str
    simplified_text: str
    prescription: Optional[Prescription] = None
    image_url: Optional[str] = None
    processing_status: ProcessingStatus = ProcessingStatus.COMPLETED
    tags: List[str] = Field(default_factory=list)


class HistoryItem(NewHistoryItem):
    id: str
    created_at: str
    updated_at: str


class HistoryStats(CamelModel):
    total: int = 0
    this_week: int = 0
    this_month: int = 0
    completed: int = 0
    failed: int = 0
    pending: int = 0


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class HistoryPage(CamelModel):
    items: List[HistoryItem]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

def _sanitize_tags(value: object) -> object:
    if value is None:
        return value
    if not isinstance(value, list):
        raise ValueError("tags must be a list of strings")
    cleaned = [sanitize_input(tag) for tag in value]
    return [tag for tag in cleaned if tag]


class HistoryCreateRequest(CamelModel):
    original_text: str
    simplified_text: str
    prescription: Optional[Prescription] = None
    image_url: Optional[str] = None
    processing_status: ProcessingStatus = ProcessingStatus.COMPLETED
    tags: List[str] = Field(default_factory=list)

    @field_validator("original_text", "simplified_text", mode="before")
    @classmethod
    def _sanitize_text(cls, value: object) -> object:
        if value is None:
            raise ValueError("field is required")
        return sanitize_input(value) if isinstance(value, str) else value

    @field_validator("image_url", mode="before")
    @classmethod
    def _sanitize_image_url(cls, value: object) -> object:
        if value is None or not isinstance(value, str):
            return value
        return sanitize_input(value) or None

    @field_validator("tags", mode="before")
    @classmethod
    def _sanitize_tag_list(cls, value: object) -> object:
        return _sanitize_tags(value) if value is not None else []

    def to_new_item(self) -> NewHistoryItem:
        return NewHistoryItem.model_validate(self.model_dump())


class HistoryUpdateRequest(CamelModel):
    """Partial update body. ``createdAt``/``updatedAt`` are not fields and are ignored."""

    id: str = Field(..., min_length=1)
    original_text: Optional[str] = None
    simplified_text: Optional[str] = None
    prescription: Optional[Prescription] = None
    image_url: Optional[str] = None
    processing_status: Optional[ProcessingStatus] = None
    tags: Optional[List[str]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _sanitize_id(cls, value: object) -> object:
        return sanitize_input(value) if isinstance(value, str) else value

    @field_validator("original_text", "simplified_text", mode="before")
    @classmethod
    def _sanitize_text(cls, value: object) -> object:
        return sanitize_input(value) if isinstance(value, str) else value

    @field_validator("image_url", mode="before")
    @classmethod
    def _sanitize_image_url(cls, value: object) -> object:
        if value is None or not isinstance(value, str):
            return value
        return sanitize_input(value) or None

    @field_validator("tags", mode="before")
    @classmethod
    def _sanitize_tag_list(cls, value: object) -> object:
        return _sanitize_tags(value)

    def changes(self) -> dict[str, object]:
        """Fields explicitly supplied by the caller, minus ``id`` and nulls for required columns."""
        supplied = self.model_dump(exclude_unset=True, exclude={"id"})
        for key in ("original_text", "simplified_text", "processing_status", "tags"):
            if key in supplied and supplied[key] is None:
                supplied.pop(key)
        if "prescription" in supplied and self.prescription is not None:
            supplied["prescription"] = self.prescription
        return supplied
