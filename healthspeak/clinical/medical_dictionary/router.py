"""FastAPI router for the medical dictionary.

Read-only access to the static abbreviation and drug tables, plus abbreviation
expansion for arbitrary prescription text.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, ConfigDict, Field

from healthspeak.clinical.medical_dictionary.service import (
    extract_medical_terms,
    format_dosage_instructions,
    medical_dictionary,
)
from healthspeak.core.errors import NotFoundError, ValidationError
from healthspeak.schemas.base import CamelModel
from healthspeak.schemas.envelope import format_success_response
from healthspeak.services.sanitization import sanitize_input, validate_text_input

router = APIRouter(prefix="/dictionary", tags=["dictionary"])


class AbbreviationOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    abbreviation: str
    full_form: str
    category: str
    description: Optional[str] = None
    common_usage: List[str] = Field(default_factory=list)


class DrugInfoOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    generic_name: str
    brand_names: List[str] = Field(default_factory=list)
    category: str
    common_dosages: List[str] = Field(default_factory=list)
    common_forms: List[str] = Field(default_factory=list)
    common_instructions: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    side_effects: List[str] = Field(default_factory=list)
    interactions: List[str] = Field(default_factory=list)


class ExpandRequest(BaseModel):
    text: str = Field(..., min_length=1)


@router.get("/abbreviations/{code}")
async def get_abbreviation(code: str):
    item = medical_dictionary.find_abbreviation(sanitize_input(code))
    if item is None:
        raise NotFoundError("Abbreviation not found")
    return format_success_response(AbbreviationOut.model_validate(item))


@router.get("/drugs")
async def search_drugs(
    q: Optional[str] = Query(default=None, description="Substring of name, generic name, brand or category"),
    category: Optional[str] = Query(default=None, description="Exact category filter"),
):
    if category:
        drugs = medical_dictionary.drugs_by_category(sanitize_input(category))
    elif q:
        query = sanitize_input(q)
        if not query:
            raise ValidationError("q must contain searchable text")
        drugs = medical_dictionary.search_drugs(query)
    else:
        drugs = list(medical_dictionary.drugs)
    return format_success_response([DrugInfoOut.model_validate(drug) for drug in drugs])


@router.get("/drugs/{name}")
async def get_drug(name: str):
    drug = medical_dictionary.find_drug(sanitize_input(name))
    if drug is None:
        raise NotFoundError("Drug not found")
    return format_success_response(DrugInfoOut.model_validate(drug))


@router.get("/categories")
async def list_categories():
    return format_success_response(medical_dictionary.categories())


@router.post("/expand")
async def expand(payload: ExpandRequest):
    text = sanitize_input(payload.text)
    validation = validate_text_input(text)
    if not validation.is_valid:
        raise ValidationError.from_errors(validation.errors, prefix="Text validation failed")

    return format_success_response(
        {
            "originalText": text,
            "expandedText": medical_dictionary.expand_abbreviations(text),
            "dosageInstructions": format_dosage_instructions(text),
            "medicalTerms": extract_medical_terms(text),
            "warnings": validation.warnings,
        }
    )
