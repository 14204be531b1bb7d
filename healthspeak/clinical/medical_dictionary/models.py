"""Reference data types for the medical dictionary.

These are static lookup records, not persisted per request.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MedicalAbbreviation:
    abbreviation: str
    full_form: str
    category: str
    description: str | None = None
    common_usage: tuple[str, ...] = ()


@dataclass(frozen=True)
class DrugInfo:
    name: str
    generic_name: str
    category: str
    brand_names: tuple[str, ...] = ()
    common_dosages: tuple[str, ...] = ()
    common_forms: tuple[str, ...] = ()
    common_instructions: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    side_effects: tuple[str, ...] = ()
    interactions: tuple[str, ...] = ()

    def names(self) -> tuple[str, ...]:
        return (self.name, self.generic_name, *self.brand_names)
