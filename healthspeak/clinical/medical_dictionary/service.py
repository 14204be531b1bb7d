"""Medical abbreviation and drug lookup service.

All lookups are case-insensitive and deterministic: when more than one record
could match, table (insertion) order decides. The tables are loaded once and
only change through the explicit ``add_*`` methods.

Abbreviation expansion strategy:
- Whole-word matches only (``\\b`` boundaries), so "500mg" is left untouched.
- A single regex pass over the text, so expansions are never re-expanded.
- Longer abbreviations are tried first; "q12h" wins over a hypothetical "q1".
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from healthspeak.clinical.medical_dictionary.data import DRUG_DATABASE, MEDICAL_ABBREVIATIONS
from healthspeak.clinical.medical_dictionary.models import DrugInfo, MedicalAbbreviation

_MEDICAL_TERM_PATTERNS = (
    re.compile(r"\b\d+\s*mg\b", re.IGNORECASE),
    re.compile(r"\b\d+\s*mcg\b", re.IGNORECASE),
    re.compile(r"\b\d+\s*ml\b", re.IGNORECASE),
    re.compile(r"\btablets?\b", re.IGNORECASE),
    re.compile(r"\bcapsules?\b", re.IGNORECASE),
    re.compile(r"\bsyrup\b", re.IGNORECASE),
    re.compile(r"\binjection\b", re.IGNORECASE),
    re.compile(r"\bdaily\b", re.IGNORECASE),
    re.compile(r"\btwice\s+daily\b", re.IGNORECASE),
    re.compile(r"\bthree\s+times\s+daily\b", re.IGNORECASE),
    re.compile(r"\bbefore\s+meals?\b", re.IGNORECASE),
    re.compile(r"\bafter\s+meals?\b", re.IGNORECASE),
    re.compile(r"\bat\s+bedtime\b", re.IGNORECASE),
)


_DOSAGE_PHRASES = {
    "bid": "twice daily",
    "tid": "three times daily",
    "qid": "four times daily",
    "qd": "once daily",
    "q12h": "every 12 hours",
    "q8h": "every 8 hours",
    "q6h": "every 6 hours",
    "q4h": "every 4 hours",
    "prn": "as needed",
    "ac": "before meals",
    "pc": "after meals",
    "hs": "at bedtime",
    "po": "by mouth",
}
_DOSAGE_RE = re.compile(
    r"\b(?:" + "|".join(sorted(_DOSAGE_PHRASES, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)

def extract_medical_terms(text: str) -> list[str]:
    """Return the distinct dosage, form and timing phrases found in ``text``."""
    if not text:
        return []

    terms: list[str] = []
    for pattern in _MEDICAL_TERM_PATTERNS:
        for match in pattern.findall(text):
            if match not in terms:
                terms.append(match)
    return terms


class MedicalDictionary:
    def __init__(
        self,
        abbreviations: Optional[Iterable[MedicalAbbreviation]] = None,
        drugs: Optional[Iterable[DrugInfo]] = None,
    ) -> None:
        self._abbreviations: list[MedicalAbbreviation] = list(
            MEDICAL_ABBREVIATIONS if abbreviations is None else abbreviations
        )
        self._drugs: list[DrugInfo] = list(DRUG_DATABASE if drugs is None else drugs)
        self._expansion_re: re.Pattern[str] | None = None
        self._expansions: dict[str, str] = {}

    @property
    def abbreviations(self) -> tuple[MedicalAbbreviation, ...]:
        return tuple(self._abbreviations)

    @property
    def drugs(self) -> tuple[DrugInfo, ...]:
        return tuple(self._drugs)

    def find_abbreviation(self, code: str) -> Optional[MedicalAbbreviation]:
        needle = (code or "").strip().lower()
        if not needle:
            return None
        for item in self._abbreviations:
            if item.abbreviation.lower() == needle:
                return item
        return None

    def find_drug(self, name: str) -> Optional[DrugInfo]:
        needle = (name or "").strip().lower()
        if not needle:
            return None
        for drug in self._drugs:
            if any(candidate.lower() == needle for candidate in drug.names()):
                return drug
        return None

    def search_drugs(self, query: str) -> list[DrugInfo]:
        needle = (query or "").strip().lower()
        if not needle:
            return []
        return [
            drug
            for drug in self._drugs
            if any(needle in candidate.lower() for candidate in (*drug.names(), drug.category))
        ]

    def drugs_by_category(self, category: str) -> list[DrugInfo]:
        needle = (category or "").strip().lower()
        return [drug for drug in self._drugs if drug.category.lower() == needle]

    def categories(self) -> list[str]:
        return sorted({drug.category for drug in self._drugs})

    def expand_abbreviations(self, text: str) -> str:
        if not text:
            return text or ""

        pattern = self._expansion_pattern()
        if pattern is None:
            return text
        return pattern.sub(lambda m: self._expansions[m.group(0).lower()], text)

    def add_abbreviation(self, abbreviation: MedicalAbbreviation) -> None:
        self._abbreviations.append(abbreviation)
        self._expansion_re = None

    def add_drug(self, drug: DrugInfo) -> None:
        self._drugs.append(drug)

    def _expansion_pattern(self) -> re.Pattern[str] | None:
        if self._expansion_re is not None:
            return self._expansion_re

        expansions: dict[str, str] = {}
        for item in self._abbreviations:
            key = item.abbreviation.strip().lower()
            if key:
                expansions.setdefault(key, item.full_form)
        if not expansions:
            return None

        # sorted() is stable: equal-length tokens keep table order.
        tokens = sorted(expansions, key=len, reverse=True)
        alternation = "|".join(re.escape(token) for token in tokens)
        self._expansions = expansions
        self._expansion_re = re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)
        return self._expansion_re


medical_dictionary = MedicalDictionary()


def format_dosage_instructions(text: str) -> str:
    """Rewrite frequency, timing and route shorthand as patient-facing phrases.

    Unlike :meth:`MedicalDictionary.expand_abbreviations` this only touches the
    dosing vocabulary and uses the "twice daily" style of a pharmacy label.
    """
    if not text:
        return ""
    return _DOSAGE_RE.sub(lambda m: _DOSAGE_PHRASES[m.group(0).lower()], text)
