"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DataType(str, Enum):
    """Kinds of personal data the detector reports."""
    TAX_ID = "tax_id"            # CPF
    COMPANY_ID = "company_id"    # CNPJ
    PHONE = "phone"
    EMAIL = "email"
    PERSON_NAME = "person_name"


class Technique(str, Enum):
    """Anonymization techniques selectable per data type."""
    MASK_PARTIAL = "mask_partial"
    MASK_TOTAL = "mask_total"
    PSEUDONYM = "pseudonym"
    SYNTHETIC = "synthetic"
    INITIALS = "initials"
    GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class AnonymizationOptions:
    """Per-run configuration: one technique per data type plus global flags.

    Technique names are not validated here; an unknown or illegal one makes
    the technique library fall back to total masking for that value.
    """
    tax_id: Technique | str = Technique.MASK_PARTIAL
    company_id: Technique | str = Technique.MASK_PARTIAL
    person_name: Technique | str = Technique.PSEUDONYM
    phone: Technique | str = Technique.MASK_PARTIAL
    email: Technique | str = Technique.MASK_PARTIAL
    keep_consistency: bool = True
    preserve_formatting: bool = True
    # Optional generalization of non-identifying details
    generalize_dates: str | None = None       # "year" | "month" | "decade"
    generalize_amounts: str | None = None     # "thousands" | "ten_thousands" | "range"
    generalize_addresses: bool = False

    def technique_for(self, data_type: DataType | str) -> Technique | str:
        return getattr(self, DataType(data_type).value)


@dataclass(frozen=True, slots=True)
class DetectedPattern:
    """A single occurrence of personal data in a text."""
    data_type: DataType
    value: str             # exact substring, text[start:end]
    start: int
    end: int               # exclusive
    confidence: float      # 0.0–1.0
    source: str            # "checksum" | "regex" | "uppercase" | "mixed_case" | "contextual"

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"empty span: start={self.start} end={self.end}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.data_type.value,
            "value": self.value,
            "start": self.start,
            "end": self.end,
            "confidence": self.confidence,
            "source": self.source,
        }


@dataclass(frozen=True, slots=True)
class AnonymizationResult:
    """One resolved substitution.

    ``fallback`` is set when the requested technique could not be applied and
    the value was totally masked instead.
    """
    original: str
    anonymized: str
    technique: str         # "<data_type>/<technique>", e.g. "tax_id/mask_partial"
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "original": self.original,
            "anonymized": self.anonymized,
            "technique": self.technique,
            "fallback": self.fallback,
        }


@dataclass(frozen=True, slots=True)
class ProcessingSummary:
    """Aggregate counts over the detected patterns of one run."""
    total_patterns: int
    counts: dict[str, int]

    @classmethod
    def from_patterns(cls, patterns: list[DetectedPattern]) -> "ProcessingSummary":
        counts = {dt.value: 0 for dt in DataType}
        for p in patterns:
            counts[p.data_type.value] += 1
        return cls(total_patterns=len(patterns), counts=counts)

    def by_type(self, data_type: DataType | str) -> int:
        return self.counts.get(DataType(data_type).value, 0)


@dataclass(slots=True)
class ProcessingResult:
    """Output of one processing run."""
    original_text: str
    anonymized_text: str
    detected_patterns: list[DetectedPattern] = field(default_factory=list)
    anonymization_results: list[AnonymizationResult] = field(default_factory=list)
    summary: ProcessingSummary = field(
        default_factory=lambda: ProcessingSummary.from_patterns([])
    )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view, e.g. for an audit log kept by the caller."""
        return {
            "anonymized_text": self.anonymized_text,
            "detected_patterns": [p.to_dict() for p in self.detected_patterns],
            "anonymization_results": [r.to_dict() for r in self.anonymization_results],
            "summary": {
                "total_patterns": self.summary.total_patterns,
                **self.summary.counts,
            },
        }
