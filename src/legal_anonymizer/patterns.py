"""Structured identifiers: CPF, CNPJ, phone numbers and emails.

Each scanner is a pure function ``text -> list[DetectedPattern]``.  Regexes
find candidates of plausible shape; CPF and CNPJ candidates are then
checksum-validated, which is what earns them their high confidence.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Callable

from .types import DataType, DetectedPattern
from .validators import is_valid_cnpj, is_valid_cpf, only_digits


@dataclass(frozen=True, slots=True)
class _Rule:
    data_type: DataType
    regex: re.Pattern
    confidence: float
    source: str
    accept: Callable[[str], bool] | None = None


def _phone_digits_ok(value: str) -> bool:
    return 8 <= len(only_digits(value)) <= 13


CPF_RULE = _Rule(
    DataType.TAX_ID,
    re.compile(r"(?<![\d/])\d{3}\.?\d{3}\.?\d{3}-?\d{2}(?![\d/])"),
    0.95, "checksum", is_valid_cpf,
)

CNPJ_RULE = _Rule(
    DataType.COMPANY_ID,
    re.compile(r"(?<!\d)\d{2}\.?\d{3}\.?\d{3}/?\d{4}-?\d{2}(?!\d)"),
    0.97, "checksum", is_valid_cnpj,
)

PHONE_RULE = _Rule(
    DataType.PHONE,
    re.compile(
        r"(?<![\d+])"
        r"(?:\+55[ ]?)?"                  # country code
        r"(?:\(\d{2}\)[ ]?|\d{2}[ ])?"    # area code
        r"(?:9[ ]?)?"                     # mobile indicator
        r"\d{4,5}-?\d{4}"
        r"(?!\d)"
    ),
    0.85, "regex", _phone_digits_ok,
)

EMAIL_RULE = _Rule(
    DataType.EMAIL,
    re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b"),
    0.92, "regex",
)


def _scan(text: str, rule: _Rule) -> list[DetectedPattern]:
    matches: list[DetectedPattern] = []
    for m in rule.regex.finditer(text):
        value = m.group()
        if rule.accept is not None and not rule.accept(value):
            continue
        matches.append(DetectedPattern(
            data_type=rule.data_type,
            value=value,
            start=m.start(),
            end=m.end(),
            confidence=rule.confidence,
            source=rule.source,
        ))
    return matches


def scan_cpf(text: str) -> list[DetectedPattern]:
    return _scan(text, CPF_RULE)


def scan_cnpj(text: str) -> list[DetectedPattern]:
    return _scan(text, CNPJ_RULE)


def scan_phones(text: str) -> list[DetectedPattern]:
    return _scan(text, PHONE_RULE)


def scan_emails(text: str) -> list[DetectedPattern]:
    return _scan(text, EMAIL_RULE)


STRUCTURED_SCANNERS: tuple[Callable[[str], list[DetectedPattern]], ...] = (
    scan_cpf, scan_cnpj, scan_phones, scan_emails,
)


def scan_structured(text: str) -> list[DetectedPattern]:
    """Run every structured scanner, in order, and concatenate the results."""
    matches: list[DetectedPattern] = []
    for scanner in STRUCTURED_SCANNERS:
        matches.extend(scanner(text))
    return matches
