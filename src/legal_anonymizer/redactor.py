"""Redactor — the main API.  Detect once, resolve each value once, substitute.

Usage:
    from legal_anonymizer import Redactor, AnonymizationOptions

    redactor = Redactor()            # reusable, holds no per-run state
    result = redactor.process(
        "Contratante: Maria Silva Santos, CPF: 111.444.777-35",
        AnonymizationOptions(person_name="pseudonym"),
    )
    print(result.anonymized_text)    # "Contratante: PESSOA_001, CPF: ***.444.***-35"
    print(result.summary.total_patterns)   # 2

Every call opens its own Session and closes it before returning, on success
and on failure, so no pseudonym mapping outlives the run.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from .detector import PatternDetector
from .errors import AnonymizationError
from .lexicon import load_lexicon
from .session import Session
from .techniques import (
    ADDRESS_REGEX,
    AMOUNT_REGEX,
    DATE_REGEX,
    apply,
    generalize_address,
    generalize_amount,
    generalize_date,
)
from .types import (
    AnonymizationOptions,
    AnonymizationResult,
    DataType,
    DetectedPattern,
    ProcessingResult,
    ProcessingSummary,
)

logger = logging.getLogger(__name__)

# Substitution precedence when one value was detected under several types:
# checksum-validated identifiers first, heuristic names last.
TYPE_PRECEDENCE: tuple[DataType, ...] = (
    DataType.COMPANY_ID,
    DataType.TAX_ID,
    DataType.EMAIL,
    DataType.PHONE,
    DataType.PERSON_NAME,
)


@dataclass
class RedactorConfig:
    """Configuration for the Redactor."""
    score_threshold: float = 0.0      # minimum confidence kept
    # Data types to leave untouched (e.g. don't redact company IDs)
    skip_types: set[DataType] = field(default_factory=set)
    # Allow-list: values that should NEVER be redacted
    allow_list: set[str] = field(default_factory=set)
    custom_scanners: list[Callable[[str], list[DetectedPattern]]] = field(default_factory=list)
    lexicon_path: str | None = None   # None = $LEGAL_ANONYMIZER_LEXICON or packaged


class Redactor:
    """Document processing orchestrator."""

    def __init__(self, config: RedactorConfig | None = None) -> None:
        self.config = config or RedactorConfig()
        self.lexicon = load_lexicon(self.config.lexicon_path)
        self.detector = PatternDetector(
            self.lexicon, custom_scanners=self.config.custom_scanners,
        )

    def detect(self, text: str | None) -> list[DetectedPattern]:
        """Detect patterns and apply the configured filters."""
        kept: list[DetectedPattern] = []
        for p in self.detector.detect(text):
            if p.data_type in self.config.skip_types:
                continue
            if p.value in self.config.allow_list:
                continue
            if p.confidence < self.config.score_threshold:
                continue
            kept.append(p)
        return kept

    def process(
        self,
        text: str | None,
        options: AnonymizationOptions | Mapping[str, Any] | None = None,
        session: Session | None = None,
    ) -> ProcessingResult:
        """Anonymize ``text``.

        A caller-supplied ``session`` is used as-is and left open; otherwise a
        fresh one is created and always closed before returning.

        Raises AnonymizationError if anything goes wrong; no partially
        substituted text is ever returned.
        """
        options = _coerce_options(options)
        text = text or ""
        owns_session = session is None
        if session is None:
            session = Session(self.lexicon)

        try:
            patterns = self.detect(text)
            anonymized, results = self._substitute(text, patterns, options, session)
            anonymized, generalized = _generalize(anonymized, options)
            results.extend(generalized)
        except Exception as exc:
            logger.exception("anonymization failed")
            raise AnonymizationError(
                "anonymization failed; the document must not be treated as anonymized"
            ) from exc
        finally:
            if owns_session:
                session.close()

        summary = ProcessingSummary.from_patterns(patterns)
        logger.info(
            "anonymized document: %d patterns %s, %d substitutions",
            summary.total_patterns,
            {k: v for k, v in summary.counts.items() if v},
            len(results),
        )
        return ProcessingResult(
            original_text=text,
            anonymized_text=anonymized,
            detected_patterns=patterns,
            anonymization_results=results,
            summary=summary,
        )

    def process_many(
        self,
        texts: Iterable[str],
        options: AnonymizationOptions | Mapping[str, Any] | None = None,
    ) -> list[ProcessingResult]:
        """Process several documents, each with its own session."""
        options = _coerce_options(options)
        return [self.process(text, options) for text in texts]

    def _substitute(
        self,
        text: str,
        patterns: list[DetectedPattern],
        options: AnonymizationOptions,
        session: Session,
    ) -> tuple[str, list[AnonymizationResult]]:
        # First-seen wins, in type precedence order.
        types_by_value: dict[str, DataType] = {}
        for data_type in TYPE_PRECEDENCE:
            for p in patterns:
                if p.data_type is data_type:
                    types_by_value.setdefault(p.value, data_type)
        if not types_by_value:
            return text, []

        def _apply(value: str) -> AnonymizationResult:
            data_type = types_by_value[value]
            return apply(
                value,
                options.technique_for(data_type),
                data_type,
                session,
                keep_consistency=options.keep_consistency,
                preserve_formatting=options.preserve_formatting,
                lexicon=self.lexicon,
            )

        regex = _substitution_regex(types_by_value)
        results: list[AnonymizationResult] = []
        replaced: list[tuple[int, int]] = []

        if options.keep_consistency:
            replacements: dict[str, str] = {}

            def _replace(m: re.Match) -> str:
                value = m.group()
                if value not in replacements:
                    result = _apply(value)
                    replacements[value] = result.anonymized
                    results.append(result)
                replaced.append(m.span())
                return replacements[value]
        else:
            def _replace(m: re.Match) -> str:
                result = _apply(m.group())
                results.append(result)
                replaced.append(m.span())
                return result.anonymized

        anonymized = regex.sub(_replace, text)
        _check_covered(patterns, replaced)
        return anonymized, results


def _check_covered(patterns: list[DetectedPattern], replaced: list[tuple[int, int]]) -> None:
    """Every detected span must lie inside a replaced one."""
    for p in patterns:
        if not any(s <= p.start and p.end <= e for s, e in replaced):
            raise AnonymizationError(
                f"{p.data_type.value} at {p.start}-{p.end} was detected but not replaced"
            )


def _coerce_options(options: AnonymizationOptions | Mapping[str, Any] | None) -> AnonymizationOptions:
    if options is None:
        return AnonymizationOptions()
    if isinstance(options, AnonymizationOptions):
        return options
    from .config import load_options
    return load_options(dict(options))


def _guard(ch: str, *, before: bool) -> str:
    """Neighbour guard mirroring the detectors' own boundaries."""
    if ch.isdigit():
        return r"(?<!\d)" if before else r"(?!\d)"
    if ch.isalpha():
        return r"(?<!\w)" if before else r"(?!\w)"
    return ""


def _substitution_regex(values: Iterable[str]) -> re.Pattern:
    """One alternation over every value, longest first.

    A single pass never rescans replaced text, so a short value can't match
    inside an earlier replacement, and at any position the longest value wins.
    """
    parts = [
        _guard(v[0], before=True) + re.escape(v) + _guard(v[-1], before=False)
        for v in sorted(values, key=len, reverse=True)
    ]
    return re.compile("|".join(parts))


def _generalize(text: str, options: AnonymizationOptions) -> tuple[str, list[AnonymizationResult]]:
    """Reduce precision of dates, amounts and addresses when enabled."""
    results: list[AnonymizationResult] = []

    def _run(regex: re.Pattern, fn: Callable[[str], str], technique: str) -> None:
        nonlocal text

        def _replace(m: re.Match) -> str:
            original = m.group()
            general = fn(original)
            if general != original:
                results.append(AnonymizationResult(original, general, technique))
            return general

        text = regex.sub(_replace, text)

    if options.generalize_dates:
        level = options.generalize_dates
        _run(DATE_REGEX, lambda v: generalize_date(v, level), f"date/generalize_{level}")
    if options.generalize_amounts:
        level = options.generalize_amounts
        _run(AMOUNT_REGEX, lambda v: generalize_amount(v, level), f"amount/generalize_{level}")
    if options.generalize_addresses:
        _run(ADDRESS_REGEX, generalize_address, "address/generalize")
    return text, results
