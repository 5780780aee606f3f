"""Pattern detector. Runs every scanner over a text and merges the results.

Layer 1: structured identifiers (CPF, CNPJ, phones, emails)
Layer 2: person names (upper-case, mixed-case and contextual passes)
Layer 3: custom scanners (user-provided callables)

Merge rule: exact duplicates (same type, value and span) collapse to the
highest-confidence instance, earliest-detected on ties; the result is sorted
by start offset.  Overlaps between different types are kept here and
resolved by the redactor when it substitutes.
"""

from __future__ import annotations
import logging
from typing import Callable, Iterable

from .lexicon import Lexicon, default_lexicon
from .names import scan_names
from .patterns import scan_structured
from .types import DetectedPattern

logger = logging.getLogger(__name__)

Scanner = Callable[[str], list[DetectedPattern]]


class PatternDetector:
    """Stateless detector; one instance can serve any number of runs."""

    def __init__(
        self,
        lexicon: Lexicon | None = None,
        *,
        custom_scanners: Iterable[Scanner] = (),
    ) -> None:
        self.lexicon = lexicon or default_lexicon()
        self.custom_scanners = tuple(custom_scanners)

    def detect(self, text: str | None) -> list[DetectedPattern]:
        """Return every detected pattern ordered by position."""
        if not text or not text.strip():
            return []

        candidates: list[DetectedPattern] = []

        # --- Layer 1: structured identifiers ---
        structured = scan_structured(text)
        candidates.extend(structured)

        # --- Layer 2: names ---
        names = scan_names(text, self.lexicon)
        candidates.extend(names)

        # --- Layer 3: custom scanners ---
        for scanner in self.custom_scanners:
            candidates.extend(scanner(text))

        merged = merge_patterns(candidates)
        logger.debug(
            "detected %d patterns (%d structured, %d names)",
            len(merged), len(structured), len(names),
        )
        return merged


def merge_patterns(candidates: list[DetectedPattern]) -> list[DetectedPattern]:
    """Drop exact duplicates keeping the most confident, then sort by start."""
    best: dict[tuple, DetectedPattern] = {}
    for c in candidates:
        key = (c.data_type, c.value, c.start, c.end)
        current = best.get(key)
        if current is None or c.confidence > current.confidence:
            best[key] = c
    return sorted(best.values(), key=lambda p: (p.start, -p.confidence))


_default: PatternDetector | None = None


def detect(text: str | None) -> list[DetectedPattern]:
    """Detect with the packaged lexicon."""
    global _default
    if _default is None:
        _default = PatternDetector()
    return _default.detect(text)
