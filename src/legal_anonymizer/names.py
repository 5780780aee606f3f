"""Person names in Portuguese legal prose.

Names have no checksum and collide with institutional vocabulary, so three
complementary passes produce candidates which then go through one shared
validation:

  * upper-case pass: ``MARIA DA SILVA SANTOS`` or ``MARIA da SILVA``
  * mixed-case pass: ``Maria da Silva Santos``
  * contextual pass: whatever capitalized words follow a cue such as
    ``Contratante:``, ``Sr.`` or ``Testemunhas:``

Connectives come from the lexicon.  A run joined by ``e`` is split into
separate people when every part is a full name on its own (``Pedro Alves e
Carla Lima``), and kept whole otherwise (``José Pereira e Silva``).

Candidates are deduplicated by exact text, keeping the most confident one.
"""

from __future__ import annotations
import functools
import logging
import re
from dataclasses import dataclass

from .lexicon import Lexicon, default_lexicon
from .types import DataType, DetectedPattern

logger = logging.getLogger(__name__)

# Latin-1 letters, split by case (× and ÷ excluded)
_UP = "A-ZÀ-ÖØ-Þ"
_LOW = "a-zß-öø-ÿ"

_UPPER_WORD = rf"[{_UP}]{{2,}}"
_CAP_WORD = rf"[{_UP}][{_LOW}]+"
_ANY_NAME_WORD = rf"[{_UP}][{_UP}{_LOW}]+"

_CUES = (
    r"nome|sra|sr|senhora|senhor|dra|dr|contratantes?|contratad[oa]s?|clientes?"
    r"|parte|requerentes?|requerid[oa]s?|autor(?:a|es|as)?|réus?|rés?"
    r"|reclamantes?|reclamad[oa]s?|outorgantes?|outorgad[oa]s?"
    r"|testemunhas?|advogad[oa]s?"
)
_CUE_REGEX = re.compile(rf"(?i:\b(?:{_CUES})\b)")

_WORD = re.compile(r"\S+")
_AND = "e"

BASE_CONFIDENCE = 0.70
COMMON_NAME_BONUS = 0.20
FULL_UPPERCASE_BONUS = 0.10
CONTEXT_BONUS = 0.15
MAX_CONFIDENCE = 0.98


@dataclass(frozen=True, slots=True)
class NameRegexes:
    uppercase: re.Pattern
    mixed_case: re.Pattern
    contextual: re.Pattern


@functools.lru_cache(maxsize=8)
def name_regexes(connectives: frozenset[str]) -> NameRegexes:
    """Compile the three pass regexes for a set of lower-case connectives."""
    lower = sorted(connectives, key=len, reverse=True)
    conn_lower = "|".join(re.escape(c) for c in lower)
    conn_any = "|".join(re.escape(c) for c in lower + [c.upper() for c in lower])
    return NameRegexes(
        uppercase=re.compile(
            rf"\b{_UPPER_WORD}(?:[ \t]+(?:(?:{conn_any})[ \t]+)?{_UPPER_WORD})+\b"
        ),
        mixed_case=re.compile(
            rf"\b{_CAP_WORD}(?:[ \t]+(?:(?:{conn_lower})[ \t]+)?{_CAP_WORD})+\b"
        ),
        contextual=re.compile(
            rf"{_CUE_REGEX.pattern}\.?[ \t]*[:\-–]?[ \t]*"
            rf"({_ANY_NAME_WORD}(?:[ \t]+(?:(?:{conn_any})[ \t]+)?{_ANY_NAME_WORD})*)"
            r"(?!\w)"
        ),
    )


@dataclass(frozen=True, slots=True)
class NameVerdict:
    valid: bool
    confidence: float = 0.0
    reason: str = ""


def validate_name(candidate: str, strategy: str, lexicon: Lexicon | None = None) -> NameVerdict:
    """Decide whether ``candidate`` looks like a personal name.

    ``strategy`` is the pass that produced it (``uppercase``, ``mixed_case``
    or ``contextual``) and only affects the confidence.
    """
    lexicon = lexicon or default_lexicon()
    words = candidate.split()
    if not words:
        return NameVerdict(False, reason="empty")
    if lexicon.is_connective(words[0]) or lexicon.is_connective(words[-1]):
        return NameVerdict(False, reason="starts or ends with a connective")

    significant = [w for w in words if not lexicon.is_connective(w)]
    if len(significant) < 2:
        return NameVerdict(False, reason="fewer than 2 words")
    if len(significant) > 6:
        return NameVerdict(False, reason="more than 6 words")
    if any(len(w) < 2 for w in significant):
        return NameVerdict(False, reason="word too short")
    if any(ch.isdigit() for ch in candidate):
        return NameVerdict(False, reason="contains digits")
    if any(lexicon.is_denied(w) for w in words):
        return NameVerdict(False, reason="denylisted word")
    upper = candidate.upper()
    if any(keyword in upper for keyword in lexicon.document_keywords):
        return NameVerdict(False, reason="looks like a document title")

    confidence = BASE_CONFIDENCE
    if any(lexicon.is_common_name(w) for w in significant):
        confidence += COMMON_NAME_BONUS
    if strategy == "uppercase" and len(significant) >= 3:
        confidence += FULL_UPPERCASE_BONUS
    if strategy == "contextual":
        confidence += CONTEXT_BONUS
    return NameVerdict(True, round(min(MAX_CONFIDENCE, confidence), 2))


def _candidate(
    text: str, start: int, end: int, strategy: str, lexicon: Lexicon,
) -> DetectedPattern | None:
    value = text[start:end]
    verdict = validate_name(value, strategy, lexicon)
    if not verdict.valid:
        logger.debug("name candidate rejected (%s): %s", strategy, verdict.reason)
        return None
    return DetectedPattern(
        data_type=DataType.PERSON_NAME,
        value=value,
        start=start,
        end=end,
        confidence=verdict.confidence,
        source=strategy,
    )


def _significant(text: str, words: list[tuple[int, int]], lexicon: Lexicon) -> int:
    return sum(1 for s, e in words if not lexicon.is_connective(text[s:e]))


def _denied(text: str, words: list[tuple[int, int]], lexicon: Lexicon) -> bool:
    return any(lexicon.is_denied(text[s:e]) for s, e in words)


def split_people(text: str, start: int, end: int, lexicon: Lexicon) -> list[tuple[int, int]]:
    """Split a span at ``e`` wherever both sides hold 2+ significant words.

    A shorter side is glued back on (``José Pereira e Silva``), unless it
    holds a denylisted word, in which case it is dropped (``Ana Costa e Dra``).
    """
    segments: list[list[tuple[int, int]]] = [[]]
    joins: list[tuple[int, int]] = []
    for m in _WORD.finditer(text, start, end):
        if m.group().lower() == _AND and segments[-1]:
            joins.append(m.span())
            segments.append([])
        else:
            segments[-1].append(m.span())

    merged = [segments[0]]
    for join, segment in zip(joins, segments[1:]):
        if (_significant(text, merged[-1], lexicon) >= 2
                and _significant(text, segment, lexicon) >= 2):
            merged.append(segment)
        elif _denied(text, segment, lexicon):
            continue
        elif _denied(text, merged[-1], lexicon):
            merged[-1] = segment
        else:
            merged[-1] = merged[-1] + [join] + segment
    return [(words[0][0], words[-1][1]) for words in merged if words]


def _emit(
    text: str, start: int, end: int, strategy: str, lexicon: Lexicon,
    found: list[DetectedPattern],
) -> None:
    for s, e in split_people(text, start, end, lexicon):
        match = _candidate(text, s, e, strategy, lexicon)
        if match is not None:
            found.append(match)


def _regex_pass(
    text: str, regex: re.Pattern, strategy: str, lexicon: Lexicon,
) -> list[DetectedPattern]:
    found: list[DetectedPattern] = []
    for m in regex.finditer(text):
        _emit(text, m.start(), m.end(), strategy, lexicon, found)
    return found


def uppercase_pass(text: str, lexicon: Lexicon | None = None) -> list[DetectedPattern]:
    lexicon = lexicon or default_lexicon()
    return _regex_pass(text, name_regexes(lexicon.connectives).uppercase, "uppercase", lexicon)


def mixed_case_pass(text: str, lexicon: Lexicon | None = None) -> list[DetectedPattern]:
    lexicon = lexicon or default_lexicon()
    return _regex_pass(text, name_regexes(lexicon.connectives).mixed_case, "mixed_case", lexicon)


def _trim_context_span(text: str, start: int, end: int, lexicon: Lexicon) -> tuple[int, int]:
    """Cut the captured words at the first denylisted one or the next cue
    (``JOÃO SILVA CPF``, ``João Silva e Sra``) and drop dangling connectives."""
    kept: list[tuple[int, int]] = []
    for m in _WORD.finditer(text, start, end):
        if lexicon.is_denied(m.group()) or _CUE_REGEX.fullmatch(m.group()):
            break
        kept.append(m.span())
    while kept and lexicon.is_connective(text[kept[-1][0]:kept[-1][1]]):
        kept.pop()
    if not kept:
        return start, start
    return kept[0][0], kept[-1][1]


def contextual_pass(text: str, lexicon: Lexicon | None = None) -> list[DetectedPattern]:
    lexicon = lexicon or default_lexicon()
    regex = name_regexes(lexicon.connectives).contextual
    found: list[DetectedPattern] = []
    pos = 0
    while (m := regex.search(text, pos)) is not None:
        start, end = _trim_context_span(text, m.start(1), m.end(1), lexicon)
        if start < end:
            _emit(text, start, end, "contextual", lexicon, found)
            pos = end
        else:
            # the first captured word may itself be the next cue
            pos = m.start(1)
    return found


def dedupe_by_text(candidates: list[DetectedPattern]) -> list[DetectedPattern]:
    """Keep one pattern per exact text: highest confidence, then first seen."""
    best: dict[str, DetectedPattern] = {}
    for c in candidates:
        current = best.get(c.value)
        if current is None or c.confidence > current.confidence:
            best[c.value] = c
    return sorted(best.values(), key=lambda p: p.start)


def scan_names(text: str, lexicon: Lexicon | None = None) -> list[DetectedPattern]:
    """Run the three passes and return deduplicated name patterns."""
    lexicon = lexicon or default_lexicon()
    candidates: list[DetectedPattern] = []
    for name_pass in (uppercase_pass, mixed_case_pass, contextual_pass):
        found = name_pass(text, lexicon)
        logger.debug("%s: %d name candidates", name_pass.__name__, len(found))
        candidates.extend(found)
    return dedupe_by_text(candidates)
