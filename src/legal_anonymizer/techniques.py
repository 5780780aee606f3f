"""Anonymization technique library.

``apply`` turns one detected value into its replacement.  It never raises:
any failure (unknown technique, technique not legal for the data type,
malformed value) degrades to total masking and the returned
``AnonymizationResult`` is flagged ``fallback=True``, so the original value is
never passed through unredacted.

Usage:
    with Session() as session:
        r = apply("111.444.777-35", "mask_partial", "tax_id", session)
        r.anonymized     # "***.444.***-35"
        r.technique      # "tax_id/mask_partial"
"""

from __future__ import annotations
import logging
import re
from typing import Callable

from .errors import ConfigError, UnsupportedTechniqueError
from .lexicon import Lexicon, default_lexicon
from .session import Session
from .types import AnonymizationResult, DataType, Technique
from .validators import only_digits

logger = logging.getLogger(__name__)

MASK_CHAR = "*"

LEGAL_TECHNIQUES: dict[DataType, frozenset[Technique]] = {
    DataType.TAX_ID: frozenset({
        Technique.MASK_PARTIAL, Technique.MASK_TOTAL, Technique.PSEUDONYM, Technique.SYNTHETIC,
    }),
    DataType.COMPANY_ID: frozenset({
        Technique.MASK_PARTIAL, Technique.MASK_TOTAL, Technique.PSEUDONYM, Technique.SYNTHETIC,
    }),
    DataType.PERSON_NAME: frozenset(Technique),
    DataType.PHONE: frozenset({
        Technique.MASK_PARTIAL, Technique.MASK_TOTAL, Technique.SYNTHETIC, Technique.GENERIC,
    }),
    DataType.EMAIL: frozenset({
        Technique.MASK_PARTIAL, Technique.MASK_TOTAL, Technique.SYNTHETIC, Technique.GENERIC,
    }),
}

# data type → (counter category, pseudonym prefix)
_PSEUDONYM_CATEGORIES: dict[DataType, tuple[str, str]] = {
    DataType.PERSON_NAME: ("person", "PESSOA"),
    DataType.COMPANY_ID: ("company", "EMPRESA"),
    DataType.TAX_ID: ("document", "DOC"),
}

GENERIC_PHONE = "(11) 99999-9999"
GENERIC_EMAIL = "contato@exemplo.com"

_ALNUM = re.compile(r"[^\W_]")
_WORD = re.compile(r"\S+")


# ----------------------------------------------------------------------
# Masking
# ----------------------------------------------------------------------

def mask_total(value: str, preserve_formatting: bool = True) -> str:
    """Mask every character, or only alphanumerics when preserving format."""
    if not preserve_formatting:
        return MASK_CHAR * len(value)
    return _ALNUM.sub(MASK_CHAR, value)


def mask_partial_cpf(value: str) -> str:
    """Keep the middle block and the check digits: ``***.444.***-35``."""
    digits = only_digits(value)
    if len(digits) != 11:
        raise ValueError("CPF must have 11 digits")
    return f"***.{digits[3:6]}.***-{digits[9:]}"


def mask_partial_cnpj(value: str) -> str:
    """Keep branch and check digits: ``**.***.***/0001-81``."""
    digits = only_digits(value)
    if len(digits) != 14:
        raise ValueError("CNPJ must have 14 digits")
    return f"**.***.***/{digits[8:12]}-{digits[12:]}"


def mask_partial_phone(value: str) -> str:
    """Keep country/area code and the last four digits, in the original layout."""
    total = len(only_digits(value))
    if total in (12, 13):
        keep_head = 4          # +55 and area code
    elif total in (10, 11):
        keep_head = 2          # area code
    elif total in (8, 9):
        keep_head = 0
    else:
        raise ValueError(f"unexpected phone length: {total} digits")

    out: list[str] = []
    seen = 0
    for ch in value:
        if ch.isdigit():
            keep = seen < keep_head or seen >= total - 4
            out.append(ch if keep else MASK_CHAR)
            seen += 1
        else:
            out.append(ch)
    return "".join(out)


def mask_partial_email(value: str) -> str:
    """Keep first and last character of the local part and the whole domain."""
    local, at, domain = value.rpartition("@")
    if not at or not local or not domain:
        raise ValueError("not an email address")
    if len(local) > 2:
        local = local[0] + MASK_CHAR * (len(local) - 2) + local[-1]
    else:
        local = MASK_CHAR * len(local)
    return f"{local}@{domain}"


def mask_partial_name(value: str) -> str:
    """Keep first and last letter of each word: ``M***a S***a``."""
    def _mask(m: re.Match) -> str:
        word = m.group()
        if len(word) <= 2:
            return word
        return word[0] + MASK_CHAR * (len(word) - 2) + word[-1]
    return _WORD.sub(_mask, value)


_PARTIAL_MASKS: dict[DataType, Callable[[str], str]] = {
    DataType.TAX_ID: mask_partial_cpf,
    DataType.COMPANY_ID: mask_partial_cnpj,
    DataType.PHONE: mask_partial_phone,
    DataType.EMAIL: mask_partial_email,
    DataType.PERSON_NAME: mask_partial_name,
}


# ----------------------------------------------------------------------
# Names
# ----------------------------------------------------------------------

def initials(value: str, lexicon: Lexicon | None = None) -> str:
    """``Maria da Silva Santos`` → ``M.S.S.``"""
    lexicon = lexicon or default_lexicon()
    letters = [w[0].upper() for w in value.split() if not lexicon.is_connective(w)]
    if not letters:
        raise ValueError("no words to abbreviate")
    return ".".join(letters) + "."


def generic_name(value: str) -> str:
    words = value.split()
    if len(words) == 3:
        return "Fulano da Silva"
    if len(words) >= 4:
        return "Fulano de Tal Santos"
    return "Fulano de Tal"


def _generic(value: str, data_type: DataType) -> str:
    if data_type is DataType.PERSON_NAME:
        return generic_name(value)
    if data_type is DataType.PHONE:
        return GENERIC_PHONE
    return GENERIC_EMAIL


# ----------------------------------------------------------------------
# Pseudonyms and synthetic values
# ----------------------------------------------------------------------

def pseudonym(value: str, data_type: DataType, session: Session, keep_consistency: bool = True) -> str:
    """Sequential category label.  Without consistency every call draws a new one."""
    category, prefix = _PSEUDONYM_CATEGORIES[data_type]
    if not keep_consistency:
        return session.next_pseudonym(category, prefix)
    return session.get_or_create(
        f"pseudonym:{category}", value, lambda: session.next_pseudonym(category, prefix),
    )


def _is_mobile(value: str) -> bool:
    return len(only_digits(value)) in (9, 11, 13)


def _generate(value: str, data_type: DataType, session: Session) -> str:
    gen = session.generator
    if data_type is DataType.TAX_ID:
        return gen.cpf(formatted=not value.isdigit())
    if data_type is DataType.COMPANY_ID:
        return gen.cnpj(formatted=not value.isdigit())
    if data_type is DataType.PERSON_NAME:
        return gen.name(upper=value.isupper())
    if data_type is DataType.PHONE:
        return gen.phone(mobile=_is_mobile(value))
    return gen.email()


def synthetic(value: str, data_type: DataType, session: Session, keep_consistency: bool = True) -> str:
    """Plausible fake of the same kind.

    With consistency the generator is seeded from the session salt and the
    value, so the same original maps to the same fake for this session only.
    """
    if not keep_consistency:
        session.generator.reseed(session.random_seed())
        return _generate(value, data_type, session)

    def _create() -> str:
        session.generator.reseed(session.seed_for(value))
        return _generate(value, data_type, session)

    return session.get_or_create(f"synthetic:{data_type.value}", value, _create)


# ----------------------------------------------------------------------
# Generalization (dates, amounts, addresses)
# ----------------------------------------------------------------------

DATE_LEVELS = ("year", "month", "decade")
AMOUNT_LEVELS = ("thousands", "ten_thousands", "range")

DATE_REGEX = re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b")
AMOUNT_REGEX = re.compile(r"R\$\s?(?:\d{1,3}(?:\.\d{3})+|\d+)(?:,\d{2})?")
ADDRESS_REGEX = re.compile(
    r"\b((?:Rua|R\.|Avenida|Av\.|Travessa|Tv\.|Alameda|Al\.|Praça|Rodovia|Estrada|Largo)"
    r"\s+[^,\n\d]+?,\s*(?:n[º°o]\.?\s*)?)(\d+[A-Za-z]?)\b"
)

_AMOUNT_RANGES = (
    (10_000, "R$ 0 - R$ 10.000"),
    (50_000, "R$ 10.000 - R$ 50.000"),
    (100_000, "R$ 50.000 - R$ 100.000"),
)


def _brl(amount: int) -> str:
    return f"R$ {amount:,}".replace(",", ".") + ",00+"


def generalize_date(value: str, level: str = "year") -> str:
    """``15/06/2023`` → ``XX/XX/2023`` (year), ``XX/06/2023`` (month) or
    ``XX/XX/2020s`` (decade).  Unparseable values are returned unchanged."""
    if level not in DATE_LEVELS:
        raise ConfigError(f"unknown date generalization level: {level!r}")
    m = DATE_REGEX.search(value)
    if not m:
        return value
    _, month, year = m.groups()
    if level == "year":
        general = f"XX/XX/{year}"
    elif level == "month":
        general = f"XX/{month}/{year}"
    else:
        general = f"XX/XX/{int(year) // 10 * 10}s"
    return value[:m.start()] + general + value[m.end():]


def parse_brl(value: str) -> int | None:
    """Integer reais of a ``R$ 52.300,00`` style amount."""
    m = AMOUNT_REGEX.search(value)
    if not m:
        return None
    number = m.group()[2:].strip().split(",")[0].replace(".", "")
    return int(number)


def generalize_amount(value: str, level: str = "thousands") -> str:
    """Round a BRL amount down to a bucket boundary or a named range."""
    if level not in AMOUNT_LEVELS:
        raise ConfigError(f"unknown amount generalization level: {level!r}")
    amount = parse_brl(value)
    if amount is None:
        return value
    if level == "thousands":
        return _brl(amount // 1_000 * 1_000)
    if level == "ten_thousands":
        return _brl(amount // 10_000 * 10_000)
    for ceiling, label in _AMOUNT_RANGES:
        if amount < ceiling:
            return label
    return "R$ 100.000+"


def generalize_address(value: str) -> str:
    """``Rua das Flores, 123`` → ``Rua das Flores, XXX``."""
    return ADDRESS_REGEX.sub(lambda m: m.group(1) + "XXX", value)


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------

def _label(item: object) -> str:
    return str(getattr(item, "value", item))


def _resolve(technique: Technique | str, data_type: DataType | str) -> tuple[Technique, DataType]:
    try:
        dt = DataType(data_type)
    except ValueError:
        raise UnsupportedTechniqueError(f"unknown data type: {_label(data_type)!r}") from None
    try:
        tech = Technique(technique)
    except ValueError:
        raise UnsupportedTechniqueError(f"unknown technique: {_label(technique)!r}") from None
    if tech not in LEGAL_TECHNIQUES[dt]:
        raise UnsupportedTechniqueError(f"{tech.value} is not available for {dt.value}")
    return tech, dt


def _anonymize(
    value: str,
    tech: Technique,
    dt: DataType,
    session: Session,
    keep_consistency: bool,
    preserve_formatting: bool,
    lexicon: Lexicon | None,
) -> str:
    if tech is Technique.MASK_TOTAL:
        return mask_total(value, preserve_formatting)
    if tech is Technique.MASK_PARTIAL:
        return _PARTIAL_MASKS[dt](value)
    if tech is Technique.PSEUDONYM:
        return pseudonym(value, dt, session, keep_consistency)
    if tech is Technique.SYNTHETIC:
        return synthetic(value, dt, session, keep_consistency)
    if tech is Technique.INITIALS:
        return initials(value, lexicon)
    return _generic(value, dt)


def apply(
    value: str,
    technique: Technique | str,
    data_type: DataType | str,
    session: Session | None = None,
    *,
    keep_consistency: bool = True,
    preserve_formatting: bool = True,
    lexicon: Lexicon | None = None,
) -> AnonymizationResult:
    """Anonymize one value.  Never raises; see module docstring.

    Without a ``session`` a throwaway one is used, so pseudonym numbering and
    synthetic consistency only hold within that single call.
    """
    if session is None:
        with Session(lexicon) as throwaway:
            return apply(
                value, technique, data_type, throwaway,
                keep_consistency=keep_consistency,
                preserve_formatting=preserve_formatting,
                lexicon=lexicon,
            )

    try:
        tech, dt = _resolve(technique, data_type)
        anonymized = _anonymize(
            value, tech, dt, session, keep_consistency, preserve_formatting, lexicon,
        )
    except Exception as exc:
        logger.warning(
            "falling back to total masking for %s/%s: %s",
            _label(data_type), _label(technique), exc,
        )
        text = value if isinstance(value, str) else str(value)
        return AnonymizationResult(
            original=text,
            anonymized=mask_total(text, preserve_formatting),
            technique=f"{_label(data_type)}/{Technique.MASK_TOTAL.value}",
            fallback=True,
        )
    return AnonymizationResult(
        original=value,
        anonymized=anonymized,
        technique=f"{dt.value}/{tech.value}",
    )
