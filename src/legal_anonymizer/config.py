"""YAML/dict config loader for legal-anonymizer.

Supports loading from a YAML file or a plain dict (for embedding in the
configuration of a larger application).

Example YAML:

    legal_anonymizer:
      score_threshold: 0.0
      skip_types:
        - company_id
      allow_list:
        - contato@escritorio.adv.br
      lexicon_path: ~/.legal-anonymizer/lexicon.yaml

    anonymization:
      tax_id: mask_partial
      company_id: mask_partial
      person_name: pseudonym
      phone: mask_partial
      email: mask_partial
      keep_consistency: true
      preserve_formatting: true
      generalize_dates: year
      generalize_amounts: range
      generalize_addresses: true

The options block also accepts the keys posted by the upload form (``cpf``,
``names``, ``phones``, ``emails``, ``keepConsistency``,
``preserveFormatting``) and its technique values ``partial`` and ``full``.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .redactor import RedactorConfig
from .techniques import AMOUNT_LEVELS, DATE_LEVELS
from .types import AnonymizationOptions, DataType, Technique

logger = logging.getLogger(__name__)

_KEY_ALIASES = {
    "cpf": "tax_id",
    "cnpj": "company_id",
    "names": "person_name",
    "name": "person_name",
    "phones": "phone",
    "emails": "email",
    "keepConsistency": "keep_consistency",
    "preserveFormatting": "preserve_formatting",
    "generalizeDates": "generalize_dates",
    "generalizeAmounts": "generalize_amounts",
    "generalizeAddresses": "generalize_addresses",
}

_TECHNIQUE_ALIASES = {
    "partial": Technique.MASK_PARTIAL.value,
    "full": Technique.MASK_TOTAL.value,
    "total": Technique.MASK_TOTAL.value,
}

_TECHNIQUE_KEYS = {dt.value for dt in DataType}


def _normalize_technique(key: str, value: Any) -> str:
    name = str(value).strip()
    name = _TECHNIQUE_ALIASES.get(name, name)
    if name not in {t.value for t in Technique}:
        # Kept as-is: the technique library masks such values totally.
        logger.warning("unknown technique %r for %s, values will be fully masked", name, key)
    return name


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("1", "true", "yes", "on"):
        return True
    if isinstance(value, str) and value.lower() in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _as_level(key: str, value: Any, allowed: tuple[str, ...]) -> str | None:
    if value in (None, "", False, "none"):
        return None
    if value not in allowed:
        raise ConfigError(f"{key} must be one of {', '.join(allowed)}, got {value!r}")
    return value


def load_options(data: dict[str, Any] | None) -> AnonymizationOptions:
    """Build AnonymizationOptions from a flat dict or an ``anonymization`` block."""
    data = dict(data or {})
    if "anonymization" in data:
        data = dict(data["anonymization"] or {})

    kwargs: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = _KEY_ALIASES.get(raw_key, raw_key)
        if key in _TECHNIQUE_KEYS:
            kwargs[key] = _normalize_technique(key, value)
        elif key in ("keep_consistency", "preserve_formatting", "generalize_addresses"):
            kwargs[key] = _as_bool(key, value)
        elif key == "generalize_dates":
            kwargs[key] = _as_level(key, value, DATE_LEVELS)
        elif key == "generalize_amounts":
            kwargs[key] = _as_level(key, value, AMOUNT_LEVELS)
        else:
            raise ConfigError(f"unknown anonymization option: {raw_key!r}")
    return AnonymizationOptions(**kwargs)


def load_config(data: dict[str, Any] | None) -> RedactorConfig:
    """Build a RedactorConfig from a flat dict or a ``legal_anonymizer`` block."""
    data = dict(data or {})
    if "legal_anonymizer" in data:
        data = dict(data["legal_anonymizer"] or {})

    skip_types: set[DataType] = set()
    for name in data.get("skip_types", []):
        try:
            skip_types.add(DataType(name))
        except ValueError:
            raise ConfigError(f"unknown data type in skip_types: {name!r}") from None

    try:
        threshold = float(data.get("score_threshold", 0.0))
    except (TypeError, ValueError):
        raise ConfigError("score_threshold must be a number") from None
    if not 0.0 <= threshold <= 1.0:
        raise ConfigError("score_threshold must be within [0, 1]")

    lexicon_path = data.get("lexicon_path")
    return RedactorConfig(
        score_threshold=threshold,
        skip_types=skip_types,
        allow_list=set(data.get("allow_list", [])),
        lexicon_path=str(Path(lexicon_path).expanduser()) if lexicon_path else None,
    )


def load_from_yaml(path: str | Path) -> tuple[RedactorConfig, AnonymizationOptions]:
    """Load both the redactor config and the anonymization options from YAML."""
    with open(Path(path).expanduser(), encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    return load_config(data.get("legal_anonymizer", {})), load_options(data.get("anonymization", {}))
