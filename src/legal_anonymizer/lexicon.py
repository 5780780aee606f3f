"""Versioned word lists for name detection and synthetic data.

The lists live in ``data/lexicon.yaml`` so accuracy fixes (a new denylist
entry, a missing surname) don't touch detection code.  An alternative file
can be supplied explicitly or through ``LEGAL_ANONYMIZER_LEXICON``.
"""

from __future__ import annotations
import functools
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

LEXICON_ENV = "LEGAL_ANONYMIZER_LEXICON"

_REQUIRED = ("first_names", "last_names", "denylist", "document_keywords", "connectives")
_REQUIRED_SYNTHETIC = (
    "male_first_names", "female_first_names", "surnames", "email_domains", "area_codes",
)


@dataclass(frozen=True, slots=True)
class Lexicon:
    """Immutable word lists.  Detection lists are stored upper-cased."""
    version: int
    first_names: frozenset[str]
    last_names: frozenset[str]
    denylist: frozenset[str]
    document_keywords: tuple[str, ...]
    connectives: frozenset[str]                 # lower-case
    male_first_names: tuple[str, ...]
    female_first_names: tuple[str, ...]
    surnames: tuple[str, ...]
    email_domains: tuple[str, ...]
    area_codes: tuple[str, ...]

    def is_connective(self, word: str) -> bool:
        return word.lower() in self.connectives

    def is_denied(self, word: str) -> bool:
        return word.upper() in self.denylist

    def is_common_name(self, word: str) -> bool:
        upper = word.upper()
        return upper in self.first_names or upper in self.last_names

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Lexicon":
        if not isinstance(data, dict):
            raise ConfigError("lexicon must be a mapping")
        missing = [k for k in _REQUIRED if not data.get(k)]
        synthetic = data.get("synthetic") or {}
        missing += [f"synthetic.{k}" for k in _REQUIRED_SYNTHETIC if not synthetic.get(k)]
        if missing:
            raise ConfigError(f"lexicon is missing: {', '.join(missing)}")

        def upper(key: str) -> frozenset[str]:
            return frozenset(str(w).upper() for w in data[key])

        return cls(
            version=int(data.get("version", 0)),
            first_names=upper("first_names"),
            last_names=upper("last_names"),
            denylist=upper("denylist"),
            document_keywords=tuple(str(w).upper() for w in data["document_keywords"]),
            connectives=frozenset(str(w).lower() for w in data["connectives"]),
            male_first_names=tuple(synthetic["male_first_names"]),
            female_first_names=tuple(synthetic["female_first_names"]),
            surnames=tuple(synthetic["surnames"]),
            email_domains=tuple(synthetic["email_domains"]),
            area_codes=tuple(str(c) for c in synthetic["area_codes"]),
        )


def load_lexicon(path: str | Path | None = None) -> Lexicon:
    """Load a lexicon from ``path``, ``$LEGAL_ANONYMIZER_LEXICON`` or the
    packaged default (cached)."""
    path = path or os.environ.get(LEXICON_ENV)
    if not path:
        return default_lexicon()
    with open(Path(path).expanduser(), encoding="utf-8") as f:
        lexicon = Lexicon.from_dict(yaml.safe_load(f))
    logger.debug("loaded lexicon v%d from %s", lexicon.version, path)
    return lexicon


@functools.lru_cache(maxsize=1)
def default_lexicon() -> Lexicon:
    source = resources.files("legal_anonymizer").joinpath("data").joinpath("lexicon.yaml")
    text = source.read_text(encoding="utf-8")
    return Lexicon.from_dict(yaml.safe_load(text))
