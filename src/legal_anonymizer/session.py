"""Session — run-scoped anonymization state.

Holds everything that would make a run reversible if it leaked: the
original → replacement map, the pseudonym counters and the hashing salt.

Design goals:
  - Scoped: one session per processing run, never shared or global
  - Deterministic within a run: same value, same replacement
  - Irreversible afterwards: ``close()`` wipes everything and no method ever
    hands out the mapping or the salt
"""

from __future__ import annotations
import hashlib
import secrets
from collections import defaultdict
from typing import Callable

from .errors import SessionClosedError
from .lexicon import Lexicon
from .synthetic import SyntheticDataGenerator

# Pseudonym format: PESSOA_001, EMPRESA_002, DOC_003
_PSEUDONYM_FMT = "{prefix}_{idx:03d}"


class Session:
    """Per-run consistency map, counters and salt."""

    __slots__ = ("_replacements", "_counters", "_salt", "_generator", "_lexicon", "_closed")

    def __init__(self, lexicon: Lexicon | None = None) -> None:
        self._replacements: dict[tuple[str, str], str] = {}   # (category, original) → replacement
        self._counters: dict[str, int] = defaultdict(int)
        self._salt: bytes = secrets.token_bytes(16)
        self._generator: SyntheticDataGenerator | None = None
        self._lexicon = lexicon
        self._closed = False

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError("session already closed")

    # ------------------------------------------------------------------
    # Core API
    # ------------------------------------------------------------------

    def next_pseudonym(self, category: str, prefix: str) -> str:
        """Draw the next sequential pseudonym for a category."""
        self._check_open()
        self._counters[category] += 1
        return _PSEUDONYM_FMT.format(prefix=prefix, idx=self._counters[category])

    def get_or_create(self, category: str, original: str, factory: Callable[[], str]) -> str:
        """Return the replacement already chosen for ``original`` or create one."""
        self._check_open()
        key = (category, original)
        if key not in self._replacements:
            self._replacements[key] = factory()
        return self._replacements[key]

    def seed_for(self, original: str) -> int:
        """Stable seed for ``original`` within this session only."""
        self._check_open()
        digest = hashlib.sha256(self._salt + original.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big")

    @staticmethod
    def random_seed() -> int:
        return secrets.randbits(64)

    @property
    def generator(self) -> SyntheticDataGenerator:
        self._check_open()
        if self._generator is None:
            self._generator = SyntheticDataGenerator(self._lexicon)
        return self._generator

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of remembered replacements."""
        return len(self._replacements)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Wipe the map, counters and salt.  Safe to call more than once."""
        self._replacements.clear()
        self._counters.clear()
        self._salt = b""
        self._generator = None
        self._closed = True
