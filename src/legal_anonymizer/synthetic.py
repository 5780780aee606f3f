"""Synthetic Brazilian personal data.

Every value is produced from a seeded Faker instance, so the same seed always
yields the same fake.  Identifiers carry valid check digits; names come from
the lexicon's synthetic pools; phones use real area codes.

Usage:
    gen = SyntheticDataGenerator()
    gen.reseed(42)
    gen.cpf()        # "428.113.650-07" style, checksum-valid
    gen.name()       # "Fernanda Costa"
"""

from __future__ import annotations
import re
import unicodedata

from faker import Faker

from .lexicon import Lexicon, default_lexicon
from .validators import cnpj_check_digits, cpf_check_digits, format_cnpj, format_cpf

_NOT_EMAIL_CHAR = re.compile(r"[^a-z.]")


def ascii_fold(value: str) -> str:
    """Strip diacritics: ``Débora João`` → ``Debora Joao``."""
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class SyntheticDataGenerator:
    """Deterministic fake-data generator (one per session)."""

    __slots__ = ("_faker", "_lexicon")

    def __init__(self, lexicon: Lexicon | None = None, *, seed: int | None = None) -> None:
        self._faker = Faker("pt_BR")
        self._lexicon = lexicon or default_lexicon()
        if seed is not None:
            self.reseed(seed)

    def reseed(self, seed: int) -> None:
        self._faker.seed_instance(seed)

    def _chance(self, threshold: float) -> bool:
        return self._faker.random.random() > threshold

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    def cpf(self, *, formatted: bool = True) -> str:
        base = self._faker.numerify("#########")
        while len(set(base)) == 1:
            base = self._faker.numerify("#########")
        digits = base + cpf_check_digits(base)
        return format_cpf(digits) if formatted else digits

    def cnpj(self, *, formatted: bool = True) -> str:
        base = self._faker.numerify("########") + "0001"
        digits = base + cnpj_check_digits(base)
        return format_cnpj(digits) if formatted else digits

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------

    def name(self, *, upper: bool = False) -> str:
        lex = self._lexicon
        pool = lex.female_first_names if self._chance(0.5) else lex.male_first_names
        first = self._faker.random_element(pool)
        last = self._faker.random_element(lex.surnames)
        # 30% get a middle surname
        if self._chance(0.7):
            middle = self._faker.random_element(lex.surnames)
            full = f"{first} {middle} {last}"
        else:
            full = f"{first} {last}"
        return full.upper() if upper else full

    def phone(self, *, mobile: bool = True) -> str:
        ddd = self._faker.random_element(self._lexicon.area_codes)
        if mobile:
            return f"({ddd}) 9{self._faker.numerify('####')}-{self._faker.numerify('####')}"
        return f"({ddd}) {self._faker.numerify('%###')}-{self._faker.numerify('####')}"

    def email(self) -> str:
        local = ascii_fold(self.name()).lower().replace(" ", ".")
        local = _NOT_EMAIL_CHAR.sub("", local)
        # 20% get a numeric suffix
        if self._chance(0.8):
            local += str(self._faker.random_int(1, 99))
        domain = self._faker.random_element(self._lexicon.email_domains)
        return f"{local}@{domain}"
