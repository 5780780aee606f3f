"""Check-digit validation for CPF and CNPJ.

Both use two modulo-11 check digits over weighted positional sums.  A check
digit is 0 when ``sum % 11 < 2``, otherwise ``11 - sum % 11``.
"""

from __future__ import annotations
import re

_NON_DIGIT = re.compile(r"\D")

_CPF_WEIGHTS_1 = tuple(range(10, 1, -1))           # 10..2
_CPF_WEIGHTS_2 = tuple(range(11, 1, -1))           # 11..2
_CNPJ_WEIGHTS_1 = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
_CNPJ_WEIGHTS_2 = (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)


def only_digits(value: str) -> str:
    return _NON_DIGIT.sub("", value)


def _check_digit(digits: str, weights: tuple[int, ...]) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def cpf_check_digits(base: str) -> str:
    """Return the two check digits for the first 9 CPF digits."""
    if len(base) != 9 or not base.isdigit():
        raise ValueError("CPF base must be 9 digits")
    first = _check_digit(base, _CPF_WEIGHTS_1)
    second = _check_digit(base + str(first), _CPF_WEIGHTS_2)
    return f"{first}{second}"


def cnpj_check_digits(base: str) -> str:
    """Return the two check digits for the first 12 CNPJ digits."""
    if len(base) != 12 or not base.isdigit():
        raise ValueError("CNPJ base must be 12 digits")
    first = _check_digit(base, _CNPJ_WEIGHTS_1)
    second = _check_digit(base + str(first), _CNPJ_WEIGHTS_2)
    return f"{first}{second}"


def _is_repeated(digits: str) -> bool:
    return len(set(digits)) == 1


def is_valid_cpf(value: str) -> bool:
    digits = only_digits(value)
    if len(digits) != 11 or _is_repeated(digits):
        return False
    return cpf_check_digits(digits[:9]) == digits[9:]


def is_valid_cnpj(value: str) -> bool:
    digits = only_digits(value)
    if len(digits) != 14 or _is_repeated(digits):
        return False
    return cnpj_check_digits(digits[:12]) == digits[12:]


def format_cpf(digits: str) -> str:
    """``11144477735`` → ``111.444.777-35``."""
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:11]}"


def format_cnpj(digits: str) -> str:
    """``11222333000181`` → ``11.222.333/0001-81``."""
    return f"{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:14]}"
