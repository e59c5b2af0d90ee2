from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")


def clean_cpf(cpf: str) -> str:
    return _NON_DIGITS.sub("", cpf or "")


def clean_phone(phone: str) -> str:
    return _NON_DIGITS.sub("", phone or "")


def _check_digit(digits: str, weight_start: int) -> int:
    total = sum(int(d) * w for d, w in zip(digits, range(weight_start, 1, -1)))
    remainder = (total * 10) % 11
    return 0 if remainder == 10 else remainder


def validate_cpf(cpf: str) -> bool:
    """Valida os dois dígitos verificadores; aceita com ou sem máscara."""
    cleaned = clean_cpf(cpf)
    if len(cleaned) != 11:
        return False
    # 111.111.111-11 e afins passam no cálculo mas não são CPFs válidos
    if cleaned == cleaned[0] * 11:
        return False
    if _check_digit(cleaned[:9], 10) != int(cleaned[9]):
        return False
    return _check_digit(cleaned[:10], 11) == int(cleaned[10])


def format_cpf(cpf: str) -> str:
    cleaned = clean_cpf(cpf)
    if len(cleaned) != 11:
        return cleaned
    return f"{cleaned[:3]}.{cleaned[3:6]}.{cleaned[6:9]}-{cleaned[9:]}"


def format_phone(phone: str | None) -> str | None:
    """(11) 9 1234-5678 para celulares; (11) 1234-5678 para fixos."""
    if phone is None:
        return None
    cleaned = clean_phone(phone)
    if len(cleaned) == 11:
        return f"({cleaned[:2]}) {cleaned[2]} {cleaned[3:7]}-{cleaned[7:]}"
    if len(cleaned) == 10:
        return f"({cleaned[:2]}) {cleaned[2:6]}-{cleaned[6:]}"
    return phone
