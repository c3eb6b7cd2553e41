# app/domain/services.py
from __future__ import annotations

import re
import secrets

CODE_MIN = 100_000
CODE_MAX = 999_999


def generate_6digit_code() -> int:
    """Uniform over [100000, 999999]; never has a leading zero."""
    return CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1)


_DECIMAL_CODE = re.compile(r"\s*[+-]?[0-9]+\s*", re.ASCII)


def _as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    # int() alone would also take "123_456" and non-ASCII digits
    text = str(value)
    if not _DECIMAL_CODE.fullmatch(text):
        return None
    return int(text)


def codes_match(stored: object, supplied: object) -> bool:
    """
    Loose equality between a stored code and caller input.

    The store hands codes back as strings while callers may pass either a
    string or a number, so "123456" and 123456 match. Values that are not
    both numeric are compared as trimmed strings.
    """
    if stored is None or supplied is None:
        return False
    stored_int, supplied_int = _as_int(stored), _as_int(supplied)
    if stored_int is not None and supplied_int is not None:
        return stored_int == supplied_int
    return str(stored).strip() == str(supplied).strip()
