"""Value normalization shared by the catalog loader and the plan validator.

Both sides of a match must be folded the same way, otherwise `"Málaga"` in the catalog and
`"malaga"` in a plan would never meet. Everything here is pure and deterministic.
"""

from __future__ import annotations

import math
import unicodedata
from typing import Any

from src.intent.dictionaries import FALSE_TOKENS, TRUE_TOKENS


def fold_text(value: Any) -> str:
    """Fold a value for equality matching.

    Folding:
        - Trim and lowercase.
        - Decompose (NFD) and drop combining marks, so accents never affect equality.

    `None` folds to an empty string.
    """

    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value).strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def clean_string(value: Any) -> str | None:
    """Trim a scalar into a string; empty values become `None`."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def scalar_to_string(value: int | float | str) -> str:
    """Stringify a scalar the way it reads, without a trailing `.0` for integral floats."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_number(value: Any) -> float | None:
    """Leniently parse a number.

    Finite numbers pass through; strings are trimmed and a comma is accepted as the decimal
    separator. Anything unparsable or non-finite becomes `None`.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except (ValueError, OverflowError):
            return None
    return number if math.isfinite(number) else None


def parse_bool_token(value: Any) -> bool | None:
    """Map a native boolean or a textual yes/no token to a tri-state boolean.

    Tokens are compared case-insensitively (Spanish and English). Unknown tokens map to `None`.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        value = scalar_to_string(value)
    token = str(value).strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    return None
