from __future__ import annotations

import math
import unicodedata
from typing import Any, Optional

import pandas as pd


def is_empty(value: Any) -> bool:
    """True for None, the empty string, and pandas missing markers (NaN/NA/NaT)."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if not pd.api.types.is_scalar(value):
        return False
    return bool(pd.isna(value))


def header_key(header: str) -> str:
    """Case-folded, NFKC-normalized header used for heuristic matching."""
    return unicodedata.normalize("NFKC", str(header)).strip().lower()


def to_number(value: Any) -> Optional[float]:
    """Coerce a cell to a float, or None when it does not look numeric.

    Booleans count as 1/0. Strings are trimmed; the blank string and digit
    separators such as "1_000" are not numeric.
    NaN and infinities are returned as-is so callers can decide on finiteness.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            return float(text)
        except ValueError:
            return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_finite_number(value: Any) -> bool:
    n = to_number(value)
    return n is not None and math.isfinite(n)
