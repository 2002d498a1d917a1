from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from ...domain.rules import DataType
from ...utils.normalize import is_empty, is_finite_number


_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_BOOLEAN_WORDS = frozenset({"true", "false", "1", "0", "yes", "no"})


def _is_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    return str(value).lower() in _BOOLEAN_WORDS


def _is_date(value: Any) -> bool:
    if isinstance(value, (datetime, date, pd.Timestamp)):
        return True
    text = str(value).strip()
    if not text:
        return False
    parsed = pd.to_datetime(text, errors="coerce", format="mixed")
    return not pd.isna(parsed)


def check_data_type(value: Any, data_type: Optional[DataType]) -> bool:
    """Check ``value`` against a declared data type.

    Empty values pass; emptiness belongs to the ``required`` rule.
    An unset or unknown data type passes.
    """
    if is_empty(value):
        return True

    if data_type == DataType.STRING:
        return isinstance(value, str)
    if data_type == DataType.NUMBER:
        return is_finite_number(value)
    if data_type == DataType.BOOLEAN:
        return _is_boolean(value)
    if data_type == DataType.DATE:
        return _is_date(value)
    if data_type == DataType.EMAIL:
        return bool(_EMAIL_RE.fullmatch(str(value)))
    return True
