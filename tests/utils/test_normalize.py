from __future__ import annotations

import pandas as pd
import pytest

from rowguard.utils.normalize import header_key, is_empty, is_finite_number, to_number


@pytest.mark.parametrize("value", [None, "", float("nan"), pd.NA, pd.NaT])
def test_is_empty_true(value: object) -> None:
    assert is_empty(value)


@pytest.mark.parametrize("value", [" ", "0", 0, False, [1, 2]])
def test_is_empty_false(value: object) -> None:
    assert not is_empty(value)


def test_header_key() -> None:
    assert header_key("  User ID ") == "user id"
    assert header_key("ＥＭＡＩＬ") == "email"


def test_to_number() -> None:
    assert to_number(" 12.5 ") == 12.5
    assert to_number(True) == 1.0
    assert to_number("") is None
    assert to_number("1e3") == 1000.0
    assert to_number("abc") is None
    assert to_number("1_000") is None


def test_is_finite_number() -> None:
    assert is_finite_number("42")
    assert not is_finite_number("nan")
    assert not is_finite_number("-inf")
