from __future__ import annotations

from datetime import date

import pytest

from rowguard.domain.rules import DataType
from rowguard.services.validation.data_types import check_data_type


@pytest.mark.parametrize("value", ["true", "FALSE", "1", "0", "Yes", "no", True, False])
def test_boolean_accepts_words(value: object) -> None:
    assert check_data_type(value, DataType.BOOLEAN)


def test_boolean_rejects_other_text() -> None:
    assert not check_data_type("maybe", DataType.BOOLEAN)
    assert not check_data_type(" yes ", DataType.BOOLEAN)


def test_string_requires_str() -> None:
    assert check_data_type("abc", DataType.STRING)
    assert not check_data_type(12, DataType.STRING)


def test_date_parsing() -> None:
    assert check_data_type("2025-04-03", DataType.DATE)
    assert check_data_type("4/3/2025", DataType.DATE)
    assert check_data_type(date(2025, 4, 3), DataType.DATE)
    assert not check_data_type("not a date", DataType.DATE)


def test_empty_and_unknown_type_pass() -> None:
    assert check_data_type("", DataType.NUMBER)
    assert check_data_type(None, DataType.EMAIL)
    assert check_data_type("whatever", None)
