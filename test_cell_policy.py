import datetime as dt

import numpy as np
import pytest

from cell_policy import default_value_for_type, normalize_cell_value, today_string
from table_model import Column, ColumnType, SelectOption

TODAY = dt.date(2025, 3, 9)


@pytest.mark.parametrize(
    "col_type, expected",
    [
        (ColumnType.TEXT, ""),
        (ColumnType.NUMBER, None),
        (ColumnType.DATE, "2025-03-09"),
        (ColumnType.CHECKBOX, False),
        (ColumnType.SINGLE_SELECT, None),
        (ColumnType.MULTI_SELECT, []),
    ],
)
def test_default_value_for_type(col_type, expected):
    assert default_value_for_type(col_type, TODAY) == expected


def test_default_accepts_type_names():
    assert default_value_for_type("Checkbox") is False
    assert default_value_for_type("multi_select") == []


def test_multiselect_defaults_are_independent_lists():
    a = default_value_for_type(ColumnType.MULTI_SELECT)
    a.append("x")
    assert default_value_for_type(ColumnType.MULTI_SELECT) == []


def test_date_default_uses_today():
    assert today_string() == dt.date.today().strftime("%Y-%m-%d")


def _col(col_type, options=None):
    return Column(id="c", name="c", type=col_type, options=options)


STATUS = _col(
    ColumnType.SINGLE_SELECT,
    (SelectOption("o1", "Open"), SelectOption("o2", "Closed")),
)
TAGS = _col(
    ColumnType.MULTI_SELECT,
    (SelectOption("t1", "red"), SelectOption("t2", "blue")),
)


@pytest.mark.parametrize(
    "raw, previous, expected",
    [
        ("42", 1, 42),
        (" 3.5 ", 1, 3.5),
        ("-7", None, -7),
        ("abc", 12, 12),
        ("", 12, None),
        (None, 12, None),
        ("inf", 5, 5),
        (8, None, 8),
        (np.float64(2.5), None, 2.5),
        (True, 3, 3),
        (10**30, 1, 10**30),
        (10**400, 1, 1),
    ],
)
def test_normalize_number(raw, previous, expected):
    result = normalize_cell_value(_col(ColumnType.NUMBER), raw, previous)
    assert result == expected
    assert type(result) is type(expected)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (True, True),
        (False, False),
        ("yes", True),
        ("off", False),
        ("", False),
        ("anything", True),
        (None, False),
        (0, False),
        (1, True),
    ],
)
def test_normalize_checkbox(raw, expected):
    assert normalize_cell_value(_col(ColumnType.CHECKBOX), raw, None) is expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-02-29", "2024-02-29"),
        ("2024/2/3", "2024-02-03"),
        (dt.date(2023, 12, 1), "2023-12-01"),
        (dt.datetime(2023, 12, 1, 15, 30), "2023-12-01"),
        ("not a date", "2020-01-01"),
        ("", "2020-01-01"),
    ],
)
def test_normalize_date(raw, expected):
    assert normalize_cell_value(_col(ColumnType.DATE), raw, "2020-01-01") == expected


def test_text_is_kept_as_given():
    col = _col(ColumnType.TEXT)
    assert normalize_cell_value(col, "  spaced ", "old") == "  spaced "
    assert normalize_cell_value(col, "", "old") == ""
    assert normalize_cell_value(col, None, "old") == ""


def test_single_select_by_id_or_name():
    assert normalize_cell_value(STATUS, "o2", None) == "o2"
    assert normalize_cell_value(STATUS, "Open", None) == "o1"
    assert normalize_cell_value(STATUS, "Unknown", "o2") == "o2"
    assert normalize_cell_value(STATUS, "", "o2") is None


def test_multi_select_filters_and_dedupes():
    assert normalize_cell_value(TAGS, ["t2", "red", "t2", "green"], []) == ["t2", "t1"]
    assert normalize_cell_value(TAGS, "blue, red", []) == ["t2", "t1"]
    assert normalize_cell_value(TAGS, None, ["t1"]) == []
    assert normalize_cell_value(TAGS, 5, ["t1"]) == ["t1"]
