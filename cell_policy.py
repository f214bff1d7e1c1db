import datetime as dt
import math

import numpy as np
import pandas as pd

from table_model import Column, ColumnType

DATE_FORMAT = "%Y-%m-%d"

_TRUE_WORDS = {"1", "true", "t", "yes", "y", "on", "x", "✓"}
_FALSE_WORDS = {"", "0", "false", "f", "no", "n", "off"}


def today_string(today: dt.date | None = None) -> str:
    return (today or dt.date.today()).strftime(DATE_FORMAT)


_DEFAULTS = {
    ColumnType.TEXT: lambda today: "",
    ColumnType.NUMBER: lambda today: None,
    ColumnType.DATE: today_string,
    ColumnType.CHECKBOX: lambda today: False,
    ColumnType.SINGLE_SELECT: lambda today: None,
    ColumnType.MULTI_SELECT: lambda today: [],
}


def default_value_for_type(col_type, today: dt.date | None = None):
    return _DEFAULTS[ColumnType.parse(col_type)](today)


# ---------- normalization ----------
def _normalize_text(column, raw, previous):
    return "" if raw is None else str(raw)


def _normalize_number(column, raw, previous):
    if raw is None:
        return None
    if isinstance(raw, str):
        stripped = raw.strip()
        if stripped == "":
            return None
        value = pd.to_numeric(stripped, errors="coerce")
    elif isinstance(raw, (int, float, np.number)) and not isinstance(raw, (bool, np.bool_)):
        value = raw
    else:
        return previous
    try:
        if pd.isna(value) or not math.isfinite(float(value)):
            return previous
    except (OverflowError, TypeError):
        return previous
    return value.item() if isinstance(value, np.generic) else value


def _normalize_checkbox(column, raw, previous):
    if isinstance(raw, (bool, np.bool_)):
        return bool(raw)
    if raw is None:
        return False
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _FALSE_WORDS:
            return False
        if lowered in _TRUE_WORDS:
            return True
    return bool(raw)


def _normalize_date(column, raw, previous):
    if isinstance(raw, (dt.date, pd.Timestamp)):
        return raw.strftime(DATE_FORMAT)
    if raw is None or str(raw).strip() == "":
        return previous
    parsed = pd.to_datetime(str(raw).strip(), errors="coerce")
    if pd.isna(parsed):
        return previous
    return parsed.strftime(DATE_FORMAT)


def _resolve_option(column: Column, token):
    token = str(token).strip()
    opt = column.option(token) or column.option_by_name(token)
    return opt.id if opt is not None else None


def _normalize_single_select(column, raw, previous):
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return None
    option_id = _resolve_option(column, raw)
    return option_id if option_id is not None else previous


def _normalize_multi_select(column, raw, previous):
    if raw is None:
        return []
    if isinstance(raw, str):
        tokens = [part for part in raw.split(",") if part.strip()]
    elif isinstance(raw, (list, tuple, set)):
        tokens = list(raw)
    else:
        return list(previous or [])
    chosen = []
    for token in tokens:
        option_id = _resolve_option(column, token)
        if option_id is not None and option_id not in chosen:
            chosen.append(option_id)
    return chosen


_NORMALIZERS = {
    ColumnType.TEXT: _normalize_text,
    ColumnType.NUMBER: _normalize_number,
    ColumnType.DATE: _normalize_date,
    ColumnType.CHECKBOX: _normalize_checkbox,
    ColumnType.SINGLE_SELECT: _normalize_single_select,
    ColumnType.MULTI_SELECT: _normalize_multi_select,
}


def normalize_cell_value(column: Column, raw, previous=None):
    """Turn editor input into the stored value for ``column``.

    Unparseable numbers, dates and unknown select options keep ``previous``;
    text is stored as given, including the empty string.
    """
    return _NORMALIZERS[column.type](column, raw, previous)
