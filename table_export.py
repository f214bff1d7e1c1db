import os
import re

import numpy as np
import pandas as pd

from table_model import Column, ColumnType, Table, ordered_columns, ordered_rows


def _text_series(col: Column, values):
    return pd.Series(["" if v is None else str(v) for v in values], dtype="object")


def _number_series(col: Column, values):
    raw = pd.Series([np.nan if v is None else v for v in values], dtype="object")
    return pd.to_numeric(raw, errors="coerce").astype("float64")


def _checkbox_series(col: Column, values):
    return pd.Series([pd.NA if v is None else bool(v) for v in values], dtype="boolean")


def _date_series(col: Column, values):
    raw = pd.Series([None if v in (None, "") else v for v in values], dtype="object")
    return pd.to_datetime(raw, errors="coerce", format="%Y-%m-%d")


def _single_select_series(col: Column, values):
    names = []
    for v in values:
        opt = col.option(v) if v is not None else None
        names.append(opt.name if opt is not None else None)
    return pd.Series(names, dtype="object")


def _multi_select_series(col: Column, values):
    joined = []
    for v in values:
        names = [opt.name for opt in (col.option(i) for i in (v or [])) if opt is not None]
        joined.append(", ".join(names))
    return pd.Series(joined, dtype="object")


_SERIES_BUILDERS = {
    ColumnType.TEXT: _text_series,
    ColumnType.NUMBER: _number_series,
    ColumnType.DATE: _date_series,
    ColumnType.CHECKBOX: _checkbox_series,
    ColumnType.SINGLE_SELECT: _single_select_series,
    ColumnType.MULTI_SELECT: _multi_select_series,
}


def table_to_dataframe(table: Table) -> pd.DataFrame:
    """Flatten a table into a DataFrame in display order, one column per field."""
    cols = ordered_columns(table)
    rows = ordered_rows(table)
    index = pd.Index([row_id for row_id, _ in rows], name="row_id", dtype="object")

    data = {}
    for pos, col in enumerate(cols):
        series = _SERIES_BUILDERS[col.type](col, [values[pos] for _, values in rows])
        series.index = index
        data[col.name] = series
    return pd.DataFrame(data, index=index)


class TableExportHandler:
    SUPPORTED = {".csv", ".parquet", ".xlsx"}
    DEFAULT_SHEET_NAME = "Sheet1"

    def __init__(self, path: str):
        self.path = path
        _, ext = os.path.splitext(path)
        self.ext = ext.lower()

        if self.ext not in self.SUPPORTED:
            raise ValueError("Unsupported file type (use .csv, .parquet, or .xlsx)")

    def save(self, table: Table) -> None:
        df = table_to_dataframe(table)
        if self.ext == ".csv":
            df.to_csv(self.path, index=False)
        elif self.ext == ".parquet":
            self._ensure_parquet_engine()
            df.to_parquet(self.path, index=False)
        elif self.ext == ".xlsx":
            self.save_workbook([table])

    def save_workbook(self, tables: list[Table]) -> None:
        if self.ext != ".xlsx":
            raise ValueError("Multiple tables can only be exported to .xlsx")
        self._ensure_excel_engine()
        used = set()
        with pd.ExcelWriter(self.path) as writer:
            for table in tables:
                name = self._sheet_name(table.name, used)
                used.add(name)
                table_to_dataframe(table).to_excel(writer, index=False, sheet_name=name)

    def _sheet_name(self, name: str, used: set) -> str:
        base = re.sub(r"[\[\]:*?/\\]", "_", name or "").strip()[:31] or self.DEFAULT_SHEET_NAME
        candidate = base
        n = 2
        while candidate in used:
            suffix = f" ({n})"
            candidate = base[: 31 - len(suffix)] + suffix
            n += 1
        return candidate

    def _ensure_parquet_engine(self):
        try:
            import pyarrow  # noqa: F401

            return
        except ImportError:
            pass
        raise RuntimeError("Parquet support requires pyarrow. Install via: pip install pyarrow")

    def _ensure_excel_engine(self):
        try:
            import openpyxl  # noqa: F401

            return
        except ImportError:
            pass
        raise RuntimeError("XLSX support requires openpyxl. Install via: pip install openpyxl")


def export_table(table: Table, path: str) -> None:
    TableExportHandler(path).save(table)
