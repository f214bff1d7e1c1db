from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ColumnType(str, Enum):
    TEXT = "Text"
    NUMBER = "Number"
    DATE = "Date"
    CHECKBOX = "Checkbox"
    SINGLE_SELECT = "SingleSelect"
    MULTI_SELECT = "MultiSelect"

    @property
    def is_select(self) -> bool:
        return self in (ColumnType.SINGLE_SELECT, ColumnType.MULTI_SELECT)

    @classmethod
    def parse(cls, value) -> "ColumnType":
        if isinstance(value, cls):
            return value
        text = "" if value is None else str(value).strip()
        for member in cls:
            if member.value == text:
                return member
        key = text.lower().replace("-", "").replace("_", "").replace(" ", "")
        if key in _TYPE_ALIASES:
            return _TYPE_ALIASES[key]
        raise ValueError(f"Unknown column type '{value}'")


_TYPE_ALIASES = {
    "text": ColumnType.TEXT,
    "str": ColumnType.TEXT,
    "string": ColumnType.TEXT,
    "number": ColumnType.NUMBER,
    "num": ColumnType.NUMBER,
    "int": ColumnType.NUMBER,
    "float": ColumnType.NUMBER,
    "date": ColumnType.DATE,
    "checkbox": ColumnType.CHECKBOX,
    "bool": ColumnType.CHECKBOX,
    "boolean": ColumnType.CHECKBOX,
    "singleselect": ColumnType.SINGLE_SELECT,
    "select": ColumnType.SINGLE_SELECT,
    "multiselect": ColumnType.MULTI_SELECT,
    "tags": ColumnType.MULTI_SELECT,
}


@dataclass(frozen=True)
class SelectOption:
    id: str
    name: str


@dataclass(frozen=True)
class Column:
    id: str
    name: str
    type: ColumnType
    order: int = 0
    # present only for select types
    options: tuple[SelectOption, ...] | None = None

    def option(self, option_id: str) -> SelectOption | None:
        for opt in self.options or ():
            if opt.id == option_id:
                return opt
        return None

    def option_by_name(self, name: str) -> SelectOption | None:
        for opt in self.options or ():
            if opt.name == name:
                return opt
        return None


@dataclass(frozen=True)
class CellData:
    value: Any = None


RowData = dict[str, CellData]


def _id_tuple(raw, label: str) -> tuple:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValueError(f"{label} is not a list")
    return tuple(str(x) for x in raw)


@dataclass(frozen=True)
class Table:
    """A named set of typed columns and keyed rows, with explicit display orders.

    Tables are treated as values: the engines never mutate one in place, they
    build a new Table and swap it into the registry once the store accepts it.
    """

    id: str
    name: str
    columns: tuple[Column, ...] = ()
    rows: dict[str, RowData] = field(default_factory=dict)
    column_order: tuple[str, ...] = ()
    row_order: tuple[str, ...] = ()

    def column(self, column_id: str) -> Column | None:
        for col in self.columns:
            if col.id == column_id:
                return col
        return None

    def column_by_name(self, name: str) -> Column | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def copy_rows(self) -> dict[str, RowData]:
        return {row_id: dict(cells) for row_id, cells in self.rows.items()}

    # ---------- record conversion ----------
    def to_record(self) -> dict:
        columns = []
        for col in self.columns:
            entry = {
                "id": col.id,
                "name": col.name,
                "type": col.type.value,
                "order": col.order,
            }
            if col.options is not None:
                entry["options"] = [{"id": o.id, "name": o.name} for o in col.options]
            columns.append(entry)
        rows = {
            row_id: {col_id: {"value": cell.value} for col_id, cell in cells.items()}
            for row_id, cells in self.rows.items()
        }
        return {
            "id": self.id,
            "name": self.name,
            "columns": columns,
            "rows": rows,
            "column_order": list(self.column_order),
            "row_order": list(self.row_order),
        }

    @classmethod
    def from_record(cls, record: dict) -> "Table":
        if not isinstance(record, dict) or "id" not in record:
            raise ValueError("Table record must be a mapping with an 'id'")

        raw_columns = record.get("columns") or []
        raw_rows = record.get("rows") or {}
        if not isinstance(raw_columns, list) or not isinstance(raw_rows, dict):
            raise ValueError("Table record needs a column list and a row mapping")

        columns = []
        for idx, entry in enumerate(raw_columns):
            if not isinstance(entry, dict):
                raise ValueError(f"Column entry {idx} is not a mapping")
            col_type = ColumnType.parse(entry.get("type"))
            options = None
            if col_type.is_select:
                raw_options = entry.get("options") or []
                if not isinstance(raw_options, list) or not all(
                    isinstance(o, dict) for o in raw_options
                ):
                    raise ValueError(f"Options of column {idx} are not a list of mappings")
                options = tuple(
                    SelectOption(id=str(o["id"]), name=str(o["name"])) for o in raw_options
                )
            columns.append(
                Column(
                    id=str(entry["id"]),
                    name=str(entry.get("name", "")),
                    type=col_type,
                    order=int(entry.get("order", idx)),
                    options=options,
                )
            )

        rows = {}
        for row_id, cells in raw_rows.items():
            if cells is not None and not isinstance(cells, dict):
                raise ValueError(f"Cells of row {row_id} are not a mapping")
            rows[str(row_id)] = {
                str(col_id): CellData(cell.get("value") if isinstance(cell, dict) else None)
                for col_id, cell in (cells or {}).items()
            }

        return cls(
            id=str(record["id"]),
            name=str(record.get("name", "")),
            columns=tuple(columns),
            rows=rows,
            column_order=_id_tuple(record.get("column_order"), "column_order"),
            row_order=_id_tuple(record.get("row_order"), "row_order"),
        )


# ---------- read models ----------
def ordered_columns(table: Table) -> list[Column]:
    by_id = {col.id: col for col in table.columns}
    return [by_id[col_id] for col_id in table.column_order if col_id in by_id]


def ordered_rows(table: Table) -> list[tuple[str, list[Any]]]:
    """Rows in display order as (row_id, values aligned with ordered_columns)."""
    cols = ordered_columns(table)
    result = []
    for row_id in table.row_order:
        cells = table.rows.get(row_id)
        if cells is None:
            continue
        values = []
        for col in cols:
            cell = cells.get(col.id)
            values.append(cell.value if cell is not None else None)
        result.append((row_id, values))
    return result


def validate_table(table: Table) -> list[str]:
    """Return a description of every broken structural invariant (empty if sound)."""
    problems = []
    column_ids = [col.id for col in table.columns]
    if len(set(column_ids)) != len(column_ids):
        problems.append("duplicate column ids")
    if len(set(table.column_order)) != len(table.column_order):
        problems.append("duplicate ids in column_order")
    if set(table.column_order) != set(column_ids):
        problems.append("column_order does not match columns")
    if len(set(table.row_order)) != len(table.row_order):
        problems.append("duplicate ids in row_order")
    if set(table.row_order) != set(table.rows):
        problems.append("row_order does not match rows")

    live = set(column_ids)
    for row_id, cells in table.rows.items():
        stale = set(cells) - live
        if stale:
            problems.append(f"row {row_id} has cells for unknown columns {sorted(stale)}")

    for col in table.columns:
        if col.type.is_select and col.options is None:
            problems.append(f"select column {col.id} has no option list")
        if not col.type.is_select and col.options is not None:
            problems.append(f"column {col.id} has options but is not a select column")
    return problems
