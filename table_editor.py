import datetime as dt
import logging
from dataclasses import replace
from typing import Callable

from cell_policy import default_value_for_type
from table_errors import (
    DuplicateNameError,
    InvalidColumnTypeError,
    NoActiveTableError,
    NotFoundError,
    PersistenceError,
    TableError,
)
from table_model import CellData, Column, ColumnType, RowData, SelectOption, Table

logger = logging.getLogger(__name__)


class ActiveTableCommands:
    """Shared plumbing for commands that rewrite the registry's active table.

    A command resolves the active table, builds a new Table value and hands it
    to ``_commit``, which writes it to the store and only then swaps it into
    the registry. Caller-input problems are recorded in ``last_error`` and
    reported as a False/None result.
    """

    def __init__(self, registry, today: Callable[[], dt.date] = dt.date.today):
        self.registry = registry
        self.today = today
        self.last_error: TableError | None = None

    def _begin(self) -> Table | None:
        self.last_error = None
        table = self.registry.active_table()
        if table is None:
            self._fail(NoActiveTableError())
        return table

    def _fail(self, error: TableError):
        self.last_error = error
        logger.warning("%s", error)

    def _default(self, col_type: ColumnType):
        return default_value_for_type(col_type, self.today())

    def _commit(self, table: Table) -> Table:
        try:
            self.registry.store.put(table)
        except Exception as exc:
            logger.error("Failed to save table %s: %s", table.id, exc)
            raise PersistenceError(f"Could not save table '{table.name}'") from exc
        self.registry.replace_table(table)
        return table


class TableMutationEngine(ActiveTableCommands):
    """Row, column and cell commands on the active table."""

    # ----- row operations -----
    def add_row(self) -> str | None:
        table = self._begin()
        if table is None:
            return None
        row_id = self.registry.new_id()
        cells: RowData = {col.id: CellData(self._default(col.type)) for col in table.columns}
        rows = table.copy_rows()
        rows[row_id] = cells
        self._commit(replace(table, rows=rows, row_order=(*table.row_order, row_id)))
        logger.debug("Added row %s to table %s", row_id, table.id)
        return row_id

    def delete_row(self, row_id: str) -> bool:
        table = self._begin()
        if table is None:
            return False
        if row_id not in table.rows:
            self._fail(NotFoundError(f"Row '{row_id}' does not exist"))
            return False
        rows = table.copy_rows()
        del rows[row_id]
        row_order = tuple(rid for rid in table.row_order if rid != row_id)
        self._commit(replace(table, rows=rows, row_order=row_order))
        logger.debug("Deleted row %s from table %s", row_id, table.id)
        return True

    # ----- column operations -----
    def add_column(self, name: str, col_type) -> Column | None:
        table = self._begin()
        if table is None:
            return None
        try:
            col_type = ColumnType.parse(col_type)
        except ValueError as exc:
            self._fail(InvalidColumnTypeError(str(exc)))
            return None
        if table.column_by_name(name) is not None:
            self._fail(DuplicateNameError(f"Column '{name}' already exists"))
            return None

        column = Column(
            id=self.registry.new_id(),
            name=name,
            type=col_type,
            order=len(table.columns),
            options=() if col_type.is_select else None,
        )
        rows = table.copy_rows()
        for cells in rows.values():
            cells[column.id] = CellData(self._default(col_type))

        self._commit(
            replace(
                table,
                columns=(*table.columns, column),
                rows=rows,
                column_order=(*table.column_order, column.id),
            )
        )
        logger.debug("Added column %s (%s) to table %s", column.id, col_type.value, table.id)
        return column

    def delete_column(self, column_id: str) -> bool:
        table = self._begin()
        if table is None:
            return False
        if table.column(column_id) is None:
            self._fail(NotFoundError(f"Column '{column_id}' does not exist"))
            return False

        rows = table.copy_rows()
        for cells in rows.values():
            cells.pop(column_id, None)
        self._commit(
            replace(
                table,
                columns=tuple(col for col in table.columns if col.id != column_id),
                rows=rows,
                column_order=tuple(cid for cid in table.column_order if cid != column_id),
            )
        )
        logger.debug("Deleted column %s from table %s", column_id, table.id)
        return True

    def add_select_option(self, column_id: str, name: str) -> SelectOption | None:
        table = self._begin()
        if table is None:
            return None
        column = table.column(column_id)
        if column is None:
            self._fail(NotFoundError(f"Column '{column_id}' does not exist"))
            return None
        if not column.type.is_select:
            self._fail(InvalidColumnTypeError(f"Column '{column.name}' has no options"))
            return None
        if column.option_by_name(name) is not None:
            self._fail(DuplicateNameError(f"Option '{name}' already exists in '{column.name}'"))
            return None

        option = SelectOption(id=self.registry.new_id(), name=name)
        updated = replace(column, options=(*(column.options or ()), option))
        columns = tuple(updated if col.id == column_id else col for col in table.columns)
        self._commit(replace(table, columns=columns))
        return option

    # ----- cell operations -----
    def edit_cell(self, row_id: str, column_id: str, value) -> bool:
        table = self._begin()
        if table is None:
            return False
        if row_id not in table.rows:
            self._fail(NotFoundError(f"Row '{row_id}' does not exist"))
            return False
        if table.column(column_id) is None:
            self._fail(NotFoundError(f"Column '{column_id}' does not exist"))
            return False

        rows = table.copy_rows()
        cells = self._materialize_row(table, rows[row_id])
        cells[column_id] = CellData(value)
        rows[row_id] = cells
        self._commit(replace(table, rows=rows))
        return True

    def _materialize_row(self, table: Table, cells: RowData) -> RowData:
        # one cell per live column, nothing else
        return {
            col.id: cells[col.id] if col.id in cells else CellData(self._default(col.type))
            for col in table.columns
        }
