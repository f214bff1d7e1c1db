import logging
from typing import Callable

from cell_policy import default_value_for_type
from id_generator import new_id
from table_errors import NotFoundError, PersistenceError, TableError
from table_model import CellData, Column, ColumnType, Table, validate_table

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_NAME = "名称"


class TableRegistry:
    """Owns the table list and the active table id.

    Only the registry, TableMutationEngine and OrderingEngine write this state,
    and always by swapping a whole Table for one id.
    """

    def __init__(
        self,
        store,
        default_column_name: str = DEFAULT_COLUMN_NAME,
        id_factory: Callable[[], str] = new_id,
    ):
        self.store = store
        self.default_column_name = default_column_name
        self.new_id = id_factory

        self.table_list: list[Table] = []
        self.active_table_id: str | None = None
        self.last_error: TableError | None = None

    # ---------- loading ----------
    def load_all(self) -> list[Table]:
        try:
            tables = list(self.store.list())
        except Exception as exc:
            logger.error("Failed to load tables: %s", exc)
            tables = []

        for table in tables:
            problems = validate_table(table)
            if problems:
                logger.warning("Table %s loaded with problems: %s", table.id, "; ".join(problems))

        self.table_list = tables
        self.active_table_id = tables[0].id if tables else None
        return list(tables)

    # ---------- lookups ----------
    def get_table(self, table_id: str | None) -> Table | None:
        for table in self.table_list:
            if table.id == table_id:
                return table
        return None

    def active_table(self) -> Table | None:
        if self.active_table_id is None:
            return None
        return self.get_table(self.active_table_id)

    def table_names(self) -> list[str]:
        return [table.name for table in self.table_list]

    # ---------- active selection ----------
    def set_active(self, table_id: str | None):
        self.active_table_id = table_id

    def switch_table(self, delta: int) -> str | None:
        if not self.table_list:
            return None
        ids = [table.id for table in self.table_list]
        if self.active_table_id not in ids:
            self.active_table_id = ids[0]
            return self.active_table_id
        idx = ids.index(self.active_table_id)
        self.active_table_id = ids[(idx + delta) % len(ids)]
        return self.active_table_id

    # ---------- create / delete ----------
    def build_table(self, name: str) -> Table:
        column = Column(
            id=self.new_id(),
            name=self.default_column_name,
            type=ColumnType.TEXT,
            order=0,
        )
        row_id = self.new_id()
        return Table(
            id=self.new_id(),
            name=name,
            columns=(column,),
            rows={row_id: {column.id: CellData(default_value_for_type(column.type))}},
            column_order=(column.id,),
            row_order=(row_id,),
        )

    def create_table(self, name: str) -> Table:
        self.last_error = None
        table = self.build_table(name)
        try:
            self.store.put(table)
        except Exception as exc:
            logger.error("Failed to create table '%s': %s", name, exc)
            raise PersistenceError(f"Could not save new table '{name}'") from exc

        self.table_list = [table, *self.table_list]
        self.active_table_id = table.id
        logger.info("Created table %s (%s)", table.id, name)
        return table

    def delete_table(self, table_id: str) -> bool:
        self.last_error = None
        if self.get_table(table_id) is None:
            self.last_error = NotFoundError(f"Table '{table_id}' does not exist")
            logger.warning("%s", self.last_error)
            return False

        try:
            self.store.delete(table_id)
        except Exception as exc:
            logger.error("Failed to delete table %s: %s", table_id, exc)
            raise PersistenceError(f"Could not delete table '{table_id}'") from exc

        remaining = [table for table in self.table_list if table.id != table_id]
        active = self.active_table_id
        if active == table_id:
            active = remaining[0].id if remaining else None
        self.table_list = remaining
        self.active_table_id = active
        logger.info("Deleted table %s", table_id)
        return True

    # ---------- commit ----------
    def replace_table(self, table: Table) -> bool:
        """Swap in a new value for an already-registered table id."""
        for idx, current in enumerate(self.table_list):
            if current.id == table.id:
                updated = list(self.table_list)
                updated[idx] = table
                self.table_list = updated
                return True
        return False
