import json
import logging
import os
import tempfile
from typing import Protocol

from table_model import Table

logger = logging.getLogger(__name__)


class TableStore(Protocol):
    """Keyed record store holding one whole Table per id, atomic per call."""

    def list(self) -> list[Table]: ...

    def get(self, table_id: str) -> Table | None: ...

    def put(self, table: Table) -> str: ...

    def delete(self, table_id: str) -> None: ...


def dump_table(table: Table) -> str:
    return json.dumps(table.to_record(), ensure_ascii=False, indent=2)


def load_table(text: str) -> Table:
    return Table.from_record(json.loads(text))


class MemoryTableStore:
    """Process-local store; records are kept serialized so reads never alias."""

    def __init__(self):
        self._records: dict[str, str] = {}

    def list(self) -> list[Table]:
        return [load_table(self._records[key]) for key in sorted(self._records)]

    def get(self, table_id: str) -> Table | None:
        text = self._records.get(table_id)
        return load_table(text) if text is not None else None

    def put(self, table: Table) -> str:
        self._records[table.id] = dump_table(table)
        return table.id

    def delete(self, table_id: str) -> None:
        self._records.pop(table_id, None)

    def raw(self, table_id: str) -> str | None:
        return self._records.get(table_id)


class JsonTableStore:
    SUFFIX = ".json"

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, table_id: str) -> str:
        if not table_id or os.sep in table_id or table_id.startswith("."):
            raise ValueError(f"Invalid table id '{table_id}'")
        return os.path.join(self.directory, table_id + self.SUFFIX)

    def list(self) -> list[Table]:
        if not os.path.isdir(self.directory):
            return []
        tables = []
        for name in sorted(os.listdir(self.directory)):
            if name.startswith(".") or not name.endswith(self.SUFFIX):
                continue
            path = os.path.join(self.directory, name)
            try:
                with open(path, "r", encoding="utf-8") as f:
                    tables.append(load_table(f.read()))
            except (OSError, ValueError, KeyError, TypeError) as exc:
                logger.warning("Skipping unreadable table record %s: %s", path, exc)
        return tables

    def get(self, table_id: str) -> Table | None:
        path = self._path(table_id)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return load_table(f.read())

    def put(self, table: Table) -> str:
        path = self._path(table.id)
        os.makedirs(self.directory, exist_ok=True)
        payload = dump_table(table)
        fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=self.SUFFIX, dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug("Wrote table %s to %s", table.id, path)
        return table.id

    def delete(self, table_id: str) -> None:
        path = self._path(table_id)
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        logger.debug("Removed table record %s", path)
