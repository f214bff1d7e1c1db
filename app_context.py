import datetime as dt
from dataclasses import dataclass
from typing import Any, Callable

from id_generator import new_id
from table_editor import TableMutationEngine
from table_ordering import OrderingEngine
from table_registry import DEFAULT_COLUMN_NAME, TableRegistry
from table_store import JsonTableStore


@dataclass
class AppContext:
    """Composition root: one store, one registry, and the engines bound to it."""

    store: Any
    registry: TableRegistry
    editor: TableMutationEngine
    ordering: OrderingEngine


def build_context(
    store,
    default_column_name: str = DEFAULT_COLUMN_NAME,
    id_factory: Callable[[], str] = new_id,
    today: Callable[[], dt.date] = dt.date.today,
) -> AppContext:
    registry = TableRegistry(store, default_column_name=default_column_name, id_factory=id_factory)
    return AppContext(
        store=store,
        registry=registry,
        editor=TableMutationEngine(registry, today=today),
        ordering=OrderingEngine(registry, today=today),
    )


def open_context(cfg: dict) -> AppContext:
    ctx = build_context(
        JsonTableStore(cfg["DATA_DIR"]),
        default_column_name=cfg.get("DEFAULT_COLUMN_NAME", DEFAULT_COLUMN_NAME),
    )
    ctx.registry.load_all()
    return ctx
