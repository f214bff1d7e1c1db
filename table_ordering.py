import logging
from collections import Counter
from dataclasses import replace

from table_editor import ActiveTableCommands
from table_errors import InvalidOrderError, NotFoundError

logger = logging.getLogger(__name__)

ORDER_FIELDS = {"column": "column_order", "row": "row_order"}


def move_item(order, old_index: int, new_index: int) -> list:
    """Remove the item at old_index and insert it at new_index."""
    items = list(order)
    if not items:
        return items
    item = items.pop(old_index)
    items.insert(new_index, item)
    return items


class OrderingEngine(ActiveTableCommands):
    def reorder(self, kind: str, ordered_ids) -> bool:
        table = self._begin()
        if table is None:
            return False
        field = ORDER_FIELDS.get(kind)
        if field is None:
            self._fail(InvalidOrderError(f"Unknown order kind '{kind}'"))
            return False

        current = getattr(table, field)
        proposed = tuple(ordered_ids)
        if Counter(proposed) != Counter(current) or len(set(proposed)) != len(proposed):
            self._fail(
                InvalidOrderError(f"New {kind} order is not a permutation of the current one")
            )
            return False

        self._commit(replace(table, **{field: proposed}))
        logger.debug("Reordered %ss of table %s", kind, table.id)
        return True

    def move(self, kind: str, active_id: str, over_id: str) -> bool:
        """Move active_id to the slot currently held by over_id."""
        table = self._begin()
        if table is None:
            return False
        field = ORDER_FIELDS.get(kind)
        if field is None:
            self._fail(InvalidOrderError(f"Unknown order kind '{kind}'"))
            return False
        if active_id == over_id:
            return False
        current = list(getattr(table, field))
        missing = [i for i in (active_id, over_id) if i not in current]
        if missing:
            self._fail(NotFoundError(f"No {kind} with id '{missing[0]}'"))
            return False
        return self.reorder(
            kind, move_item(current, current.index(active_id), current.index(over_id))
        )
