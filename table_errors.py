class TableError(Exception):
    """Base class for conditions reported by the table engines."""


class NotFoundError(TableError):
    pass


class DuplicateNameError(TableError):
    pass


class NoActiveTableError(TableError):
    def __init__(self, message: str = "No active table"):
        super().__init__(message)


class InvalidOrderError(TableError):
    pass


class InvalidColumnTypeError(TableError):
    pass


class PersistenceError(TableError):
    """The durable store rejected a read or write; in-memory state is unchanged."""
