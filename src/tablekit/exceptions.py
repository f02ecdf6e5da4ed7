"""Error taxonomy for tablekit.

Store failures are not wrapped: SQLAlchemy exceptions raised while executing
a statement reach the caller unchanged.
"""


class TablekitError(Exception):
    """Base class for errors raised by tablekit itself."""


class InvalidArgumentError(TablekitError, ValueError):
    """Raised when a caller passes an argument the operation cannot use."""


class QueryMisuseError(TablekitError):
    """Raised when a query is built or compiled in a way that makes no sense.

    Example: attaching an ON CONFLICT directive to an UPDATE.
    """


class StoreNotConnectedError(TablekitError, RuntimeError):
    """Raised when the process-wide store is requested before connect()."""


class UnsupportedDialectError(TablekitError, ValueError):
    """Raised when a dialect name has no registered renderer."""
