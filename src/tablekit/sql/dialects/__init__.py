"""SQL dialect registry."""

from typing import Dict, Type

from ...exceptions import UnsupportedDialectError
from .postgresql import PostgreSQLDialect
from .sqlite import SQLiteDialect

DIALECTS: Dict[str, Type[PostgreSQLDialect]] = {
    "postgresql": PostgreSQLDialect,
    "postgres": PostgreSQLDialect,
    "pg": PostgreSQLDialect,
    "sqlite": SQLiteDialect,
}


def get_dialect(name: str) -> PostgreSQLDialect:
    """
    Return a dialect instance by name.

    Args:
        name: Dialect identifier, e.g. "postgresql" or "sqlite"

    Raises:
        UnsupportedDialectError: If no dialect is registered under ``name``
    """
    try:
        return DIALECTS[name.lower()]()
    except KeyError:
        raise UnsupportedDialectError(
            f"Unsupported dialect {name!r}; expected one of {sorted(DIALECTS)}"
        ) from None


__all__ = ["DIALECTS", "PostgreSQLDialect", "SQLiteDialect", "get_dialect"]
