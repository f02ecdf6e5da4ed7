"""tablekit: typed table access and upsert-aware SQL rendering."""

from tablekit.exceptions import (
    InvalidArgumentError,
    QueryMisuseError,
    StoreNotConnectedError,
    TablekitError,
    UnsupportedDialectError,
)
from tablekit.sql import CompiledStatement, Query
from tablekit.store import Store, connect, connected, disconnect, get_store
from tablekit.table import Table, TableConfig

__version__ = "0.1.0"

__all__ = [
    "CompiledStatement",
    "InvalidArgumentError",
    "Query",
    "QueryMisuseError",
    "Store",
    "StoreNotConnectedError",
    "Table",
    "TableConfig",
    "TablekitError",
    "UnsupportedDialectError",
    "connect",
    "connected",
    "disconnect",
    "get_store",
]
