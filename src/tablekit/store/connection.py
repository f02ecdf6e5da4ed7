"""Store handle: SQLAlchemy engine plus the dialect that renders statements for it.

A process usually holds one store, managed through :func:`connect`,
:func:`disconnect` and :func:`get_store`. Code that wants explicit ownership
can build a :class:`Store` directly and pass it to tables.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Union

import sqlalchemy as sa
from sqlalchemy.engine import Engine, make_url

from tablekit.config import Settings, get_settings, normalize_database_url
from tablekit.exceptions import StoreNotConnectedError
from tablekit.sql.core.statements import CompiledStatement
from tablekit.sql.dialects import PostgreSQLDialect, get_dialect
from tablekit.utils.logging import get_logger

logger = get_logger(__name__)


class Store:
    """Runs compiled statements against one SQLAlchemy engine."""

    def __init__(self, engine: Engine, dialect: Optional[PostgreSQLDialect] = None):
        self.engine = engine
        self.dialect = dialect or get_dialect(engine.dialect.name)

    @classmethod
    def from_url(
        cls, url: str, dialect: Optional[str] = None, echo: bool = False
    ) -> "Store":
        """
        Create a store from a SQLAlchemy URL.

        Args:
            url: Database URL, e.g. ``postgresql+psycopg2://user@host/db``;
                ``postgres://`` is accepted as an alias of ``postgresql://``
            dialect: Dialect name; defaults to the URL's backend name
            echo: Echo statements through SQLAlchemy's own logging
        """
        url = normalize_database_url(url)
        sql_dialect = get_dialect(dialect or make_url(url).get_backend_name())
        return cls(sa.create_engine(url, echo=echo), sql_dialect)

    def execute(self, statement: CompiledStatement) -> List[Dict[str, Any]]:
        """
        Execute one statement in its own transaction.

        Returns:
            Result rows as dicts; an empty list when the statement returns no rows
        """
        with self.engine.begin() as conn:
            result = conn.execute(statement.to_clause())
            rows = [dict(row) for row in result.mappings()] if result.returns_rows else []

        logger.debug(
            "query.executed",
            sql=statement.sql,
            param_count=len(statement.params),
            row_count=len(rows),
        )
        return rows

    def dispose(self) -> None:
        self.engine.dispose()

    def __repr__(self) -> str:
        return f"<Store {self.dialect.name} {self.engine.url.render_as_string(hide_password=True)}>"


# Module-level singleton; connect/disconnect hold the lock
_store: Optional[Store] = None
_store_lock = threading.Lock()


def connect(
    config: Union[Settings, str, None] = None,
    *,
    dialect: Optional[str] = None,
    echo: Optional[bool] = None,
) -> Store:
    """
    Connect the process-wide store.

    Calling this again while connected returns the existing store unchanged.

    Args:
        config: Settings, a database URL, or None to use get_settings()
        dialect: Dialect override
        echo: SQLAlchemy echo override
    """
    global _store
    with _store_lock:
        if _store is not None:
            logger.info("store.connect.skipped", reason="already_connected")
            return _store

        settings = config if isinstance(config, Settings) else get_settings()
        url = config if isinstance(config, str) else settings.database_url

        store = Store.from_url(
            url,
            dialect=dialect or settings.dialect,
            echo=settings.echo if echo is None else echo,
        )
        _store = store

    logger.info(
        "store.connected",
        dialect=store.dialect.name,
        url=store.engine.url.render_as_string(hide_password=True),
    )
    return store


def disconnect() -> None:
    """Dispose of the process-wide store; a no-op when not connected."""
    global _store
    with _store_lock:
        if _store is None:
            return
        store, _store = _store, None

    store.dispose()
    logger.info("store.disconnected", dialect=store.dialect.name)


def get_store() -> Store:
    """Get the process-wide store."""
    if _store is None:
        raise StoreNotConnectedError("Store not connected. Call connect() first.")
    return _store


def is_connected() -> bool:
    return _store is not None


@contextmanager
def connected(
    config: Union[Settings, str, None] = None,
    *,
    dialect: Optional[str] = None,
    echo: Optional[bool] = None,
) -> Iterator[Store]:
    """Connect for the duration of a ``with`` block and always disconnect after."""
    store = connect(config, dialect=dialect, echo=echo)
    try:
        yield store
    finally:
        disconnect()
