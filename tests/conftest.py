"""Pytest configuration: environment isolation, store doubles and database fixtures.

.tablekit_env is loaded FIRST with override=True so tests never pick up a
developer's real TABLEKIT_* configuration.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

_TEST_ENV_FILE = Path(__file__).parent.parent / ".tablekit_env"
if _TEST_ENV_FILE.exists():
    load_dotenv(_TEST_ENV_FILE, override=True)

import os
import re
from datetime import datetime, timedelta
from typing import Any, Dict, Generator, List, Optional

import pytest
import sqlalchemy as sa
from sqlalchemy.engine.url import make_url

from tablekit.config import get_settings
from tablekit.sql.core.statements import CompiledStatement
from tablekit.sql.dialects import PostgreSQLDialect
from tablekit.store import Store, disconnect

POSTGRES_ENV = "TABLEKIT_TEST_DATABASE_URI"

USERS_DDL = {
    "sqlite": """
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            name TEXT,
            n INTEGER,
            created_at TEXT,
            updated_at TEXT
        )
    """,
    "postgresql": """
        CREATE TABLE users (
            id SERIAL PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            name TEXT,
            n INTEGER,
            created_at TIMESTAMPTZ,
            updated_at TIMESTAMPTZ
        )
    """,
}


class RecordingStore(Store):
    """Store double that records compiled statements instead of running them."""

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        dialect: Optional[PostgreSQLDialect] = None,
    ):
        self.engine = None
        self.dialect = dialect or PostgreSQLDialect()
        self.rows = rows if rows is not None else []
        self.statements: List[CompiledStatement] = []

    @property
    def called(self) -> bool:
        return bool(self.statements)

    @property
    def last(self) -> CompiledStatement:
        return self.statements[-1]

    def execute(self, statement: CompiledStatement) -> List[Dict[str, Any]]:
        self.statements.append(statement)
        if not statement.returning and not statement.sql.startswith("SELECT"):
            return []
        return [dict(row) for row in self.rows]

    def dispose(self) -> None:
        pass


class FakeClock:
    """Deterministic replacement for the table clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int = 60) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture(autouse=True)
def _isolated_store_state() -> Generator[None, None, None]:
    """Reset the process-wide store and cached settings around every test."""
    get_settings.cache_clear()
    disconnect()
    yield
    disconnect()
    get_settings.cache_clear()


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def _create_users_table(store: Store) -> None:
    with store.engine.begin() as conn:
        conn.execute(sa.text(USERS_DDL[store.dialect.name]))


@pytest.fixture
def sqlite_store() -> Generator[Store, None, None]:
    """In-memory SQLite store with a ``users`` table."""
    store = Store.from_url("sqlite://")
    _create_users_table(store)
    yield store
    store.dispose()


def _validate_test_database(dsn: str) -> None:
    """Refuse to create tables in a database whose name does not look disposable."""
    db_name = make_url(dsn).database or ""
    if not re.search(r"(test|tmp|dev|local|sandbox)", db_name, re.IGNORECASE):
        raise RuntimeError(
            f"Refusing to run tests against non-test database: {db_name!r}. "
            "Test databases must contain one of: test, tmp, dev, local, sandbox."
        )


@pytest.fixture
def postgres_store() -> Generator[Store, None, None]:
    """PostgreSQL store with a fresh ``users`` table; skipped without a test DSN."""
    dsn = os.environ.get(POSTGRES_ENV)
    if not dsn or not dsn.startswith("postgres"):
        pytest.skip(f"{POSTGRES_ENV} must point at a PostgreSQL test database")
    _validate_test_database(dsn)

    store = Store.from_url(dsn)
    with store.engine.begin() as conn:
        conn.execute(sa.text("DROP TABLE IF EXISTS users"))
    _create_users_table(store)
    try:
        yield store
    finally:
        with store.engine.begin() as conn:
            conn.execute(sa.text("DROP TABLE IF EXISTS users"))
        store.dispose()
