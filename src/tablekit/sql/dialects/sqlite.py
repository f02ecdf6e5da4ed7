"""
SQLite SQL dialect.

SQLite (3.35+) accepts the same INSERT ... ON CONFLICT ... DO UPDATE and
RETURNING grammar as PostgreSQL, so only the operator table differs.
"""

from .postgresql import PostgreSQLDialect


class SQLiteDialect(PostgreSQLDialect):
    """SQLite SQL dialect implementation."""

    name = "sqlite"

    # No ILIKE; LIKE is already case-insensitive for ASCII
    operators = {**PostgreSQLDialect.operators, "ilike": "LIKE"}
