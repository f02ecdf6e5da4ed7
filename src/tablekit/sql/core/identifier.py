"""
SQL identifier handling utilities.

Provides functions for quoting and qualifying SQL identifiers (table names,
column names, ``table.column`` references) so that arbitrary names, including
reserved words and non-ASCII names, are safe to embed in generated SQL.
"""

from typing import Iterable, Optional

STAR = "*"


def quote_identifier(name: str, dialect: str = "postgresql") -> str:
    """
    Quote a single SQL identifier (table or column name).

    Args:
        name: The identifier to quote
        dialect: Database dialect ("postgresql", "sqlite")

    Returns:
        Properly quoted identifier. ``*`` is returned unquoted.

    Examples:
        >>> quote_identifier("email")
        '"email"'
        >>> quote_identifier('odd"name')
        '"odd""name"'
        >>> quote_identifier("*")
        '*'
    """
    if name == STAR:
        return name
    # PostgreSQL and SQLite both use double quotes
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def quote_qualified(name: str, dialect: str = "postgresql") -> str:
    """
    Quote a possibly dotted reference segment by segment.

    Examples:
        >>> quote_qualified("courses.id")
        '"courses"."id"'
        >>> quote_qualified("courses.*")
        '"courses".*'
    """
    return ".".join(quote_identifier(part, dialect) for part in name.split("."))


def qualify_table(
    table: str, schema: Optional[str] = None, dialect: str = "postgresql"
) -> str:
    """
    Create a fully qualified table name with optional schema prefix.

    Args:
        table: Table name
        schema: Optional schema name
        dialect: Database dialect

    Returns:
        Qualified table name

    Examples:
        >>> qualify_table("users")
        '"users"'
        >>> qualify_table("users", schema="public")
        'public."users"'
    """
    quoted_table = quote_identifier(table, dialect)
    if schema:
        return f"{schema}.{quoted_table}"
    return quoted_table


def columnize(columns: Iterable[str], dialect: str = "postgresql") -> str:
    """
    Render a comma-separated column list.

    Examples:
        >>> columnize(["id", "email"])
        '"id", "email"'
        >>> columnize(["*"])
        '*'
    """
    return ", ".join(quote_qualified(col, dialect) for col in columns)
