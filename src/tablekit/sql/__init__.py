"""
SQL module for statement building and rendering.

Statements are built as plain data (``tablekit.sql.core.statements``) and
rendered to SQL text plus ordered bindings by a dialect.
"""

from .core.identifier import qualify_table, quote_identifier
from .core.statements import CompiledStatement, OnConflictDirective
from .dialects import PostgreSQLDialect, SQLiteDialect, get_dialect
from .operations.insert import InsertBuilder
from .operations.query import Query

__all__ = [
    "quote_identifier",
    "qualify_table",
    "CompiledStatement",
    "OnConflictDirective",
    "PostgreSQLDialect",
    "SQLiteDialect",
    "get_dialect",
    "InsertBuilder",
    "Query",
]
