"""Core SQL utilities package."""

from .identifier import columnize, qualify_table, quote_identifier, quote_qualified
from .parameters import ParameterCollector
from .statements import (
    CompiledStatement,
    Condition,
    Join,
    OnConflictDirective,
    OrderBy,
    PlainInsert,
    RawCondition,
    SelectStatement,
    UpdateStatement,
    UpsertInsert,
)

__all__ = [
    "quote_identifier",
    "quote_qualified",
    "qualify_table",
    "columnize",
    "ParameterCollector",
    "CompiledStatement",
    "Condition",
    "Join",
    "OnConflictDirective",
    "OrderBy",
    "PlainInsert",
    "RawCondition",
    "SelectStatement",
    "UpdateStatement",
    "UpsertInsert",
]
