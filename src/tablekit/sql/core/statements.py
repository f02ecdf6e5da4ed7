"""
Statement data structures.

A statement is a plain, immutable description of one SQL command. Mappings
handed to a statement are copied into read-only views. Dialects
turn statements into :class:`CompiledStatement` objects; nothing here knows
about quoting or placeholder syntax.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Literal, Mapping, Optional, Tuple, Union

import sqlalchemy as sa


def _read_only(instance: Any, name: str) -> None:
    object.__setattr__(instance, name, MappingProxyType(dict(getattr(instance, name))))


@dataclass(frozen=True)
class Condition:
    """``<column> <operator> <value>``, optionally negated."""

    column: str
    operator: str
    value: Any
    negate: bool = False


@dataclass(frozen=True)
class RawCondition:
    """Caller-supplied SQL fragment; ``?`` marks each binding in order."""

    sql: str
    bindings: Tuple[Any, ...] = ()


WhereClause = Union[Condition, RawCondition]


@dataclass(frozen=True)
class Join:
    table: str
    left: str
    right: str
    kind: str = "INNER"


@dataclass(frozen=True)
class OrderBy:
    column: str
    direction: str = "asc"


@dataclass(frozen=True)
class OnConflictDirective:
    """
    Conflict target and update set for one INSERT.

    Attributes:
        columns: Conflict target columns, in caller order
        updates: Column -> value assignments applied when the conflict fires
        action: "update" (DO UPDATE SET) or "nothing" (DO NOTHING)
    """

    columns: Tuple[str, ...]
    updates: Mapping[str, Any] = field(default_factory=dict)
    action: Literal["update", "nothing"] = "update"

    def __post_init__(self):
        _read_only(self, "updates")


@dataclass(frozen=True)
class SelectStatement:
    table: str
    schema: Optional[str] = None
    columns: Tuple[str, ...] = ("*",)
    where: Tuple[WhereClause, ...] = ()
    joins: Tuple[Join, ...] = ()
    order_by: Tuple[OrderBy, ...] = ()
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass(frozen=True)
class PlainInsert:
    table: str
    values: Mapping[str, Any]
    schema: Optional[str] = None
    returning: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        _read_only(self, "values")


@dataclass(frozen=True)
class UpsertInsert:
    table: str
    values: Mapping[str, Any]
    on_conflict: OnConflictDirective
    schema: Optional[str] = None
    returning: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        _read_only(self, "values")


InsertStatement = Union[PlainInsert, UpsertInsert]


@dataclass(frozen=True)
class UpdateStatement:
    table: str
    values: Mapping[str, Any]
    schema: Optional[str] = None
    where: Tuple[WhereClause, ...] = ()
    limit: Optional[int] = None
    returning: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        _read_only(self, "values")


Statement = Union[SelectStatement, PlainInsert, UpsertInsert, UpdateStatement]


@dataclass(frozen=True)
class CompiledStatement:
    """
    Rendered SQL with its bindings.

    Attributes:
        sql: SQL text using named placeholders (``:p_0``)
        params: Placeholder name -> value, in placeholder order
        returning: Columns requested back, or None when no row is expected
    """

    sql: str
    params: Mapping[str, Any] = field(default_factory=dict)
    returning: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        _read_only(self, "params")

    @property
    def bindings(self) -> List[Any]:
        """Bound values in the order their placeholders appear."""
        return list(self.params.values())

    def to_clause(self) -> sa.TextClause:
        """
        Build an executable SQLAlchemy clause.

        Values are attached through ``bindparam`` so SQLAlchemy infers a type
        per value (datetime, Decimal, ...) and applies the driver conversions.
        """
        clause = sa.text(self.sql)
        if self.params:
            clause = clause.bindparams(
                *(sa.bindparam(name, value) for name, value in self.params.items())
            )
        return clause

    def __str__(self) -> str:
        return self.sql
