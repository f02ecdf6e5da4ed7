"""
Generic query builder.

A :class:`Query` describes exactly one statement against one table. Methods
mutate the query and return it, so calls chain::

    rows = (
        Query("courses", store)
        .where({"free": True})
        .order_by("name")
        .limit(10)
        .all()
    )

The query is turned into a statement object by :meth:`Query.to_statement`
and rendered by the store's dialect in :meth:`Query.to_sql`.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from ...exceptions import InvalidArgumentError, QueryMisuseError
from ..core.statements import (
    CompiledStatement,
    Condition,
    Join,
    OnConflictDirective,
    OrderBy,
    RawCondition,
    SelectStatement,
    Statement,
    UpdateStatement,
    WhereClause,
)
from ..dialects import PostgreSQLDialect
from .insert import InsertBuilder, make_on_conflict

if TYPE_CHECKING:
    from ...store.connection import Store

T = TypeVar("T")
Row = Dict[str, Any]
RowFactory = Callable[[Row], Any]

_NO_VALUE = object()


def _flatten_columns(columns: Sequence[Union[str, Sequence[str]]]) -> Tuple[str, ...]:
    flat: List[str] = []
    for column in columns:
        if isinstance(column, str):
            flat.append(column)
        else:
            flat.extend(column)
    return tuple(flat)


class Query(Generic[T]):
    """Chainable builder for one SELECT, INSERT or UPDATE statement."""

    def __init__(
        self,
        table: str,
        store: Optional["Store"] = None,
        *,
        schema: Optional[str] = None,
        dialect: Optional[PostgreSQLDialect] = None,
        row_factory: Optional[RowFactory] = None,
    ):
        self.table = table
        self.schema = schema
        self.store = store
        if dialect is None:
            dialect = store.dialect if store is not None else PostgreSQLDialect()
        self.dialect = dialect
        self.row_factory = row_factory

        self._method = "select"
        self._columns: Tuple[str, ...] = ("*",)
        self._where: List[WhereClause] = []
        self._joins: List[Join] = []
        self._order_by: List[OrderBy] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        self._values: Optional[Dict[str, Any]] = None
        self._returning: Optional[Tuple[str, ...]] = None
        self._on_conflict: Optional[OnConflictDirective] = None

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def where(
        self,
        column: Union[str, Mapping[str, Any]],
        operator: Any = _NO_VALUE,
        value: Any = _NO_VALUE,
    ) -> "Query[T]":
        """
        Add an AND-ed condition.

        Accepts ``where({"col": value, ...})``, ``where("col", value)`` or
        ``where("col", ">=", value)``.
        """
        self._where.extend(self._conditions(column, operator, value, negate=False))
        return self

    def where_not(
        self,
        column: Union[str, Mapping[str, Any]],
        operator: Any = _NO_VALUE,
        value: Any = _NO_VALUE,
    ) -> "Query[T]":
        """Like :meth:`where`, with each condition negated."""
        self._where.extend(self._conditions(column, operator, value, negate=True))
        return self

    def where_raw(self, sql: str, *bindings: Any) -> "Query[T]":
        """Add a raw SQL condition; each ``?`` in ``sql`` binds the next value."""
        self._where.append(RawCondition(sql, tuple(bindings)))
        return self

    def _conditions(
        self,
        column: Union[str, Mapping[str, Any]],
        operator: Any,
        value: Any,
        negate: bool,
    ) -> List[Condition]:
        if isinstance(column, Mapping):
            if operator is not _NO_VALUE:
                raise InvalidArgumentError("where() with a mapping takes no further arguments")
            return [Condition(k, "=", v, negate) for k, v in column.items()]
        if operator is _NO_VALUE:
            raise InvalidArgumentError(f"where() on {column!r} needs a value")
        if value is _NO_VALUE:
            return [Condition(column, "=", operator, negate)]
        if operator.lower() not in self.dialect.operators:
            raise InvalidArgumentError(f"The operator {operator!r} is not permitted")
        return [Condition(column, operator, value, negate)]

    # ------------------------------------------------------------------
    # Shaping
    # ------------------------------------------------------------------

    def select(self, *columns: Union[str, Sequence[str]]) -> "Query[Any]":
        self._columns = _flatten_columns(columns) or ("*",)
        return self

    def join(self, table: str, left: str, right: str) -> "Query[Any]":
        self._joins.append(Join(table, left, right))
        return self

    def order_by(self, column: str, direction: str = "asc") -> "Query[T]":
        if direction.lower() not in self.dialect.order_directions:
            raise InvalidArgumentError(f"Unknown order direction: {direction!r}")
        self._order_by.append(OrderBy(column, direction.lower()))
        return self

    def limit(self, value: int) -> "Query[T]":
        self._limit = self._non_negative("limit", value)
        return self

    def offset(self, value: int) -> "Query[T]":
        self._offset = self._non_negative("offset", value)
        return self

    @staticmethod
    def _non_negative(name: str, value: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidArgumentError(f"{name} must be a non-negative integer, got {value!r}")
        return value

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, values: Mapping[str, Any]) -> "Query[T]":
        self._method = "insert"
        self._values = dict(values)
        return self

    def update(self, values: Mapping[str, Any]) -> "Query[T]":
        if self._on_conflict is not None:
            raise QueryMisuseError("update() cannot follow an on_conflict() directive")
        self._method = "update"
        self._values = dict(values)
        return self

    def returning(self, *columns: Union[str, Sequence[str]]) -> "Query[T]":
        self._returning = _flatten_columns(columns) or None
        return self

    def on_conflict(self, columns: Sequence[str], updates: Mapping[str, Any]) -> "Query[T]":
        """
        Turn this insert into ``INSERT ... ON CONFLICT (columns) DO UPDATE SET ...``.

        Raises:
            QueryMisuseError: If this query is not an insert
        """
        self._require_insert("on_conflict")
        self._on_conflict = make_on_conflict(columns, updates)
        return self

    def on_conflict_ignore(self, columns: Sequence[str]) -> "Query[T]":
        """Turn this insert into ``INSERT ... ON CONFLICT (columns) DO NOTHING``."""
        self._require_insert("on_conflict_ignore")
        self._on_conflict = make_on_conflict(columns, action="nothing")
        return self

    def _require_insert(self, method: str) -> None:
        if self._method != "insert":
            raise QueryMisuseError(
                f"{method}() can only be attached to an insert, not a {self._method}"
            )

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def to_statement(self) -> Statement:
        """Build the statement object this query describes."""
        if self._method == "insert":
            builder = InsertBuilder(self.table, self.schema)
            return builder.from_directive(self._values or {}, self._on_conflict, self._returning)
        if self._method == "update":
            return UpdateStatement(
                table=self.table,
                values=self._values or {},
                schema=self.schema,
                where=tuple(self._where),
                limit=self._limit,
                returning=self._returning,
            )
        if self._method == "select":
            return SelectStatement(
                table=self.table,
                schema=self.schema,
                columns=self._columns,
                where=tuple(self._where),
                joins=tuple(self._joins),
                order_by=tuple(self._order_by),
                limit=self._limit,
                offset=self._offset,
            )
        raise QueryMisuseError(f"Unknown query method: {self._method!r}")

    def to_sql(self) -> CompiledStatement:
        return self.dialect.compile(self.to_statement())

    def __str__(self) -> str:
        return self.to_sql().sql

    def __repr__(self) -> str:
        return f"<Query {self._method} {self.table!r}>"

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self) -> List[Row]:
        """Run the statement and return raw rows (empty without RETURNING)."""
        if self.store is None:
            raise QueryMisuseError(f"Query on {self.table!r} has no store to run against")
        return self.store.execute(self.to_sql())

    def all(self) -> List[T]:
        return [self._make_row(row) for row in self.execute()]

    def first(self) -> Optional[T]:
        """Return the first matching row, or None."""
        if self._method != "select":
            raise QueryMisuseError(f"first() applies to selects, not a {self._method}")
        self._limit = 1
        rows = self.execute()
        return self._make_row(rows[0]) if rows else None

    def _make_row(self, row: Row) -> T:
        if self.row_factory is None:
            return row  # type: ignore[return-value]
        return self.row_factory(row)
