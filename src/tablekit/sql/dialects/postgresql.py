"""
PostgreSQL-specific SQL dialect implementation.

Renders statement objects into PostgreSQL SQL: SELECT, UPDATE, and INSERT
with optional ``ON CONFLICT`` handling and ``RETURNING``.

The INSERT path is layered. ``build_insert`` is the base algorithm and is
never altered; ``compile_insert`` calls it for the common prefix and then
appends the conflict and RETURNING clauses for the statement variant it was
given. A plain insert therefore renders exactly what ``build_insert``
produces.
"""

import re
from typing import Iterable, List, Optional, Sequence

from ...exceptions import InvalidArgumentError, QueryMisuseError
from ..core.identifier import columnize, qualify_table, quote_identifier, quote_qualified
from ..core.parameters import ParameterCollector
from ..core.statements import (
    CompiledStatement,
    Condition,
    InsertStatement,
    Join,
    OrderBy,
    PlainInsert,
    RawCondition,
    SelectStatement,
    Statement,
    UpdateStatement,
    UpsertInsert,
    WhereClause,
)

# Unescaped "?" in raw fragments marks a binding
_RAW_BINDING = re.compile(r"(?<!\\)\?")


class PostgreSQLDialect:
    """PostgreSQL SQL dialect implementation."""

    name = "postgresql"

    operators = {
        "=": "=",
        "!=": "!=",
        "<>": "<>",
        "<": "<",
        "<=": "<=",
        ">": ">",
        ">=": ">=",
        "like": "LIKE",
        "ilike": "ILIKE",
        "in": "IN",
        "not in": "NOT IN",
        "is": "IS",
        "is not": "IS NOT",
    }

    order_directions = ("asc", "desc")

    def quote(self, identifier: str) -> str:
        """Quote an identifier using PostgreSQL syntax (double quotes)."""
        return quote_identifier(identifier, dialect=self.name)

    def qualify(self, table: str, schema: Optional[str] = None) -> str:
        """Create a fully qualified table reference."""
        return qualify_table(table, schema, dialect=self.name)

    def columnize(self, columns: Iterable[str]) -> str:
        return columnize(columns, dialect=self.name)

    # ------------------------------------------------------------------
    # INSERT
    # ------------------------------------------------------------------

    def build_insert(
        self,
        table: str,
        columns: List[str],
        placeholders: List[str],
        schema: Optional[str] = None,
    ) -> str:
        """
        Build a simple INSERT statement.

        Args:
            table: Table name
            columns: List of column names
            placeholders: List of parameter placeholders
            schema: Optional schema name

        Returns:
            INSERT SQL statement
        """
        qualified_table = self.qualify(table, schema)
        if not columns:
            return f"INSERT INTO {qualified_table} DEFAULT VALUES"
        quoted_cols = ", ".join(self.quote(c) for c in columns)
        values = ", ".join(placeholders)
        return f"INSERT INTO {qualified_table} ({quoted_cols}) VALUES ({values})"

    def build_insert_on_conflict_do_nothing(
        self,
        table: str,
        columns: List[str],
        placeholders: List[str],
        conflict_columns: Sequence[str],
        schema: Optional[str] = None,
    ) -> str:
        """
        Build INSERT ... ON CONFLICT DO NOTHING statement.

        Args:
            table: Table name
            columns: List of column names
            placeholders: List of parameter placeholders
            conflict_columns: Columns for conflict detection (usually a unique key)
            schema: Optional schema name

        Returns:
            INSERT ... ON CONFLICT DO NOTHING SQL statement
        """
        base_insert = self.build_insert(table, columns, placeholders, schema)
        return f"{base_insert} ON CONFLICT ({self.columnize(conflict_columns)}) DO NOTHING"

    def compile_insert(self, statement: InsertStatement) -> CompiledStatement:
        """
        Compile a plain insert or an upsert.

        Assignments of an upsert are rendered in sorted column-name order, and
        their values are bound in that same order after the inserted values,
        so one logical upsert always produces the same SQL text.

        Args:
            statement: PlainInsert or UpsertInsert

        Returns:
            CompiledStatement with SQL, ordered params and the RETURNING columns
        """
        if not isinstance(statement, (PlainInsert, UpsertInsert)):
            raise QueryMisuseError(
                f"compile_insert() expects an insert statement, got {type(statement).__name__}"
            )

        params = ParameterCollector()
        columns = list(statement.values.keys())
        placeholders = params.add_many([statement.values[c] for c in columns])

        if isinstance(statement, UpsertInsert):
            directive = statement.on_conflict
            if directive.action == "nothing":
                sql = self.build_insert_on_conflict_do_nothing(
                    statement.table,
                    columns,
                    placeholders,
                    directive.columns,
                    statement.schema,
                )
            else:
                sql = self.build_insert(
                    statement.table, columns, placeholders, statement.schema
                )
                assignments = ", ".join(
                    f"{self.quote(col)} = {params.add(directive.updates[col])}"
                    for col in sorted(directive.updates)
                )
                sql += (
                    f" ON CONFLICT ({self.columnize(directive.columns)})"
                    f" DO UPDATE SET {assignments}"
                )
        else:
            sql = self.build_insert(
                statement.table, columns, placeholders, statement.schema
            )

        sql += self._returning_clause(statement.returning)
        return CompiledStatement(sql, params.values, statement.returning)

    # ------------------------------------------------------------------
    # SELECT / UPDATE
    # ------------------------------------------------------------------

    def compile_select(self, statement: SelectStatement) -> CompiledStatement:
        params = ParameterCollector()
        parts = [
            f"SELECT {self.columnize(statement.columns)}",
            f"FROM {self.qualify(statement.table, statement.schema)}",
        ]
        parts.extend(self._join_clause(join) for join in statement.joins)

        where = self._where_clause(statement.where, params)
        if where:
            parts.append(where)
        if statement.order_by:
            parts.append(
                "ORDER BY " + ", ".join(self._order_clause(o) for o in statement.order_by)
            )
        if statement.limit is not None:
            parts.append(f"LIMIT {params.add(statement.limit)}")
        if statement.offset is not None:
            parts.append(f"OFFSET {params.add(statement.offset)}")

        return CompiledStatement(" ".join(parts), params.values)

    def compile_update(self, statement: UpdateStatement) -> CompiledStatement:
        """
        Compile an UPDATE.

        ``statement.limit`` is not rendered: PostgreSQL has no UPDATE ... LIMIT.
        Callers narrow the row set through the WHERE clause instead.
        """
        if not statement.values:
            raise InvalidArgumentError("Update requires at least one column to set")

        params = ParameterCollector()
        assignments = ", ".join(
            f"{self.quote(col)} = {params.add(value)}"
            for col, value in statement.values.items()
        )
        sql = f"UPDATE {self.qualify(statement.table, statement.schema)} SET {assignments}"

        where = self._where_clause(statement.where, params)
        if where:
            sql += f" {where}"
        sql += self._returning_clause(statement.returning)
        return CompiledStatement(sql, params.values, statement.returning)

    def compile(self, statement: Statement) -> CompiledStatement:
        """Compile any supported statement."""
        if isinstance(statement, (PlainInsert, UpsertInsert)):
            return self.compile_insert(statement)
        if isinstance(statement, SelectStatement):
            return self.compile_select(statement)
        if isinstance(statement, UpdateStatement):
            return self.compile_update(statement)
        raise QueryMisuseError(f"Cannot compile {type(statement).__name__}")

    # ------------------------------------------------------------------
    # Clause helpers
    # ------------------------------------------------------------------

    def _returning_clause(self, returning: Optional[Sequence[str]]) -> str:
        if not returning:
            return ""
        return f" RETURNING {self.columnize(returning)}"

    def _join_clause(self, join: Join) -> str:
        left = quote_qualified(join.left, self.name)
        right = quote_qualified(join.right, self.name)
        table = quote_qualified(join.table, self.name)
        return f"{join.kind} JOIN {table} ON {left} = {right}"

    def _order_clause(self, order: OrderBy) -> str:
        direction = order.direction.lower()
        if direction not in self.order_directions:
            raise InvalidArgumentError(f"Unknown order direction: {order.direction!r}")
        return f"{quote_qualified(order.column, self.name)} {direction.upper()}"

    def _where_clause(
        self, clauses: Sequence[WhereClause], params: ParameterCollector
    ) -> str:
        if not clauses:
            return ""
        return "WHERE " + " AND ".join(self._condition(c, params) for c in clauses)

    def _condition(self, clause: WhereClause, params: ParameterCollector) -> str:
        if isinstance(clause, RawCondition):
            return self._raw_condition(clause, params)

        expr = self._comparison(clause, params)
        if clause.negate:
            return f"NOT ({expr})"
        return expr

    def _comparison(self, clause: Condition, params: ParameterCollector) -> str:
        operator = clause.operator.lower()
        if operator not in self.operators:
            raise InvalidArgumentError(f"The operator {clause.operator!r} is not permitted")

        column = quote_qualified(clause.column, self.name)
        value = clause.value

        if value is None:
            if operator in ("=", "is"):
                return f"{column} IS NULL"
            if operator in ("!=", "<>", "is not"):
                return f"{column} IS NOT NULL"

        if operator in ("in", "not in"):
            if isinstance(value, (str, bytes)):
                raise InvalidArgumentError(
                    f"Operator {clause.operator!r} expects a sequence of values"
                )
            values = list(value)
            if not values:
                return "1 = 0" if operator == "in" else "1 = 1"
            return f"{column} {self.operators[operator]} ({', '.join(params.add_many(values))})"

        return f"{column} {self.operators[operator]} {params.add(value)}"

    def _raw_condition(self, clause: RawCondition, params: ParameterCollector) -> str:
        segments = _RAW_BINDING.split(clause.sql)
        if len(segments) - 1 != len(clause.bindings):
            raise InvalidArgumentError(
                f"Raw condition has {len(segments) - 1} placeholders but "
                f"{len(clause.bindings)} bindings"
            )

        # Caller colons are literal; text() would read ":name" as a bind
        parts = [_escape_raw(segments[0])]
        for value, segment in zip(clause.bindings, segments[1:]):
            parts.append(params.add(value))
            parts.append(_escape_raw(segment))
        return f"({''.join(parts)})"


def _escape_raw(segment: str) -> str:
    return segment.replace("\\?", "?").replace(":", "\\:")
