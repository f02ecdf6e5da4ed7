"""
INSERT statement builders.

Turns payloads and conflict settings into :class:`PlainInsert` or
:class:`UpsertInsert` statements. Rendering is left to the dialect.
"""

from typing import Any, Literal, Mapping, Optional, Sequence, Tuple

from ...exceptions import InvalidArgumentError
from ..core.statements import InsertStatement, OnConflictDirective, PlainInsert, UpsertInsert


def make_on_conflict(
    columns: Sequence[str],
    updates: Optional[Mapping[str, Any]] = None,
    action: Literal["update", "nothing"] = "update",
) -> OnConflictDirective:
    """
    Validate and build an ON CONFLICT directive.

    Args:
        columns: Conflict target columns (order is kept)
        updates: Column -> value to assign when the conflict fires
        action: "update" or "nothing"

    Raises:
        InvalidArgumentError: If the target is empty, or an update directive
            has nothing to assign
    """
    if isinstance(columns, str):
        columns = [columns]
    if not columns:
        raise InvalidArgumentError("ON CONFLICT requires at least one target column")
    if action == "update" and not updates:
        raise InvalidArgumentError("ON CONFLICT DO UPDATE requires at least one column to set")
    return OnConflictDirective(
        columns=tuple(columns), updates=dict(updates or {}), action=action
    )


class InsertBuilder:
    """
    Builder for INSERT statements against one table.

    Example:
        >>> builder = InsertBuilder("users")
        >>> directive = make_on_conflict(["email"], {"n": 1})
        >>> stmt = builder.from_directive({"email": "a@b.com", "n": 1}, directive)
        >>> stmt.on_conflict.columns
        ('email',)
    """

    def __init__(self, table: str, schema: Optional[str] = None):
        self.table = table
        self.schema = schema

    def insert(
        self,
        values: Mapping[str, Any],
        returning: Optional[Tuple[str, ...]] = None,
    ) -> PlainInsert:
        """Build a plain INSERT."""
        return PlainInsert(
            table=self.table,
            values=dict(values),
            schema=self.schema,
            returning=returning,
        )

    def from_directive(
        self,
        values: Mapping[str, Any],
        directive: Optional[OnConflictDirective],
        returning: Optional[Tuple[str, ...]] = None,
    ) -> InsertStatement:
        """Build whichever insert variant ``directive`` calls for."""
        if directive is None:
            return self.insert(values, returning)
        return UpsertInsert(
            table=self.table,
            values=dict(values),
            on_conflict=directive,
            schema=self.schema,
            returning=returning,
        )
