"""Typed CRUD facade over one table.

Usage:
    >>> from pydantic import BaseModel
    >>> class Course(BaseModel):
    ...     id: int
    ...     name: str
    >>> courses = Table(TableConfig("courses"), model=Course)
    >>> courses.insert({"name": "sql-101"})
    Course(id=1, name='sql-101')
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, Mapping, Optional, Sequence, TypeVar, Union

from tablekit.exceptions import InvalidArgumentError
from tablekit.sql.operations.query import Query
from tablekit.store.connection import Store, get_store

T = TypeVar("T")
ID = Union[int, str]
Record = Mapping[str, Any]
StoreProvider = Callable[[], Store]


@dataclass(frozen=True)
class TableConfig:
    """
    Static description of a table.

    Attributes:
        table_name: Table name
        primary_key: Primary key column
        create_timestamp: Column stamped with "now" on insert
        update_timestamp: Column stamped with "now" on insert and update
        schema: Optional schema the table lives in
    """

    table_name: str
    primary_key: str = "id"
    create_timestamp: Optional[str] = None
    update_timestamp: Optional[str] = None
    schema: Optional[str] = None


def _row_factory(model: Any) -> Optional[Callable[[Dict[str, Any]], Any]]:
    if model is None or model is dict:
        return None
    if hasattr(model, "model_validate"):
        return model.model_validate
    if dataclasses.is_dataclass(model):
        names = {f.name for f in dataclasses.fields(model)}
        return lambda row: model(**{k: v for k, v in row.items() if k in names})
    return lambda row: model(**row)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Table(Generic[T]):
    """
    CRUD operations for one entity type backed by one table.

    Args:
        config: Table description
        model: Row type. A pydantic model, a dataclass, or any callable taking
            columns as keyword arguments. Rows are plain dicts when omitted.
        store: A Store, or a zero-argument callable returning one. Defaults to
            the process-wide store, looked up on every call.
        clock: Returns the value used for timestamp columns
    """

    def __init__(
        self,
        config: TableConfig,
        model: Any = None,
        store: Union[Store, StoreProvider, None] = None,
        clock: Optional[Callable[[], Any]] = None,
    ):
        self.config = config
        self.model = model
        self._make_row = _row_factory(model)
        self._store = store if store is not None else get_store
        self._clock = clock or _utcnow

    @property
    def store(self) -> Store:
        if isinstance(self._store, Store):
            return self._store
        return self._store()

    @property
    def query(self) -> Query[T]:
        """A fresh query on this table."""
        return Query(
            self.config.table_name,
            self.store,
            schema=self.config.schema,
            row_factory=self._make_row,
        )

    def where(self, obj: Record) -> Query[T]:
        return self.query.where(obj)

    def where_not(self, obj: Record) -> Query[T]:
        return self.query.where_not(obj)

    def find(self, id: ID) -> Optional[T]:
        """Return the row whose primary key is ``id``, or None."""
        return self.query.where({self.config.primary_key: id}).first()

    def insert(self, obj: Record) -> T:
        """Insert ``obj`` and return the stored row."""
        rows = self.query.insert(self._stamp_create(obj)).returning("*").all()
        return rows[0]

    def insert_void(self, obj: Record) -> None:
        self.query.insert(self._stamp_create(obj)).execute()

    def upsert(self, obj: Record, conflict_columns: Sequence[str]) -> T:
        """
        Insert ``obj``, or update the row it conflicts with on ``conflict_columns``.

        The update set is ``obj`` itself plus the update timestamp; the create
        timestamp of an existing row is left alone.
        """
        rows = (
            self.query.insert(self._stamp_create(obj))
            .on_conflict(conflict_columns, self._stamp_update(obj))
            .returning("*")
            .all()
        )
        return rows[0]

    def update(self, key: Optional[ID], obj: Record) -> Optional[T]:
        """
        Update the row whose primary key is ``key``.

        Returns:
            The updated row, or None when no row has that key

        Raises:
            InvalidArgumentError: If ``key`` is None
        """
        rows = self._update(key, obj).returning("*").all()
        return rows[0] if rows else None

    def update_void(self, key: Optional[ID], obj: Record) -> None:
        self._update(key, obj).execute()

    def _update(self, key: Optional[ID], obj: Record) -> Query[T]:
        if key is None:
            raise InvalidArgumentError("Key cannot be None for update")
        return (
            self.query.where({self.config.primary_key: key})
            .limit(1)
            .update(self._stamp_update(obj))
        )

    def _stamp_create(self, obj: Record) -> Dict[str, Any]:
        create_col = self.config.create_timestamp
        update_col = self.config.update_timestamp
        if create_col is None and update_col is None:
            return dict(obj)

        now = self._clock()
        timestamps: Dict[str, Any] = {}
        if create_col:
            timestamps[create_col] = now
        if update_col:
            timestamps[update_col] = now
        return {**timestamps, **obj}

    def _stamp_update(self, obj: Record) -> Dict[str, Any]:
        update_col = self.config.update_timestamp
        if update_col is None:
            return dict(obj)
        return {update_col: self._clock(), **obj}

    def __repr__(self) -> str:
        return f"<Table {self.config.table_name!r}>"
