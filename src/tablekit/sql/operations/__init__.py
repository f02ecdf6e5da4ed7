"""Statement builders."""

from .insert import InsertBuilder, make_on_conflict
from .query import Query

__all__ = ["InsertBuilder", "Query", "make_on_conflict"]
