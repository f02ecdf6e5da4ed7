"""
SQL parameter binding utilities.

Placeholders are always indexed names (``:p_0``, ``:p_1`` ...) rather than
column names, so that any column name, including ones with spaces or non-ASCII
characters, can be bound through SQLAlchemy ``text()``.
"""

from typing import Any, Dict, List


class ParameterCollector:
    """
    Collects bound values for a single statement, in placeholder order.

    One collector is created per compile call and discarded with it.

    Example:
        >>> params = ParameterCollector()
        >>> params.add("a@b.com")
        ':p_0'
        >>> params.add(1)
        ':p_1'
        >>> params.values
        {'p_0': 'a@b.com', 'p_1': 1}
    """

    def __init__(self, prefix: str = "p"):
        self.prefix = prefix
        self.values: Dict[str, Any] = {}

    def add(self, value: Any) -> str:
        """Bind ``value`` and return its placeholder."""
        name = f"{self.prefix}_{len(self.values)}"
        self.values[name] = value
        return f":{name}"

    def add_many(self, values: List[Any]) -> List[str]:
        return [self.add(v) for v in values]

    def __len__(self) -> int:
        return len(self.values)
