"""
Fluent, stateful queries over a RowStore.

**Conceptual**: where() and select() only record pending state. Nothing is
evaluated until a terminal call (get, first, pluck, value, count, frame),
which takes a snapshot of the rows, filters it, projects it, and then clears
the pending state. Pending state never survives a terminal call, even one
that raises.

**Matching**: where(column, value) keeps rows whose field loosely equals value
(see flatmodel.store.values.loose_equals). A row without the column never
matches. Several where() calls combine with AND.

**Projection**: select(*columns) reduces each result row to the listed columns.
Columns that do not exist are silently left out.

Example:
    >>> query = QueryBuilder(store)
    >>> query.where("active", "true").pluck("name")
    ['John Doe']
    >>> query.select("id", "name").where("id", 1).first()
    {'id': '1', 'name': 'John Doe'}
"""

import logging
from typing import Callable, Optional

import pandas as pd

from flatmodel.store.errors import ColumnNotFoundError
from flatmodel.store.rows import Row, RowStore
from flatmodel.store.values import Value, loose_equals

logger = logging.getLogger(__name__)

Constraint = Callable[[Row], bool]


def equals_constraint(column: str, value: Value) -> Constraint:
    """Build a predicate matching rows whose `column` loosely equals `value`."""
    def constraint(row: Row) -> bool:
        return column in row and loose_equals(row[column], value)
    return constraint


class QueryBuilder:
    """Accumulates constraints and a projection, evaluated on a terminal call."""

    def __init__(self, store: RowStore):
        self.store = store
        self._constraints: list[Constraint] = []
        self._columns: Optional[list[str]] = None

    def where(self, column: str, value: Value) -> "QueryBuilder":
        self._constraints.append(equals_constraint(column, value))
        return self

    def select(self, *columns: str) -> "QueryBuilder":
        self._columns = list(columns)
        return self

    def reset(self) -> None:
        """Drop all pending constraints and the pending projection."""
        self._constraints = []
        self._columns = None

    # ------------------------------------------------------------------
    # Terminal calls
    # ------------------------------------------------------------------

    def get(self) -> list[Row]:
        """
        Evaluate the pending query.

        Returns:
            A new list of row copies matching every constraint, projected to the
            selected columns if select() was called.
        """
        constraints = self._constraints
        columns = self._columns
        self.reset()

        rows = [row for row in self.store.all() if all(check(row) for check in constraints)]
        if columns is not None:
            caster = self.store.caster
            rows = [
                {column: row[column] for column in columns if column in row}
                for row in (caster.cast(row) for row in rows)
            ]

        logger.debug("Query matched %d of %d rows", len(rows), self.store.count())
        return rows

    def first(self) -> Optional[Row]:
        rows = self.get()
        return rows[0] if rows else None

    def pluck(self, column: str) -> list[Value]:
        """
        Return `column` from every matching row.

        Raises:
            ColumnNotFoundError: If `column` is not one of the store's headers.
        """
        rows = self.get()
        if not self.store.has_header(column):
            raise ColumnNotFoundError(
                f"Column '{column}' not found. Available columns: {self.store.headers}"
            )
        return [row.get(column) for row in rows]

    def value(self, column: str) -> Optional[Value]:
        values = self.pluck(column)
        return values[0] if values else None

    def count(self) -> int:
        return len(self.get())

    def frame(self) -> pd.DataFrame:
        """Evaluate the pending query and return the result as a DataFrame."""
        columns = self._columns
        rows = self.get()
        if columns is None:
            columns = self.store.headers
        else:
            columns = [column for column in columns if self.store.has_header(column)]
        return pd.DataFrame(rows, columns=columns)
