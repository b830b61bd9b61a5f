"""
CsvModel: the file-backed row store engine.

**Conceptual**: A CsvModel is built from a StoreConfig. Construction loads the
whole source into memory (headers resolved, rows arity-checked and cast); if
anything goes wrong the constructor raises and no instance exists. After that:
  - reads go through a QueryBuilder over the in-memory rows,
  - mutations pass the MutationGuard, build a complete new row list, and only
    then swap it in, so a failing transform or cast leaves the rows unchanged,
  - flush()/save() hand the rows to the CsvWriter; with auto_flush enabled
    every mutation ends with a flush.

**Predicates and transforms**: update/upsert/delete accept either callables or
mappings.
  - A predicate mapping {"id": 1} matches rows where every listed column
    loosely equals its value.
  - A transform mapping {"name": "New"} is merged over the matched row.

Example:
    >>> users = CsvModel(StoreConfig(
    ...     path="csv/users.csv",
    ...     primary_key="id",
    ...     policy=StorePolicy(writable=True),
    ... ))
    >>> users.where("active", "true").pluck("name")
    ['John Doe', 'Bob Jones']
    >>> users.update({"id": 1}, {"name": "Johnny"}).save()
"""

import logging
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

import pandas as pd

from flatmodel.config.store import StoreConfig
from flatmodel.store.errors import ColumnNotFoundError, FileWriteError, InvalidRowFormatError
from flatmodel.store.guard import MutationGuard
from flatmodel.store.query import QueryBuilder
from flatmodel.store.rows import Row, RowStore
from flatmodel.store.sources import FileSource, RowSource
from flatmodel.store.values import Value, loose_equals
from flatmodel.store.writer import CsvWriter
from flatmodel.utils.time import Clock

logger = logging.getLogger(__name__)

Predicate = Union[Callable[[Row], bool], Mapping[str, Value]]
Transform = Union[Callable[[Row], Mapping[str, Value]], Mapping[str, Value]]


def matches_conditions(row: Row, conditions: Mapping[str, Value]) -> bool:
    """True if every condition column exists in `row` and loosely equals its value."""
    return all(column in row and loose_equals(row[column], value) for column, value in conditions.items())


def as_predicate(predicate: Predicate) -> Callable[[Row], bool]:
    if callable(predicate):
        return lambda row: bool(predicate(dict(row)))
    if isinstance(predicate, Mapping):
        conditions = dict(predicate)
        return lambda row: matches_conditions(row, conditions)
    raise TypeError(f"Predicate must be a callable or a mapping, got {type(predicate).__name__}")


def as_transform(transform: Transform) -> Callable[[Row], Mapping[str, Value]]:
    if callable(transform):
        return lambda row: transform(dict(row))
    if isinstance(transform, Mapping):
        updates = dict(transform)
        return lambda row: {**row, **updates}
    raise TypeError(f"Transform must be a callable or a mapping, got {type(transform).__name__}")


class CsvModel:
    """
    In-memory store over one delimited file.

    Args:
        config: The store declaration.
        source: Where to read from; defaults to a FileSource on config.path.
        clock: Time source for backup names; defaults to the system clock.
        base_dir: Base for a relative config.path; defaults to Settings.base_dir.

    Raises:
        Any load error (see RowStore.load); the instance is not created.
    """

    def __init__(
        self,
        config: StoreConfig,
        source: Optional[RowSource] = None,
        clock: Optional[Clock] = None,
        base_dir: Optional[Path] = None,
    ):
        self.config = config
        self.path: Optional[Path] = config.resolve_path(base_dir)

        if source is None:
            if self.path is None:
                raise ValueError("StoreConfig.path is required when no source is given.")
            source = FileSource(self.path)
        elif self.path is None:
            self.path = getattr(source, "path", None)
        self.source = source

        self._store = RowStore.load(source, config)
        self._query = QueryBuilder(self._store)
        self._guard = MutationGuard(config.policy, is_stream=source.is_stream, name=source.describe())
        self._writer = (
            CsvWriter(self.path, config.dialect, backup_enabled=config.policy.backup_enabled, clock=clock)
            if self.path is not None else None
        )

    def __repr__(self) -> str:
        return f"CsvModel({self.source.describe()!r}, rows={self._store.count()})"

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def headers(self) -> list[str]:
        return list(self._store.headers)

    @property
    def primary_key(self) -> Optional[str]:
        return self._store.primary_key

    @property
    def is_stream(self) -> bool:
        return self.source.is_stream

    def has_header(self, name: str) -> bool:
        return self._store.has_header(name)

    def all(self) -> list[Row]:
        return self._store.all()

    def count(self) -> int:
        return self._store.count()

    def find(self, value: Value) -> Optional[Row]:
        return self._store.find(value)

    def to_frame(self) -> pd.DataFrame:
        return self._store.to_frame()

    # ------------------------------------------------------------------
    # Queries (pending state lives on the model's QueryBuilder)
    # ------------------------------------------------------------------

    def query(self) -> QueryBuilder:
        return self._query

    def where(self, column: str, value: Value) -> QueryBuilder:
        return self._query.where(column, value)

    def select(self, *columns: str) -> QueryBuilder:
        return self._query.select(*columns)

    def get(self) -> list[Row]:
        return self._query.get()

    def first(self) -> Optional[Row]:
        return self._query.first()

    def pluck(self, column: str) -> list[Value]:
        return self._query.pluck(column)

    def value(self, column: str) -> Optional[Value]:
        return self._query.value(column)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _normalize(self, row: Mapping[str, Value]) -> Row:
        """Shape a produced row to the header set and cast it."""
        if not isinstance(row, Mapping):
            raise InvalidRowFormatError(f"Rows must be mappings, got {type(row).__name__}.")
        unknown = [column for column in row if column not in self._store.headers]
        if unknown:
            raise ColumnNotFoundError(
                f"Columns {unknown} not found. Available columns: {self._store.headers}"
            )
        return self._store.caster.cast({column: row.get(column) for column in self._store.headers})

    def _after_mutation(self) -> None:
        if self.config.policy.auto_flush:
            self.flush()

    def insert(self, row: Mapping[str, Value]) -> "CsvModel":
        """
        Append a row. Missing columns are filled with None.

        Raises:
            WriteNotAllowedError, StreamWriteError: From the writable gate.
            ColumnNotFoundError: If the row names a column outside the headers.
            CastingError: If a field cannot be cast.
        """
        self._guard.check_insert()
        self._store.append(self._normalize(row))
        self._after_mutation()
        return self

    def update(self, predicate: Predicate, transform: Transform) -> "CsvModel":
        """
        Replace every matching row with cast(transform(row)).

        Zero matches is a successful no-op.
        """
        self._guard.check_change("update")
        matches = as_predicate(predicate)
        mutate = as_transform(transform)

        updated = 0
        rows = []
        for row in self._store.all():
            if matches(row):
                row = self._normalize(mutate(row))
                updated += 1
            rows.append(row)

        if updated:
            self._store.replace(rows)
        logger.debug("update() changed %d rows", updated)
        self._after_mutation()
        return self

    def upsert(self, predicate: Predicate, transform: Transform) -> "CsvModel":
        """
        Replace the first matching row with cast(transform(row)), or append
        cast(transform({})) when nothing matches.
        """
        self._guard.check_change("upsert")
        matches = as_predicate(predicate)
        mutate = as_transform(transform)

        rows = self._store.all()
        for index, row in enumerate(rows):
            if matches(row):
                rows[index] = self._normalize(mutate(row))
                break
        else:
            rows.append(self._normalize(mutate({})))

        self._store.replace(rows)
        self._after_mutation()
        return self

    def delete(self, predicate: Predicate) -> "CsvModel":
        """Remove every matching row; the rest keep their order."""
        self._guard.check_change("delete")
        matches = as_predicate(predicate)

        rows = self._store.all()
        kept = [row for row in rows if not matches(row)]
        if len(kept) != len(rows):
            self._store.replace(kept)
        logger.debug("delete() removed %d rows", len(rows) - len(kept))
        self._after_mutation()
        return self

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def flush(self) -> "CsvModel":
        """
        Write the rows back to the file (backing it up first if enabled).

        An empty row set leaves the file untouched.

        Raises:
            WriteNotAllowedError, StreamWriteError: From the writable gate.
            BackupFailedError: If the backup copy fails; the file is untouched.
            FileWriteError: If the file cannot be written or the source has no
                path to write back to.
        """
        self._guard.check_writable("flush")
        if self._writer is None:
            raise FileWriteError(f"{self.source.describe()}: no target path to write to.")
        self._writer.write(self._store.headers, self._store.all(), include_header=self.config.has_headers)
        return self

    def save(self) -> "CsvModel":
        return self.flush()
