"""
The in-memory row sequence and the loader that fills it.

**Conceptual**: RowStore owns the rows of one store. It is filled once, at
construction, by reading the whole source: headers are resolved first, then
every remaining record is checked for arity, zipped with the headers and cast.
After that the sequence only changes through replace()/append(), which the
engine calls after its policy checks have passed.

**Load rules**:
  - The source handle is closed when loading finishes or fails.
  - A record whose field count differs from the header count is an error;
    records are never padded or truncated.
  - Completely blank lines are skipped.
  - A declared primary key must be one of the headers.

Example:
    >>> store = RowStore.load(FileSource("users.csv"), StoreConfig(primary_key="id"))
    >>> store.find("1")["email"]
    'john@example.com'
"""

import csv
import logging
from typing import Iterable, Optional

import pandas as pd

from flatmodel.config.store import StoreConfig
from flatmodel.store.casting import TypeCaster
from flatmodel.store.errors import (
    ColumnNotFoundError,
    InvalidRowFormatError,
    PrimaryKeyMissingError,
)
from flatmodel.store.headers import HeaderResolver
from flatmodel.store.sources import RowSource
from flatmodel.store.values import Value, loose_equals

logger = logging.getLogger(__name__)

Row = dict[str, Value]


class RowStore:
    """Ordered rows sharing one header set."""

    def __init__(
        self,
        headers: Iterable[str],
        rows: Optional[Iterable[Row]] = None,
        caster: Optional[TypeCaster] = None,
        primary_key: Optional[str] = None,
    ):
        self.headers = list(headers)
        self.caster = caster or TypeCaster()
        self.primary_key = primary_key
        self._rows: list[Row] = list(rows or [])

        if primary_key and primary_key not in self.headers:
            raise ColumnNotFoundError(
                f"Primary key '{primary_key}' not found in headers {self.headers}."
            )

    @classmethod
    def load(cls, source: RowSource, config: StoreConfig) -> "RowStore":
        """
        Read every record from `source` into a new RowStore.

        Raises:
            CsvFileNotFoundError, StreamOpenError, InvalidHandleError: If the
                source cannot be opened.
            MissingHeaderError, HeaderMismatchError: From header resolution.
            InvalidRowFormatError: If a record has the wrong field count, the
                text is not valid delimited data or it cannot be decoded.
            CastingError: If a field cannot be cast.
            ColumnNotFoundError: If the primary key is not a header.
        """
        context = source.describe()
        caster = TypeCaster(config.casts)
        resolver = HeaderResolver(config)

        with source.open() as handle:
            reader = csv.reader(handle, **config.dialect.reader_options())
            try:
                headers, records = resolver.resolve(iter(reader), context)
                expected = len(headers)
                rows: list[Row] = []
                for record in records:
                    if not record:
                        continue
                    if len(record) != expected:
                        raise InvalidRowFormatError(
                            f"{context}: CSV row does not match header count. "
                            f"Expected {expected} columns, got {len(record)} "
                            f"(line {reader.line_num}). Row: [{', '.join(record)}]"
                        )
                    rows.append(caster.cast(dict(zip(headers, record))))
            except csv.Error as e:
                raise InvalidRowFormatError(
                    f"{context}: Malformed delimited text at line {reader.line_num}: {e}"
                ) from e
            except UnicodeDecodeError as e:
                raise InvalidRowFormatError(
                    f"{context}: Text is not valid {getattr(source, 'encoding', 'utf-8')} "
                    f"after line {reader.line_num}: {e}"
                ) from e

        logger.debug("Loaded %d rows with headers %s from %s", len(rows), headers, context)
        return cls(headers, rows, caster=caster, primary_key=config.primary_key)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def all(self) -> list[Row]:
        """Return copies of all rows, in order."""
        return [dict(row) for row in self._rows]

    def count(self) -> int:
        return len(self._rows)

    def has_header(self, name: str) -> bool:
        return name in self.headers

    def find(self, value: Value) -> Optional[Row]:
        """
        Return the first row whose primary-key field loosely equals `value`.

        Raises:
            PrimaryKeyMissingError: If no primary key is declared.
        """
        if not self.primary_key:
            raise PrimaryKeyMissingError("Cannot call find() without defining a primary key.")
        for row in self._rows:
            if self.primary_key in row and loose_equals(row[self.primary_key], value):
                return self.caster.cast(row)
        return None

    def to_frame(self) -> pd.DataFrame:
        """Return the rows as a DataFrame whose columns follow the header order."""
        return pd.DataFrame(self.all(), columns=self.headers)

    # ------------------------------------------------------------------
    # Mutation (policy checks happen in the engine, before these are called)
    # ------------------------------------------------------------------

    def replace(self, rows: Iterable[Row]) -> None:
        self._rows = [dict(row) for row in rows]

    def append(self, row: Row) -> None:
        self._rows.append(dict(row))
