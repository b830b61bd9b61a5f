"""
Header resolution: deciding the ordered column names of a store.

**Conceptual**: The resolver looks at the declared headers, the has_headers
flag and the strict-headers policy, and consumes (or peeks at) the first
parsed record accordingly. It returns the header list together with the
record iterator positioned at the first data record.

**Modes**:
  1. Declared headers, file has a header line: the line is consumed and
     ignored; declared headers win.
  2. No declared headers, file has a header line: the line (trimmed) becomes
     the header set.
  3. No declared headers, no header line: the first record is peeked to count
     fields and pushed back as data; headers are "0".."n-1".
  4. Declared headers, no header line: declared headers are used and nothing
     is consumed.

**Strict mode** (declared headers + strict_headers + header line): the file's
header line must contain exactly the declared names, in any order. The file's
order is kept so positional values line up with their names.
"""

import itertools
import logging
from typing import Iterator, Optional, Sequence

from flatmodel.config.store import StoreConfig
from flatmodel.store.errors import HeaderMismatchError, MissingHeaderError

logger = logging.getLogger(__name__)

Record = list[str]


def _find_duplicates(names: Sequence[str]) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for name in names:
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)
    return duplicates


class HeaderResolver:
    """Resolves the header set for one store declaration."""

    def __init__(self, config: StoreConfig):
        self.config = config

    @property
    def is_strict(self) -> bool:
        return bool(self.config.headers) and self.config.policy.strict_headers and self.config.has_headers

    def resolve(self, records: Iterator[Record], context: str = "") -> tuple[list[str], Iterator[Record]]:
        """
        Determine headers and return them with the remaining records.

        Args:
            records: Parsed records from the source, first line first.
            context: Source description for error messages.

        Returns:
            (headers, records) where records yields data records only.

        Raises:
            MissingHeaderError: If a header line is needed but absent or empty.
            HeaderMismatchError: If strict validation fails or the header line
                repeats a name.
        """
        declared = list(self.config.headers)

        if self.is_strict:
            found = self._read_header_line(records, context)
            self._validate_strict(declared, found, context)
            logger.debug("%s: strict headers matched %s", context, found)
            return found, records

        if declared:
            if self.config.has_headers:
                # Header line present but overridden by the declaration
                next(records, None)
            return declared, records

        if self.config.has_headers:
            found = self._read_header_line(records, context)
            return found, records

        first = next(records, None)
        if not first:
            raise MissingHeaderError(
                f"{context}: Cannot determine column count - the source appears empty."
            )
        synthesized = [str(index) for index in range(len(first))]
        logger.debug("%s: synthesized %d positional headers", context, len(synthesized))
        return synthesized, itertools.chain([first], records)

    def _read_header_line(self, records: Iterator[Record], context: str) -> list[str]:
        line: Optional[Record] = next(records, None)
        if not line:
            raise MissingHeaderError(f"{context}: Failed to read headers - the header line is missing or empty.")

        headers = [name.strip() for name in line]
        if not any(headers):
            raise MissingHeaderError(f"{context}: Failed to read headers - the header line is blank.")
        duplicates = _find_duplicates(headers)
        if duplicates:
            raise HeaderMismatchError(
                f"{context}: Header line repeats column names: {duplicates}.",
                found=headers,
            )
        return headers

    @staticmethod
    def _validate_strict(declared: list[str], found: list[str], context: str) -> None:
        missing = [name for name in declared if name not in found]
        extra = [name for name in found if name not in declared]
        if missing or extra:
            raise HeaderMismatchError(
                f"{context}: Headers do not match expected values. "
                f"Expected: [{', '.join(declared)}], Found: [{', '.join(found)}]. "
                f"Missing: {missing}, unexpected: {extra}.",
                expected=declared,
                found=found,
            )
