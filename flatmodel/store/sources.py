"""
Row sources: where a store reads its text from.

**Conceptual**: The loader does not care whether text comes from a file on disk
or from an arbitrary reader. A RowSource only has to open a text handle that
can be used as a context manager. Two implementations are provided:
  - FileSource: a file path (the normal case). Stores backed by a file can be
    written back.
  - StreamSource: any callable returning a text handle (an HTTP body wrapper,
    io.StringIO, stdin). Stores backed by a stream are read-only.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Protocol, TextIO

from flatmodel.store.errors import CsvFileNotFoundError, InvalidHandleError, StreamOpenError

logger = logging.getLogger(__name__)


class RowSource(Protocol):
    """Anything that can open a readable text handle for the loader."""

    is_stream: bool

    def open(self) -> TextIO:
        """Open and return a readable text handle; the caller closes it."""
        ...

    def describe(self) -> str:
        """Short human-readable name used in error messages."""
        ...


def _ensure_readable(handle, name: str):
    readable = getattr(handle, "readable", None)
    if not callable(getattr(handle, "read", None)) or (callable(readable) and not readable()):
        close = getattr(handle, "close", None)
        if callable(close):
            close()
        raise InvalidHandleError(f"Handle for {name} is not readable.")
    return handle


class FileSource:
    """Reads rows from a file on disk."""

    is_stream = False

    def __init__(self, path: Path | str, encoding: str = "utf-8"):
        self.path = Path(path)
        self.encoding = encoding

    def describe(self) -> str:
        return str(self.path)

    def open(self) -> TextIO:
        """
        Open the file for reading.

        Raises:
            CsvFileNotFoundError: If the file does not exist.
            InvalidHandleError: If the path exists but cannot be read
                (a directory, missing permissions, ...).
        """
        if not self.path.exists():
            raise CsvFileNotFoundError(f"File not found at {self.path}")
        try:
            # newline="" lets the csv module handle embedded line breaks
            handle = open(self.path, "r", newline="", encoding=self.encoding)
        except OSError as e:
            raise InvalidHandleError(f"Cannot open {self.path} for reading: {e}") from e
        logger.debug("Opened %s for reading", self.path)
        return _ensure_readable(handle, str(self.path))


class StreamSource:
    """
    Reads rows from a caller-supplied text stream.

    Args:
        opener: Zero-argument callable returning a readable text handle. A
            source without an opener cannot be opened.
        name: Label used in error messages.
    """

    is_stream = True

    def __init__(self, opener: Optional[Callable[[], TextIO]] = None, name: str = "stream"):
        self.opener = opener
        self.name = name

    def describe(self) -> str:
        return self.name

    def open(self) -> TextIO:
        """
        Call the opener and return its handle.

        Raises:
            StreamOpenError: If no opener was supplied or the opener fails.
            InvalidHandleError: If the opener returns something unreadable.
        """
        if self.opener is None:
            raise StreamOpenError(f"Stream source '{self.name}' has no opener.")
        try:
            handle = self.opener()
        except OSError as e:
            raise StreamOpenError(f"Failed to open stream '{self.name}': {e}") from e
        if handle is None:
            raise StreamOpenError(f"Opener for stream '{self.name}' returned no handle.")
        return _ensure_readable(handle, self.name)
