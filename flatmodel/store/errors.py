"""
Error types raised by the row store.

**Conceptual**: Every failure the store can produce is a distinct subclass of
CsvModelError, so callers can catch the whole family or a single kind. Messages
carry enough context (path, column, expected vs found values) to act on them
without re-running under a debugger.

Some kinds also inherit from the matching builtin (FileNotFoundError,
ValueError, OSError) so generic handlers keep working.
"""


class CsvModelError(Exception):
    """Base class for all row store errors."""
    pass


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class CsvFileNotFoundError(CsvModelError, FileNotFoundError):
    """Raised when the backing file does not exist."""
    pass


class StreamOpenError(CsvModelError):
    """Raised when a stream source cannot produce a readable handle."""
    pass


class InvalidHandleError(CsvModelError):
    """Raised when the backing file exists but cannot be opened for reading."""
    pass


class MissingHeaderError(CsvModelError):
    """Raised when a header line is required but absent or empty."""
    pass


class HeaderMismatchError(CsvModelError):
    """
    Raised when the file's header line disagrees with the declared headers,
    or when a header line contains duplicate names.
    """

    def __init__(self, message: str, expected=None, found=None):
        super().__init__(message)
        self.expected = list(expected) if expected is not None else []
        self.found = list(found) if found is not None else []


class InvalidRowFormatError(CsvModelError):
    """Raised when a record's field count does not match the header count."""
    pass


# ---------------------------------------------------------------------------
# Lookup and casting
# ---------------------------------------------------------------------------

class ColumnNotFoundError(CsvModelError):
    """Raised when a named column is not part of the header set."""
    pass


class PrimaryKeyMissingError(CsvModelError):
    """Raised when a primary-key lookup is attempted without a primary key."""
    pass


class CastingError(CsvModelError, ValueError):
    """Raised when a value cannot be converted to its declared type."""
    pass


# ---------------------------------------------------------------------------
# Mutation and persistence
# ---------------------------------------------------------------------------

class WriteNotAllowedError(CsvModelError):
    """Raised when a mutating call is made on a store that is not writable."""
    pass


class StreamWriteError(CsvModelError):
    """Raised when a mutating call is made on a stream-backed store."""
    pass


class AppendOnlyViolationError(CsvModelError):
    """Raised when update/upsert/delete is called on an append-only store."""
    pass


class BackupFailedError(CsvModelError):
    """Raised when the pre-flush backup copy cannot be written."""
    pass


class FileWriteError(CsvModelError, OSError):
    """Raised when the primary file cannot be overwritten."""
    pass
