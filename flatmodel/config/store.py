"""
Per-store configuration: dialect, policy and the store declaration.

**Conceptual**: A store is declared with a StoreConfig. Everything that changes
how a store behaves lives here as plain data: where the file is, how it is
delimited, which headers to expect, how fields are cast, and which
capabilities (writing, append-only, backups, strict headers, auto-flush) are
switched on. The engine reads this declaration; it is never subclassed.

Example:
    >>> config = StoreConfig(
    ...     path="csv/users.csv",
    ...     primary_key="id",
    ...     casts={"id": "int", "active": "bool"},
    ...     policy=StorePolicy(writable=True, backup_enabled=True),
    ... )
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence

from flatmodel.config.settings import Settings, get_settings


@dataclass(frozen=True)
class CsvDialect:
    """
    Delimited-text dialect.

    Attributes:
        delimiter: Field separator (one character).
        enclosure: Quote character wrapping fields that need it (one character).
        escape: Escape character; empty string disables escaping.
    """
    delimiter: str = ","
    enclosure: str = '"'
    escape: str = "\\"

    def __post_init__(self):
        if len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got: {self.delimiter!r}")
        if len(self.enclosure) != 1:
            raise ValueError(f"enclosure must be a single character, got: {self.enclosure!r}")
        if len(self.escape) > 1:
            raise ValueError(f"escape must be empty or a single character, got: {self.escape!r}")
        if self.delimiter == self.enclosure:
            raise ValueError("delimiter and enclosure must differ")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CsvDialect":
        """Build the default dialect from process settings."""
        settings = settings or get_settings()
        return cls(
            delimiter=settings.delimiter,
            enclosure=settings.enclosure,
            escape=settings.escape,
        )

    def reader_options(self) -> dict:
        """Keyword arguments for csv.reader / csv.writer."""
        return {
            "delimiter": self.delimiter,
            "quotechar": self.enclosure,
            "escapechar": self.escape or None,
            "doublequote": True,
            "lineterminator": "\n",
        }


@dataclass(frozen=True)
class StorePolicy:
    """
    Capability switches for a store.

    Attributes:
        writable: Allow insert/update/upsert/delete/flush at all.
        append_only: Allow insert but reject update/upsert/delete.
        backup_enabled: Copy the file to a timestamped .bak before each flush.
        strict_headers: Require the file's header line to match the declared
            headers as a set.
        auto_flush: Persist after every mutation.
    """
    writable: bool = False
    append_only: bool = False
    backup_enabled: bool = False
    strict_headers: bool = False
    auto_flush: bool = False


@dataclass(frozen=True)
class StoreConfig:
    """
    Declaration of a single file-backed store.

    Attributes:
        path: Location of the backing file. Relative paths resolve against
            Settings.base_dir. May be None for stream-backed stores.
        dialect: Delimiter, enclosure and escape characters.
        has_headers: Whether the file's first line is a header line.
        headers: Predefined column names; empty means "take them from the file".
        casts: Column -> cast type name (see flatmodel.store.casting).
        primary_key: Column used by find(); optional.
        policy: Capability switches.
    """
    path: Optional[Path | str] = None
    dialect: CsvDialect = field(default_factory=CsvDialect)
    has_headers: bool = True
    headers: Sequence[str] = ()
    casts: Mapping[str, str] = field(default_factory=dict)
    primary_key: Optional[str] = None
    policy: StorePolicy = field(default_factory=StorePolicy)

    def __post_init__(self):
        """Normalize and validate the declaration."""
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "casts", dict(self.casts))

        duplicates = sorted({h for h in self.headers if self.headers.count(h) > 1})
        if duplicates:
            raise ValueError(f"Predefined headers must be unique; duplicated: {duplicates}")
        if self.primary_key is not None and not self.primary_key.strip():
            raise ValueError("primary_key must be a non-empty column name or None")

    def resolve_path(self, base_dir: Optional[Path] = None) -> Optional[Path]:
        """
        Return the absolute location of the backing file.

        Args:
            base_dir: Directory for relative paths; defaults to Settings.base_dir.
        """
        if self.path is None:
            return None
        path = Path(self.path)
        if path.is_absolute():
            return path
        if base_dir is None:
            base_dir = get_settings().base_dir
        return Path(base_dir) / path
