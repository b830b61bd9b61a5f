"""
Persistence of a RowStore back to its delimited file.

**Flush sequence**:
  1. Serialize headers and rows to text in memory (dialect-aware).
  2. If backups are enabled and the file exists, copy it to
     "{path}.{YYYY-MM-DD-HH-MM-SS}.bak" next to it. A failed copy aborts the
     flush before the primary file is opened.
  3. If there are no rows, stop: the existing file is left as it is, not
     truncated to a header line.
  4. Overwrite the file with the serialized text in a single write.

Serializing first means a value that cannot be encoded fails the flush before
any file is touched. The overwrite itself is not atomic: a crash during step 4
can leave a partial primary file next to a valid backup.
"""

import csv
import io
import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional, Sequence

from flatmodel.config.store import CsvDialect
from flatmodel.store.errors import BackupFailedError, FileWriteError
from flatmodel.store.values import Value, to_text
from flatmodel.utils.time import Clock, get_real_clock

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


class CsvWriter:
    """Writes rows to one file, optionally backing it up first."""

    def __init__(
        self,
        path: Path | str,
        dialect: Optional[CsvDialect] = None,
        backup_enabled: bool = False,
        clock: Optional[Clock] = None,
        encoding: str = "utf-8",
    ):
        self.path = Path(path)
        self.dialect = dialect or CsvDialect()
        self.backup_enabled = backup_enabled
        self.clock = clock or get_real_clock()
        self.encoding = encoding

    def backup_path(self) -> Path:
        stamp = self.clock.now().strftime(BACKUP_TIMESTAMP_FORMAT)
        return Path(f"{self.path}.{stamp}.bak")

    def backup(self) -> Optional[Path]:
        """
        Copy the current file to its timestamped backup location.

        Returns:
            The backup path, or None when backups are off or there is no file yet.

        Raises:
            BackupFailedError: If the copy fails.
        """
        if not self.backup_enabled or not self.path.exists():
            return None

        target = self.backup_path()
        try:
            shutil.copyfile(self.path, target)
        except OSError as e:
            raise BackupFailedError(f"Failed to backup {self.path} to {target}: {e}") from e

        logger.info("Backed up %s to %s", self.path, target)
        return target

    def serialize(
        self,
        headers: Sequence[str],
        rows: Iterable[dict[str, Value]],
        include_header: bool = True,
    ) -> str:
        """
        Render headers and rows as delimited text.

        The header line is written only when there are headers and
        include_header is set. Row values are written in header order; None
        becomes an empty field.

        Raises:
            FileWriteError: If a value cannot be encoded in the dialect.
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, **self.dialect.reader_options())
        try:
            if headers and include_header:
                writer.writerow(headers)
            for row in rows:
                writer.writerow([to_text(row.get(column)) for column in headers])
        except csv.Error as e:
            raise FileWriteError(f"Cannot encode rows for {self.path}: {e}") from e
        return buffer.getvalue()

    def write(
        self,
        headers: Sequence[str],
        rows: Sequence[dict[str, Value]],
        include_header: bool = True,
    ) -> bool:
        """
        Back up (if enabled) and overwrite the file with `rows`.

        Args:
            headers: Column order for every row.
            rows: Rows to write.
            include_header: Write the header line (files declared without a
                header line are written back without one).

        Returns:
            True if the file was written, False if there were no rows.

        Raises:
            FileWriteError: If the rows cannot be encoded or the file cannot be written.
            BackupFailedError: If the backup copy fails.
        """
        payload = self.serialize(headers, rows, include_header)

        self.backup()

        if not rows:
            logger.debug("No rows to write; leaving %s untouched", self.path)
            return False

        try:
            with open(self.path, "w", newline="", encoding=self.encoding) as handle:
                handle.write(payload)
        except OSError as e:
            raise FileWriteError(f"Failed to write {self.path}: {e}") from e

        logger.info("Flushed %d rows to %s", len(rows), self.path)
        return True
