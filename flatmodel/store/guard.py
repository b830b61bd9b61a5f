"""
Policy gates checked before any row is touched.

Two independent gates, always evaluated in this order:
  1. Writable: the store must be writable and backed by a file (not a stream).
     Applies to insert, update, upsert, delete and flush.
  2. Append-only: when enabled, update, upsert and delete are rejected.
     Insert is still allowed.

A rejected call raises before anything changes, so the store is left exactly
as it was.
"""

import logging

from flatmodel.config.store import StorePolicy
from flatmodel.store.errors import (
    AppendOnlyViolationError,
    StreamWriteError,
    WriteNotAllowedError,
)

logger = logging.getLogger(__name__)


class MutationGuard:
    """Checks a StorePolicy for one store."""

    def __init__(self, policy: StorePolicy, is_stream: bool = False, name: str = "store"):
        self.policy = policy
        self.is_stream = is_stream
        self.name = name

    def check_writable(self, operation: str) -> None:
        """
        Raises:
            WriteNotAllowedError: If the store is not writable.
            StreamWriteError: If the store is backed by a stream.
        """
        if not self.policy.writable:
            logger.warning("Rejected %s on %s: store is not writable", operation, self.name)
            raise WriteNotAllowedError(f"{self.name} is not writable; {operation}() is not allowed.")
        if self.is_stream:
            logger.warning("Rejected %s on %s: store is stream-backed", operation, self.name)
            raise StreamWriteError(f"{self.name} is a stream-backed store; it cannot be written to.")

    def check_mutable(self, operation: str) -> None:
        """
        Raises:
            AppendOnlyViolationError: If the store is append-only.
        """
        if self.policy.append_only:
            logger.warning("Rejected %s on %s: store is append-only", operation, self.name)
            raise AppendOnlyViolationError(
                f"{self.name} is append-only and does not support {operation}()."
            )

    def check_insert(self) -> None:
        self.check_writable("insert")

    def check_change(self, operation: str) -> None:
        """Both gates, for update/upsert/delete."""
        self.check_writable(operation)
        self.check_mutable(operation)
