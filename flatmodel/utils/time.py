"""
Time and clock abstractions for deterministic backup naming.

This module provides a simple, testable way to obtain "now" via a clock object
rather than calling datetime.now() directly. The persistence writer stamps
every backup file with the current time, so depending on a Clock lets tests
predict the exact backup filename.
"""

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """
    Abstract time source protocol.

    **Conceptual**: A Clock is any object that can answer the question "what time
    is it right now?" Code that needs a timestamp (the backup step of a flush)
    accepts a Clock instead of reading the system time itself.

    **Usage**: Pass a RealClock in production and a FrozenClock in tests.

    **Example**:
        writer = CsvWriter(path, dialect, clock=FrozenClock(datetime(2024, 1, 15)))
        writer.backup()  # -> users.csv.2024-01-15-00-00-00.bak
    """

    def now(self) -> datetime:
        """
        Return the current time according to this clock.

        Returns:
            datetime object representing "now".
        """
        ...


class RealClock:
    """
    Clock that returns the actual current system time (UTC).

    **Usage**:
        clock = RealClock()
        current_time = clock.now()  # Returns current UTC time
    """

    def now(self) -> datetime:
        """Return the current UTC time from the system clock."""
        return datetime.now(timezone.utc)


class FrozenClock:
    """
    Clock that always returns a fixed timestamp (for deterministic tests).

    **Usage**:
        clock = FrozenClock(datetime(2024, 1, 15, 9, 30, 0, tzinfo=timezone.utc))
        clock.now()  # Always 2024-01-15T09:30:00+00:00
    """

    def __init__(self, fixed_now: datetime):
        """
        Initialize a FrozenClock with a fixed timestamp.

        Args:
            fixed_now: The datetime to return on every call to now().
        """
        self._fixed_now = fixed_now

    def now(self) -> datetime:
        """Return the configured fixed timestamp."""
        return self._fixed_now


def get_real_clock() -> Clock:
    """
    Factory function to create a RealClock instance.

    Returns:
        RealClock instance.
    """
    return RealClock()
