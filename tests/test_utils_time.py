"""
Tests for flatmodel/utils/time.py

These tests verify the clock abstraction works correctly for both real and frozen time.
"""

from datetime import datetime, timezone

from flatmodel.utils.time import FrozenClock, RealClock, get_real_clock


def test_real_clock_returns_current_time():
    """Test that RealClock returns a time close to actual current time."""
    clock = RealClock()

    before = datetime.now(timezone.utc)
    clock_time = clock.now()
    after = datetime.now(timezone.utc)

    assert before <= clock_time <= after
    assert clock_time.tzinfo == timezone.utc


def test_frozen_clock_returns_fixed_time():
    """Test that FrozenClock always returns the configured timestamp."""
    fixed_time = datetime(2024, 1, 15, 9, 30, 45, tzinfo=timezone.utc)
    clock = FrozenClock(fixed_time)

    assert clock.now() == fixed_time
    assert clock.now() == fixed_time


def test_get_real_clock_factory():
    """Test that get_real_clock() returns a working RealClock."""
    clock = get_real_clock()

    assert isinstance(clock, RealClock)
    assert clock.now().tzinfo == timezone.utc
