# app/core/clock.py
"""
Time source for the background workers and report endpoints.

Everything that needs "today" takes a clock instead of calling
``datetime.now()`` so tests can pin the date.
"""
from datetime import date, datetime, timezone


class SystemClock:
    """UTC wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock(SystemClock):
    """Clock frozen at a given date; ``set`` moves it."""

    def __init__(self, current: date):
        self.current = current

    def now(self) -> datetime:
        return datetime(self.current.year, self.current.month, self.current.day, tzinfo=timezone.utc)

    def today(self) -> date:
        return self.current

    def set(self, current: date) -> None:
        self.current = current


system_clock = SystemClock()


def get_clock() -> SystemClock:
    """FastAPI dependency; overridden in tests."""
    return system_clock
