"""Clock capability used for the default certificate date."""

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    def today(self) -> date: ...


class SystemClock:
    """Reads the host's local date."""

    def today(self) -> date:
        return datetime.now().date()


class FixedClock:
    """Always returns the same date."""

    def __init__(self, value: date) -> None:
        self._value = value

    def today(self) -> date:
        return self._value


_system_clock = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency; tests override it with a FixedClock."""
    return _system_clock
