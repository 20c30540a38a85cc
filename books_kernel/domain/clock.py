"""
Clock -- where "today" comes from.

The asset service dates a depreciation entry with ``clock.today()`` when
the caller passes no entry date. Production code uses ``SystemClock``;
tests pin the date with ``DeterministicClock`` so entries land in a known
fiscal year.

Dates are UTC calendar dates.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):

    @abstractmethod
    def today(self) -> date:
        ...


class SystemClock(Clock):
    """UTC date of the machine clock."""

    def today(self) -> date:
        return datetime.now(timezone.utc).date()


class DeterministicClock(Clock):
    """
    Pinned clock for tests.

    ``today()`` keeps returning the same date until ``set_today()`` or
    ``advance_days()`` moves it, e.g. across a fiscal year end.
    """

    def __init__(self, today: date | None = None):
        self._today = today or date(2024, 12, 31)

    def today(self) -> date:
        return self._today

    def set_today(self, today: date) -> None:
        self._today = today

    def advance_days(self, days: int = 1) -> None:
        self._today += timedelta(days=days)
