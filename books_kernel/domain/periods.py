"""
Fiscal periods -- map dates onto a company's fiscal years.

A fiscal year is labelled by the calendar year in which it ends. With the
default year end of December 31 the fiscal year is the calendar year; a
company whose year ends June 30 has fiscal year 2025 running from
2024-07-01 to 2025-06-30.
"""

import calendar
from datetime import date, timedelta

from books_kernel.exceptions import InvalidPeriodError

_DEFAULT_YEAR_END = (12, 31)


def _year_end_md(fiscal_year_end: date | None) -> tuple[int, int]:
    if fiscal_year_end is None:
        return _DEFAULT_YEAR_END
    return fiscal_year_end.month, fiscal_year_end.day


def _clamped(year: int, month: int, day: int) -> date:
    # Feb 29 year ends fall back to Feb 28 in non-leap years
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def fiscal_year_bounds(fiscal_year: int, fiscal_year_end: date | None = None) -> tuple[date, date]:
    """Return the inclusive (start, end) dates of ``fiscal_year``."""
    month, day = _year_end_md(fiscal_year_end)
    end = _clamped(fiscal_year, month, day)
    start = _clamped(fiscal_year - 1, month, day) + timedelta(days=1)
    return start, end


def fiscal_year_of(on_date: date, fiscal_year_end: date | None = None) -> int:
    """Return the fiscal year that contains ``on_date``."""
    month, day = _year_end_md(fiscal_year_end)
    if on_date <= _clamped(on_date.year, month, day):
        return on_date.year
    return on_date.year + 1


def validate_period(period_start: date, period_end: date) -> None:
    """Raise InvalidPeriodError if the period is inverted."""
    if period_end < period_start:
        raise InvalidPeriodError(period_start, period_end)


def in_period(on_date: date | None, period_start: date, period_end: date) -> bool:
    """Inclusive containment test. Undated records are never in a period."""
    return on_date is not None and period_start <= on_date <= period_end
