"""Date arithmetic and date text helpers."""

from __future__ import annotations

import re
from collections.abc import Collection
from dataclasses import dataclass
from datetime import date, datetime

from dateutil.relativedelta import relativedelta

from zst.core.errors import InvalidDateError

MIN_YEAR = 1900
MAX_YEAR = 2100

# Two-digit years below this value belong to the 21st century.
TWO_DIGIT_YEAR_PIVOT = 70

_DATE_PATTERN = re.compile(r"^(\d{1,2})[./-](\d{1,2})[./-](\d{2}|\d{4})$")


@dataclass(frozen=True)
class SeasonDays:
    """Split of a day range into winter and summer days."""

    winter_days: int = 0
    summer_days: int = 0

    @property
    def total(self) -> int:
        return self.winter_days + self.summer_days


def to_calendar_date(value: date | datetime) -> date:
    """
    Normalizes a date-like value to a plain calendar date.

    A ``datetime`` is cut down to its date, which is the same as moving it to
    midnight. Any other type is rejected.

    Raises:
        InvalidDateError: If the value is not a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidDateError(f"Expected a calendar date, got {value!r}.")


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Returns the signed number of whole days from ``start`` to ``end``."""
    return (to_calendar_date(end) - to_calendar_date(start)).days


def is_winter_month(day: date | datetime, winter_months: Collection[int]) -> bool:
    """Checks whether the calendar month of ``day`` is a winter month."""
    return to_calendar_date(day).month in winter_months


def are_adjacent_days(first: date | datetime, second: date | datetime) -> bool:
    """Checks whether two dates are consecutive calendar days, in any order."""
    return abs(days_between(first, second)) == 1


def count_season_days(
    start: date | datetime,
    end: date | datetime,
    winter_months: Collection[int],
) -> SeasonDays:
    """
    Counts winter and summer days in the half-open interval ``[start, end)``.

    The range is walked one calendar month at a time, since every day of a
    month falls into the same season.

    Args:
        start: First day of the range (included).
        end: Day after the last day of the range (excluded).
        winter_months: Month numbers (1-12) counted as winter.

    Returns:
        The season split. Both counts are zero when ``end <= start``.
    """
    cursor = to_calendar_date(start)
    stop = to_calendar_date(end)

    winter_days = 0
    summer_days = 0
    while cursor < stop:
        next_month = cursor.replace(day=1) + relativedelta(months=1)
        chunk_end = min(next_month, stop)
        chunk_days = (chunk_end - cursor).days
        if cursor.month in winter_months:
            winter_days += chunk_days
        else:
            summer_days += chunk_days
        cursor = chunk_end

    return SeasonDays(winter_days=winter_days, summer_days=summer_days)


def parse_date(text: str) -> date:
    """
    Parses a German date such as ``31.12.2025``.

    ``-`` and ``/`` are accepted as separators, day and month may have one
    digit and two-digit years are expanded (``24`` -> 2024, ``85`` -> 1985).

    Raises:
        InvalidDateError: If the text is not a valid date between 1900 and 2100.
    """
    match = _DATE_PATTERN.match(text.strip()) if text else None
    if not match:
        raise InvalidDateError(f"Invalid date format: {text!r}. Expected DD.MM.YYYY.")

    day, month, year = (int(part) for part in match.groups())
    if len(match.group(3)) == 2:
        year += 2000 if year < TWO_DIGIT_YEAR_PIVOT else 1900

    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidDateError(f"Year {year} is outside {MIN_YEAR}-{MAX_YEAR}.")

    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(f"Invalid calendar date: {text!r} ({e}).") from e


def format_date(day: date | datetime) -> str:
    """Formats a date as ``DD.MM.YYYY``."""
    return to_calendar_date(day).strftime("%d.%m.%Y")
