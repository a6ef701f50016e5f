"""Value objects shared by the calculation core."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from zst.core.calculations import Number, as_decimal, max_value_for
from zst.core.dates import to_calendar_date
from zst.core.errors import (
    ConfigurationError,
    DegeneratePeriodError,
    InvalidDateError,
    InvalidReadingError,
)

DEFAULT_LEADING_DIGITS = 6
DEFAULT_FRACTION_DIGITS = 3
MAX_LEADING_DIGITS = 12
MAX_FRACTION_DIGITS = 6

DEFAULT_WINTER_MONTHS = frozenset({11, 12, 1, 2})
DEFAULT_WINTER_FACTOR = Decimal("1.02")


class RoundingMode(str, enum.Enum):
    """How numbers are rounded for display."""

    NEAREST = "nearest"
    FLOOR = "floor"
    UNROUNDED = "unrounded"


@dataclass(frozen=True)
class MeterConfig:
    """Describes the display of a meter: digits before and after the comma."""

    leading_digits: int = DEFAULT_LEADING_DIGITS
    fraction_digits: int = DEFAULT_FRACTION_DIGITS

    def __post_init__(self) -> None:
        if not 1 <= self.leading_digits <= MAX_LEADING_DIGITS:
            raise ConfigurationError(
                f"leading_digits must be between 1 and {MAX_LEADING_DIGITS}, "
                f"got {self.leading_digits}."
            )
        if not 0 <= self.fraction_digits <= MAX_FRACTION_DIGITS:
            raise ConfigurationError(
                f"fraction_digits must be between 0 and {MAX_FRACTION_DIGITS}, "
                f"got {self.fraction_digits}."
            )

    @property
    def max_value(self) -> int:
        return max_value_for(self.leading_digits)


@dataclass(frozen=True)
class SeasonConfig:
    """Winter months and the factor by which winter days consume more."""

    winter_months: frozenset[int] = DEFAULT_WINTER_MONTHS
    winter_factor: Decimal = DEFAULT_WINTER_FACTOR

    def __post_init__(self) -> None:
        months = frozenset(self.winter_months)
        invalid = sorted(m for m in months if not 1 <= m <= 12)
        if invalid:
            raise ConfigurationError(f"Invalid winter months: {invalid}.")
        object.__setattr__(self, "winter_months", months)
        object.__setattr__(self, "winter_factor", as_decimal(self.winter_factor))

    @classmethod
    def from_values(cls, winter_months: Iterable[int], winter_factor: Number) -> SeasonConfig:
        return cls(
            winter_months=frozenset(winter_months),
            winter_factor=as_decimal(winter_factor),
        )


@dataclass(frozen=True)
class DisplayConfig:
    """Rounding applied to every number shown to the user."""

    rounding_mode: RoundingMode = RoundingMode.NEAREST
    fraction_digits: int = DEFAULT_FRACTION_DIGITS

    def __post_init__(self) -> None:
        object.__setattr__(self, "rounding_mode", RoundingMode(self.rounding_mode))
        if not 0 <= self.fraction_digits <= MAX_FRACTION_DIGITS:
            raise ConfigurationError(
                f"fraction_digits must be between 0 and {MAX_FRACTION_DIGITS}, "
                f"got {self.fraction_digits}."
            )


@dataclass(frozen=True)
class ReferencePeriod:
    """
    The two anchor readings every projection is derived from.

    Dates are normalized to calendar dates and readings to ``Decimal``.
    The end date must lie strictly after the start date.
    """

    start_date: date
    start_reading: Decimal
    end_date: date
    end_reading: Decimal
    days: int = field(init=False)

    def __post_init__(self) -> None:
        start = to_calendar_date(self.start_date)
        end = to_calendar_date(self.end_date)
        if end == start:
            raise DegeneratePeriodError(
                f"Reference period {start} has zero duration."
            )
        if end < start:
            raise InvalidDateError(
                f"End date {end} must be after start date {start}."
            )
        object.__setattr__(self, "start_date", start)
        object.__setattr__(self, "end_date", end)
        object.__setattr__(self, "days", (end - start).days)

        for name in ("start_reading", "end_reading"):
            reading = as_decimal(getattr(self, name))
            if not reading.is_finite() or reading < 0:
                raise InvalidReadingError(f"{name} must be a non-negative number.")
            object.__setattr__(self, name, reading)

    @classmethod
    def create(
        cls,
        start_date: date | datetime,
        start_reading: Number,
        end_date: date | datetime,
        end_reading: Number,
    ) -> ReferencePeriod:
        return cls(
            start_date=start_date,
            start_reading=as_decimal(start_reading),
            end_date=end_date,
            end_reading=as_decimal(end_reading),
        )

    def contains(self, day: date | datetime) -> bool:
        """Checks whether ``day`` lies strictly between the two anchor dates."""
        return self.start_date < to_calendar_date(day) < self.end_date
