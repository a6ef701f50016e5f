"""Exceptions raised by the calculation core."""

from __future__ import annotations


class CalculationError(Exception):
    """Base class for every error the calculation core raises."""


class InvalidDateError(CalculationError):
    """A date is not a valid calendar date or the period is out of order."""


class InvalidReadingError(CalculationError):
    """A meter reading is negative, non-finite or above the meter maximum."""


class DegeneratePeriodError(InvalidDateError):
    """The reference period has zero duration, so no daily rate exists."""


class ConfigurationError(CalculationError):
    """Meter, season or display settings are inconsistent."""
