"""Core business logic for meter reading calculations."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from zst.core.errors import ConfigurationError, InvalidReadingError

Number = Decimal | int | float | str


@dataclass(frozen=True)
class ConsumptionResult:
    """Consumption between two readings and whether the meter rolled over."""

    consumption: Decimal
    overflow_occurred: bool


def as_decimal(value: Number) -> Decimal:
    """
    Converts a numeric input to ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    instead of its binary expansion.

    Raises:
        InvalidReadingError: If the value cannot be read as a number.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidReadingError(f"Expected a number, got {value!r}.")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise InvalidReadingError(f"Expected a number, got {value!r}.") from e


def max_value_for(leading_digits: int) -> int:
    """Returns the highest value a meter with ``leading_digits`` digits can show."""
    if leading_digits < 1:
        raise ConfigurationError(
            f"A meter needs at least one leading digit, got {leading_digits}."
        )
    return 10**leading_digits - 1


def validate_reading(
    value: Number,
    max_value: int | Decimal,
    fraction_digits: int | None = None,
) -> Decimal:
    """
    Checks that a reading is a value the meter can actually display.

    Args:
        value: The reading to check.
        max_value: The highest integer part of the meter. Fractions below
            ``max_value + 1`` are valid, e.g. 999999,999 on a six-digit meter.
        fraction_digits: Maximum number of decimals, or None to skip the check.

    Returns:
        The reading as ``Decimal``.

    Raises:
        InvalidReadingError: If the reading is non-finite, negative, not below
            ``max_value + 1`` or has too many decimals.
    """
    reading = as_decimal(value)
    if not reading.is_finite():
        raise InvalidReadingError(f"Reading must be a finite number, got {reading}.")
    if reading < 0:
        raise InvalidReadingError(f"Reading cannot be negative: {reading}.")
    if reading >= Decimal(max_value) + 1:
        raise InvalidReadingError(
            f"Reading {reading} exceeds the meter maximum {max_value}."
        )
    if fraction_digits is not None:
        exponent = reading.normalize().as_tuple().exponent
        if exponent < -fraction_digits:
            raise InvalidReadingError(
                f"Reading {reading} has more than {fraction_digits} decimals."
            )
    return reading


def consumption_between(
    old_reading: Number,
    new_reading: Number,
    max_value: int | Decimal,
) -> ConsumptionResult:
    """
    Calculates the consumption between two meter readings.

    A new reading below the old one means the counter passed ``max_value``
    and started again at zero. The meter has ``max_value + 1`` states, so the
    consumption is ``(max_value + 1 - old) + new``.

    Args:
        old_reading: The earlier reading.
        new_reading: The later reading.
        max_value: The highest value of the meter.

    Returns:
        The consumption and whether a rollover was assumed.

    Raises:
        InvalidReadingError: If a reading lies outside ``[0, max_value + 1)``.
    """
    old = validate_reading(old_reading, max_value)
    new = validate_reading(new_reading, max_value)

    if new >= old:
        return ConsumptionResult(consumption=new - old, overflow_occurred=False)

    states = Decimal(max_value) + 1
    return ConsumptionResult(consumption=(states - old) + new, overflow_occurred=True)


def normalize_reading(value: Number, max_value: int | Decimal) -> Decimal:
    """
    Wraps any value into the meter range ``[0, max_value + 1)``.

    Works for values above the maximum (forward rollover) and for negative
    values from extrapolating backwards past zero.
    """
    raw = as_decimal(value)
    if not raw.is_finite():
        raise InvalidReadingError(f"Cannot normalize a non-finite value: {raw}.")
    states = Decimal(max_value) + 1
    if 0 <= raw < states:
        return raw
    # Decimal remainder keeps the sign of the dividend.
    wrapped = raw % states
    if wrapped < 0:
        wrapped += states
    return abs(wrapped) if wrapped.is_zero() else wrapped
