"""Rounding of results for display."""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

from zst.core.calculations import Number, as_decimal
from zst.core.models import DEFAULT_FRACTION_DIGITS, DisplayConfig, RoundingMode

_ONE = Decimal(1)


def round_value(
    value: Number,
    mode: RoundingMode | str = RoundingMode.NEAREST,
    fraction_digits: int = DEFAULT_FRACTION_DIGITS,
) -> Decimal:
    """
    Rounds a reading or consumption value for display.

    Args:
        value: The value to round.
        mode: ``nearest`` rounds half away from zero to an integer, ``floor``
            rounds down to an integer, ``unrounded`` keeps up to
            ``fraction_digits`` decimals (rounding half away from zero at
            the last kept digit).
        fraction_digits: Decimals kept in ``unrounded`` mode.

    Returns:
        The rounded value.
    """
    number = as_decimal(value)
    mode = RoundingMode(mode)

    if mode is RoundingMode.NEAREST:
        return number.quantize(_ONE, rounding=ROUND_HALF_UP)
    if mode is RoundingMode.FLOOR:
        return number.quantize(_ONE, rounding=ROUND_FLOOR)
    return number.quantize(Decimal(1).scaleb(-fraction_digits), rounding=ROUND_HALF_UP)


def round_for_display(value: Number, config: DisplayConfig) -> Decimal:
    """Applies the rounding selected in ``config``."""
    return round_value(value, config.rounding_mode, config.fraction_digits)
