"""Conversion between German number text and ``Decimal``."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

from zst.core.calculations import Number, as_decimal
from zst.core.errors import InvalidReadingError
from zst.core.models import DEFAULT_FRACTION_DIGITS


def _number_pattern(fraction_digits: int) -> re.Pattern[str]:
    # Either grouped thousands (1.234.567) or plain digits (1234567).
    integer = r"(?:0|[1-9]\d{0,2}(?:\.\d{3})+|\d+)"
    fraction = rf"(?:,\d{{1,{fraction_digits}}})?" if fraction_digits else ""
    return re.compile(rf"^{integer}{fraction}$")


def parse_number(text: str, fraction_digits: int = DEFAULT_FRACTION_DIGITS) -> Decimal:
    """
    Parses a meter reading written in German notation.

    Accepts ``1234``, ``1.234``, ``1.234,567``, ``1234,56`` and ``0,123``.
    Whitespace is ignored.

    Args:
        text: The reading as typed by the user.
        fraction_digits: Maximum number of decimals after the comma.

    Raises:
        InvalidReadingError: If the text is empty or not a valid reading.
    """
    cleaned = re.sub(r"\s", "", text or "")
    if not cleaned:
        raise InvalidReadingError("Reading is empty.")
    if not _number_pattern(fraction_digits).match(cleaned):
        raise InvalidReadingError(
            f"Invalid reading format: {text!r}. Expected e.g. 1.234,567 or 1234,56."
        )
    return Decimal(cleaned.replace(".", "").replace(",", "."))


def format_number(
    value: Number,
    max_fraction_digits: int = DEFAULT_FRACTION_DIGITS,
    min_fraction_digits: int = 0,
) -> str:
    """
    Formats a number in German notation, e.g. ``1.234,5``.

    Trailing zeros after the comma are dropped down to ``min_fraction_digits``.
    """
    number = as_decimal(value)
    quantized = number.quantize(
        Decimal(1).scaleb(-max_fraction_digits), rounding=ROUND_HALF_UP
    )
    if quantized.is_zero():
        quantized = abs(quantized)

    integer, _, fraction = f"{quantized:,f}".partition(".")
    fraction = fraction.rstrip("0").ljust(min_fraction_digits, "0")
    integer = integer.replace(",", ".")
    return f"{integer},{fraction}" if fraction else integer
