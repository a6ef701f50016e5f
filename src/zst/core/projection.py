"""Projection of meter readings to arbitrary dates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from zst.core.calculations import (
    ConsumptionResult,
    Number,
    as_decimal,
    consumption_between,
    normalize_reading,
)
from zst.core.dates import (
    are_adjacent_days,
    count_season_days,
    days_between,
    to_calendar_date,
)
from zst.core.models import ReferencePeriod
from zst.core.rates import SeasonalRates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionResult:
    """
    A projected reading at ``target_date``.

    ``elapsed_days`` is signed and counted from the start of the reference
    period. ``consumption`` is always the non-negative, rollover-aware
    consumption between the start reading and the projected reading, in
    chronological order.
    """

    target_date: date
    reading: Decimal
    consumption: Decimal
    elapsed_days: int
    overflow_occurred: bool


@dataclass(frozen=True)
class SegmentResult:
    """Days and consumption between two dated readings."""

    start_date: date
    end_date: date
    start_reading: Decimal
    end_reading: Decimal
    days: int
    consumption: Decimal
    overflow_occurred: bool
    billing_freeze: bool = False


def billing_freeze_applies(
    first_date: date | datetime,
    first_reading: Number,
    second_date: date | datetime,
    second_reading: Number,
    billing_mode: bool = True,
) -> bool:
    """
    Checks the billing rule for consecutive days with an unchanged reading.

    Meters read on e.g. 31.12. and 01.01. for annual billing show the same
    value; the day between them has no consumption.
    """
    return (
        billing_mode
        and are_adjacent_days(first_date, second_date)
        and as_decimal(first_reading) == as_decimal(second_reading)
    )


def measure_segment(
    start_date: date | datetime,
    start_reading: Number,
    end_date: date | datetime,
    end_reading: Number,
    max_value: int | Decimal,
    billing_mode: bool = False,
) -> SegmentResult:
    """
    Calculates the days and displayed consumption between two dated readings.

    In billing mode, consecutive days with equal readings count as exactly
    one day without consumption.
    """
    start = to_calendar_date(start_date)
    end = to_calendar_date(end_date)
    old = as_decimal(start_reading)
    new = as_decimal(end_reading)

    if billing_freeze_applies(start, old, end, new, billing_mode):
        logger.debug(f"Billing rule applied for {start}..{end}")
        return SegmentResult(
            start_date=start,
            end_date=end,
            start_reading=old,
            end_reading=new,
            days=1,
            consumption=Decimal(0),
            overflow_occurred=False,
            billing_freeze=True,
        )

    result = consumption_between(old, new, max_value)
    return SegmentResult(
        start_date=start,
        end_date=end,
        start_reading=old,
        end_reading=new,
        days=days_between(start, end),
        consumption=result.consumption,
        overflow_occurred=result.overflow_occurred,
    )


def _billing_anchor(period: ReferencePeriod, target: date) -> Decimal | None:
    """Returns the anchor reading a target next to an anchor date is frozen to."""
    if are_adjacent_days(period.end_date, target):
        return period.end_reading
    if are_adjacent_days(period.start_date, target):
        return period.start_reading
    return None


def project_reading(
    period: ReferencePeriod,
    rates: SeasonalRates,
    target_date: date | datetime,
    max_value: int | Decimal,
    billing_mode: bool = False,
) -> ProjectionResult:
    """
    Projects the meter reading at ``target_date``.

    Targets inside the reference period are interpolated, targets before or
    after it are extrapolated with the same rates. The raw value is wrapped
    into the meter range, so projections past the maximum or below zero
    roll over.

    Args:
        period: The reference period the rates were derived from.
        rates: Rates from ``derive_rates`` for ``period``.
        target_date: The date to project to.
        max_value: The highest value of the meter.
        billing_mode: Freeze targets on the day next to an anchor date to
            that anchor's reading.

    Returns:
        The projected reading with its consumption since the start anchor.
    """
    target = to_calendar_date(target_date)
    start = period.start_date
    elapsed = days_between(start, target)

    if elapsed == 0:
        return ProjectionResult(
            target_date=target,
            reading=period.start_reading,
            consumption=Decimal(0),
            elapsed_days=0,
            overflow_occurred=False,
        )

    forward = elapsed > 0

    if billing_mode:
        frozen = _billing_anchor(period, target)
        if frozen is not None:
            logger.debug(f"Billing rule: reading on {target} frozen to {frozen}")
            displayed = _displayed_consumption(
                period.start_reading, frozen, forward, max_value
            )
            return ProjectionResult(
                target_date=target,
                reading=frozen,
                consumption=displayed.consumption,
                elapsed_days=elapsed,
                overflow_occurred=displayed.overflow_occurred,
            )

    if forward:
        season_days = count_season_days(start, target, rates.winter_months)
    else:
        season_days = count_season_days(target, start, rates.winter_months)

    consumption = rates.consumption_for(season_days)
    if not forward:
        consumption = -consumption

    raw_reading = period.start_reading + consumption
    reading = normalize_reading(raw_reading, max_value)
    displayed = _displayed_consumption(period.start_reading, reading, forward, max_value)

    logger.debug(
        f"Projected {target} ({elapsed:+d} days): raw={raw_reading}, reading={reading}"
    )

    return ProjectionResult(
        target_date=target,
        reading=reading,
        consumption=displayed.consumption,
        elapsed_days=elapsed,
        overflow_occurred=raw_reading != reading or rates.period_overflow,
    )


def _displayed_consumption(
    start_reading: Decimal,
    reading: Decimal,
    forward: bool,
    max_value: int | Decimal,
) -> ConsumptionResult:
    if forward:
        return consumption_between(start_reading, reading, max_value)
    return consumption_between(reading, start_reading, max_value)
