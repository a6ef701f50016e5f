"""Service that turns two anchor readings into a full calculation report."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from zst.core.calculations import Number, validate_reading
from zst.core.dates import to_calendar_date
from zst.core.errors import CalculationError, InvalidDateError
from zst.core.models import DisplayConfig, MeterConfig, ReferencePeriod, SeasonConfig
from zst.core.projection import (
    ProjectionResult,
    SegmentResult,
    measure_segment,
    project_reading,
)
from zst.core.rates import SeasonalRates, derive_rates
from zst.core.rounding import round_for_display

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationRequest:
    """All inputs of one calculation. Equal requests give equal reports."""

    old_reading: Number
    new_reading: Number
    old_date: date | datetime
    new_date: date | datetime
    between_date: date | datetime | None = None
    future_date: date | datetime | None = None
    meter: MeterConfig = field(default_factory=MeterConfig)
    season: SeasonConfig = field(default_factory=SeasonConfig)
    winter_mode: bool = False
    billing_mode: bool = False
    display: DisplayConfig = field(default_factory=DisplayConfig)


@dataclass(frozen=True)
class NotApplicable:
    """The optional target date was not supplied."""


@dataclass(frozen=True)
class Failed:
    """The optional target date was supplied but could not be used."""

    error: CalculationError


@dataclass(frozen=True)
class TargetResult:
    """A projected reading plus the segment shown for it."""

    projection: ProjectionResult
    segment: SegmentResult

    @property
    def reading(self) -> Decimal:
        return self.projection.reading

    @property
    def consumption(self) -> Decimal:
        return self.segment.consumption

    @property
    def days(self) -> int:
        return self.segment.days

    @property
    def overflow_occurred(self) -> bool:
        return self.projection.overflow_occurred or self.segment.overflow_occurred


TargetOutcome = TargetResult | NotApplicable | Failed


@dataclass(frozen=True)
class CalculationReport:
    """
    Results for the reference period and the optional target dates.

    ``total`` covers the whole reference period. ``current`` is the segment
    that ends at the new reading: it starts at the between reading when one
    was projected, otherwise it equals ``total``.
    """

    request: CalculationRequest
    period: ReferencePeriod
    rates: SeasonalRates
    total: SegmentResult
    current: SegmentResult
    between: TargetOutcome
    future: TargetOutcome

    def display(self, value: Number) -> Decimal:
        """Rounds a value with the rounding selected for this request."""
        return round_for_display(value, self.request.display)


class MeterCalculator:
    """
    Orchestrates rate derivation and projections for a calculation request.

    The last request and its report are kept, so recalculating unchanged
    inputs returns the previous report.
    """

    def __init__(self):
        self._last_request: CalculationRequest | None = None
        self._last_report: CalculationReport | None = None

    def calculate(self, request: CalculationRequest) -> CalculationReport:
        """
        Calculates consumption, rates and the optional between/future targets.

        Raises:
            InvalidReadingError: If an anchor reading is invalid.
            InvalidDateError: If the anchor dates are invalid or out of order.
            ConfigurationError: If the season settings contradict winter mode.
        """
        if self._last_report is not None and request == self._last_request:
            logger.debug("Inputs unchanged, returning the previous report.")
            return self._last_report

        report = self._calculate(request)
        self._last_request = request
        self._last_report = report
        return report

    def project(
        self, request: CalculationRequest, target_date: date | datetime
    ) -> ProjectionResult:
        """Projects the reading at any date, inside or outside the period."""
        period, rates = self._prepare(request)
        return project_reading(
            period, rates, target_date, request.meter.max_value, request.billing_mode
        )

    def clear_cache(self) -> None:
        self._last_request = None
        self._last_report = None

    def _prepare(
        self, request: CalculationRequest
    ) -> tuple[ReferencePeriod, SeasonalRates]:
        meter = request.meter
        old = validate_reading(request.old_reading, meter.max_value, meter.fraction_digits)
        new = validate_reading(request.new_reading, meter.max_value, meter.fraction_digits)
        period = ReferencePeriod.create(request.old_date, old, request.new_date, new)
        rates = derive_rates(period, meter.max_value, request.season, request.winter_mode)
        return period, rates

    def _calculate(self, request: CalculationRequest) -> CalculationReport:
        logger.debug(f"Calculating {request}")
        period, rates = self._prepare(request)
        max_value = request.meter.max_value

        total = measure_segment(
            period.start_date,
            period.start_reading,
            period.end_date,
            period.end_reading,
            max_value,
            request.billing_mode,
        )
        between = self._between(request, period, rates)
        future = self._future(request, period, rates)

        current = total
        if isinstance(between, TargetResult):
            current = measure_segment(
                between.projection.target_date,
                between.reading,
                period.end_date,
                period.end_reading,
                max_value,
                request.billing_mode,
            )

        logger.debug(
            f"Total consumption {total.consumption} over {total.days} days "
            f"(overflow={total.overflow_occurred})"
        )
        return CalculationReport(
            request=request,
            period=period,
            rates=rates,
            total=total,
            current=current,
            between=between,
            future=future,
        )

    def _between(
        self,
        request: CalculationRequest,
        period: ReferencePeriod,
        rates: SeasonalRates,
    ) -> TargetOutcome:
        if request.between_date is None:
            return NotApplicable()
        try:
            target = to_calendar_date(request.between_date)
            if not period.contains(target):
                raise InvalidDateError(
                    f"Between date {target} must lie between "
                    f"{period.start_date} and {period.end_date}."
                )
            projection = project_reading(
                period, rates, target, request.meter.max_value, request.billing_mode
            )
            segment = measure_segment(
                period.start_date,
                period.start_reading,
                target,
                projection.reading,
                request.meter.max_value,
                request.billing_mode,
            )
        except CalculationError as e:
            logger.warning(f"Between date not calculated: {e}")
            return Failed(e)
        return TargetResult(projection=projection, segment=segment)

    def _future(
        self,
        request: CalculationRequest,
        period: ReferencePeriod,
        rates: SeasonalRates,
    ) -> TargetOutcome:
        if request.future_date is None:
            return NotApplicable()
        try:
            target = to_calendar_date(request.future_date)
            if target <= period.end_date:
                raise InvalidDateError(
                    f"Future date {target} must lie after {period.end_date}."
                )
            projection = project_reading(
                period, rates, target, request.meter.max_value, request.billing_mode
            )
            segment = measure_segment(
                period.end_date,
                period.end_reading,
                target,
                projection.reading,
                request.meter.max_value,
                request.billing_mode,
            )
        except CalculationError as e:
            logger.warning(f"Future date not calculated: {e}")
            return Failed(e)
        return TargetResult(projection=projection, segment=segment)
