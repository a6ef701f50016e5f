"""Tests for the calculator service."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from zst.core.errors import (
    ConfigurationError,
    DegeneratePeriodError,
    InvalidDateError,
    InvalidReadingError,
)
from zst.core.models import DisplayConfig, MeterConfig, RoundingMode, SeasonConfig
from zst.services.calculator import (
    CalculationRequest,
    Failed,
    MeterCalculator,
    NotApplicable,
    TargetResult,
)


def make_request(**overrides) -> CalculationRequest:
    values = dict(
        old_reading=Decimal("1000"),
        new_reading=Decimal("1100"),
        old_date=date(2025, 1, 1),
        new_date=date(2025, 1, 11),
    )
    values.update(overrides)
    return CalculationRequest(**values)


@pytest.fixture
def calculator() -> MeterCalculator:
    return MeterCalculator()


def test_full_report(calculator):
    report = calculator.calculate(
        make_request(between_date=date(2025, 1, 6), future_date=date(2025, 1, 21))
    )

    assert report.total.consumption == Decimal(100)
    assert report.total.days == 10
    assert report.total.overflow_occurred is False
    assert report.rates.average_rate_per_day == Decimal(10)

    assert isinstance(report.between, TargetResult)
    assert report.between.reading == Decimal(1050)
    assert report.between.consumption == Decimal(50)
    assert report.between.days == 5

    assert report.current.consumption == Decimal(50)
    assert report.current.days == 5

    assert isinstance(report.future, TargetResult)
    assert report.future.reading == Decimal(1200)
    assert report.future.consumption == Decimal(100)
    assert report.future.days == 10
    assert report.future.projection.elapsed_days == 20


def test_targets_not_supplied(calculator):
    report = calculator.calculate(make_request())
    assert report.between == NotApplicable()
    assert report.future == NotApplicable()
    assert report.current == report.total


@pytest.mark.parametrize(
    "overrides",
    [
        {"between_date": date(2025, 1, 1)},
        {"between_date": date(2025, 1, 11)},
        {"between_date": date(2025, 2, 1)},
    ],
)
def test_between_outside_period_fails(calculator, caplog, overrides):
    with caplog.at_level(logging.WARNING):
        report = calculator.calculate(make_request(**overrides))
    assert isinstance(report.between, Failed)
    assert isinstance(report.between.error, InvalidDateError)
    assert report.current == report.total
    assert "Between date not calculated" in caplog.text


@pytest.mark.parametrize("future", [date(2025, 1, 11), date(2025, 1, 5)])
def test_future_not_after_end_fails(calculator, caplog, future):
    with caplog.at_level(logging.WARNING):
        report = calculator.calculate(make_request(future_date=future))
    assert isinstance(report.future, Failed)
    assert isinstance(report.future.error, InvalidDateError)
    assert "Future date not calculated" in caplog.text


def test_failed_target_keeps_other_results(calculator):
    report = calculator.calculate(
        make_request(between_date=date(2025, 3, 1), future_date=date(2025, 1, 21))
    )
    assert isinstance(report.between, Failed)
    assert isinstance(report.future, TargetResult)
    assert report.future.reading == Decimal(1200)


def test_unchanged_request_returns_previous_report(calculator):
    first = calculator.calculate(make_request(future_date=date(2025, 1, 21)))
    second = calculator.calculate(make_request(future_date=date(2025, 1, 21)))
    assert second is first

    changed = calculator.calculate(make_request(future_date=date(2025, 1, 22)))
    assert changed is not first
    assert changed.future.reading == Decimal(1210)


def test_clear_cache(calculator):
    request = make_request()
    first = calculator.calculate(request)
    calculator.clear_cache()
    second = calculator.calculate(request)
    assert second is not first
    assert second == first


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"new_reading": Decimal("1000000")}, InvalidReadingError),
        ({"old_reading": Decimal("-1")}, InvalidReadingError),
        ({"old_reading": Decimal("1000.1234")}, InvalidReadingError),
        ({"new_date": date(2025, 1, 1)}, DegeneratePeriodError),
        ({"new_date": date(2024, 12, 1)}, InvalidDateError),
        (
            {"winter_mode": True, "season": SeasonConfig(winter_months=frozenset())},
            ConfigurationError,
        ),
    ],
)
def test_invalid_requests_raise(calculator, overrides, error):
    with pytest.raises(error):
        calculator.calculate(make_request(**overrides))


def test_small_meter_range():
    request = make_request(
        old_reading=Decimal("99990"),
        new_reading=Decimal("10"),
        meter=MeterConfig(leading_digits=5),
    )
    report = MeterCalculator().calculate(request)
    assert report.total.consumption == Decimal(20)
    assert report.total.overflow_occurred is True


def test_between_just_below_rollover(calculator):
    report = calculator.calculate(
        make_request(
            old_reading=Decimal("999999"),
            new_reading=Decimal("0"),
            old_date=date(2025, 6, 1),
            new_date=date(2025, 6, 3),
            between_date=date(2025, 6, 2),
        )
    )
    assert isinstance(report.between, TargetResult)
    assert report.between.reading == Decimal("999999.5")
    assert report.between.consumption == Decimal("0.5")
    assert report.current.consumption == Decimal("0.5")
    assert report.current.overflow_occurred is True


def test_fractional_anchor_in_top_unit(calculator):
    report = calculator.calculate(
        make_request(old_reading=Decimal("999999.5"), new_reading=Decimal("9.5"))
    )
    assert report.total.consumption == Decimal(10)
    assert report.total.overflow_occurred is True


def test_billing_mode_future_next_to_end(calculator):
    report = calculator.calculate(
        make_request(future_date=date(2025, 1, 12), billing_mode=True)
    )
    assert report.future.reading == Decimal(1100)
    assert report.future.consumption == Decimal(0)
    assert report.future.days == 1
    assert report.future.segment.billing_freeze is True


def test_billing_mode_between_next_to_end(calculator):
    report = calculator.calculate(
        make_request(between_date=date(2025, 1, 10), billing_mode=True)
    )
    assert report.between.reading == Decimal(1100)
    assert report.between.consumption == Decimal(100)
    assert report.between.days == 9
    assert report.current.consumption == Decimal(0)
    assert report.current.days == 1


def test_rollover_in_reference_period(calculator):
    report = calculator.calculate(
        make_request(
            old_reading=Decimal("999990"),
            new_reading=Decimal("10"),
            between_date=date(2025, 1, 6),
        )
    )
    assert report.total.consumption == Decimal(20)
    assert report.total.overflow_occurred is True
    assert report.between.reading == Decimal(0)
    assert report.between.overflow_occurred is True


def test_winter_mode_report(calculator):
    report = calculator.calculate(
        make_request(
            old_reading=Decimal("0"),
            new_reading=Decimal("1018"),
            old_date=date(2025, 2, 20),
            new_date=date(2025, 3, 2),
            future_date=date(2025, 3, 3),
            winter_mode=True,
        )
    )
    assert report.rates.summer_rate_per_day == Decimal(100)
    assert report.rates.winter_rate_per_day == Decimal(102)
    assert report.future.reading == Decimal(1118)
    assert report.future.consumption == Decimal(100)


@pytest.mark.parametrize(
    "mode, expected",
    [
        (RoundingMode.NEAREST, Decimal("33")),
        (RoundingMode.FLOOR, Decimal("33")),
        (RoundingMode.UNROUNDED, Decimal("33.333")),
    ],
)
def test_display_rounding(calculator, mode, expected):
    report = calculator.calculate(
        make_request(
            old_reading=Decimal("0"),
            new_reading=Decimal("100"),
            new_date=date(2025, 1, 4),
            between_date=date(2025, 1, 2),
            display=DisplayConfig(mode),
        )
    )
    assert report.display(report.between.reading) == expected


def test_project_outside_period(calculator):
    result = calculator.project(make_request(), date(2024, 12, 27))
    assert result.reading == Decimal(950)
    assert result.elapsed_days == -5
