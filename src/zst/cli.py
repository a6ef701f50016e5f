"""Command line front end for the meter reading calculator."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from decimal import Decimal

from zst.config import Settings, settings
from zst.core.dates import format_date, parse_date
from zst.core.errors import CalculationError
from zst.core.formatting import format_number, parse_number
from zst.core.models import DisplayConfig, MeterConfig, RoundingMode
from zst.services.calculator import (
    CalculationReport,
    CalculationRequest,
    Failed,
    MeterCalculator,
    TargetOutcome,
    TargetResult,
)

logger = logging.getLogger(__name__)


def build_parser(config: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="zst-rechner",
        description=(
            "Interpolate and extrapolate meter readings from two dated readings. "
            "Readings use German notation (1.234,567), dates DD.MM.YYYY."
        ),
    )
    p.add_argument("--old", required=True, help="Older meter reading.")
    p.add_argument("--new", required=True, help="Newer meter reading.")
    p.add_argument("--start", required=True, help="Date of the older reading.")
    p.add_argument("--end", required=True, help="Date of the newer reading.")
    p.add_argument("--between", default=None, help="Date between start and end.")
    p.add_argument("--future", default=None, help="Date after end for a forecast.")
    p.add_argument(
        "--winter",
        action=argparse.BooleanOptionalAction,
        default=config.WINTER_MODE,
        help=f"Weight winter months by the winter factor ({config.WINTER_FACTOR}).",
    )
    p.add_argument(
        "--billing",
        action=argparse.BooleanOptionalAction,
        default=config.BILLING_MODE,
        help="No consumption between consecutive days with equal readings.",
    )
    p.add_argument(
        "--rounding",
        choices=[mode.value for mode in RoundingMode],
        default=config.ROUNDING_MODE.value,
        help="Rounding of displayed values (default: %(default)s).",
    )
    p.add_argument(
        "--leading-digits",
        type=int,
        default=config.LEADING_DIGITS,
        help="Digits before the comma on the meter (default: %(default)s).",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return p


def build_request(args: argparse.Namespace, config: Settings) -> CalculationRequest:
    """Parses the text arguments into a calculation request."""
    fraction_digits = config.FRACTION_DIGITS
    return CalculationRequest(
        old_reading=parse_number(args.old, fraction_digits),
        new_reading=parse_number(args.new, fraction_digits),
        old_date=parse_date(args.start),
        new_date=parse_date(args.end),
        between_date=parse_date(args.between) if args.between else None,
        future_date=parse_date(args.future) if args.future else None,
        meter=MeterConfig(
            leading_digits=args.leading_digits, fraction_digits=fraction_digits
        ),
        season=config.season_config(),
        winter_mode=args.winter,
        billing_mode=args.billing,
        display=DisplayConfig(
            rounding_mode=RoundingMode(args.rounding), fraction_digits=fraction_digits
        ),
    )


def _fmt(report: CalculationReport, value: Decimal) -> str:
    return format_number(report.display(value), report.request.display.fraction_digits)


def _overflow_note(overflow: bool) -> str:
    return " (Überlauf)" if overflow else ""


def _render_target(report: CalculationReport, label: str, outcome: TargetOutcome) -> list[str]:
    if isinstance(outcome, TargetResult):
        return [
            f"{label} {format_date(outcome.projection.target_date)}: "
            f"Zählerstand {_fmt(report, outcome.reading)}, "
            f"Verbrauch {_fmt(report, outcome.consumption)}, "
            f"Tage {outcome.days}{_overflow_note(outcome.overflow_occurred)}"
        ]
    if isinstance(outcome, Failed):
        return [f"{label}: nicht berechenbar ({outcome.error})"]
    return []


def render_report(report: CalculationReport) -> str:
    """Formats a report as German text lines."""
    period = report.period
    rates = report.rates
    lines = [
        f"Zeitraum {format_date(period.start_date)} - {format_date(period.end_date)}: "
        f"Verbrauch {_fmt(report, report.total.consumption)}, "
        f"Tage {report.total.days}{_overflow_note(report.total.overflow_occurred)}",
        f"Verbrauch pro Tag: {_fmt(report, rates.average_rate_per_day)}",
    ]
    if report.request.winter_mode:
        lines.append(
            f"Verbrauch pro Tag Sommer/Winter: "
            f"{_fmt(report, rates.summer_rate_per_day)} / "
            f"{_fmt(report, rates.winter_rate_per_day)}"
        )
    lines.extend(_render_target(report, "Zwischenstand", report.between))
    if isinstance(report.between, TargetResult):
        lines.append(
            f"Aktuell ab Zwischenstand: Verbrauch {_fmt(report, report.current.consumption)}, "
            f"Tage {report.current.days}"
        )
    lines.extend(_render_target(report, "Prognose", report.future))
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    """Runs the calculator and returns the process exit code."""
    args = build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    try:
        request = build_request(args, settings)
        report = MeterCalculator().calculate(request)
    except CalculationError as e:
        logger.debug("Calculation failed", exc_info=True)
        print(f"Fehler: {e}", file=sys.stderr)
        return 2

    print(render_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
