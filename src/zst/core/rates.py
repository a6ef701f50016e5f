"""Daily consumption rates derived from a reference period."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from zst.core.calculations import consumption_between
from zst.core.dates import SeasonDays, count_season_days
from zst.core.errors import ConfigurationError
from zst.core.models import ReferencePeriod, SeasonConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeasonalRates:
    """
    Per-day consumption of a reference period, split by season.

    Without winter mode both rates are equal and ``winter_factor`` is 1.
    """

    summer_rate_per_day: Decimal
    winter_rate_per_day: Decimal
    total_consumption: Decimal
    total_days: int
    season_days: SeasonDays
    winter_factor: Decimal
    winter_months: frozenset[int]
    period_overflow: bool

    @property
    def effective_days(self) -> Decimal:
        """Days of the period with winter days weighted by the winter factor."""
        return self._weighted(self.season_days)

    @property
    def average_rate_per_day(self) -> Decimal:
        """The plain mean over the whole period, as shown to the user."""
        return self.total_consumption / self.total_days

    def consumption_for(self, days: SeasonDays) -> Decimal:
        """
        Returns the consumption attributed to ``days``.

        Equal to ``summer_days * summer_rate + winter_days * winter_rate``, but
        computed as a share of the period total so that the full period gives
        back exactly ``total_consumption``.
        """
        return self.total_consumption * self._weighted(days) / self.effective_days

    def _weighted(self, days: SeasonDays) -> Decimal:
        return Decimal(days.summer_days) + Decimal(days.winter_days) * self.winter_factor


def derive_rates(
    period: ReferencePeriod,
    max_value: int | Decimal,
    season: SeasonConfig | None = None,
    winter_mode: bool = False,
) -> SeasonalRates:
    """
    Derives summer and winter daily rates from a reference period.

    Args:
        period: The two anchor readings.
        max_value: The highest value of the meter, used for rollover.
        season: Winter months and factor. Defaults to Nov-Feb and 1.02.
        winter_mode: Whether winter days are weighted by the winter factor.

    Returns:
        The rate pair every projection of this period is evaluated with.

    Raises:
        ConfigurationError: If winter mode is on without winter months or
            with a factor that is not above 1.
        InvalidReadingError: If an anchor reading is outside the meter range.
    """
    season = season or SeasonConfig()
    if winter_mode:
        if not season.winter_months:
            raise ConfigurationError("Winter mode is enabled but no winter months are set.")
        if season.winter_factor <= 1:
            raise ConfigurationError(
                f"Winter factor must be greater than 1, got {season.winter_factor}."
            )

    total = consumption_between(period.start_reading, period.end_reading, max_value)
    season_days = count_season_days(
        period.start_date, period.end_date, season.winter_months
    )
    factor = season.winter_factor if winter_mode else Decimal(1)

    effective_days = Decimal(season_days.summer_days) + season_days.winter_days * factor
    summer_rate = total.consumption / effective_days
    winter_rate = summer_rate * factor

    logger.debug(
        f"Rates for {period.start_date}..{period.end_date}: "
        f"consumption={total.consumption}, days={period.days}, "
        f"winter_days={season_days.winter_days}, summer_days={season_days.summer_days}, "
        f"summer_rate={summer_rate}, winter_rate={winter_rate}"
    )

    return SeasonalRates(
        summer_rate_per_day=summer_rate,
        winter_rate_per_day=winter_rate,
        total_consumption=total.consumption,
        total_days=period.days,
        season_days=season_days,
        winter_factor=factor,
        winter_months=season.winter_months,
        period_overflow=total.overflow_occurred,
    )
