"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal

import pytest

from zst.core.models import MeterConfig, ReferencePeriod


@pytest.fixture
def meter() -> MeterConfig:
    """A six-digit meter with three decimals (max 999999)."""
    return MeterConfig()


@pytest.fixture
def ten_day_period() -> ReferencePeriod:
    """
    1000 -> 1100 over ten January days: a uniform rate of 10 per day.
    """
    return ReferencePeriod.create(
        date(2025, 1, 1), Decimal("1000"), date(2025, 1, 11), Decimal("1100")
    )
