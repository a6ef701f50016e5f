"""Application configuration."""

from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from zst.core.models import DisplayConfig, MeterConfig, RoundingMode, SeasonConfig


class Settings(BaseSettings):
    """Loads and validates application settings from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="ZST_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    LEADING_DIGITS: int = Field(6, ge=1, le=12)
    FRACTION_DIGITS: int = Field(3, ge=0, le=6)
    WINTER_FACTOR: Decimal = Decimal("1.02")
    WINTER_MONTHS: list[int] = [11, 12, 1, 2]
    WINTER_MODE: bool = False
    BILLING_MODE: bool = False
    ROUNDING_MODE: RoundingMode = RoundingMode.NEAREST
    LOG_LEVEL: str = "INFO"

    @field_validator("WINTER_MONTHS")
    @classmethod
    def validate_winter_months(cls, v: list[int]) -> list[int]:
        invalid = [m for m in v if not 1 <= m <= 12]
        if invalid:
            raise ValueError(f"winter months must be between 1 and 12, got {invalid}")
        return v

    def meter_config(self) -> MeterConfig:
        return MeterConfig(
            leading_digits=self.LEADING_DIGITS, fraction_digits=self.FRACTION_DIGITS
        )

    def season_config(self) -> SeasonConfig:
        return SeasonConfig.from_values(self.WINTER_MONTHS, self.WINTER_FACTOR)

    def display_config(self) -> DisplayConfig:
        return DisplayConfig(
            rounding_mode=self.ROUNDING_MODE, fraction_digits=self.FRACTION_DIGITS
        )


settings = Settings()
