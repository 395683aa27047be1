# src/dealcore/adapters/config.py
from datetime import date
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # -----------------------------
    # Default global assumptions (all percents, vacancy in months/year)
    # -----------------------------
    LTR_VACANCY_MONTHS: float = Field(default=1.0)
    SECTION8_VACANCY_MONTHS: float = Field(default=0.5)
    MAINTENANCE_PERCENT: float = Field(default=5.0)
    RENT_GROWTH_PERCENT: float = Field(default=3.0)
    APPRECIATION_PERCENT: float = Field(default=3.0)
    PROPERTY_TAX_INCREASE_PERCENT: float = Field(default=3.0)
    INSURANCE_INCREASE_PERCENT: float = Field(default=5.0)

    # -----------------------------
    # Projection
    # -----------------------------
    PROJECTION_YEARS: int = Field(default=30)

    # Pins "today" for property age, sale age and roof age rules.
    AS_OF_DATE: date | None = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="DEALCORE_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "LTR_VACANCY_MONTHS",
        "SECTION8_VACANCY_MONTHS",
        "MAINTENANCE_PERCENT",
        "RENT_GROWTH_PERCENT",
        "APPRECIATION_PERCENT",
        "PROPERTY_TAX_INCREASE_PERCENT",
        "INSURANCE_INCREASE_PERCENT",
        mode="before",
    )
    @classmethod
    def _to_non_negative_percent(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        try:
            f = float(v)
        except Exception as err:
            raise ValueError("value must be numeric or percent-like") from err
        if f < 0:
            raise ValueError("value must be non-negative")
        return f

    @field_validator("PROJECTION_YEARS", mode="before")
    @classmethod
    def _years_positive(cls, v: Any) -> Any:
        n = int(v)
        if n <= 0:
            raise ValueError("PROJECTION_YEARS must be > 0")
        return n

    def today(self) -> date:
        return self.AS_OF_DATE or date.today()


config = AppConfig()
