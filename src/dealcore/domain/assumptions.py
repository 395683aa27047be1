# src/dealcore/domain/assumptions.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Section8Rents(BaseModel):
    """Voucher payment standard per bedroom count for one zip code."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    studio: float | None = None
    bed1: float | None = Field(default=None, alias="1bed")
    bed2: float | None = Field(default=None, alias="2bed")
    bed3: float | None = Field(default=None, alias="3bed")
    bed4: float | None = Field(default=None, alias="4bed")
    bed5: float | None = Field(default=None, alias="5bed")
    bed6: float | None = Field(default=None, alias="6bed")
    bed7: float | None = Field(default=None, alias="7bed")

    def for_beds(self, beds: int) -> float | None:
        if beds == 0:
            return self.studio
        return getattr(self, f"bed{beds}", None)


class Section8ZipData(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    zip_code: str
    zone: int
    rents: Section8Rents = Field(default_factory=Section8Rents)


class GlobalAssumptions(BaseModel):
    """
    Shared, read-only assumptions applied to every projection run.

    Percent fields are in percent (3.0 == 3%); vacancy is months per year.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    ltr_vacancy_months: float = 1.0
    section8_vacancy_months: float = 0.5
    maintenance_percent: float = 5.0
    rent_growth_percent: float = 3.0
    appreciation_percent: float = 3.0
    property_tax_increase_percent: float = 3.0
    insurance_increase_percent: float = 5.0
    section8_zip_data: list[Section8ZipData] = Field(default_factory=list)

    @classmethod
    def from_config(cls) -> "GlobalAssumptions":
        from dealcore.adapters.config import config

        return cls(
            ltr_vacancy_months=config.LTR_VACANCY_MONTHS,
            section8_vacancy_months=config.SECTION8_VACANCY_MONTHS,
            maintenance_percent=config.MAINTENANCE_PERCENT,
            rent_growth_percent=config.RENT_GROWTH_PERCENT,
            appreciation_percent=config.APPRECIATION_PERCENT,
            property_tax_increase_percent=config.PROPERTY_TAX_INCREASE_PERCENT,
            insurance_increase_percent=config.INSURANCE_INCREASE_PERCENT,
        )
