from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ExitStrategy = Literal["sell", "refi"]


class PropertyType(str, Enum):
    SINGLE_FAMILY = "single_family"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"
    MULTI_FAMILY = "multi_family"
    MANUFACTURED = "manufactured"
    OTHER = "other"

    @property
    def is_multi_family(self) -> bool:
        return self is PropertyType.MULTI_FAMILY

    @property
    def is_condo(self) -> bool:
        return self is PropertyType.CONDO

    @classmethod
    def from_upstream(cls, raw: Any) -> "PropertyType | None":
        """
        Map listing-provider labels (Single Family, Condo, Multi-Family (2-4),
        Duplex, ...) onto the closed set above.
        """
        if raw is None or isinstance(raw, cls):
            return raw
        s = str(raw).strip().lower()
        if not s:
            return None
        try:
            return cls(s)
        except ValueError:
            pass
        if "multi" in s or s in {"duplex", "triplex", "quadplex", "fourplex", "apartment"}:
            return cls.MULTI_FAMILY
        if "condo" in s:
            return cls.CONDO
        if "town" in s:
            return cls.TOWNHOUSE
        if "single" in s or s in {"house", "sfr"}:
            return cls.SINGLE_FAMILY
        if "manufactured" in s or "mobile" in s:
            return cls.MANUFACTURED
        return cls.OTHER


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class UnitDetail(_Record):
    beds: int = 0
    baths: float = 0.0
    sqft: float | None = None
    section8_rent: float | None = None
    market_rent: float | None = None
    after_rehab_market_rent: float | None = None
    str_annual_revenue: float | None = None
    str_annual_expenses: float | None = None
    # legacy monthly STR figure, only used when the annual one is missing
    str_monthly_revenue: float | None = None

    def ltr_rent(self) -> float:
        """Explicit market rent wins; otherwise derive it from the voucher amount."""
        if self.market_rent is not None:
            return self.market_rent
        return (self.section8_rent or 0.0) / 1.1

    def voucher_rent(self) -> float:
        return self.section8_rent or 0.0

    def post_rehab_rent(self) -> float:
        if self.after_rehab_market_rent is not None:
            return self.after_rehab_market_rent
        return self.ltr_rent()

    def str_revenue(self) -> float:
        if self.str_annual_revenue:
            return self.str_annual_revenue
        if self.str_monthly_revenue:
            return self.str_monthly_revenue * 12
        return 0.0

    def str_expenses(self) -> float:
        return self.str_annual_expenses or 0.0


class DealInputs(_Record):
    """
    One acquisition as supplied by the deal-record store.

    All rates and ratios are percents (7.0 == 7%). Money is in whole currency.
    """
    address: str = ""
    units: int = 1
    unit_details: list[UnitDetail] = Field(default_factory=list)
    total_sqft: float = 0.0
    year_built: int = 0

    purchase_price: float = Field(..., description="Contract purchase price")
    property_taxes: float = 0.0
    property_insurance: float = 0.0
    has_hurricane_windows: bool = False
    has_new_roof: bool = False

    # acquisition loan
    loan_interest_rate: float = 7.0
    loan_term: int = Field(default=30, description="Amortization period in years")
    down_payment: float = Field(default=20.0, description="20 means 20% down")
    acquisition_costs: float = Field(default=5.0, description="closing costs as % of price")
    acquisition_costs_amount: float | None = None
    setup_furnish_cost: float = 0.0

    # rehab / bridge loan
    rehab_cost: float = 0.0
    rehab_months: float = 0.0
    rehab_financing_rate: float = 0.0
    rehab_entry_points: float = 0.0
    rehab_exit_points: float = 0.0
    bridge_ltc: float = Field(default=90.0, alias="bridgeLTC")
    bridge_rehab_budget_percent: float = 100.0
    bridge_max_arv_ltv: float = Field(default=70.0, alias="bridgeMaxARLTV")
    bridge_settlement_charges: float | None = None

    # exit
    exit_strategy: ExitStrategy = "refi"
    exit_refi_ltv: float = Field(default=75.0, alias="exitRefiLTV")
    exit_refi_rate: float = 7.0
    dscr_acquisition_costs: float | None = None
    after_repair_value: float = 0.0
    rehab_property_taxes: float = 0.0
    rehab_property_insurance: float = 0.0
    sell_closing_costs: float = 8.0

    @property
    def down_payment_amount(self) -> float:
        return self.purchase_price * (self.down_payment / 100)

    @property
    def loan_amount(self) -> float:
        return self.purchase_price - self.down_payment_amount

    @property
    def acquisition_costs_total(self) -> float:
        if self.acquisition_costs_amount is not None:
            return self.acquisition_costs_amount
        return self.purchase_price * (self.acquisition_costs / 100)


class ComparableProperty(_Record):
    """A sold comp, or the subject property itself (sold_price left at 0)."""
    sold_price: float = 0.0
    sqft: float = 0.0
    beds: float = 0.0
    baths: float = 0.0
    year_built: int = 0
    property_type: PropertyType | None = None
    lot_size: float | None = None
    has_pool: bool | None = None
    parking_spaces: int | None = None
    days_on_market: int | None = None
    sold_date: date | None = None

    @field_validator("property_type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        return PropertyType.from_upstream(v)

    @field_validator("sold_date", mode="before")
    @classmethod
    def _tolerant_date(cls, v: Any) -> Any:
        # unparseable sale dates just skip the market-timing adjustment
        if isinstance(v, datetime):
            return v.date()
        if v is None or isinstance(v, date):
            return v
        try:
            return date.fromisoformat(str(v).strip()[:10])
        except ValueError:
            return None
