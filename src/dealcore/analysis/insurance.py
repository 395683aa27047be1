# src/dealcore/analysis/insurance.py
"""
Property tax and landlord-insurance estimates.

Insurance follows a per-sqft rate table keyed on building age, with
wind-mitigation discounts for impact windows and a new roof, rounded to the
nearest $50 the way carriers quote. Without a usable sqft we fall back to a
legacy %-of-value table. These rounded figures feed straight into NOI, so the
rounding is part of the model, not presentation.
"""
from __future__ import annotations

from datetime import date

from dealcore.adapters.config import config
from dealcore.domain.money import round_half_up, round_to_nearest

PROPERTY_TAX_RATE = 0.020          # of price/value, investment property
PRE_REPAIR_INSURANCE_RATE = 0.012  # of purchase price when sqft is unknown

HURRICANE_WINDOWS_DISCOUNT = 0.88
NEW_ROOF_DISCOUNT = 0.83

# (max age in years, $/sqft/year)
_RATE_PER_SQFT_BY_AGE = (
    (5, 2.50),
    (15, 3.00),
    (30, 3.50),
    (50, 4.25),
)
_RATE_PER_SQFT_OLDEST = 5.00

# legacy %-of-value rates by age
_VALUE_RATE_BY_AGE = (
    (5, 0.005),
    (10, 0.008),
    (20, 0.012),
    (35, 0.015),
    (50, 0.020),
    (70, 0.028),
)
_VALUE_RATE_OLDEST = 0.040


def _age(year_built: int, as_of: date | None) -> int:
    today = as_of or config.today()
    return today.year - year_built


def insurance_rate_per_sqft(year_built: int, as_of: date | None = None) -> float:
    age = _age(year_built, as_of)
    for max_age, rate in _RATE_PER_SQFT_BY_AGE:
        if age <= max_age:
            return rate
    return _RATE_PER_SQFT_OLDEST


def insurance_rate_by_value(year_built: int, as_of: date | None = None) -> float:
    age = _age(year_built, as_of)
    for max_age, rate in _VALUE_RATE_BY_AGE:
        if age <= max_age:
            return rate
    return _VALUE_RATE_OLDEST


def insurance_from_sqft(
    sqft: float,
    year_built: int,
    has_hurricane_windows: bool = False,
    has_new_roof: bool = False,
    as_of: date | None = None,
) -> float:
    premium = sqft * insurance_rate_per_sqft(year_built, as_of)
    # discounts compound
    if has_hurricane_windows:
        premium = premium * HURRICANE_WINDOWS_DISCOUNT
    if has_new_roof:
        premium = premium * NEW_ROOF_DISCOUNT
    return round_to_nearest(premium, 50)


def estimate_insurance(
    value: float,
    year_built: int,
    sqft: float | None = None,
    has_hurricane_windows: bool = False,
    has_new_roof: bool = False,
    as_of: date | None = None,
) -> float:
    """
    Annual premium for a property worth `value` (purchase price before
    rehab, ARV after). sqft wins when known; year built drives the rate
    either way.
    """
    if sqft and sqft > 0:
        return insurance_from_sqft(sqft, year_built, has_hurricane_windows, has_new_roof, as_of)

    premium = round_half_up(value * insurance_rate_by_value(year_built, as_of))
    if has_hurricane_windows:
        premium = round_half_up(premium * HURRICANE_WINDOWS_DISCOUNT)
    if has_new_roof:
        premium = round_half_up(premium * NEW_ROOF_DISCOUNT)
    return float(premium)


def pre_repair_insurance(
    purchase_price: float,
    sqft: float | None,
    year_built: int,
    as_of: date | None = None,
) -> float:
    """Insurance carried while the property is being renovated (no mitigation credits)."""
    if sqft and sqft > 0:
        return round_to_nearest(sqft * insurance_rate_per_sqft(year_built, as_of), 50)
    return purchase_price * PRE_REPAIR_INSURANCE_RATE


def estimate_property_taxes(value: float) -> float:
    return float(round_half_up(value * PROPERTY_TAX_RATE))
