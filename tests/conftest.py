# tests/conftest.py
from datetime import date

import pytest

from dealcore.domain.assumptions import GlobalAssumptions
from dealcore.domain.property import DealInputs, UnitDetail

AS_OF = date(2025, 6, 1)


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def assumptions() -> GlobalAssumptions:
    # library defaults, independent of any DEALCORE_* env vars
    return GlobalAssumptions()


@pytest.fixture
def rental_deal() -> DealInputs:
    """
    Single-family rental with easy numbers:
    $200k price, 20% down, 0% / 10-year loan -> $16,000 annual debt service.
    """
    return DealInputs(
        address="123 Test St, Miami, FL 33101",
        units=1,
        unit_details=[UnitDetail(beds=3, baths=2, market_rent=2000, section8_rent=2200)],
        total_sqft=1500,
        year_built=1990,
        purchase_price=200_000,
        property_taxes=4_000,
        property_insurance=1_500,
        loan_interest_rate=0.0,
        loan_term=10,
        down_payment=20.0,
        acquisition_costs=5.0,
    )


@pytest.fixture
def rehab_deal() -> DealInputs:
    """Purchase $200k + rehab $50k, ARV $320k, 90% LTC bridge."""
    return DealInputs(
        address="456 Flip Ave, Tampa, FL 33602",
        units=1,
        unit_details=[UnitDetail(beds=3, baths=2, market_rent=1800, after_rehab_market_rent=2600)],
        total_sqft=1500,
        year_built=1990,
        purchase_price=200_000,
        rehab_cost=50_000,
        rehab_months=6,
        rehab_financing_rate=10.0,
        bridge_ltc=90.0,
        bridge_rehab_budget_percent=100.0,
        after_repair_value=320_000,
        sell_closing_costs=8.0,
        exit_refi_ltv=75.0,
        exit_refi_rate=7.0,
        loan_term=30,
    )
