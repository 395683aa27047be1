import pytest

from dealcore.analysis.exit_scenarios import bridge_financing, calculate_rehab_scenarios
from dealcore.domain.finance import AmortizationSchedule


def test_bridge_financing(rehab_deal, as_of):
    b = bridge_financing(rehab_deal, as_of)
    assert b.loan_amount == pytest.approx(230_000)
    # 6% of purchase, withheld from proceeds
    assert b.entry_points_cost == pytest.approx(12_000)
    assert b.down_payment == pytest.approx(250_000 - (230_000 - 12_000))
    assert b.pre_repair_taxes == pytest.approx(4_000)
    # 1500 sqft x $4.25 (35-year-old house) -> nearest $50
    assert b.pre_repair_insurance == pytest.approx(6_400)
    monthly = 230_000 * 0.10 / 12 + (4_000 + 6_400) / 12
    assert b.carrying_costs == pytest.approx(monthly * 6)
    assert b.total_cash_invested == pytest.approx(32_000 + monthly * 6)


def test_sell_scenario(rehab_deal, as_of):
    sell = calculate_rehab_scenarios(rehab_deal, as_of).sell
    assert sell.selling_costs == pytest.approx(25_600)
    assert sell.sale_proceeds == pytest.approx(64_400)
    assert sell.exit_points_cost == 0.0
    assert sell.net_profit == pytest.approx(64_400 - sell.total_cash_invested)
    assert sell.funds_gap == 0.0
    assert sell.new_loan_amount is None


def test_refi_scenario(rehab_deal, as_of):
    exits = calculate_rehab_scenarios(rehab_deal, as_of)
    refi = exits.refi
    assert refi.new_loan_amount == pytest.approx(240_000)
    assert refi.exit_points_cost == pytest.approx(16_000)
    assert refi.cash_out_amount == pytest.approx(-6_000)
    assert refi.capital_left_in_deal == pytest.approx(exits.bridge.total_cash_invested + 6_000)
    assert refi.funds_gap == refi.capital_left_in_deal
    assert refi.equity_retained == pytest.approx(80_000)

    schedule = AmortizationSchedule(240_000, 7.0, 30)
    assert refi.new_monthly_payment == pytest.approx(schedule.monthly_payment)
    assert refi.new_annual_debt_service == pytest.approx(schedule.annual_debt_service)


def test_explicit_overrides(rehab_deal, as_of):
    deal = rehab_deal.model_copy(
        update={"bridge_settlement_charges": 5_000.0, "dscr_acquisition_costs": 4_000.0}
    )
    exits = calculate_rehab_scenarios(deal, as_of)
    assert exits.bridge.entry_points_cost == 5_000
    assert exits.bridge.down_payment == pytest.approx(250_000 - (230_000 - 5_000))
    assert exits.refi.cash_out_amount == pytest.approx(240_000 - 230_000 - 4_000)


def test_partial_rehab_budget(rehab_deal, as_of):
    deal = rehab_deal.model_copy(update={"bridge_rehab_budget_percent": 50.0, "bridge_ltc": 80.0})
    b = bridge_financing(deal, as_of)
    assert b.loan_amount == pytest.approx(160_000 + 25_000)


def test_unknown_sqft_uses_price_based_insurance(rehab_deal, as_of):
    deal = rehab_deal.model_copy(update={"total_sqft": 0.0})
    b = bridge_financing(deal, as_of)
    assert b.pre_repair_insurance == pytest.approx(200_000 * 0.012)


def test_chosen_follows_exit_strategy(rehab_deal, as_of):
    exits = calculate_rehab_scenarios(rehab_deal, as_of)
    assert exits.chosen("sell") is exits.sell
    assert exits.chosen("refi") is exits.refi
