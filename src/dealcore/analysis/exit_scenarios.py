# src/dealcore/analysis/exit_scenarios.py
from __future__ import annotations

from datetime import date

from dealcore.adapters.logging_utils import get_logger
from dealcore.analysis.insurance import PROPERTY_TAX_RATE, pre_repair_insurance
from dealcore.domain.finance import AmortizationSchedule
from dealcore.domain.money import ensure_finite
from dealcore.domain.property import DealInputs
from dealcore.domain.underwriting import BridgeFinancing, ExitScenarios, RehabExitScenario

logger = get_logger(__name__)

BRIDGE_SETTLEMENT_RATE = 0.06  # of purchase price, when not given explicitly
DSCR_ACQUISITION_RATE = 0.05   # of ARV, when not given explicitly


def bridge_financing(deal: DealInputs, as_of: date | None = None) -> BridgeFinancing:
    """
    Capital stack while the rehab is underway.

    - Bridge loan = purchase x LTC% + rehab x financed-budget%.
    - Settlement charges are withheld from loan proceeds, so they raise the
      cash needed at closing instead of being a separate outlay.
    - Rehab cost itself is not cash invested: it is drawn from the loan.
    - Taxes/insurance while renovating are based on the purchase price,
      not the ARV.
    """
    purchase_loan = deal.purchase_price * (deal.bridge_ltc / 100)
    rehab_loan = deal.rehab_cost * (deal.bridge_rehab_budget_percent / 100)
    loan_amount = purchase_loan + rehab_loan

    if deal.bridge_settlement_charges is not None:
        entry_points_cost = deal.bridge_settlement_charges
    else:
        entry_points_cost = deal.purchase_price * BRIDGE_SETTLEMENT_RATE

    total_project_cost = deal.purchase_price + deal.rehab_cost
    down_payment = total_project_cost - (loan_amount - entry_points_cost)

    taxes = deal.purchase_price * PROPERTY_TAX_RATE
    insurance = pre_repair_insurance(deal.purchase_price, deal.total_sqft, deal.year_built, as_of)

    monthly_interest = loan_amount * (deal.rehab_financing_rate / 100 / 12)
    monthly_taxes_insurance = (taxes + insurance) / 12
    carrying_costs = (monthly_interest + monthly_taxes_insurance) * deal.rehab_months

    return BridgeFinancing(
        loan_amount=loan_amount,
        entry_points_cost=entry_points_cost,
        down_payment=down_payment,
        pre_repair_taxes=taxes,
        pre_repair_insurance=insurance,
        carrying_costs=carrying_costs,
        total_cash_invested=down_payment + carrying_costs,
    )


def calculate_rehab_scenarios(deal: DealInputs, as_of: date | None = None) -> ExitScenarios:
    """
    Compare selling the finished property against a cash-out refinance.

    Both scenarios pay off the full bridge loan. Selling pays selling costs
    on the ARV and no exit points; the refinance pays DSCR-loan closing
    costs (exit_points_cost) out of the new loan.
    """
    bridge = bridge_financing(deal, as_of)
    arv = deal.after_repair_value
    payoff = bridge.loan_amount

    # ----- sell -----
    selling_costs = arv * (deal.sell_closing_costs / 100)
    sale_proceeds = arv - selling_costs - payoff
    sell = RehabExitScenario(
        exit_type="sell",
        total_cash_invested=bridge.total_cash_invested,
        rehab_carrying_costs=bridge.carrying_costs,
        entry_points_cost=bridge.entry_points_cost,
        exit_points_cost=0.0,
        sale_proceeds=sale_proceeds,
        selling_costs=selling_costs,
        net_profit=sale_proceeds - bridge.total_cash_invested,
        funds_gap=0.0,
    )

    # ----- refi (BRRRR) -----
    new_loan = arv * (deal.exit_refi_ltv / 100)
    if deal.dscr_acquisition_costs is not None:
        dscr_costs = deal.dscr_acquisition_costs
    else:
        dscr_costs = arv * DSCR_ACQUISITION_RATE

    cash_out = new_loan - payoff - dscr_costs
    capital_left = bridge.total_cash_invested - cash_out
    schedule = AmortizationSchedule(new_loan, deal.exit_refi_rate, deal.loan_term)

    refi = RehabExitScenario(
        exit_type="refi",
        total_cash_invested=bridge.total_cash_invested,
        rehab_carrying_costs=bridge.carrying_costs,
        entry_points_cost=bridge.entry_points_cost,
        exit_points_cost=dscr_costs,
        new_loan_amount=new_loan,
        cash_out_amount=cash_out,
        capital_left_in_deal=capital_left,
        equity_retained=arv - new_loan,
        new_monthly_payment=schedule.monthly_payment,
        new_annual_debt_service=schedule.annual_debt_service,
        funds_gap=capital_left,
    )

    ensure_finite(
        "exit scenarios",
        [
            bridge.total_cash_invested,
            sale_proceeds,
            cash_out,
            capital_left,
            schedule.annual_debt_service,
        ],
    )

    logger.debug(
        "rehab_exit_scenarios",
        extra={
            "context": {
                "bridge_loan": payoff,
                "cash_invested": bridge.total_cash_invested,
                "net_profit": sell.net_profit,
                "funds_gap": capital_left,
            }
        },
    )
    return ExitScenarios(bridge=bridge, sell=sell, refi=refi)
