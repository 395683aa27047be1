# src/dealcore/analysis/cashflow.py
"""
Multi-year cash-flow projections for one deal under one operating strategy.

Each year is folded from the previous year's ending state:

    income -> vacancy -> maintenance/taxes/insurance -> NOI -> debt service
           -> cash flow -> amortize 12 months -> appreciate -> escalate

The carried state is a small frozen record; nothing is mutated in place.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable

from dealcore.adapters.config import config
from dealcore.adapters.logging_utils import get_logger
from dealcore.analysis.exit_scenarios import bridge_financing
from dealcore.domain.assumptions import GlobalAssumptions
from dealcore.domain.errors import InvalidProjectionInput
from dealcore.domain.finance import AmortizationSchedule
from dealcore.domain.money import ensure_finite, safe_ratio
from dealcore.domain.property import DealInputs
from dealcore.domain.underwriting import Strategy, StrategyResults, Year1Summary, YearProjection

logger = get_logger(__name__)

REHAB_TAX_RATE = 0.013        # of ARV, when no post-rehab tax figure is given
REHAB_INSURANCE_RATE = 0.011  # of ARV, when no post-rehab insurance figure is given


@dataclass(frozen=True)
class _Basis:
    """Everything fixed for the life of a projection."""
    strategy: Strategy
    unit_income: tuple[float, ...]  # annual, per unit, year 1
    vacancy_months: float           # 0 when vacancy does not apply
    value: float                    # purchase price or ARV
    taxes: float
    insurance: float
    schedule: AmortizationSchedule
    cash_invested: float


@dataclass(frozen=True)
class _Carry:
    balance: float
    unit_income: tuple[float, ...]
    taxes: float
    insurance: float
    value: float
    cumulative_cash_flow: float = 0.0
    cumulative_return: float = 0.0


def _grow(amount: float, percent: float) -> float:
    return amount * (1 + percent / 100)


def _year(
    year: int,
    state: _Carry,
    basis: _Basis,
    assumptions: GlobalAssumptions,
) -> tuple[YearProjection, _Carry]:
    # --- income side ---
    gross = sum(state.unit_income)
    vacancy = gross * (basis.vacancy_months / 12)
    effective = gross - vacancy

    # --- operating expenses (no debt) ---
    maintenance = effective * (assumptions.maintenance_percent / 100)
    noi = effective - state.taxes - state.insurance - maintenance

    # --- financing ---
    schedule = basis.schedule
    paid = schedule.advance(state.balance, 12, start_month=(year - 1) * 12)
    debt_service = paid.payment
    cash_flow = noi - debt_service
    balance = 0.0 if year * 12 >= schedule.n_months else paid.balance

    # --- value ---
    appreciation = state.value * (assumptions.appreciation_percent / 100)
    value = state.value + appreciation
    annual_return = cash_flow + appreciation

    row = YearProjection(
        year=year,
        gross_income=gross,
        vacancy_loss=vacancy,
        noi=noi,
        debt_service=debt_service,
        cash_flow=cash_flow,
        appreciation=appreciation,
        property_value=value,
        equity=value - balance,
        annual_return=annual_return,
        cumulative_cash_flow=state.cumulative_cash_flow + cash_flow,
        cumulative_return=state.cumulative_return + annual_return,
        loan_balance=balance,
    )

    nxt = replace(
        state,
        balance=balance,
        unit_income=tuple(_grow(x, assumptions.rent_growth_percent) for x in state.unit_income),
        taxes=_grow(state.taxes, assumptions.property_tax_increase_percent),
        insurance=_grow(state.insurance, assumptions.insurance_increase_percent),
        value=value,
        cumulative_cash_flow=row.cumulative_cash_flow,
        cumulative_return=row.cumulative_return,
    )
    return row, nxt


def _run(basis: _Basis, assumptions: GlobalAssumptions, years: int | None) -> StrategyResults:
    n_years = years if years is not None else config.PROJECTION_YEARS
    if n_years < 1:
        raise InvalidProjectionInput(f"projection needs at least one year (got {n_years})")

    state = _Carry(
        balance=basis.schedule.principal,
        unit_income=basis.unit_income,
        taxes=basis.taxes,
        insurance=basis.insurance,
        value=basis.value,
    )
    rows: list[YearProjection] = []
    for year in range(1, n_years + 1):
        row, state = _year(year, state, basis, assumptions)
        rows.append(row)

    first = rows[0]
    summary = Year1Summary(
        gross_income=first.gross_income,
        vacancy=first.vacancy_loss,
        expenses=first.gross_income - first.noi - first.vacancy_loss,
        noi=first.noi,
        debt_service=first.debt_service,
        cash_flow=first.cash_flow,
        cap_rate=safe_ratio(first.noi, basis.value) * 100,
        dscr=safe_ratio(first.noi, basis.schedule.annual_debt_service),
        cash_on_cash=safe_ratio(first.cash_flow, basis.cash_invested) * 100,
    )

    ensure_finite(f"{basis.strategy.value} projection", _numbers(rows, summary, basis.cash_invested))

    logger.info(
        "strategy_projected",
        extra={
            "context": {
                "strategy": basis.strategy.value,
                "years": n_years,
                "year1_cash_flow": summary.cash_flow,
                "dscr": summary.dscr,
            }
        },
    )
    return StrategyResults(
        strategy=basis.strategy,
        year1_summary=summary,
        cash_invested=basis.cash_invested,
        projections=rows,
    )


def _numbers(rows: list[YearProjection], summary: Year1Summary, cash_invested: float) -> Iterable[float]:
    yield cash_invested
    yield from (
        summary.gross_income, summary.vacancy, summary.expenses, summary.noi,
        summary.debt_service, summary.cash_flow, summary.cap_rate, summary.dscr,
        summary.cash_on_cash,
    )
    for r in rows:
        yield from (
            r.gross_income, r.vacancy_loss, r.noi, r.debt_service, r.cash_flow,
            r.appreciation, r.property_value, r.equity, r.annual_return,
            r.cumulative_cash_flow, r.cumulative_return, r.loan_balance,
        )


def _acquisition_basis(
    strategy: Strategy,
    deal: DealInputs,
    unit_income: tuple[float, ...],
    vacancy_months: float,
) -> _Basis:
    """Conventional purchase loan: purchase price minus down payment."""
    return _Basis(
        strategy=strategy,
        unit_income=unit_income,
        vacancy_months=vacancy_months,
        value=deal.purchase_price,
        taxes=deal.property_taxes,
        insurance=deal.property_insurance,
        schedule=AmortizationSchedule(deal.loan_amount, deal.loan_interest_rate, deal.loan_term),
        cash_invested=deal.down_payment_amount + deal.acquisition_costs_total + deal.setup_furnish_cost,
    )


def project_ltr(
    deal: DealInputs,
    assumptions: GlobalAssumptions,
    exclude_vacancy: bool = False,
    years: int | None = None,
) -> StrategyResults:
    """Long-term rental at market rent (voucher rent / 1.1 when no market rent is known)."""
    income = tuple(u.ltr_rent() * 12 for u in deal.unit_details)
    vacancy = 0.0 if exclude_vacancy else assumptions.ltr_vacancy_months
    return _run(_acquisition_basis(Strategy.LTR, deal, income, vacancy), assumptions, years)


def project_section8(
    deal: DealInputs,
    assumptions: GlobalAssumptions,
    exclude_vacancy: bool = False,
    years: int | None = None,
) -> StrategyResults:
    """Voucher rental: the voucher amount as-is, with the voucher-program vacancy."""
    income = tuple(u.voucher_rent() * 12 for u in deal.unit_details)
    vacancy = 0.0 if exclude_vacancy else assumptions.section8_vacancy_months
    return _run(_acquisition_basis(Strategy.SECTION8, deal, income, vacancy), assumptions, years)


def project_str(
    deal: DealInputs,
    assumptions: GlobalAssumptions,
    exclude_vacancy: bool = False,
    years: int | None = None,
) -> StrategyResults:
    """
    Short-term rental from annual revenue/expense pairs.

    Occupancy is already reflected in the annual revenue figure, so no
    vacancy is deducted; exclude_vacancy is accepted for a uniform call
    signature only.
    """
    income = tuple(u.str_revenue() - u.str_expenses() for u in deal.unit_details)
    return _run(_acquisition_basis(Strategy.STR, deal, income, 0.0), assumptions, years)


def project_rehab(
    deal: DealInputs,
    assumptions: GlobalAssumptions,
    exclude_vacancy: bool = False,
    years: int | None = None,
    as_of: date | None = None,
) -> StrategyResults:
    """
    Hold after rehab and cash-out refinance.

    Value basis is the ARV, the loan is the exit refinance
    (ARV x exit LTV at the exit rate), rents are post-rehab market rents and
    taxes/insurance are the post-rehab figures (or ARV-scaled defaults).
    Cash invested is what the bridge phase required.
    """
    arv = deal.after_repair_value
    income = tuple(u.post_rehab_rent() * 12 for u in deal.unit_details)
    basis = _Basis(
        strategy=Strategy.REHAB,
        unit_income=income,
        vacancy_months=0.0 if exclude_vacancy else assumptions.ltr_vacancy_months,
        value=arv,
        taxes=deal.rehab_property_taxes or arv * REHAB_TAX_RATE,
        insurance=deal.rehab_property_insurance or arv * REHAB_INSURANCE_RATE,
        schedule=AmortizationSchedule(arv * (deal.exit_refi_ltv / 100), deal.exit_refi_rate, deal.loan_term),
        cash_invested=bridge_financing(deal, as_of).total_cash_invested,
    )
    return _run(basis, assumptions, years)


def project_strategy(
    strategy: Strategy | str,
    deal: DealInputs,
    assumptions: GlobalAssumptions,
    exclude_vacancy: bool = False,
    years: int | None = None,
    as_of: date | None = None,
) -> StrategyResults:
    strategy = Strategy(strategy)
    if strategy is Strategy.REHAB:
        return project_rehab(deal, assumptions, exclude_vacancy, years, as_of)
    projector = {
        Strategy.LTR: project_ltr,
        Strategy.SECTION8: project_section8,
        Strategy.STR: project_str,
    }[strategy]
    return projector(deal, assumptions, exclude_vacancy, years)
