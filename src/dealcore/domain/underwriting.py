from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Literal, Optional


class Strategy(str, Enum):
    LTR = "ltr"            # long-term rental at market rent
    SECTION8 = "section8"  # voucher rent, own vacancy assumption
    STR = "str"            # short-term rental, annual revenue/expense pairs
    REHAB = "rehab"        # post-rehab refinance rental (BRRRR hold)


@dataclass(frozen=True)
class YearProjection:
    year: int
    gross_income: float         # scheduled income before vacancy
    vacancy_loss: float
    noi: float                  # effective income - taxes - insurance - maintenance
    debt_service: float         # annual P&I actually paid this year
    cash_flow: float            # noi - debt_service
    appreciation: float
    property_value: float       # end-of-year value
    equity: float               # property_value - loan_balance
    annual_return: float        # cash_flow + appreciation
    cumulative_cash_flow: float
    cumulative_return: float
    loan_balance: float         # end-of-year remaining principal


@dataclass(frozen=True)
class Year1Summary:
    gross_income: float
    vacancy: float
    expenses: float
    noi: float
    debt_service: float
    cash_flow: float
    cap_rate: float       # percent
    dscr: float
    cash_on_cash: float   # percent


@dataclass(frozen=True)
class StrategyResults:
    strategy: Strategy
    year1_summary: Year1Summary
    cash_invested: float
    projections: list[YearProjection] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["strategy"] = self.strategy.value
        return d


@dataclass(frozen=True)
class BridgeFinancing:
    """Acquisition + rehab funded by a bridge (hard-money) loan."""
    loan_amount: float           # purchase x LTC% + rehab x budget%
    entry_points_cost: float     # settlement charges, netted from proceeds
    down_payment: float          # purchase + rehab - (loan - entry cost)
    pre_repair_taxes: float      # annual, off purchase price
    pre_repair_insurance: float  # annual, off purchase price / sqft
    carrying_costs: float        # interest + taxes + insurance over rehab months
    total_cash_invested: float   # down payment + carrying costs


@dataclass(frozen=True)
class RehabExitScenario:
    exit_type: Literal["sell", "refi"]
    total_cash_invested: float
    rehab_carrying_costs: float
    entry_points_cost: float
    exit_points_cost: float

    # sell
    sale_proceeds: Optional[float] = None
    selling_costs: Optional[float] = None
    net_profit: Optional[float] = None

    # refi (BRRRR)
    new_loan_amount: Optional[float] = None
    cash_out_amount: Optional[float] = None
    capital_left_in_deal: Optional[float] = None
    equity_retained: Optional[float] = None
    new_monthly_payment: Optional[float] = None
    new_annual_debt_service: Optional[float] = None

    # positive = shortfall the investor must bring, negative = surplus returned
    funds_gap: float = 0.0


@dataclass(frozen=True)
class ExitScenarios:
    bridge: BridgeFinancing
    sell: RehabExitScenario
    refi: RehabExitScenario

    def chosen(self, exit_strategy: str) -> RehabExitScenario:
        return self.sell if exit_strategy == "sell" else self.refi


@dataclass(frozen=True)
class AdjustmentBreakdown:
    """Dollar adjustment per feature; positive raises the comp toward the subject."""
    sqft: float = 0.0
    beds: float = 0.0
    baths: float = 0.0
    age: float = 0.0
    lot_size: float = 0.0
    pool: float = 0.0
    parking: float = 0.0
    property_type: float = 0.0
    market_timing: float = 0.0

    def total(self) -> float:
        return sum(asdict(self).values())


@dataclass(frozen=True)
class ARVAdjustment:
    adjusted_price: int
    similarity_score: int  # 0..100
    adjustments: AdjustmentBreakdown


@dataclass(frozen=True)
class WeightedARV:
    arv: int
    adjustments: list[ARVAdjustment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)
