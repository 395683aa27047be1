from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Iterable, Sequence

from dealcore.adapters.logging_utils import get_logger
from dealcore.adapters.rehab_estimator import RehabEstimator, RehabLevel, unit_type_from_count
from dealcore.analysis.cashflow import project_strategy
from dealcore.analysis.confidence import ConfidenceResult, calculate_confidence
from dealcore.analysis.cost_range import calculate_cost_range
from dealcore.analysis.exit_scenarios import calculate_rehab_scenarios
from dealcore.analysis.line_items import regenerate_line_items, total_cost
from dealcore.analysis.section8 import auto_populate_section8_rents
from dealcore.analysis.valuation import calculate_weighted_arv
from dealcore.domain.assumptions import GlobalAssumptions
from dealcore.domain.condition import ConditionAssessment
from dealcore.domain.metrics import StrategyComparison, compare_strategies
from dealcore.domain.property import ComparableProperty, DealInputs
from dealcore.domain.rehab import CostRangeResult, LineItem
from dealcore.domain.underwriting import ExitScenarios, Strategy, StrategyResults, WeightedARV
from dealcore.services.guardrails import GuardrailFlag, evaluate_guardrails

logger = get_logger(__name__)

ALL_STRATEGIES = (Strategy.LTR, Strategy.SECTION8, Strategy.STR, Strategy.REHAB)


@dataclass
class DealAnalysis:
    deal: DealInputs                      # the deal as actually analyzed
    strategies: list[StrategyResults] = field(default_factory=list)
    comparison: StrategyComparison | None = None
    arv: WeightedARV | None = None
    line_items: list[LineItem] = field(default_factory=list)
    cost_range: CostRangeResult | None = None
    confidence: ConfidenceResult | None = None
    exits: ExitScenarios | None = None
    guardrails: list[GuardrailFlag] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "deal": self.deal.model_dump(by_alias=True),
            "strategies": {r.strategy.value: r.to_dict() for r in self.strategies},
            "arv": self.arv.to_dict() if self.arv else None,
            "line_items": [i.model_dump(by_alias=True) for i in self.line_items],
            "cost_range": asdict(self.cost_range) if self.cost_range else None,
            "confidence": asdict(self.confidence) if self.confidence else None,
            "exits": asdict(self.exits) if self.exits else None,
            "guardrails": {
                "has_flags": bool(self.guardrails),
                "flags": [asdict(f) for f in self.guardrails],
            },
        }
        if self.comparison is not None:
            out["comparison"] = {
                "strategies": self.comparison.strategies,
                "year1_cash_flow": self.comparison.year1_cash_flow.tolist(),
                "dscr": self.comparison.dscr.tolist(),
                "cash_on_cash": self.comparison.cash_on_cash.tolist(),
                "cumulative_return": self.comparison.cumulative_return.tolist(),
                "best_cash_flow": self.comparison.best_cash_flow,
                "best_total_return": self.comparison.best_total_return,
            }
        return out


def subject_from_deal(deal: DealInputs) -> ComparableProperty:
    """The subject property as a comp record, from the deal's own facts."""
    return ComparableProperty(
        sqft=deal.total_sqft,
        beds=sum(u.beds for u in deal.unit_details),
        baths=sum(u.baths for u in deal.unit_details),
        year_built=deal.year_built,
    )


def _fill_voucher_rents(deal: DealInputs, assumptions: GlobalAssumptions) -> DealInputs:
    """Voucher rents from the zip tables, only where the unit has none of its own."""
    if not assumptions.section8_zip_data or not deal.unit_details:
        return deal
    looked_up = auto_populate_section8_rents(deal.address, deal.unit_details, assumptions)
    units = [
        orig if orig.section8_rent is not None else filled
        for orig, filled in zip(deal.unit_details, looked_up)
    ]
    return deal.model_copy(update={"unit_details": units})


def analyze_deal(
    deal: DealInputs,
    assumptions: GlobalAssumptions | None = None,
    *,
    strategies: Iterable[Strategy | str] = ALL_STRATEGIES,
    comps: Sequence[ComparableProperty] | None = None,
    subject: ComparableProperty | None = None,
    assessment: ConditionAssessment | None = None,
    existing_line_items: Iterable[LineItem] = (),
    rehab_level: RehabLevel | None = None,
    exclude_vacancy: bool = False,
    as_of: date | None = None,
) -> DealAnalysis:
    """
    Main analysis entrypoint.

    - comps -> weighted ARV, which replaces the deal's ARV when positive
    - assessment -> line items, cost range and confidence; the line-item
      total becomes the rehab cost
    - no assessment but a rehab_level -> quick $/sqft estimate as the rehab
      cost, unless the deal already carries one
    - every requested strategy is projected; the rehab hold is skipped
      when there is no ARV to refinance against
    - exit scenarios whenever an ARV is known
    """
    assumptions = assumptions or GlobalAssumptions.from_config()
    deal = _fill_voucher_rents(deal, assumptions)
    analysis = DealAnalysis(deal=deal)

    # --- valuation ---
    if comps:
        analysis.arv = calculate_weighted_arv(comps, subject or subject_from_deal(deal), as_of)
        if analysis.arv.arv > 0:
            deal = deal.model_copy(update={"after_repair_value": float(analysis.arv.arv)})

    # --- rehab scope ---
    if assessment is not None:
        analysis.line_items = regenerate_line_items(
            assessment, deal.total_sqft, deal.units, existing_line_items
        )
        analysis.cost_range = calculate_cost_range(analysis.line_items, assessment, as_of)
        analysis.confidence = calculate_confidence(assessment, deal.year_built or None)
        rehab_total = total_cost(analysis.line_items)
        if rehab_total > 0:
            deal = deal.model_copy(update={"rehab_cost": rehab_total})
    elif rehab_level is not None and deal.rehab_cost <= 0 and deal.total_sqft > 0:
        quick = RehabEstimator().estimate(deal.total_sqft, rehab_level, unit_type_from_count(deal.units))
        deal = deal.model_copy(update={"rehab_cost": quick})

    # --- projections ---
    for s in strategies:
        s = Strategy(s)
        if s is Strategy.REHAB and deal.after_repair_value <= 0:
            logger.warning("rehab_strategy_skipped", extra={"context": {"reason": "no ARV"}})
            continue
        analysis.strategies.append(
            project_strategy(s, deal, assumptions, exclude_vacancy=exclude_vacancy, as_of=as_of)
        )
    if analysis.strategies:
        analysis.comparison = compare_strategies(analysis.strategies)

    # --- exits ---
    if deal.after_repair_value > 0:
        analysis.exits = calculate_rehab_scenarios(deal, as_of)

    analysis.deal = deal
    analysis.guardrails = evaluate_guardrails(deal, analysis.strategies, analysis.exits)

    logger.info(
        "deal_analyzed",
        extra={
            "context": {
                "address": deal.address,
                "strategies": [r.strategy.value for r in analysis.strategies],
                "arv": deal.after_repair_value,
                "rehab_cost": deal.rehab_cost,
                "flags": len(analysis.guardrails),
            }
        },
    )
    return analysis
