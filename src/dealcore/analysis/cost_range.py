# src/dealcore/analysis/cost_range.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from dealcore.adapters.config import config
from dealcore.adapters.logging_utils import get_logger
from dealcore.domain.condition import (
    ConditionAssessment,
    HvacCondition,
    OverallCondition,
    PipeMaterial,
    RoofCondition,
)
from dealcore.domain.money import round_half_up
from dealcore.domain.rehab import RULE_CATEGORIES, CostDriver, CostRangeResult, LineItem

logger = get_logger(__name__)

# category -> (low multiplier, high multiplier)
VARIANCE_BANDS = {
    "structural": (0.80, 1.40),
    "systems": (0.90, 1.20),
}
DEFAULT_BAND = (0.85, 1.25)

BASE_CONTINGENCY_LOW = 0.10
BASE_CONTINGENCY_HIGH = 0.20
STRUCTURAL_CONTINGENCY_HIGH = 0.30
MAJOR_ISSUE_CONTINGENCY_HIGH = 0.35
MAX_CONTINGENCY_LOW = 0.15
MAX_CONTINGENCY_HIGH = 0.45

OLD_ROOF_YEARS = 30
TOP_N = 5


@dataclass
class _Bucket:
    low: int = 0
    high: int = 0
    count: int = 0


@dataclass
class _Contingency:
    low: float = BASE_CONTINGENCY_LOW
    high: float = BASE_CONTINGENCY_HIGH
    factors: list[str] = field(default_factory=list)

    def flag(self, reason: str, extra_high: float = 0.0) -> None:
        self.factors.append(reason)
        self.high += extra_high


def _contingency(assessment: ConditionAssessment, as_of: date) -> _Contingency:
    c = _Contingency()
    a = assessment

    if a.has_structural_issues:
        c.high = STRUCTURAL_CONTINGENCY_HIGH
        c.factors.append("Structural issues may reveal hidden damage")
    if a.additional_issues.has_major_issue:
        c.high = MAJOR_ISSUE_CONTINGENCY_HIGH
        c.factors.append("Major issues (mold/termites) often have hidden extent")

    # missing data
    if a.overall_condition is OverallCondition.UNSET:
        c.flag("Overall condition not assessed", 0.05)
    if a.roof.condition is RoofCondition.UNSET:
        c.flag("Roof condition unknown", 0.05)
    if a.hvac.condition is HvacCondition.UNSET:
        c.flag("HVAC condition not verified", 0.05)

    # risk flags
    if a.roof.roof_year and as_of.year - a.roof.roof_year > OLD_ROOF_YEARS:
        c.flag("Older property may have age-related issues", 0.05)
    if a.flood_zone:
        c.flag("Flood zone property - potential moisture issues", 0.05)
    if a.plumbing.pipe_material in (PipeMaterial.UNSET, PipeMaterial.UNKNOWN):
        c.flag("Plumbing material unknown - may need replacement", 0.03)
    if a.electrical.has_outdated_wiring:
        c.flag("Outdated wiring type - full rewire likely needed")

    c.low = min(MAX_CONTINGENCY_LOW, c.low)
    c.high = min(MAX_CONTINGENCY_HIGH, c.high)
    return c


def calculate_cost_range(
    line_items: Iterable[LineItem],
    assessment: ConditionAssessment | None = None,
    as_of: date | None = None,
) -> CostRangeResult:
    """
    Low / mid / high rehab budget from priced line items.

    Each item is widened by its category's band (structural -20/+40%,
    systems -10/+20%, everything else -15/+25%), then a contingency
    is added on top: 10% on the low side, 20-45% on the high side
    depending on risk flags and gaps in the assessment.

    top_drivers ranks the per-category subtotals and the contingency by
    high cost.
    """
    a = assessment if assessment is not None else ConditionAssessment()

    # rule categories first so ties keep a stable order
    buckets: dict[str, _Bucket] = {cat: _Bucket() for cat in RULE_CATEGORIES}
    for item in line_items:
        low_mult, high_mult = VARIANCE_BANDS.get(item.category, DEFAULT_BAND)
        b = buckets.setdefault(item.category, _Bucket())
        b.low += round_half_up(item.estimated_cost * low_mult)
        b.high += round_half_up(item.estimated_cost * high_mult)
        b.count += 1

    low_total = sum(b.low for b in buckets.values())
    high_total = sum(b.high for b in buckets.values())

    c = _contingency(a, as_of or config.today())
    contingency_low = round_half_up(low_total * c.low)
    contingency_high = round_half_up(high_total * c.high)
    low_total += contingency_low
    high_total += contingency_high

    drivers = [
        CostDriver(
            category=category[:1].upper() + category[1:],
            low_cost=b.low,
            high_cost=b.high,
            confidence="Medium" if b.count >= 3 else "Low",
            description=f"{b.count} item{'s' if b.count > 1 else ''} in {category}",
        )
        for category, b in buckets.items()
        if b.count > 0
    ]
    if contingency_high > 0:
        drivers.append(
            CostDriver(
                category="Contingency",
                low_cost=contingency_low,
                high_cost=contingency_high,
                confidence="Low",
                description=(
                    f"Unknowns & hidden issues "
                    f"({round_half_up(c.low * 100)}-{round_half_up(c.high * 100)}%)"
                ),
            )
        )
    drivers.sort(key=lambda d: d.high_cost, reverse=True)

    result = CostRangeResult(
        low_estimate=low_total,
        mid_estimate=round_half_up((low_total + high_total) / 2),
        high_estimate=high_total,
        top_drivers=drivers[:TOP_N],
        uncertainty_factors=c.factors[:TOP_N],
    )
    logger.debug(
        "cost_range",
        extra={
            "context": {
                "low": result.low_estimate,
                "mid": result.mid_estimate,
                "high": result.high_estimate,
                "contingency_high_pct": c.high,
            }
        },
    )
    return result
