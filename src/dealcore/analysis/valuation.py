# src/dealcore/analysis/valuation.py
from __future__ import annotations

from datetime import date
from typing import Sequence

from dealcore.adapters.config import config
from dealcore.adapters.logging_utils import get_logger
from dealcore.domain.money import round_half_up
from dealcore.domain.property import ComparableProperty, PropertyType
from dealcore.domain.underwriting import AdjustmentBreakdown, ARVAdjustment, WeightedARV

logger = get_logger(__name__)

# --- adjustment weights ---
BED_VALUE_PCT = 0.11           # of comp price per bedroom
BATH_VALUE_PCT = 0.07          # of comp price per bathroom
AGE_VALUE_PCT = 0.008          # of comp price per year of construction
CODE_YEAR = 2001               # wind-code threshold for construction
CODE_PREMIUM_PCT = 0.05
LAND_VALUE_PER_SQFT = 20.0
POOL_VALUE_PCT = 0.05
PARKING_SPACE_VALUE = 12_500.0
CONDO_DISCOUNT_PCT = 0.10
ANNUAL_APPRECIATION = 0.03

# --- similarity penalties / bonuses (points out of 100) ---
SQFT_MAX_PENALTY = 35
BED_PENALTY = 12
BATH_PENALTY = 6
AGE_MAX_PENALTY = 20
LOT_MAX_PENALTY = 8
POOL_PENALTY = 8
PARKING_PENALTY = 4
BOTH_MULTI_BONUS = 12
SAME_TYPE_BONUS = 8
TYPE_MISMATCH_PENALTY = 15
TIMING_MAX_PENALTY = 10
DOM_MAX_PENALTY = 8
QUICK_SALE_BONUS = 3


def _months_since(sold: date, as_of: date) -> float:
    return (as_of - sold).days / 30


def calculate_arv_adjustment(
    comp: ComparableProperty,
    subject: ComparableProperty,
    as_of: date | None = None,
) -> ARVAdjustment:
    """
    Adjust one comp's sale price toward the subject and score how alike they are.

    Each feature is only compared when both sides carry it. Dollar
    adjustments are additive on the comp's sold price; the similarity score
    starts at 100, moves by fixed penalties/bonuses and is clamped to [0, 100].
    """
    price = comp.sold_price
    adjusted = price
    score = 100.0
    adj: dict[str, float] = {}

    # 1) living area at the comp's own $/sqft
    if comp.sqft > 0 and subject.sqft > 0:
        diff = subject.sqft - comp.sqft
        adj["sqft"] = diff * (price / comp.sqft)
        adjusted += adj["sqft"]
        score -= abs(diff) / subject.sqft * SQFT_MAX_PENALTY

    # 2) bedrooms
    if comp.beds > 0 and subject.beds > 0:
        diff = subject.beds - comp.beds
        adj["beds"] = diff * price * BED_VALUE_PCT
        adjusted += adj["beds"]
        score -= abs(diff) * BED_PENALTY

    # 3) bathrooms
    if comp.baths > 0 and subject.baths > 0:
        diff = subject.baths - comp.baths
        adj["baths"] = diff * price * BATH_VALUE_PCT
        adjusted += adj["baths"]
        score -= abs(diff) * BATH_PENALTY

    # 4) age, plus a step across the construction-code year
    if comp.year_built > 0 and subject.year_built > 0:
        age_diff = comp.year_built - subject.year_built
        age_adj = -age_diff * price * AGE_VALUE_PCT
        if subject.year_built > CODE_YEAR and comp.year_built <= CODE_YEAR:
            age_adj += price * CODE_PREMIUM_PCT
        elif subject.year_built <= CODE_YEAR and comp.year_built > CODE_YEAR:
            age_adj -= price * CODE_PREMIUM_PCT
        adj["age"] = age_adj
        adjusted += age_adj
        if abs(age_diff) > 10:
            score -= min(abs(age_diff) / 2, AGE_MAX_PENALTY)

    # 5) lot size
    if comp.lot_size and subject.lot_size and comp.lot_size > 0 and subject.lot_size > 0:
        diff = subject.lot_size - comp.lot_size
        adj["lot_size"] = diff * LAND_VALUE_PER_SQFT
        adjusted += adj["lot_size"]
        diff_pct = abs(diff) / subject.lot_size
        if diff_pct > 0.2:
            score -= min(diff_pct * 10, LOT_MAX_PENALTY)

    # 6) pool
    if comp.has_pool is not None and subject.has_pool is not None:
        if subject.has_pool != comp.has_pool:
            adj["pool"] = price * POOL_VALUE_PCT if subject.has_pool else -price * POOL_VALUE_PCT
            adjusted += adj["pool"]
            score -= POOL_PENALTY

    # 7) parking
    if comp.parking_spaces is not None and subject.parking_spaces is not None:
        diff = subject.parking_spaces - comp.parking_spaces
        if diff != 0:
            adj["parking"] = diff * PARKING_SPACE_VALUE
            adjusted += adj["parking"]
            score -= abs(diff) * PARKING_PENALTY

    # 8) property type
    if comp.property_type is not None and subject.property_type is not None:
        if comp.property_type.is_multi_family and subject.property_type.is_multi_family:
            score += BOTH_MULTI_BONUS
        elif (
            comp.property_type is subject.property_type
            and subject.property_type is not PropertyType.OTHER
        ):
            score += SAME_TYPE_BONUS
        else:
            score -= TYPE_MISMATCH_PENALTY
            if comp.property_type.is_condo != subject.property_type.is_condo:
                # condos trade below houses
                sign = -1 if subject.property_type.is_condo else 1
                adj["property_type"] = sign * price * CONDO_DISCOUNT_PCT
                adjusted += adj["property_type"]

    # 9) market timing
    if comp.sold_date is not None:
        months = _months_since(comp.sold_date, as_of or config.today())
        if months > 3:
            score -= min(months / 2, TIMING_MAX_PENALTY)
            adj["market_timing"] = price * (ANNUAL_APPRECIATION / 12) * months
            adjusted += adj["market_timing"]

    # 10) days on market
    if comp.days_on_market is not None:
        if comp.days_on_market > 90:
            score -= min((comp.days_on_market - 90) / 10, DOM_MAX_PENALTY)
        elif comp.days_on_market < 30:
            score += QUICK_SALE_BONUS

    score = max(0.0, min(100.0, score))

    return ARVAdjustment(
        adjusted_price=round_half_up(adjusted),
        similarity_score=round_half_up(score),
        adjustments=AdjustmentBreakdown(**adj),
    )


def calculate_weighted_arv(
    comps: Sequence[ComparableProperty],
    subject: ComparableProperty,
    as_of: date | None = None,
) -> WeightedARV:
    """
    Similarity-weighted average of adjusted comp prices.

    No comps -> ARV 0 with no adjustments. If every comp scores 0 the
    weights are meaningless, so we fall back to the plain mean.
    """
    if not comps:
        return WeightedARV(arv=0, adjustments=[])

    adjustments = [calculate_arv_adjustment(c, subject, as_of) for c in comps]

    total_weighted = 0.0
    total_weight = 0.0
    for a in adjustments:
        weight = a.similarity_score / 100
        total_weighted += a.adjusted_price * weight
        total_weight += weight

    if total_weight > 0:
        arv = round_half_up(total_weighted / total_weight)
    else:
        arv = round_half_up(sum(a.adjusted_price for a in adjustments) / len(adjustments))

    logger.info(
        "weighted_arv",
        extra={
            "context": {
                "comps": len(adjustments),
                "arv": arv,
                "mean_similarity": total_weight * 100 / len(adjustments),
            }
        },
    )
    return WeightedARV(arv=arv, adjustments=adjustments)
