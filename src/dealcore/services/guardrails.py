# src/dealcore/services/guardrails.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from dealcore.adapters.logging_utils import get_logger
from dealcore.domain.property import DealInputs
from dealcore.domain.underwriting import ExitScenarios, StrategyResults

logger = get_logger(__name__)

Severity = Literal["warning", "error"]

ARV_LOW_RATIO = 0.5
ARV_HIGH_RATIO = 3.0


@dataclass(frozen=True)
class GuardrailFlag:
    code: str
    severity: Severity
    message: str
    context: dict[str, Any] = field(default_factory=dict)


def evaluate_guardrails(
    deal: DealInputs,
    strategies: list[StrategyResults] | None = None,
    exits: ExitScenarios | None = None,
) -> list[GuardrailFlag]:
    """
    Simple, high-leverage sanity checks on an analyzed deal.

    These do *not* block anything; they flag sketchy inputs or results so
    the caller can highlight them.
    """
    flags: list[GuardrailFlag] = []
    price = deal.purchase_price
    arv = deal.after_repair_value

    # ------------------------------------------------------------------
    # 1) Basic data sanity
    # ------------------------------------------------------------------
    if price <= 0:
        flags.append(
            GuardrailFlag(
                code="PURCHASE_PRICE_MISSING",
                severity="warning",
                message="Purchase price is missing or zero.",
                context={"purchase_price": price},
            )
        )

    # ------------------------------------------------------------------
    # 2) ARV vs purchase price
    # ------------------------------------------------------------------
    if price > 0 and arv > 0:
        ratio = arv / price
        if ratio < ARV_LOW_RATIO:
            flags.append(
                GuardrailFlag(
                    code="ARV_TOO_LOW",
                    severity="warning",
                    message="ARV is less than 50% of purchase price. Check comps.",
                    context={"purchase_price": price, "arv": arv, "ratio": ratio},
                )
            )
        elif ratio > ARV_HIGH_RATIO:
            flags.append(
                GuardrailFlag(
                    code="ARV_TOO_HIGH",
                    severity="warning",
                    message="ARV is more than 3x purchase price. Check comps.",
                    context={"purchase_price": price, "arv": arv, "ratio": ratio},
                )
            )

    # ------------------------------------------------------------------
    # 3) Rehab vs ARV
    # ------------------------------------------------------------------
    if arv > 0 and deal.rehab_cost > arv:
        flags.append(
            GuardrailFlag(
                code="REHAB_EXCEEDS_ARV",
                severity="error",
                message="Rehab budget exceeds ARV. Deal almost certainly does not pencil.",
                context={"arv": arv, "rehab_cost": deal.rehab_cost},
            )
        )

    # ------------------------------------------------------------------
    # 4) DSCR per strategy
    # ------------------------------------------------------------------
    for r in strategies or []:
        dscr = r.year1_summary.dscr
        if r.year1_summary.debt_service > 0 and dscr < 1.0:
            flags.append(
                GuardrailFlag(
                    code="DSCR_BELOW_ONE",
                    severity="warning",
                    message=f"{r.strategy.value}: DSCR below 1.0, rent does not cover debt service.",
                    context={"strategy": r.strategy.value, "dscr": dscr},
                )
            )

    # ------------------------------------------------------------------
    # 5) Exit scenarios
    # ------------------------------------------------------------------
    if exits is not None:
        if exits.sell.net_profit is not None and exits.sell.net_profit < 0:
            flags.append(
                GuardrailFlag(
                    code="NEGATIVE_PROFIT",
                    severity="warning",
                    message="Selling after rehab loses money.",
                    context={"net_profit": exits.sell.net_profit},
                )
            )
        if exits.refi.funds_gap > 0:
            flags.append(
                GuardrailFlag(
                    code="FUNDS_GAP_POSITIVE",
                    severity="warning",
                    message="Cash-out refinance leaves capital in the deal.",
                    context={"funds_gap": exits.refi.funds_gap},
                )
            )

    if flags:
        logger.info(
            "deal_guardrails_flags",
            extra={"context": {"flags": [asdict(f) for f in flags]}},
        )
    return flags
