# src/dealcore/services/auto_calcs.py
from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from dealcore.adapters.logging_utils import get_logger
from dealcore.analysis.insurance import estimate_insurance, estimate_property_taxes
from dealcore.domain.condition import ConditionAssessment, RoofCondition
from dealcore.domain.money import round_half_up
from dealcore.domain.property import DealInputs

logger = get_logger(__name__)

DEFAULT_ARV_MARKUP = 1.30
DEFAULT_ACQUISITION_RATE = 0.05
DEFAULT_BRIDGE_SETTLEMENT_RATE = 0.06
DEFAULT_DSCR_ACQUISITION_RATE = 0.05


def _field_names(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Accept both snake_case field names and the camelCase wire aliases."""
    by_alias = {f.alias: name for name, f in DealInputs.model_fields.items() if f.alias}
    return {by_alias.get(k, k): v for k, v in patch.items()}


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _insurance_discounts(deal: dict[str, Any], assessment: ConditionAssessment | None) -> tuple[bool, bool]:
    hurricane_windows = bool(deal.get("has_hurricane_windows"))
    new_roof = bool(deal.get("has_new_roof"))
    if assessment is not None:
        hurricane_windows = hurricane_windows or assessment.exterior.windows_type.is_impact
        new_roof = new_roof or assessment.roof.condition is RoofCondition.NEW
    return hurricane_windows, new_roof


def with_auto_calcs(
    prev: DealInputs,
    patch: Mapping[str, Any],
    assessment: ConditionAssessment | None = None,
    as_of: date | None = None,
) -> DealInputs:
    """
    Apply an edit to a deal and re-derive the figures that depend on it.

    - purchase price -> taxes (2%), insurance, default ARV (+30%) with its
      taxes/insurance when no ARV is set, and the acquisition (5%) and
      bridge settlement (6%) amounts if they still sit at the old default
    - year built / sqft -> current and post-rehab insurance
    - ARV -> post-rehab taxes/insurance, DSCR closing costs (5%) if unset
    - discount flags, or a (new) condition assessment -> insurance again

    Impact windows and a new roof in the assessment count as insurance
    discounts on top of the deal's own flags.
    """
    changes = _field_names(patch)
    u: dict[str, Any] = {**prev.model_dump(), **changes}

    def insurance(value: float, discounts: tuple[bool, bool]) -> float:
        hw, nr = discounts
        return estimate_insurance(value, u["year_built"], u["total_sqft"], hw, nr, as_of)

    def refresh_insurance(discounts: tuple[bool, bool]) -> None:
        u["property_insurance"] = insurance(u["purchase_price"], discounts)
        u["rehab_property_insurance"] = insurance(u["after_repair_value"], discounts)

    discounts = _insurance_discounts(u, assessment)

    price = changes.get("purchase_price")
    price_changed = _is_number(price)
    if price_changed:
        u["property_taxes"] = estimate_property_taxes(price)
        u["property_insurance"] = insurance(price, discounts)
        if not u["after_repair_value"]:
            arv = float(round_half_up(price * DEFAULT_ARV_MARKUP))
            u["after_repair_value"] = arv
            u["rehab_property_taxes"] = estimate_property_taxes(arv)
            u["rehab_property_insurance"] = insurance(arv, discounts)

    if _is_number(changes.get("year_built")) or _is_number(changes.get("total_sqft")):
        refresh_insurance(discounts)

    arv_changed = _is_number(changes.get("after_repair_value"))
    if arv_changed:
        u["rehab_property_taxes"] = estimate_property_taxes(u["after_repair_value"])
        u["rehab_property_insurance"] = insurance(u["after_repair_value"], discounts)

    if "has_hurricane_windows" in changes or "has_new_roof" in changes or assessment is not None:
        refresh_insurance(_insurance_discounts(u, assessment))

    if price_changed:
        old_acq = round_half_up(prev.purchase_price * DEFAULT_ACQUISITION_RATE)
        if u["acquisition_costs_amount"] is None or u["acquisition_costs_amount"] == old_acq:
            u["acquisition_costs_amount"] = float(round_half_up(price * DEFAULT_ACQUISITION_RATE))

        old_bridge = round_half_up(prev.purchase_price * DEFAULT_BRIDGE_SETTLEMENT_RATE)
        if u["bridge_settlement_charges"] is None or u["bridge_settlement_charges"] == old_bridge:
            u["bridge_settlement_charges"] = float(round_half_up(price * DEFAULT_BRIDGE_SETTLEMENT_RATE))

    if "after_repair_value" in changes and u["dscr_acquisition_costs"] is None:
        u["dscr_acquisition_costs"] = float(
            round_half_up(u["after_repair_value"] * DEFAULT_DSCR_ACQUISITION_RATE)
        )

    logger.debug(
        "auto_calcs_applied",
        extra={"context": {"changed": sorted(changes), "price_changed": price_changed, "arv_changed": arv_changed}},
    )
    return DealInputs.model_validate(u)
