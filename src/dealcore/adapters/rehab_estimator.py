# src/dealcore/adapters/rehab_estimator.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from dealcore.domain.errors import InvalidProjectionInput
from dealcore.domain.money import round_half_up, round_to_nearest

RehabLevel = Literal["light", "lite+", "medium", "heavy", "fullgut"]
UnitType = Literal["single", "duplex", "triplex", "quad"]


@dataclass
class RehabEstimatorConfig:
    """
    Quick $/sqft rehab model, used before a room-by-room assessment exists.

    Condition factors scale the base rate: light is paint/flooring, medium is
    full kitchen/bath plus roof or HVAC, fullgut is down to the studs.
    """
    base_cost_per_sqft: float = 35.0
    condition_factor: dict[str, float] = field(
        default_factory=lambda: {
            "light": 0.50,
            "lite+": 0.70,
            "medium": 1.00,
            "heavy": 1.40,
            "fullgut": 1.80,
        }
    )
    # duplicate kitchens/baths push $/sqft up slightly
    unit_type_multiplier: dict[str, float] = field(
        default_factory=lambda: {
            "single": 1.00,
            "duplex": 1.05,
            "triplex": 1.10,
            "quad": 1.15,
        }
    )
    round_to: float = 500.0


def unit_type_from_count(units: int) -> UnitType:
    if units <= 1:
        return "single"
    if units == 2:
        return "duplex"
    if units == 3:
        return "triplex"
    return "quad"


@dataclass(frozen=True)
class CapitalNeeded:
    hard_costs: int
    entry_points: int
    interest: int
    exit_points: int
    total: int


class RehabEstimator:
    """
    Estimate a rehab budget from size, scope and building type.

    Output: hard costs in dollars, rounded to the nearest $500.
    """

    def __init__(self, cfg: RehabEstimatorConfig | None = None) -> None:
        self.cfg = cfg or RehabEstimatorConfig()

    def estimate(
        self,
        sqft: float,
        condition: RehabLevel = "medium",
        unit_type: UnitType = "single",
    ) -> float:
        if not sqft or sqft <= 0:
            raise InvalidProjectionInput(f"sqft must be > 0 for a rehab estimate (got {sqft})")
        try:
            factor = self.cfg.condition_factor[condition]
            unit_mult = self.cfg.unit_type_multiplier[unit_type]
        except KeyError as err:
            raise InvalidProjectionInput(f"unknown rehab scope: {err.args[0]!r}") from err

        raw = sqft * self.cfg.base_cost_per_sqft * factor * unit_mult
        return round_to_nearest(raw, self.cfg.round_to)

    @staticmethod
    def total_capital_needed(
        hard_costs: float,
        entry_points_percent: float,
        loan_rate_percent: float,
        rehab_months: float,
        exit_points_percent: float,
    ) -> CapitalNeeded:
        """
        Hard costs plus the cost of financing them with a 100% rehab loan:
        points on the way in, simple interest for the rehab period, points
        on the way out.
        """
        loan = hard_costs
        entry = loan * (entry_points_percent / 100)
        interest = loan * (loan_rate_percent / 100 / 12) * rehab_months
        exit_ = loan * (exit_points_percent / 100)
        return CapitalNeeded(
            hard_costs=round_half_up(hard_costs),
            entry_points=round_half_up(entry),
            interest=round_half_up(interest),
            exit_points=round_half_up(exit_),
            total=round_half_up(hard_costs + entry + interest + exit_),
        )
