# src/dealcore/domain/rehab.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RULE_CATEGORIES = ("structural", "systems", "interior", "exterior")

Confidence = Literal["High", "Medium", "Low"]


class LineItem(BaseModel):
    """
    One scope-of-work entry.

    category is one of RULE_CATEGORIES for generated items; items added by
    hand may carry any category ("Custom", "Additional Work", ...).
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = ""
    category: str
    description: str
    estimated_cost: float = Field(ge=0)
    is_manually_edited: bool = False

    @property
    def key(self) -> tuple[str, str]:
        return (self.category, self.description)


@dataclass(frozen=True)
class CostDriver:
    category: str
    low_cost: float
    high_cost: float
    confidence: Confidence
    description: str


@dataclass(frozen=True)
class CostRangeResult:
    low_estimate: float
    mid_estimate: float
    high_estimate: float
    top_drivers: list[CostDriver] = field(default_factory=list)
    uncertainty_factors: list[str] = field(default_factory=list)
