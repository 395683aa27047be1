# src/dealcore/analysis/confidence.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from dealcore.domain.condition import ConditionAssessment, OverallCondition

ConfidenceLevel = Literal["Low", "Medium", "High", "Very High"]

MAX_MISSING_FIELDS = 5
MAX_ASSUMPTIONS = 6
ISSUE_CHECKLIST = ("mold", "termites", "water_damage", "structural_issues", "code_violations")


@dataclass(frozen=True)
class ConfidenceResult:
    score: int  # 0..100
    level: ConfidenceLevel
    missing_fields: list[str] = field(default_factory=list)
    assumptions: list[str] = field(default_factory=list)


def _level(score: int) -> ConfidenceLevel:
    if score >= 85:
        return "Very High"
    if score >= 65:
        return "High"
    if score >= 40:
        return "Medium"
    return "Low"


def calculate_confidence(
    assessment: ConditionAssessment | None,
    year_built: int | None = None,
) -> ConfidenceResult:
    """
    How much to trust a rehab estimate built from this assessment.

    Points for completeness:
      critical (roof, HVAC, overall, plumbing, electrical)  ~40
      important (foundation, kitchen, baths, windows)       ~30
      nice-to-have (interior, exterior, issue checklist)    ~30
    plus a small bonus for detailed notes, capped at 100.
    """
    a = assessment if assessment is not None else ConditionAssessment()
    points = 0
    missing: list[str] = []
    assumptions: list[str] = []

    # ----- critical -----
    if a.overall_condition is not OverallCondition.UNSET:
        points += 10
    else:
        missing.append("Overall Condition")
        assumptions.append('Assuming "Fair" overall condition')

    if a.roof.condition:
        points += 8
        if a.roof.roof_year:
            points += 2
        elif not a.roof.age:
            assumptions.append("Roof age estimated from property age")
    else:
        missing.append("Roof Condition")
        assumptions.append("Assuming roof matches property age")

    if a.hvac.condition:
        points += 7
        if a.hvac.system_type:
            points += 2
        else:
            assumptions.append("Assuming standard Central AC")
        if a.hvac.number_of_units:
            points += 1
    else:
        missing.append("HVAC Condition")
        assumptions.append("Assuming HVAC matches property age")

    if a.plumbing.condition:
        points += 3
        if a.plumbing.pipe_material:
            points += 2
        else:
            assumptions.append("Pipe material unknown - assuming standard for era")
    else:
        missing.append("Plumbing Condition")
        assumptions.append("Assuming plumbing is functional")

    if a.electrical.condition:
        points += 3
        if a.electrical.panel_amperage:
            points += 2
        else:
            assumptions.append("Electrical panel size unknown")
    else:
        missing.append("Electrical Condition")
        assumptions.append("Assuming electrical is adequate")

    # ----- important -----
    if a.foundation.condition:
        points += 8
    else:
        missing.append("Foundation")
        assumptions.append("Assuming foundation is structurally sound")

    if a.kitchen.condition:
        points += 5
        points += 1 if a.kitchen.cabinets else 0
        points += 1 if a.kitchen.appliances else 0
    else:
        missing.append("Kitchen Condition")
        assumptions.append("Kitchen rehab costs estimated at medium level")

    if a.bathrooms:
        filled = sum(1 for b in a.bathrooms if b.condition)
        points += min(7, filled * 3)
        if filled == 0:
            assumptions.append("Bathroom conditions not specified")
    else:
        missing.append("Bathroom Details")
        assumptions.append("Bathroom count and condition estimated")

    x = a.exterior
    if x.windows:
        points += 4
        if x.windows_type:
            points += 2
        else:
            assumptions.append("Window type not specified")
        if x.windows_condition:
            points += 2
    else:
        missing.append("Window Condition")
        assumptions.append("Window costs estimated at replacement level")

    # ----- nice to have -----
    i = a.interior
    interior = (
        (3 if i.flooring else 0)
        + (3 if i.walls else 0)
        + (2 if i.ceilings else 0)
        + (2 if i.lighting else 0)
    )
    points += interior
    if interior < 5:
        assumptions.append("Interior finishes assumed at average condition")

    points += (
        (3 if x.siding else 0)
        + (2 if x.doors else 0)
        + (2 if x.driveway else 0)
        + (2 if x.landscaping else 0)
        + (1 if x.gutters else 0)
    )

    # a checked box counts even when the answer is "no"
    checked = a.additional_issues.model_fields_set
    issues = 2 * sum(1 for f in ISSUE_CHECKLIST if f in checked)
    points += issues
    if issues < 5:
        assumptions.append("Major issues (mold, termites, etc.) not verified")

    # detailed notes
    for notes in (a.roof.notes, a.hvac.notes, a.plumbing.notes, a.electrical.notes):
        if len(notes) > 20:
            points += 1
    if len(a.general_notes) > 50:
        points += 2

    score = min(100, points)

    if year_built and year_built < 1980:
        assumptions.append("Pre-1980 property may have dated systems")
    if year_built and year_built > 2010:
        assumptions.append("Recent construction - lower baseline rehab needs")
    if a.flood_zone:
        assumptions.append("Property in flood zone - higher insurance costs")

    return ConfidenceResult(
        score=score,
        level=_level(score),
        missing_fields=missing[:MAX_MISSING_FIELDS],
        assumptions=assumptions[:MAX_ASSUMPTIONS],
    )
