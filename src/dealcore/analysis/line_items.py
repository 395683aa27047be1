# src/dealcore/analysis/line_items.py
"""
Condition assessment -> priced scope-of-work line items.

Costs live in the lookup tables below (condition value -> description and
base cost). The rule functions only decide which table row applies and
which scaling to use:

- size_multiplier: 0.85 under 1,200 sqft, 1.15 over 2,500 sqft, else 1.0
- unit_multiplier: each unit beyond the first adds 70% of the base cost
- per-unit:        base x units (kitchens, water heaters, doors)
- sqft-linear:     $/sqft x sqft (roof, siding, paint, common flooring)

Any condition value without a row, including "unset", produces nothing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from dealcore.adapters.logging_utils import get_logger
from dealcore.domain.condition import (
    AdditionalIssues,
    ApplianceCondition,
    BathroomAssessment,
    BathroomCondition,
    BedroomAssessment,
    BedroomCondition,
    BedroomFlooring,
    CabinetCondition,
    CeilingCondition,
    ClosetCondition,
    ConditionAssessment,
    CountertopCondition,
    DoorCondition,
    DrivewayCondition,
    ElectricalCondition,
    FencingCondition,
    FoundationCondition,
    GutterCondition,
    HvacCondition,
    HvacSystemType,
    InteriorFlooring,
    KitchenCondition,
    KitchenFlooring,
    LandscapingCondition,
    LightingCondition,
    PanelAmperage,
    PipeAge,
    PipeMaterial,
    PlumbingCondition,
    PoolCondition,
    PoolEquipment,
    RoofCondition,
    SidingCondition,
    TileCondition,
    ToiletCondition,
    TubShowerCondition,
    VanityCondition,
    WallCondition,
    WaterHeaterCondition,
    WindowCondition,
    WindowDamage,
    WindowType,
    WiringType,
)
from dealcore.domain.errors import InvalidProjectionInput
from dealcore.domain.money import round_half_up
from dealcore.domain.rehab import LineItem

logger = get_logger(__name__)

DETAIL_MAX_CHARS = 40
PERMITS_RATE = 0.05
CONTINGENCY_RATE = 0.10


# ---------------------------------------------------------------------------
# Scaling
# ---------------------------------------------------------------------------

def unit_multiplier(units: int) -> float:
    return 1 + (units - 1) * 0.7 if units > 1 else 1.0


def size_multiplier(sqft: float) -> float:
    if sqft < 1200:
        return 0.85
    if sqft > 2500:
        return 1.15
    return 1.0


@dataclass(frozen=True)
class _Scale:
    sqft: float
    units: int

    @property
    def size(self) -> float:
        return size_multiplier(self.sqft)

    @property
    def unit(self) -> float:
        return unit_multiplier(self.units)

    @property
    def sqft_label(self) -> str:
        sqft = float(self.sqft)
        return str(int(sqft)) if sqft.is_integer() else str(sqft)

    def units_suffix(self) -> str:
        return f" ({self.units} units)" if self.units > 1 else ""


# ---------------------------------------------------------------------------
# Decision tables: condition value -> (description, base cost)
# ---------------------------------------------------------------------------

ROOF_SQFT_RATE = 1800 / 100  # replacement, $ per sqft of living area
ROOF_REPAIRS = {RoofCondition.POOR: ("Roof Repairs & Patching", 5000)}
ROOF_LEAKS = ("Roof Leak Repairs", 3000)
ROOF_OK = {RoofCondition.NEW, RoofCondition.GOOD}

FOUNDATION = {
    FoundationCondition.MAJOR_ISSUES: ("Foundation Repairs (Major Issues)", 25000),
    FoundationCondition.NEEDS_REPAIR: ("Foundation Repairs (Needs Repair)", 12000),
    FoundationCondition.MINOR_CRACKS: ("Foundation Crack Sealing", 3000),
}

# flag attribute -> (detail prefix, default description, base cost)
ISSUE_FLAGS = (
    ("structural_issues", "Structural Repairs", "Structural Repairs (Beams/Joists)", 15000),
    ("termites", "Termite Treatment", "Termite Treatment & Damage Repair", 8000),
    ("water_damage", "Water Damage", "Water Damage Remediation", 6000),
    ("mold", "Mold Remediation", "Mold Remediation & Prevention", 8000),
    ("fire_damage", None, "Fire Damage Restoration", 30000),
)
CODE_VIOLATIONS = ("Code Violations", "Code Violation Corrections", 6000)

HVAC_OK = {HvacCondition.NEW, HvacCondition.GOOD}
HVAC_REPLACE = {HvacCondition.NOT_WORKING, HvacCondition.OLD}
HVAC_UNIT_COST = {
    HvacSystemType.MINI_SPLIT: 7000,
    HvacSystemType.HEAT_PUMP: 7500,
    HvacSystemType.PACKAGE_UNIT: 8000,
    HvacSystemType.WINDOW_UNITS: 2000,
}
HVAC_DEFAULT_UNIT_COST = 6000
HVAC_SERVICE = {HvacCondition.FAIR: ("HVAC Service & Repair", 1500)}

PLUMBING_OK = {PlumbingCondition.EXCELLENT, PlumbingCondition.GOOD}
PLUMBING_REPLACE = ("Complete Plumbing Replacement", 15000)
GALVANIZED = ("Galvanized Pipe Replacement (Required)", {PipeAge.ORIGINAL: 14000}, 12000)
PLUMBING_UNKNOWN_OLD = ("Plumbing Inspection & Potential Replacement", 8000)
PLUMBING_REPAIRS = ("Plumbing Repairs & Leak Fixes", 4000)

WATER_HEATER = {
    WaterHeaterCondition.NEEDS_REPLACEMENT: 1500,
    WaterHeaterCondition.OLD: 1200,
}

ELECTRICAL_OK = {ElectricalCondition.UPDATED}
REWIRE = ("Complete Electrical Rewiring", 18000)
ALUMINUM_REWIRE = ("Aluminum Wiring Replacement", 15000)
PANEL_REPAIRS = {PanelAmperage.A100: (" (100A → 200A Upgrade)", 6000)}
PANEL_REPAIRS_DEFAULT = ("", 5000)
PANEL_RECOMMENDED = ("Panel Upgrade Recommended (100A → 200A)", 4500)

KITCHEN_OK = {KitchenCondition.UPDATED}
KITCHEN = {
    KitchenCondition.NEEDS_FULL_REHAB: ("Kitchen Full Remodel", 22000),
    KitchenCondition.DATED: ("Kitchen Cosmetic Updates", 8000),
}
CABINETS = {
    CabinetCondition.NEEDS_REPLACEMENT: ("Kitchen Cabinet Replacement", 6000),
    CabinetCondition.WORN: ("Kitchen Cabinet Refinishing", 2000),
}
COUNTERTOPS = {
    CountertopCondition.NEEDS_REPLACEMENT: ("Kitchen Countertop Installation", 3500),
    CountertopCondition.LAMINATE_WORN: ("Kitchen Countertop Refresh", 1500),
}
APPLIANCES = {
    ApplianceCondition.MISSING_BROKEN: 4000,
    ApplianceCondition.OLD: 2500,
}
KITCHEN_FLOORING = {KitchenFlooring.NEEDS_REPLACEMENT: ("Kitchen Flooring Installation", 2000)}

BATHROOM = {
    BathroomCondition.POOR: ("Full Remodel", 10000),
    BathroomCondition.DATED: ("Cosmetic Update", 4000),
}
VANITY = {VanityCondition.NEEDS_REPLACEMENT: ("Vanity Replacement", 1200)}
TOILET = {ToiletCondition.NEEDS_REPLACEMENT: ("Toilet Replacement", 400)}
TUB_SHOWER = {
    TubShowerCondition.CRACKED_DAMAGED: ("Tub/Shower Replacement", 2500),
    TubShowerCondition.WORN_STAINED: ("Tub Refinishing", 600),
}
TILE = {TileCondition.CRACKED_MISSING: ("Tile Replacement", 1800)}

BEDROOM_FLOORING = {
    BedroomFlooring.NEEDS_REPLACEMENT: ("Flooring Replacement", 1500),
    BedroomFlooring.CARPET_WORN: ("Carpet Replacement", 800),
}
BEDROOM = {
    BedroomCondition.NEEDS_WORK: ("Repairs & Updates", 1200),
    BedroomCondition.NEEDS_PAINT: ("Paint", 500),
}
CLOSETS = {ClosetCondition.NONE: ("Add Closet", 1500)}

FLOORING_SQFT_RATE = 4
FLOORING_REPAIRS = {InteriorFlooring.MIXED: ("Flooring Repairs & Patching", 2000)}
PAINT_SQFT_RATE = 2
WALL_REPAIRS = {WallCondition.NEEDS_REPAIR: ("Drywall Repair & Patching", 3000)}
CEILINGS = {
    CeilingCondition.NEEDS_REPAIR: ("Ceiling Repairs", 2500),
    CeilingCondition.STAINS_CRACKS: ("Ceiling Patch & Paint", 1200),
}
LIGHTING = {
    LightingCondition.OUTDATED: ("Lighting Fixture Updates", 1500),
    LightingCondition.NEEDS_REPLACEMENT: ("Lighting Fixture Updates", 1500),
}

SIDING_SQFT_RATE = 8
EXTERIOR_PAINT_SQFT_RATE = 3
SIDING_REPAIRS = {SidingCondition.NEEDS_REPAIR: ("Siding Repairs", 3000)}

WINDOWS_REPLACE = {WindowCondition.BROKEN_MISSING, WindowCondition.OLD_SINGLE_PANE}
WINDOW_BASE_COST = 12000
WINDOW_TYPE_COST = {
    WindowType.IMPACT_RATED: 18000,
    WindowType.HURRICANE: 18000,
    WindowType.SINGLE_PANE: 10000,
}
WINDOW_EXTENT_FACTOR = {
    WindowDamage.ALL_NEED_REPLACEMENT: 1.2,
    WindowDamage.MANY_BROKEN: 1.1,
    WindowDamage.SOME_BROKEN: 0.4,
}
WINDOW_REPAIRS = {WindowDamage.MANY_BROKEN: 6000, WindowDamage.SOME_BROKEN: 2500}
IMPACT_REPAIR_FACTOR = 1.5

DOORS = {
    DoorCondition.NEEDS_REPLACEMENT: ("Exterior Door Replacement", 2000),
    DoorCondition.WORN: ("Door Refinishing", 600),
}
GUTTERS = {
    GutterCondition.MISSING: ("Gutter Installation", 1500),
    GutterCondition.NEEDS_REPAIR: ("Gutter Repairs", 500),
}
LANDSCAPING = {
    LandscapingCondition.OVERGROWN: ("Landscaping Cleanup & Maintenance", 2000),
    LandscapingCondition.MINIMAL: ("Landscape Installation", 3500),
}
DRIVEWAY = {
    DrivewayCondition.NEEDS_REPLACEMENT: ("Driveway Replacement", 6000),
    DrivewayCondition.CRACKED: ("Driveway Repairs & Sealing", 1500),
}
FENCING = {FencingCondition.NEEDS_REPAIR: ("Fence Repairs", 2000)}

POOL = {
    PoolCondition.NOT_WORKING: ("Pool Restoration", 8000),
    PoolCondition.NEEDS_REPAIR: ("Pool Repairs", 4000),
}
POOL_EQUIPMENT = {
    PoolEquipment.NEEDS_REPLACEMENT: ("Pool Equipment Replacement (Pump, Filter, Heater)", 3500),
    PoolEquipment.OLD: ("Pool Equipment Replacement (Pump, Filter, Heater)", 2000),
}


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

@dataclass
class _Items:
    items: list[LineItem] = field(default_factory=list)

    def add(self, category: str, description: str, cost: float) -> None:
        self.items.append(
            LineItem(
                id=f"auto-{len(self.items)}",
                category=category,
                description=description,
                estimated_cost=round_half_up(cost),
            )
        )

    def add_row(self, category: str, row: tuple[str, float] | None, factor: float = 1.0) -> None:
        if row is not None:
            description, base = row
            self.add(category, description, base * factor)

    @property
    def total(self) -> float:
        return sum(i.estimated_cost for i in self.items)


def _with_detail(prefix: str, details: str) -> str:
    clipped = details[:DETAIL_MAX_CHARS]
    ellipsis = "..." if len(details) > DETAIL_MAX_CHARS else ""
    return f"{prefix} - {clipped}{ellipsis}"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _structural(a: ConditionAssessment, s: _Scale, out: _Items) -> None:
    roof = a.roof
    if roof.condition not in ROOF_OK:
        if roof.condition is RoofCondition.NEEDS_REPLACEMENT:
            out.add("structural", f"Roof Replacement ({s.sqft_label} sqft)", s.sqft * ROOF_SQFT_RATE)
        elif roof.condition in ROOF_REPAIRS:
            out.add_row("structural", ROOF_REPAIRS[roof.condition], s.size)
        elif roof.leaks:
            out.add_row("structural", ROOF_LEAKS, s.size)

    out.add_row("structural", FOUNDATION.get(a.foundation.condition), s.size)

    issues: AdditionalIssues = a.additional_issues
    for flag, prefix, default, base in ISSUE_FLAGS:
        if not getattr(issues, flag):
            continue
        details = getattr(issues, f"{flag}_details") if prefix else ""
        description = _with_detail(prefix, details) if details else default
        out.add("structural", description, base * s.size * s.unit)


def _systems(a: ConditionAssessment, s: _Scale, out: _Items) -> None:
    hvac = a.hvac
    if hvac.condition not in HVAC_OK:
        if hvac.condition in HVAC_REPLACE:
            n = hvac.number_of_units or s.units or 1
            per_unit = HVAC_UNIT_COST.get(hvac.system_type, HVAC_DEFAULT_UNIT_COST)
            system = f" - {hvac.system_type.value}" if hvac.system_type is not HvacSystemType.UNSET else ""
            plural = "s" if n > 1 else ""
            out.add("systems", f"HVAC Replacement ({n} unit{plural}){system}", n * per_unit)
        else:
            out.add_row("systems", HVAC_SERVICE.get(hvac.condition))

    p = a.plumbing
    if p.condition not in PLUMBING_OK:
        if p.condition is PlumbingCondition.NEEDS_REPLACEMENT:
            out.add_row("systems", PLUMBING_REPLACE)
        elif p.pipe_material is PipeMaterial.GALVANIZED:
            description, by_age, default = GALVANIZED
            out.add("systems", description, by_age.get(p.pipe_age, default))
        elif p.pipe_age is PipeAge.OVER_TWENTY and p.pipe_material is PipeMaterial.UNKNOWN:
            out.add_row("systems", PLUMBING_UNKNOWN_OLD)
        elif p.condition is PlumbingCondition.HAS_ISSUES or p.leaks:
            out.add_row("systems", PLUMBING_REPAIRS)

    if p.water_heater in WATER_HEATER:
        out.add(
            "systems",
            f"Water Heater Replacement{s.units_suffix()}",
            WATER_HEATER[p.water_heater] * s.units,
        )

    e = a.electrical
    if e.condition not in ELECTRICAL_OK:
        if e.condition is ElectricalCondition.UNSAFE or e.wiring_type is WiringType.KNOB_AND_TUBE:
            out.add_row("systems", REWIRE)
        elif e.wiring_type is WiringType.ALUMINUM:
            out.add_row("systems", ALUMINUM_REWIRE)
        elif e.condition is ElectricalCondition.NEEDS_WORK:
            suffix, cost = PANEL_REPAIRS.get(e.panel_amperage, PANEL_REPAIRS_DEFAULT)
            out.add("systems", f"Electrical Panel Upgrade & Repairs{suffix}", cost)
        elif e.panel_amperage is PanelAmperage.A100 and e.condition is ElectricalCondition.ADEQUATE:
            out.add_row("systems", PANEL_RECOMMENDED)

    issues = a.additional_issues
    if issues.code_violations:
        prefix, default, base = CODE_VIOLATIONS
        details = issues.code_violations_details
        out.add("systems", _with_detail(prefix, details) if details else default, base * s.unit)


def _kitchen(a: ConditionAssessment, s: _Scale, out: _Items) -> None:
    k = a.kitchen
    if k.condition in KITCHEN_OK:
        return

    suffix = s.units_suffix()
    if k.condition in KITCHEN:
        description, base = KITCHEN[k.condition]
        out.add("interior", f"{description}{suffix}", base * s.units)
    if k.condition is KitchenCondition.NEEDS_FULL_REHAB:
        return

    for table, value in ((CABINETS, k.cabinets), (COUNTERTOPS, k.countertops)):
        if value in table:
            description, base = table[value]
            out.add("interior", f"{description}{suffix}", base * s.units)

    if k.appliances in APPLIANCES:
        out.add(
            "interior",
            f"Kitchen Appliances{suffix} - Range, Fridge, Dishwasher, Microwave",
            APPLIANCES[k.appliances] * s.units,
        )

    if k.flooring in KITCHEN_FLOORING:
        description, base = KITCHEN_FLOORING[k.flooring]
        out.add("interior", f"{description}{suffix}", base * s.units)


def _bathroom(idx: int, bath: BathroomAssessment, out: _Items) -> None:
    label = bath.location or f"Bathroom {idx + 1}"

    def add(row: tuple[str, float] | None) -> None:
        if row is not None:
            out.add("interior", f"{label} - {row[0]}", row[1])

    if bath.condition in BATHROOM:
        add(BATHROOM[bath.condition])
        return
    add(VANITY.get(bath.vanity))
    add(TOILET.get(bath.toilet))
    add(TUB_SHOWER.get(bath.tub_shower))
    add(TILE.get(bath.tile))


def _bedroom(idx: int, bedroom: BedroomAssessment, out: _Items) -> None:
    label = bedroom.location or f"Bedroom {idx + 1}"
    for row in (
        BEDROOM_FLOORING.get(bedroom.flooring),
        BEDROOM.get(bedroom.condition),
        CLOSETS.get(bedroom.closets),
    ):
        if row is not None:
            out.add("interior", f"{label} - {row[0]}", row[1])


def _interior(a: ConditionAssessment, s: _Scale, out: _Items) -> None:
    _kitchen(a, s, out)
    for idx, bath in enumerate(a.bathrooms):
        _bathroom(idx, bath, out)
    for idx, bedroom in enumerate(a.bedrooms):
        _bedroom(idx, bedroom, out)

    i = a.interior
    multi = s.units > 1
    if i.flooring is InteriorFlooring.NEEDS_REPLACEMENT:
        # common areas scale less than per-unit work
        factor = s.unit * 0.8 if multi else 1.0
        out.add(
            "interior",
            f"Flooring Replacement - Common Areas ({s.sqft_label} sqft){s.units_suffix()}",
            s.sqft * FLOORING_SQFT_RATE * factor,
        )
    else:
        out.add_row("interior", FLOORING_REPAIRS.get(i.flooring), s.unit)

    if i.walls is WallCondition.NEEDS_PAINT:
        factor = s.unit * 0.9 if multi else 1.0
        scope = f" {s.units} Units" if multi else " House"
        out.add(
            "interior",
            f"Interior Paint - Full{scope} ({s.sqft_label} sqft)",
            s.sqft * PAINT_SQFT_RATE * factor,
        )
    else:
        out.add_row("interior", WALL_REPAIRS.get(i.walls), s.unit)

    out.add_row("interior", CEILINGS.get(i.ceilings), s.unit)
    out.add_row("interior", LIGHTING.get(i.lighting), s.unit)


def _windows(a: ConditionAssessment, s: _Scale, out: _Items) -> None:
    x = a.exterior
    if x.windows in WINDOWS_REPLACE:
        base = WINDOW_TYPE_COST.get(x.windows_type, WINDOW_BASE_COST)
        base *= WINDOW_EXTENT_FACTOR.get(x.windows_condition, 1.0)
        factor = s.unit * 0.85 if s.units > 1 else 1.0
        kind = f" - {x.windows_type.value}" if x.windows_type is not WindowType.UNSET else ""
        out.add("exterior", f"Window Replacement{kind}{s.units_suffix()}", base * factor)
    elif x.windows_condition in WINDOW_REPAIRS:
        impact = IMPACT_REPAIR_FACTOR if x.windows_type.is_impact else 1.0
        out.add(
            "exterior",
            f"Window Repairs ({x.windows_condition.value})",
            round_half_up(WINDOW_REPAIRS[x.windows_condition] * impact),
        )


def _exterior(a: ConditionAssessment, s: _Scale, out: _Items) -> None:
    x = a.exterior
    if x.siding is SidingCondition.NEEDS_REPLACEMENT:
        out.add("exterior", f"Siding Replacement ({s.sqft_label} sqft)", s.sqft * SIDING_SQFT_RATE)
    elif x.siding is SidingCondition.NEEDS_PAINT:
        out.add("exterior", f"Exterior Paint ({s.sqft_label} sqft)", s.sqft * EXTERIOR_PAINT_SQFT_RATE)
    else:
        out.add_row("exterior", SIDING_REPAIRS.get(x.siding), s.size)

    _windows(a, s, out)

    if x.doors in DOORS:
        description, base = DOORS[x.doors]
        out.add("exterior", f"{description}{s.units_suffix()}", base * s.units)

    out.add_row("exterior", GUTTERS.get(x.gutters))
    out.add_row("exterior", LANDSCAPING.get(x.landscaping))
    out.add_row("exterior", DRIVEWAY.get(x.driveway))
    out.add_row("exterior", FENCING.get(x.fencing))

    if a.pool.has_pool:
        out.add_row("exterior", POOL.get(a.pool.condition))
        out.add_row("exterior", POOL_EQUIPMENT.get(a.pool.equipment))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_line_items(
    assessment: ConditionAssessment | None,
    sqft: float,
    units: int,
) -> list[LineItem]:
    """
    Rule-generated scope of work for one property.

    Items are emitted in a fixed order (structural, systems, interior,
    exterior) with ids auto-0, auto-1, ... Permits (5%) and a contingency
    reserve (10%) of the hard-cost subtotal are appended whenever any hard
    cost exists.
    """
    if units < 1:
        raise InvalidProjectionInput(f"units must be >= 1 (got {units})")
    if sqft < 0:
        raise InvalidProjectionInput(f"sqft must be >= 0 (got {sqft})")

    a = assessment if assessment is not None else ConditionAssessment()
    scale = _Scale(sqft=sqft, units=units)
    out = _Items()

    _structural(a, scale, out)
    _systems(a, scale, out)
    _interior(a, scale, out)
    _exterior(a, scale, out)

    hard_total = out.total
    if hard_total > 0:
        out.add("systems", "Permits & Inspections", round_half_up(hard_total * PERMITS_RATE))
        out.add("systems", "Contingency Reserve (10%)", round_half_up(hard_total * CONTINGENCY_RATE))

    logger.debug(
        "line_items_generated",
        extra={"context": {"count": len(out.items), "hard_total": hard_total, "units": units}},
    )
    return out.items


def merge_line_items(generated: Sequence[LineItem], existing: Iterable[LineItem]) -> list[LineItem]:
    """
    Generated items first, then every existing item that no generated item
    replaces (matched on category + description). Custom categories never
    match, so they always survive.
    """
    generated_keys = {item.key for item in generated}
    kept = [item for item in existing if item.key not in generated_keys]
    return [*generated, *kept]


def regenerate_line_items(
    assessment: ConditionAssessment | None,
    sqft: float,
    units: int,
    existing: Iterable[LineItem] = (),
    preserve_custom: bool = True,
) -> list[LineItem]:
    generated = generate_line_items(assessment, sqft, units)
    if not preserve_custom:
        return generated
    return merge_line_items(generated, existing)


def total_cost(items: Iterable[LineItem]) -> float:
    return float(sum(i.estimated_cost for i in items))
