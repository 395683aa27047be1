# src/dealcore/domain/condition.py
"""
Structured property-condition assessment.

Every categorical field is a closed str-Enum whose empty value ("") is the
explicit "unset" member. Values the surveyor never filled in, values outside
the enum, and whole sub-records that are missing all collapse to "unset"
instead of failing validation, so the rules engine always sees a total,
well-typed record.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Any, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _is_member(enum_type: type[Enum], value: Any) -> bool:
    if isinstance(value, enum_type):
        return True
    return value in [m.value for m in enum_type]


class _Assessment(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _unknown_is_unset(cls, data: Any) -> Any:
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data

        fields = {}
        for name, f in cls.model_fields.items():
            fields[name] = f
            if f.alias:
                fields[f.alias] = f

        cleaned: dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            f = fields.get(key)
            if f is None:
                continue
            ann = f.annotation
            if isinstance(ann, type) and issubclass(ann, Enum):
                if not _is_member(ann, value):
                    value = ann("")
            elif isinstance(value, str) and ann is not str:
                # numeric/boolean fields arrive as form strings ("2", "")
                if not value.strip():
                    continue
                if ann is not bool:
                    try:
                        number = float(value)
                    except ValueError:
                        continue
                    if not math.isfinite(number):
                        continue
                    if ann is int or int in get_args(ann):
                        # "2.5" -> 2, as form inputs are read
                        value = int(number)
            cleaned[key] = value
        return cleaned


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OverallCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    UNINHABITABLE = "Uninhabitable"
    UNSET = ""


class RoofCondition(str, Enum):
    NEW = "New (0-5 yrs)"
    GOOD = "Good (6-15 yrs)"
    FAIR = "Fair (16-20 yrs)"
    POOR = "Poor (20+ yrs)"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class FoundationCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    MINOR_CRACKS = "Minor Cracks"
    MAJOR_ISSUES = "Major Issues"
    NEEDS_REPAIR = "Needs Repair"
    UNSET = ""


class HvacCondition(str, Enum):
    NEW = "New (0-5 yrs)"
    GOOD = "Good (6-10 yrs)"
    FAIR = "Fair (11-15 yrs)"
    OLD = "Old (15+ yrs)"
    NOT_WORKING = "Not Working"
    UNSET = ""


class HvacSystemType(str, Enum):
    CENTRAL_AC = "Central AC"
    MINI_SPLIT = "Mini-Split"
    WINDOW_UNITS = "Window Units"
    PACKAGE_UNIT = "Package Unit"
    HEAT_PUMP = "Heat Pump"
    NONE = "None"
    UNSET = ""


class PlumbingCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    HAS_ISSUES = "Has Issues"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class PipeMaterial(str, Enum):
    COPPER = "Copper"
    PEX = "PEX"
    PVC = "PVC"
    GALVANIZED = "Galvanized"
    MIXED = "Mixed"
    UNKNOWN = "Unknown"
    UNSET = ""


class PipeAge(str, Enum):
    ORIGINAL = "Original"
    TEN_TO_TWENTY = "10-20 yrs"
    OVER_TWENTY = "20+ yrs"
    RECENTLY_UPDATED = "Recently Updated"
    UNSET = ""


class WaterHeaterCondition(str, Enum):
    NEW = "New"
    GOOD = "Good"
    OLD = "Old"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class ElectricalCondition(str, Enum):
    UPDATED = "Updated"
    ADEQUATE = "Adequate"
    NEEDS_WORK = "Needs Work"
    UNSAFE = "Unsafe"
    UNSET = ""


class PanelAmperage(str, Enum):
    A100 = "100A"
    A150 = "150A"
    A200 = "200A"
    A200_PLUS = "200A+"
    UNKNOWN = "Unknown"
    UNSET = ""


class WiringType(str, Enum):
    MODERN = "Modern"
    ALUMINUM = "Aluminum"
    KNOB_AND_TUBE = "Knob & Tube"
    MIXED = "Mixed"
    UNSET = ""


class SidingCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_PAINT = "Needs Paint"
    NEEDS_REPAIR = "Needs Repair"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class SidingType(str, Enum):
    STUCCO = "Stucco"
    VINYL = "Vinyl"
    WOOD = "Wood"
    BRICK = "Brick"
    CONCRETE_BLOCK = "Concrete Block"
    UNSET = ""


class WindowCondition(str, Enum):
    NEW = "New"
    GOOD = "Good"
    OLD_SINGLE_PANE = "Old Single Pane"
    BROKEN_MISSING = "Broken/Missing"
    UNSET = ""


class WindowType(str, Enum):
    IMPACT_RATED = "Impact-Rated"
    HURRICANE = "Hurricane"
    DOUBLE_PANE = "Double Pane"
    SINGLE_PANE = "Single Pane"
    MIXED = "Mixed"
    UNKNOWN = "Unknown"
    UNSET = ""

    @property
    def is_impact(self) -> bool:
        return self in (WindowType.IMPACT_RATED, WindowType.HURRICANE)


class WindowDamage(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    SOME_BROKEN = "Some Broken"
    MANY_BROKEN = "Many Broken"
    ALL_NEED_REPLACEMENT = "All Need Replacement"
    UNSET = ""


class DoorCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    WORN = "Worn"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class GutterCondition(str, Enum):
    GOOD = "Good"
    NEEDS_REPAIR = "Needs Repair"
    MISSING = "Missing"
    UNSET = ""


class LandscapingCondition(str, Enum):
    WELL_MAINTAINED = "Well Maintained"
    OVERGROWN = "Overgrown"
    MINIMAL = "Minimal"
    UNSET = ""


class FencingCondition(str, Enum):
    GOOD = "Good"
    NEEDS_REPAIR = "Needs Repair"
    NONE = "None"
    UNSET = ""


class DrivewayCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    CRACKED = "Cracked"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class KitchenCondition(str, Enum):
    MODERN = "Modern"
    UPDATED = "Updated"
    DATED = "Dated"
    NEEDS_FULL_REHAB = "Needs Full Rehab"
    UNSET = ""


class CabinetCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    WORN = "Worn"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class CountertopCondition(str, Enum):
    GRANITE_QUARTZ = "Granite/Quartz"
    LAMINATE_GOOD = "Laminate Good"
    LAMINATE_WORN = "Laminate Worn"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class ApplianceCondition(str, Enum):
    ALL_NEW = "All New"
    MOST_GOOD = "Most Good"
    OLD = "Old"
    MISSING_BROKEN = "Missing/Broken"
    UNSET = ""


class KitchenFlooring(str, Enum):
    TILE = "Tile"
    VINYL = "Vinyl"
    WOOD = "Wood"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class BathroomCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    DATED = "Dated"
    POOR = "Poor"
    UNSET = ""


class VanityCondition(str, Enum):
    MODERN = "Modern"
    GOOD = "Good"
    WORN = "Worn"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class ToiletCondition(str, Enum):
    GOOD = "Good"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class TubShowerCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    WORN_STAINED = "Worn/Stained"
    CRACKED_DAMAGED = "Cracked/Damaged"
    UNSET = ""


class TileCondition(str, Enum):
    MODERN = "Modern"
    GOOD = "Good"
    DATED = "Dated"
    CRACKED_MISSING = "Cracked/Missing"
    UNSET = ""


class BedroomFlooring(str, Enum):
    TILE = "Tile"
    WOOD = "Wood"
    CARPET_GOOD = "Carpet Good"
    CARPET_WORN = "Carpet Worn"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class ClosetCondition(str, Enum):
    EXCELLENT = "Excellent"
    ADEQUATE = "Adequate"
    SMALL = "Small"
    NONE = "None"
    UNSET = ""


class BedroomCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_PAINT = "Needs Paint"
    NEEDS_WORK = "Needs Work"
    UNSET = ""


class InteriorFlooring(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    MIXED = "Mixed"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class WallCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_PAINT = "Needs Paint"
    NEEDS_REPAIR = "Needs Repair"
    UNSET = ""


class CeilingCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    STAINS_CRACKS = "Stains/Cracks"
    NEEDS_REPAIR = "Needs Repair"
    UNSET = ""


class LightingCondition(str, Enum):
    MODERN = "Modern"
    ADEQUATE = "Adequate"
    OUTDATED = "Outdated"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


class PoolCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_REPAIR = "Needs Repair"
    NOT_WORKING = "Not Working"
    UNSET = ""


class PoolEquipment(str, Enum):
    NEW = "New"
    GOOD = "Good"
    OLD = "Old"
    NEEDS_REPLACEMENT = "Needs Replacement"
    UNSET = ""


# ---------------------------------------------------------------------------
# Sub-assessments
# ---------------------------------------------------------------------------

class RoofAssessment(_Assessment):
    condition: RoofCondition = RoofCondition.UNSET
    age: str = ""
    roof_year: int | None = None
    leaks: bool = False
    notes: str = ""


class FoundationAssessment(_Assessment):
    condition: FoundationCondition = FoundationCondition.UNSET
    notes: str = ""


class HvacAssessment(_Assessment):
    condition: HvacCondition = HvacCondition.UNSET
    age: str = ""
    system_type: HvacSystemType = HvacSystemType.UNSET
    number_of_units: int | None = None
    notes: str = ""


class PlumbingAssessment(_Assessment):
    condition: PlumbingCondition = PlumbingCondition.UNSET
    pipe_material: PipeMaterial = PipeMaterial.UNSET
    pipe_age: PipeAge = PipeAge.UNSET
    water_heater: WaterHeaterCondition = WaterHeaterCondition.UNSET
    leaks: bool = False
    notes: str = ""


class ElectricalAssessment(_Assessment):
    condition: ElectricalCondition = ElectricalCondition.UNSET
    panel_size: str = ""
    panel_amperage: PanelAmperage = PanelAmperage.UNSET
    wiring_type: WiringType = WiringType.UNSET
    notes: str = ""

    @property
    def has_outdated_wiring(self) -> bool:
        return self.wiring_type in (WiringType.KNOB_AND_TUBE, WiringType.ALUMINUM)


class ExteriorAssessment(_Assessment):
    siding: SidingCondition = SidingCondition.UNSET
    siding_type: SidingType = SidingType.UNSET
    windows: WindowCondition = WindowCondition.UNSET
    windows_type: WindowType = WindowType.UNSET
    windows_condition: WindowDamage = WindowDamage.UNSET
    doors: DoorCondition = DoorCondition.UNSET
    gutters: GutterCondition = GutterCondition.UNSET
    landscaping: LandscapingCondition = LandscapingCondition.UNSET
    fencing: FencingCondition = FencingCondition.UNSET
    driveway: DrivewayCondition = DrivewayCondition.UNSET
    notes: str = ""


class KitchenAssessment(_Assessment):
    condition: KitchenCondition = KitchenCondition.UNSET
    cabinets: CabinetCondition = CabinetCondition.UNSET
    countertops: CountertopCondition = CountertopCondition.UNSET
    appliances: ApplianceCondition = ApplianceCondition.UNSET
    flooring: KitchenFlooring = KitchenFlooring.UNSET
    notes: str = ""


class BathroomAssessment(_Assessment):
    location: str = ""
    condition: BathroomCondition = BathroomCondition.UNSET
    vanity: VanityCondition = VanityCondition.UNSET
    toilet: ToiletCondition = ToiletCondition.UNSET
    tub_shower: TubShowerCondition = TubShowerCondition.UNSET
    tile: TileCondition = TileCondition.UNSET
    notes: str = ""


class BedroomAssessment(_Assessment):
    location: str = ""
    flooring: BedroomFlooring = BedroomFlooring.UNSET
    closets: ClosetCondition = ClosetCondition.UNSET
    condition: BedroomCondition = BedroomCondition.UNSET
    notes: str = ""


class InteriorAssessment(_Assessment):
    flooring: InteriorFlooring = InteriorFlooring.UNSET
    walls: WallCondition = WallCondition.UNSET
    ceilings: CeilingCondition = CeilingCondition.UNSET
    lighting: LightingCondition = LightingCondition.UNSET
    open_floor_plan: bool = False
    notes: str = ""


class PoolAssessment(_Assessment):
    has_pool: bool = False
    condition: PoolCondition = PoolCondition.UNSET
    equipment: PoolEquipment = PoolEquipment.UNSET
    notes: str = ""


class AdditionalIssues(_Assessment):
    mold: bool = False
    mold_details: str = ""
    termites: bool = False
    termites_details: str = ""
    water_damage: bool = False
    water_damage_details: str = ""
    fire_damage: bool = False
    fire_damage_details: str = ""
    structural_issues: bool = False
    structural_issues_details: str = ""
    code_violations: bool = False
    code_violations_details: str = ""
    other: str = ""

    @property
    def has_major_issue(self) -> bool:
        return self.mold or self.termites or self.water_damage or self.fire_damage


class ConditionAssessment(_Assessment):
    overall_condition: OverallCondition = OverallCondition.UNSET
    roof: RoofAssessment = Field(default_factory=RoofAssessment)
    foundation: FoundationAssessment = Field(default_factory=FoundationAssessment)
    hvac: HvacAssessment = Field(default_factory=HvacAssessment)
    plumbing: PlumbingAssessment = Field(default_factory=PlumbingAssessment)
    electrical: ElectricalAssessment = Field(default_factory=ElectricalAssessment)
    exterior: ExteriorAssessment = Field(default_factory=ExteriorAssessment)
    kitchen: KitchenAssessment = Field(default_factory=KitchenAssessment)
    bathrooms: list[BathroomAssessment] = Field(default_factory=list)
    bedrooms: list[BedroomAssessment] = Field(default_factory=list)
    interior: InteriorAssessment = Field(default_factory=InteriorAssessment)
    pool: PoolAssessment = Field(default_factory=PoolAssessment)
    additional_issues: AdditionalIssues = Field(default_factory=AdditionalIssues)
    flood_zone: bool = False
    general_notes: str = ""

    @property
    def has_structural_issues(self) -> bool:
        return self.additional_issues.structural_issues or self.foundation.condition in (
            FoundationCondition.MAJOR_ISSUES,
            FoundationCondition.NEEDS_REPAIR,
        )
