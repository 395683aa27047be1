import pytest

from dealcore.analysis.line_items import (
    generate_line_items,
    merge_line_items,
    regenerate_line_items,
    size_multiplier,
    total_cost,
    unit_multiplier,
)
from dealcore.domain.condition import ConditionAssessment, RoofCondition
from dealcore.domain.errors import InvalidProjectionInput
from dealcore.domain.rehab import LineItem


def _assess(**data) -> ConditionAssessment:
    return ConditionAssessment.model_validate(data)


def _by_description(items):
    return {i.description: i.estimated_cost for i in items}


def test_empty_assessment_produces_nothing():
    assert generate_line_items(ConditionAssessment(), 1500, 1) == []
    assert generate_line_items(None, 1500, 1) == []


def test_unknown_condition_values_are_unset():
    a = _assess(roof={"condition": "Leaky??"}, kitchen=None, bathrooms=[{"condition": 7}])
    assert a.roof.condition is RoofCondition.UNSET
    assert generate_line_items(a, 1500, 1) == []


def test_roof_replacement_with_soft_costs():
    items = generate_line_items(_assess(roof={"condition": "Needs Replacement"}), 1500, 1)
    assert [i.id for i in items] == ["auto-0", "auto-1", "auto-2"]
    assert items[0].category == "structural"
    assert items[0].description == "Roof Replacement (1500 sqft)"
    assert items[0].estimated_cost == 27_000
    assert items[1].description == "Permits & Inspections"
    assert items[1].estimated_cost == 1_350
    assert items[2].description == "Contingency Reserve (10%)"
    assert items[2].estimated_cost == 2_700
    assert {i.category for i in items[1:]} == {"systems"}


def test_small_house_scales_structural_work_down():
    items = generate_line_items(_assess(foundation={"condition": "Major Issues"}), 1000, 1)
    assert _by_description(items)["Foundation Repairs (Major Issues)"] == 21_250


def test_roof_leak_only_when_no_other_roof_rule():
    items = generate_line_items(_assess(roof={"condition": "Fair (16-20 yrs)", "leaks": True}), 1800, 1)
    assert _by_description(items)["Roof Leak Repairs"] == 3_000

    items = generate_line_items(_assess(roof={"condition": "Good (6-15 yrs)", "leaks": True}), 1800, 1)
    assert items == []


def test_issue_details_are_clipped():
    details = "Sagging beam over the garage and family room"  # 44 chars
    items = generate_line_items(
        _assess(additional_issues={"structural_issues": True, "structural_issues_details": details}),
        1800,
        1,
    )
    assert items[0].description == f"Structural Repairs - {details[:40]}..."
    assert items[0].estimated_cost == 15_000


def test_fire_damage_ignores_details():
    items = generate_line_items(
        _assess(additionalIssues={"fireDamage": True, "fireDamageDetails": "kitchen"}),
        1800,
        2,
    )
    assert items[0].description == "Fire Damage Restoration"
    assert items[0].estimated_cost == 51_000  # 30k x 1.7 units


def test_hvac_replacement_by_system_type():
    items = generate_line_items(
        _assess(hvac={"condition": "Old (15+ yrs)", "system_type": "Mini-Split", "number_of_units": 2}),
        1800,
        1,
    )
    assert _by_description(items)["HVAC Replacement (2 units) - Mini-Split"] == 14_000


def test_hvac_defaults_to_property_unit_count():
    items = generate_line_items(_assess(hvac={"condition": "Not Working"}), 1800, 3)
    assert _by_description(items)["HVAC Replacement (3 units)"] == 18_000


def test_galvanized_pipes():
    items = generate_line_items(
        _assess(plumbing={"condition": "Has Issues", "pipe_material": "Galvanized", "pipe_age": "Original"}),
        1800,
        1,
    )
    assert _by_description(items)["Galvanized Pipe Replacement (Required)"] == 14_000
    assert "Plumbing Repairs & Leak Fixes" not in _by_description(items)


def test_water_heater_per_unit():
    items = generate_line_items(_assess(plumbing={"water_heater": "Old"}), 1800, 3)
    assert _by_description(items)["Water Heater Replacement (3 units)"] == 3_600


def test_electrical_rules():
    knob = generate_line_items(_assess(electrical={"wiring_type": "Knob & Tube"}), 1800, 1)
    assert "Complete Electrical Rewiring" in _by_description(knob)

    panel = generate_line_items(
        _assess(electrical={"condition": "Needs Work", "panel_amperage": "100A"}), 1800, 1
    )
    assert _by_description(panel)["Electrical Panel Upgrade & Repairs (100A → 200A Upgrade)"] == 6_000

    recommended = generate_line_items(
        _assess(electrical={"condition": "Adequate", "panel_amperage": "100A"}), 1800, 1
    )
    assert _by_description(recommended)["Panel Upgrade Recommended (100A → 200A)"] == 4_500


def test_kitchen_full_remodel_replaces_components():
    items = generate_line_items(
        _assess(kitchen={"condition": "Needs Full Rehab", "cabinets": "Needs Replacement"}),
        1800,
        2,
    )
    costs = _by_description(items)
    assert costs["Kitchen Full Remodel (2 units)"] == 44_000
    assert not any("Cabinet" in d for d in costs)


def test_dated_kitchen_components():
    items = generate_line_items(
        _assess(kitchen={"condition": "Dated", "countertops": "Laminate Worn", "appliances": "Old"}),
        1800,
        1,
    )
    costs = _by_description(items)
    assert costs["Kitchen Cosmetic Updates"] == 8_000
    assert costs["Kitchen Countertop Refresh"] == 1_500
    assert costs["Kitchen Appliances - Range, Fridge, Dishwasher, Microwave"] == 2_500


def test_updated_kitchen_is_skipped():
    items = generate_line_items(_assess(kitchen={"condition": "Updated", "appliances": "Old"}), 1800, 1)
    assert items == []


def test_bathrooms_and_bedrooms_by_location():
    items = generate_line_items(
        _assess(
            bathrooms=[
                {"location": "Master Bath", "condition": "Poor", "vanity": "Needs Replacement"},
                {"toilet": "Needs Replacement", "tub_shower": "Worn/Stained"},
            ],
            bedrooms=[{"flooring": "Carpet Worn", "closets": "None"}],
        ),
        1800,
        1,
    )
    costs = _by_description(items)
    assert costs["Master Bath - Full Remodel"] == 10_000
    assert "Master Bath - Vanity Replacement" not in costs
    assert costs["Bathroom 2 - Toilet Replacement"] == 400
    assert costs["Bathroom 2 - Tub Refinishing"] == 600
    assert costs["Bedroom 1 - Carpet Replacement"] == 800
    assert costs["Bedroom 1 - Add Closet"] == 1_500


def test_interior_paint_and_flooring_multi_unit():
    items = generate_line_items(
        _assess(interior={"flooring": "Needs Replacement", "walls": "Needs Paint"}), 2000, 2
    )
    costs = _by_description(items)
    # 2000 sqft x $4 x 1.7 units x 0.8
    assert costs["Flooring Replacement - Common Areas (2000 sqft) (2 units)"] == 10_880
    # 2000 sqft x $2 x 1.7 units x 0.9
    assert costs["Interior Paint - Full 2 Units (2000 sqft)"] == 6_120


def test_window_replacement_and_repairs():
    replace = generate_line_items(
        _assess(exterior={"windows": "Old Single Pane", "windows_type": "Impact-Rated",
                          "windows_condition": "All Need Replacement"}),
        1800,
        1,
    )
    assert _by_description(replace)["Window Replacement - Impact-Rated"] == 21_600

    repair = generate_line_items(
        _assess(exterior={"windows_type": "Impact-Rated", "windows_condition": "Some Broken"}),
        1800,
        1,
    )
    assert _by_description(repair)["Window Repairs (Some Broken)"] == 3_750


def test_exterior_and_pool():
    items = generate_line_items(
        _assess(
            exterior={"siding": "Needs Paint", "doors": "Worn", "gutters": "Missing", "driveway": "Cracked"},
            pool={"has_pool": True, "condition": "Needs Repair", "equipment": "Old"},
        ),
        1800,
        1,
    )
    costs = _by_description(items)
    assert costs["Exterior Paint (1800 sqft)"] == 5_400
    assert costs["Door Refinishing"] == 600
    assert costs["Gutter Installation"] == 1_500
    assert costs["Driveway Repairs & Sealing"] == 1_500
    assert costs["Pool Repairs"] == 4_000
    assert costs["Pool Equipment Replacement (Pump, Filter, Heater)"] == 2_000


def test_pool_rules_need_a_pool():
    items = generate_line_items(_assess(pool={"condition": "Not Working"}), 1800, 1)
    assert items == []


def test_invalid_scale():
    with pytest.raises(InvalidProjectionInput):
        generate_line_items(ConditionAssessment(), 1500, 0)
    with pytest.raises(InvalidProjectionInput):
        generate_line_items(ConditionAssessment(), -1, 1)


@pytest.mark.parametrize("units,expected", [(1, 1.0), (2, 1.7), (4, 3.1)])
def test_unit_multiplier(units, expected):
    assert unit_multiplier(units) == pytest.approx(expected)


@pytest.mark.parametrize("sqft,expected", [(1199, 0.85), (1200, 1.0), (2500, 1.0), (2501, 1.15)])
def test_size_multiplier(sqft, expected):
    assert size_multiplier(sqft) == expected


def test_merge_keeps_custom_items():
    generated = generate_line_items(_assess(roof={"condition": "Needs Replacement"}), 1500, 1)
    existing = [
        LineItem(id="x1", category="structural", description="Roof Replacement (1500 sqft)",
                 estimated_cost=20_000, is_manually_edited=True),
        LineItem(id="x2", category="Custom", description="Dumpster rental", estimated_cost=900),
    ]
    merged = merge_line_items(generated, existing)
    assert merged[: len(generated)] == generated
    assert merged[-1].description == "Dumpster rental"
    assert len(merged) == len(generated) + 1


def test_regenerate_without_preserving():
    existing = [LineItem(category="Custom", description="Dumpster rental", estimated_cost=900)]
    a = _assess(roof={"condition": "Poor (20+ yrs)"})
    assert len(regenerate_line_items(a, 1800, 1, existing)) == 4
    assert len(regenerate_line_items(a, 1800, 1, existing, preserve_custom=False)) == 3


def test_total_cost():
    items = generate_line_items(_assess(roof={"condition": "Needs Replacement"}), 1500, 1)
    assert total_cost(items) == 27_000 + 1_350 + 2_700
    assert total_cost([]) == 0.0
