from datetime import date

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from dealcore.analysis.cost_range import calculate_cost_range
from dealcore.domain.condition import ConditionAssessment
from dealcore.domain.rehab import LineItem

AS_OF = date(2025, 6, 1)

# every "not assessed" factor cleared
KNOWN = {
    "overall_condition": "Good",
    "roof": {"condition": "Good (6-15 yrs)"},
    "hvac": {"condition": "Good (6-10 yrs)"},
    "plumbing": {"pipe_material": "Copper"},
}


def _item(category: str, cost: float) -> LineItem:
    return LineItem(category=category, description=f"{category} work", estimated_cost=cost)


def _assess(**extra) -> ConditionAssessment:
    return ConditionAssessment.model_validate({**KNOWN, **extra})


def test_single_systems_item():
    result = calculate_cost_range([_item("systems", 10_000)], _assess(), AS_OF)
    # band -10/+20, contingency 10% / 20%
    assert result.low_estimate == 9_900
    assert result.high_estimate == 14_400
    assert result.mid_estimate == 12_150
    assert result.uncertainty_factors == []

    systems, contingency = result.top_drivers
    assert (systems.category, systems.low_cost, systems.high_cost) == ("Systems", 9_000, 12_000)
    assert systems.confidence == "Low"
    assert systems.description == "1 item in systems"
    assert (contingency.category, contingency.low_cost, contingency.high_cost) == ("Contingency", 900, 2_400)
    assert contingency.description == "Unknowns & hidden issues (10-20%)"


def test_bands_by_category():
    items = [_item("structural", 10_000), _item("interior", 10_000), _item("Custom", 10_000)]
    result = calculate_cost_range(items, _assess(), AS_OF)
    by_cat = {d.category: (d.low_cost, d.high_cost) for d in result.top_drivers}
    assert by_cat["Structural"] == (8_000, 14_000)
    assert by_cat["Interior"] == (8_500, 12_500)
    # unknown categories use the default band in their own bucket
    assert by_cat["Custom"] == (8_500, 12_500)


def test_medium_confidence_with_three_items():
    items = [_item("exterior", 1_000)] * 3
    result = calculate_cost_range(items, _assess(), AS_OF)
    exterior = next(d for d in result.top_drivers if d.category == "Exterior")
    assert exterior.confidence == "Medium"
    assert exterior.description == "3 items in exterior"


def test_missing_assessment_widens_contingency():
    result = calculate_cost_range([_item("interior", 10_000)], None, AS_OF)
    assert result.uncertainty_factors == [
        "Overall condition not assessed",
        "Roof condition unknown",
        "HVAC condition not verified",
        "Plumbing material unknown - may need replacement",
    ]
    # 0.20 + 3 x 0.05 + 0.03
    assert result.high_estimate == 12_500 + round(12_500 * 0.38)
    assert result.low_estimate == 8_500 + 850


def test_structural_and_major_issues():
    a = _assess(foundation={"condition": "Major Issues"})
    result = calculate_cost_range([_item("structural", 10_000)], a, AS_OF)
    assert result.high_estimate == 14_000 + 4_200
    assert result.uncertainty_factors == ["Structural issues may reveal hidden damage"]

    a = _assess(additional_issues={"mold": True})
    result = calculate_cost_range([_item("structural", 10_000)], a, AS_OF)
    assert result.high_estimate == 14_000 + 4_900


def test_contingency_is_capped():
    a = ConditionAssessment.model_validate(
        {
            "foundation": {"condition": "Needs Repair"},
            "additional_issues": {"termites": True},
            "roof": {"roof_year": 1980},
            "flood_zone": True,
            "electrical": {"wiring_type": "Aluminum"},
        }
    )
    result = calculate_cost_range([_item("interior", 10_000)], a, AS_OF)
    assert result.high_estimate == 12_500 + round(12_500 * 0.45)
    assert len(result.uncertainty_factors) == 5
    assert result.uncertainty_factors[:2] == [
        "Structural issues may reveal hidden damage",
        "Major issues (mold/termites) often have hidden extent",
    ]


def test_old_roof_and_flood_zone():
    a = _assess(roof={"condition": "Fair (16-20 yrs)", "roof_year": 1990}, flood_zone=True)
    result = calculate_cost_range([_item("interior", 10_000)], a, AS_OF)
    assert result.uncertainty_factors == [
        "Older property may have age-related issues",
        "Flood zone property - potential moisture issues",
    ]


def test_empty_items():
    result = calculate_cost_range([], _assess(), AS_OF)
    assert (result.low_estimate, result.mid_estimate, result.high_estimate) == (0, 0, 0)
    assert result.top_drivers == []


def test_top_five_drivers():
    items = [_item(c, 1_000 * (i + 1)) for i, c in enumerate(["a", "b", "c", "d", "e", "f"])]
    result = calculate_cost_range(items, _assess(), AS_OF)
    assert len(result.top_drivers) == 5
    highs = [d.high_cost for d in result.top_drivers]
    assert highs == sorted(highs, reverse=True)


line_items = st.lists(
    st.builds(
        LineItem,
        category=st.sampled_from(["structural", "systems", "interior", "exterior", "Custom"]),
        description=st.text(min_size=1, max_size=20),
        estimatedCost=st.integers(min_value=0, max_value=250_000),
    ),
    min_size=1,
    max_size=30,
)


@settings(max_examples=80, deadline=None)
@given(items=line_items, flood=st.booleans())
def test_low_mid_high_ordering(items, flood):
    a = ConditionAssessment(flood_zone=flood)
    result = calculate_cost_range(items, a, AS_OF)
    assert result.low_estimate <= result.mid_estimate <= result.high_estimate
    assert result.mid_estimate == pytest.approx((result.low_estimate + result.high_estimate) / 2, abs=0.5)


def test_negative_cost_rejected():
    with pytest.raises(ValidationError):
        _item("structural", -2.0)
    with pytest.raises(ValidationError):
        LineItem.model_validate({"category": "Custom", "description": "Credit", "estimatedCost": -500})


def test_custom_category_label_kept_as_written():
    result = calculate_cost_range([_item("Additional Work", 1_000)], _assess(), AS_OF)
    assert [d.category for d in result.top_drivers] == ["Additional Work", "Contingency"]
