import json

import pytest

from dealcore.analysis.line_items import total_cost
from dealcore.domain.assumptions import GlobalAssumptions, Section8ZipData
from dealcore.domain.condition import ConditionAssessment
from dealcore.domain.property import ComparableProperty, DealInputs, UnitDetail
from dealcore.domain.rehab import LineItem
from dealcore.domain.underwriting import Strategy
from dealcore.services.deal_analyzer import analyze_deal, subject_from_deal


def test_rental_only(rental_deal, assumptions, as_of):
    analysis = analyze_deal(
        rental_deal,
        assumptions,
        strategies=["ltr", Strategy.SECTION8],
        as_of=as_of,
    )
    assert [r.strategy for r in analysis.strategies] == [Strategy.LTR, Strategy.SECTION8]
    assert analysis.comparison.best_cash_flow == "section8"
    # no ARV -> no exit comparison
    assert analysis.exits is None
    assert analysis.arv is None
    assert analysis.line_items == []


def test_rehab_strategy_skipped_without_arv(rental_deal, assumptions, as_of):
    analysis = analyze_deal(rental_deal, assumptions, as_of=as_of)
    assert Strategy.REHAB not in [r.strategy for r in analysis.strategies]
    assert len(analysis.strategies) == 3


def test_comps_replace_arv(rehab_deal, assumptions, as_of):
    comps = [
        ComparableProperty(sold_price=340_000, sqft=1500, beds=3, baths=2, year_built=1990),
        ComparableProperty(sold_price=330_000, sqft=1500, beds=3, baths=2, year_built=1990),
    ]
    analysis = analyze_deal(rehab_deal, assumptions, comps=comps, as_of=as_of)
    assert analysis.arv.arv == 335_000
    assert analysis.deal.after_repair_value == 335_000
    assert analysis.exits.refi.new_loan_amount == pytest.approx(335_000 * 0.75)
    rehab = next(r for r in analysis.strategies if r.strategy is Strategy.REHAB)
    assert rehab.projections[0].property_value == pytest.approx(335_000 * 1.03)


def test_assessment_drives_rehab_cost(rehab_deal, assumptions, as_of):
    assessment = ConditionAssessment.model_validate(
        {
            "roof": {"condition": "Needs Replacement"},
            "kitchen": {"condition": "Dated"},
            "overall_condition": "Fair",
        }
    )
    custom = LineItem(category="Custom", description="Dumpster rental", estimated_cost=900)
    analysis = analyze_deal(
        rehab_deal,
        assumptions,
        assessment=assessment,
        existing_line_items=[custom],
        as_of=as_of,
    )
    assert analysis.line_items[-1] == custom
    assert analysis.deal.rehab_cost == total_cost(analysis.line_items)
    assert analysis.cost_range.low_estimate <= analysis.cost_range.high_estimate
    assert analysis.confidence.level == "Low"
    assert analysis.exits.bridge.loan_amount == pytest.approx(
        200_000 * 0.9 + analysis.deal.rehab_cost
    )


def test_quick_rehab_estimate(rehab_deal, assumptions, as_of):
    deal = rehab_deal.model_copy(update={"rehab_cost": 0.0})
    analysis = analyze_deal(deal, assumptions, rehab_level="medium", as_of=as_of)
    assert analysis.deal.rehab_cost == 52_500

    # an explicit budget wins
    analysis = analyze_deal(rehab_deal, assumptions, rehab_level="heavy", as_of=as_of)
    assert analysis.deal.rehab_cost == 50_000


def test_voucher_rents_filled_from_zip_tables(as_of):
    assumptions = GlobalAssumptions(
        section8_zip_data=[
            Section8ZipData.model_validate({"zipCode": "33101", "zone": 2, "rents": {"2bed": 2_000}})
        ]
    )
    deal = DealInputs(
        address="9 Bay St, Miami, FL 33101",
        purchase_price=150_000,
        unit_details=[UnitDetail(beds=2), UnitDetail(beds=2, section8_rent=1_700)],
    )
    analysis = analyze_deal(deal, assumptions, strategies=["section8"], as_of=as_of)
    assert [u.section8_rent for u in analysis.deal.unit_details] == [2_000, 1_700]
    assert analysis.strategies[0].projections[0].gross_income == pytest.approx(3_700 * 12)


def test_subject_from_deal(rehab_deal):
    subject = subject_from_deal(rehab_deal)
    assert subject.sqft == 1500
    assert subject.beds == 3
    assert subject.year_built == 1990


def test_to_dict_is_json_ready(rehab_deal, assumptions, as_of):
    comps = [ComparableProperty(sold_price=320_000, sqft=1500, beds=3, baths=2, year_built=1990)]
    analysis = analyze_deal(
        rehab_deal,
        assumptions,
        comps=comps,
        assessment=ConditionAssessment.model_validate({"hvac": {"condition": "Fair (11-15 yrs)"}}),
        as_of=as_of,
    )
    payload = json.loads(json.dumps(analysis.to_dict(), default=str))
    assert set(payload["strategies"]) == {"ltr", "section8", "str", "rehab"}
    assert payload["deal"]["purchasePrice"] == 200_000
    assert payload["exits"]["sell"]["exit_type"] == "sell"
    assert payload["comparison"]["strategies"] == ["ltr", "section8", "str", "rehab"]
    assert isinstance(payload["guardrails"]["flags"], list)
