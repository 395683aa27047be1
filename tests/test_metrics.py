import numpy as np
import pytest

from dealcore.analysis.cashflow import project_ltr, project_section8, project_str
from dealcore.analysis.projection_frame import (
    PROJECTION_COLUMNS,
    cash_flow_pivot,
    projections_to_frame,
    year1_summary_frame,
)
from dealcore.domain.metrics import compare_strategies, compute_cash_on_cash_return, compute_dscr


def test_compute_dscr_handles_all_cash():
    dscr = compute_dscr(np.array([12_000.0, 10_000.0]), np.array([10_000.0, 0.0]))
    assert dscr.tolist() == [pytest.approx(1.2), 0.0]


def test_cash_on_cash_in_percent():
    coc = compute_cash_on_cash_return(np.array([5_000.0, 1_000.0]), np.array([50_000.0, 0.0]))
    assert coc.tolist() == [pytest.approx(10.0), 0.0]


def test_compare_strategies(rental_deal, assumptions):
    results = [
        project_ltr(rental_deal, assumptions, years=5),
        project_section8(rental_deal, assumptions, years=5),
    ]
    cmp = compare_strategies(results)
    assert cmp.strategies == ["ltr", "section8"]
    # higher voucher rent and less vacancy
    assert cmp.best_cash_flow == "section8"
    assert cmp.best_total_return == "section8"
    assert cmp.dscr[0] == pytest.approx(results[0].year1_summary.dscr)
    assert cmp.cash_on_cash[1] == pytest.approx(results[1].year1_summary.cash_on_cash)


def test_compare_nothing():
    cmp = compare_strategies([])
    assert cmp.strategies == []
    assert cmp.best_cash_flow is None
    assert cmp.best_total_return is None


def test_first_strategy_wins_ties(rental_deal, assumptions):
    r = project_ltr(rental_deal, assumptions, years=2)
    assert compare_strategies([r, r]).best_cash_flow == "ltr"


def test_projections_frame(rental_deal, assumptions):
    results = [
        project_ltr(rental_deal, assumptions, years=10),
        project_section8(rental_deal, assumptions, years=10),
    ]
    df = projections_to_frame(results)
    assert list(df.columns) == PROJECTION_COLUMNS
    assert len(df) == 20
    assert set(df["strategy"]) == {"ltr", "section8"}

    pivot = cash_flow_pivot(results)
    assert list(pivot.index) == list(range(1, 11))
    assert pivot.loc[1, "ltr"] == pytest.approx(results[0].projections[0].cash_flow)

    values = cash_flow_pivot(results, value="property_value")
    assert values.loc[10, "section8"] == pytest.approx(results[1].projections[-1].property_value)


def test_empty_frames():
    assert list(projections_to_frame([]).columns) == PROJECTION_COLUMNS
    assert cash_flow_pivot([]).empty
    assert year1_summary_frame([]).empty


def test_year1_summary_frame(rental_deal, assumptions):
    results = [project_ltr(rental_deal, assumptions, years=1), project_str(rental_deal, assumptions, years=1)]
    df = year1_summary_frame(results)
    assert list(df.index) == ["ltr", "str"]
    assert df.loc["ltr", "cap_rate"] == pytest.approx(7.7)
    assert df.loc["ltr", "cash_invested"] == pytest.approx(50_000)
