import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dealcore.domain.errors import InvalidLoanTerms
from dealcore.domain.finance import AmortizationSchedule, annuity_payment


def test_zero_rate_payment_is_straight_line():
    """
    $100k at 0% over 10 years -> principal / 120 months, never NaN.
    """
    s = AmortizationSchedule(100_000, 0.0, 10)
    assert s.monthly_payment == pytest.approx(833.3333333, rel=1e-9)
    assert math.isfinite(s.annual_debt_service)
    assert s.annual_debt_service == pytest.approx(10_000.0)


def test_standard_30_year_payment():
    s = AmortizationSchedule(200_000, 6.0, 30)
    assert s.monthly_payment == pytest.approx(1199.10, abs=0.01)
    assert s.n_months == 360


def test_zero_principal_is_a_valid_loan():
    s = AmortizationSchedule(0.0, 7.0, 30)
    assert s.monthly_payment == 0.0
    assert s.advance(0.0, 12).balance == 0.0


@pytest.mark.parametrize(
    "principal,rate,term",
    [
        (-1.0, 5.0, 30),
        (100_000, 5.0, 0),
        (100_000, 5.0, -5),
        (float("nan"), 5.0, 30),
        (100_000, float("inf"), 30),
        (1_000, -1_300.0, 1),
        (100_000, -1_200.0, 30),
    ],
)
def test_invalid_terms_raise(principal, rate, term):
    with pytest.raises(InvalidLoanTerms):
        AmortizationSchedule(principal, rate, term)


def test_invalid_terms_are_value_errors():
    with pytest.raises(ValueError):
        AmortizationSchedule(100_000, 5.0, 0)


def test_advance_stops_after_last_payment():
    s = AmortizationSchedule(12_000, 0.0, 1)
    step = s.advance(12_000, 24)
    # only 12 payments exist
    assert step.payment == pytest.approx(12_000.0)
    assert step.balance == pytest.approx(0.0, abs=1e-9)

    after = s.advance(0.0, 12, start_month=12)
    assert after.payment == 0.0
    assert after.interest == 0.0


def test_step_splits_interest_and_principal():
    s = AmortizationSchedule(120_000, 12.0, 30)
    step = s.step(120_000)
    assert step.interest == pytest.approx(1_200.0)
    assert step.principal == pytest.approx(s.monthly_payment - 1_200.0)
    assert step.balance == pytest.approx(120_000 - step.principal)


def test_annuity_payment_formula_matches_schedule():
    r = 7.0 / 100 / 12
    assert annuity_payment(r, 360, 300_000) == pytest.approx(
        AmortizationSchedule(300_000, 7.0, 30).monthly_payment
    )


@settings(max_examples=60, deadline=None)
@given(
    principal=st.floats(min_value=1_000, max_value=5_000_000),
    rate=st.one_of(st.just(0.0), st.floats(min_value=0.01, max_value=15.0)),
    term=st.integers(min_value=1, max_value=40),
)
def test_amortization_closure(principal, rate, term):
    """Principal portions over the full term repay the original principal."""
    s = AmortizationSchedule(principal, rate, term)
    repaid = sum(step.principal for _, step in s.rows())
    assert repaid == pytest.approx(principal, rel=1e-6)
