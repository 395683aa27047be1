import math
from dataclasses import dataclass
from typing import Iterator

from dealcore.domain.errors import InvalidLoanTerms


def annuity_payment(rate_monthly: float, n_months: int, principal: float) -> float:
    """
    Standard fixed-rate amortization formula:
    M = P * [ r(1+r)^n / ((1+r)^n - 1) ]
    P = loan principal
    r = monthly interest rate
    n = number of payments (months)
    """
    r = rate_monthly
    if r == 0:
        return principal / n_months
    # (1+r)^n - 1 without cancellation for small r
    growth_less_one = math.expm1(n_months * math.log1p(r))
    return principal * (r * (growth_less_one + 1)) / growth_less_one


@dataclass(frozen=True)
class AmortizationStep:
    payment: float    # total paid over the step
    interest: float   # interest portion
    principal: float  # principal portion
    balance: float    # balance after the step


@dataclass(frozen=True)
class AmortizationSchedule:
    """
    Fixed-rate, fixed-term monthly loan.

    annual_rate_percent is nominal and in percent (7.0 == 7%).
    """
    principal: float
    annual_rate_percent: float
    term_years: int

    def __post_init__(self) -> None:
        if not math.isfinite(self.principal) or self.principal < 0:
            raise InvalidLoanTerms(f"principal must be >= 0 (got {self.principal})")
        if self.term_years <= 0:
            raise InvalidLoanTerms(f"term must be > 0 years (got {self.term_years})")
        if not math.isfinite(self.annual_rate_percent):
            raise InvalidLoanTerms(f"rate must be finite (got {self.annual_rate_percent})")
        try:
            payment = self.monthly_payment
        except (OverflowError, ZeroDivisionError, ValueError) as err:
            raise InvalidLoanTerms("loan terms produce no finite payment") from err
        if not math.isfinite(payment):
            raise InvalidLoanTerms(f"loan terms produce a non-finite payment ({payment})")

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate_percent / 100 / 12

    @property
    def n_months(self) -> int:
        return int(self.term_years * 12)

    @property
    def monthly_payment(self) -> float:
        return annuity_payment(self.monthly_rate, self.n_months, self.principal)

    @property
    def annual_debt_service(self) -> float:
        return self.monthly_payment * 12

    def step(self, balance: float) -> AmortizationStep:
        """One scheduled payment against the given remaining balance."""
        payment = self.monthly_payment
        interest = balance * self.monthly_rate
        principal = payment - interest
        return AmortizationStep(
            payment=payment,
            interest=interest,
            principal=principal,
            balance=balance - principal,
        )

    def advance(self, balance: float, months: int, start_month: int = 0) -> AmortizationStep:
        """
        Roll the balance forward `months` payments, starting after
        `start_month` payments have already been made. Payments stop once
        the schedule's last month has been paid.
        """
        count = 0
        interest = principal = 0.0
        for month in range(start_month, start_month + months):
            if month >= self.n_months:
                break
            s = self.step(balance)
            interest += s.interest
            principal += s.principal
            balance = s.balance
            count += 1
        return AmortizationStep(
            payment=self.monthly_payment * count,
            interest=interest,
            principal=principal,
            balance=balance,
        )

    def rows(self) -> Iterator[tuple[int, AmortizationStep]]:
        balance = self.principal
        for month in range(1, self.n_months + 1):
            s = self.step(balance)
            balance = s.balance
            yield month, s
