# src/dealcore/domain/errors.py


class DealCoreError(Exception):
    """Base class for every error raised by the calculation core."""


class InvalidLoanTerms(DealCoreError, ValueError):
    """Negative principal, non-positive term, or a payment that is not finite."""


class InvalidProjectionInput(DealCoreError, ValueError):
    """
    A size/unit count that is used as a divisor or scaling base is not positive,
    or a computation would otherwise produce NaN/Infinity.
    """
