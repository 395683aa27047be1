# src/dealcore/domain/money.py
from __future__ import annotations

import math
from typing import Iterable

from dealcore.domain.errors import InvalidProjectionInput


def round_half_up(value: float) -> int:
    """
    Round to the nearest whole unit, ties toward +inf.

    Python's round() is banker's rounding; reference figures (rounded tax
    estimates, adjusted comp prices, line-item costs) are half-up.
    """
    return int(math.floor(value + 0.5))


def round_to_nearest(value: float, step: float) -> float:
    """Round half-up to a multiple of step (e.g. $50 insurance quotes)."""
    return float(round_half_up(value / step) * step)


def ensure_finite(label: str, values: Iterable[float]) -> None:
    for v in values:
        if not math.isfinite(v):
            raise InvalidProjectionInput(f"{label} produced a non-finite value ({v})")


def safe_ratio(numerator: float, denominator: float) -> float:
    # zero denominators are normal for all-cash deals; report 0.0, never inf
    if denominator == 0:
        return 0.0
    return numerator / denominator
