from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from dealcore.domain.underwriting import StrategyResults


@dataclass
class StrategyComparison:
    """
    Side-by-side year-1 and horizon metrics for the strategies run on one deal.

    Arrays are aligned with `strategies`.
    """
    strategies: list[str]
    year1_cash_flow: np.ndarray
    dscr: np.ndarray
    cash_on_cash: np.ndarray
    cumulative_return: np.ndarray
    best_cash_flow: str | None
    best_total_return: str | None


def compute_dscr(noi: np.ndarray, annual_debt_service: np.ndarray) -> np.ndarray:
    """
    DSCR = NOI / Annual Debt Service.

    An all-cash deal has no debt service; it reports 0.0 like the
    single-deal projector does, so the vector stays finite.
    """
    noi = np.asarray(noi, dtype=float)
    debt = np.asarray(annual_debt_service, dtype=float)
    dscr = np.zeros_like(noi, dtype=float)
    mask = debt != 0.0
    dscr[mask] = noi[mask] / debt[mask]
    return dscr


def compute_cash_on_cash_return(
    annual_cash_flow: np.ndarray,
    total_cash_invested: np.ndarray,
) -> np.ndarray:
    """Cash-on-cash return in percent; 0.0 where nothing was invested."""
    cf = np.asarray(annual_cash_flow, dtype=float)
    invested = np.asarray(total_cash_invested, dtype=float)
    coc = np.zeros_like(cf, dtype=float)
    mask = invested != 0.0
    coc[mask] = cf[mask] / invested[mask] * 100.0
    return coc


def _argmax_label(values: np.ndarray, labels: Sequence[str]) -> str | None:
    if values.size == 0:
        return None
    # first strategy wins ties
    return labels[int(np.argmax(values))]


def compare_strategies(results: Sequence[StrategyResults]) -> StrategyComparison:
    """
    Rank strategies by year-1 cash flow and by cumulative return at the end
    of the projection horizon.
    """
    labels = [r.strategy.value for r in results]

    noi = np.array([r.year1_summary.noi for r in results], dtype=float)
    debt = np.array([r.year1_summary.debt_service for r in results], dtype=float)
    cash_flow = np.array([r.year1_summary.cash_flow for r in results], dtype=float)
    invested = np.array([r.cash_invested for r in results], dtype=float)
    cumulative = np.array(
        [r.projections[-1].cumulative_return if r.projections else 0.0 for r in results],
        dtype=float,
    )

    return StrategyComparison(
        strategies=labels,
        year1_cash_flow=cash_flow,
        dscr=compute_dscr(noi, debt),
        cash_on_cash=compute_cash_on_cash_return(cash_flow, invested),
        cumulative_return=cumulative,
        best_cash_flow=_argmax_label(cash_flow, labels),
        best_total_return=_argmax_label(cumulative, labels),
    )
