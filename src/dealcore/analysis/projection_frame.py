# src/dealcore/analysis/projection_frame.py

from __future__ import annotations
from dataclasses import asdict
from typing import Iterable

import pandas as pd

from dealcore.domain.underwriting import StrategyResults

PROJECTION_COLUMNS = [
    "strategy",
    "year",
    "gross_income",
    "vacancy_loss",
    "noi",
    "debt_service",
    "cash_flow",
    "appreciation",
    "property_value",
    "equity",
    "annual_return",
    "cumulative_cash_flow",
    "cumulative_return",
    "loan_balance",
]


def projections_to_frame(results: Iterable[StrategyResults]) -> pd.DataFrame:
    """
    Long-format table of every projected year across strategies.

    One row per (strategy, year); columns as in PROJECTION_COLUMNS.
    """
    rows = []
    for r in results:
        for p in r.projections:
            row = asdict(p)
            row["strategy"] = r.strategy.value
            rows.append(row)

    if not rows:
        return pd.DataFrame(columns=PROJECTION_COLUMNS)
    return pd.DataFrame(rows)[PROJECTION_COLUMNS]


def cash_flow_pivot(results: Iterable[StrategyResults], value: str = "cash_flow") -> pd.DataFrame:
    """
    Wide view for charting: index = year, one column per strategy.
    """
    df = projections_to_frame(results)
    if df.empty:
        return pd.DataFrame()
    return df.pivot(index="year", columns="strategy", values=value)


def year1_summary_frame(results: Iterable[StrategyResults]) -> pd.DataFrame:
    """Year-1 summary per strategy, indexed by strategy."""
    rows = []
    for r in results:
        row = asdict(r.year1_summary)
        row["strategy"] = r.strategy.value
        row["cash_invested"] = r.cash_invested
        rows.append(row)
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).set_index("strategy")
