"""
Multi-scenario views over a baseline: month-by-month revenue paths and a
baseline-vs-scenario KPI table for charts.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from core.errors import InvalidInput
from core.schema import BaselineSnapshot, ScenarioDefinition

from .projection import ProjectedKPIs


def monthly_revenue_forecast(
    scenarios: Sequence[ScenarioDefinition],
    baseline: BaselineSnapshot,
    months: int = 12,
) -> pd.DataFrame:
    """
    Compound each scenario's annual growth monthly from the baseline revenue.

    Revenue in month i (0-based) = monthly_revenue × (1 + growth / 100 / 12)^i

    Returns
    -------
    DataFrame with a `month` column (T1..Tn) and one column per scenario id.
    """
    scenarios = list(scenarios)
    if not scenarios:
        raise InvalidInput("Cannot forecast an empty scenario set.")
    if months <= 0:
        raise InvalidInput(f"months must be positive, got {months}")

    steps = np.arange(months, dtype=float)
    data = {"month": [f"T{i + 1}" for i in range(months)]}
    for s in scenarios:
        monthly_rate = float(s.revenue_growth_pct) / 100.0 / 12.0
        data[s.id] = float(baseline.monthly_revenue) * np.power(1.0 + monthly_rate, steps)
    return pd.DataFrame(data)


def kpi_comparison_table(
    projections: Sequence[ProjectedKPIs],
    baseline: BaselineSnapshot,
) -> pd.DataFrame:
    """
    Baseline next to every scenario for revenue, EBITDA and cash.

    Returns
    -------
    DataFrame with columns metric, current, then one column per scenario id.
    """
    rows = []
    for metric, attr, current in [
        ("Revenue", "revenue", baseline.monthly_revenue),
        ("EBITDA", "ebitda", baseline.ebitda),
        ("Cash", "cash", baseline.cash_on_hand),
    ]:
        row = {"metric": metric, "current": float(current)}
        for p in projections:
            row[p.id] = float(getattr(p, attr))
        rows.append(row)
    return pd.DataFrame(rows)
