"""
Decision support — scenario-vs-scenario comparison and a risk report over a run.

Translates projections and distributions into answers a finance lead can act on:
  Q1: "How does plan B differ from plan A?"  → per-KPI difference and % difference
  Q2: "How likely are we to lose money?"     → P(EBITDA > 0) over retained trials
  Q3: "How bad is a bad month?"              → VaR95 / CVaR95 and the P05–P95 range
  Q4: "How uncertain is this?"               → coefficient of variation, IQR
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from engine.projection import ProjectedKPIs

from .aggregator import MonteCarloResult

# (attribute, label, unit)
_COMPARED_METRICS = [
    ("revenue", "Revenue", "currency"),
    ("gross_profit", "Gross Profit", "currency"),
    ("ebitda", "EBITDA", "currency"),
    ("cash", "Cash", "currency"),
    ("gross_margin", "Gross Margin", "percent"),
    ("dso", "DSO", "days"),
    ("ccc", "Cash Conversion Cycle", "days"),
]


def compare_scenarios(first: ProjectedKPIs, second: ProjectedKPIs) -> pd.DataFrame:
    """
    Side-by-side comparison of two projected scenarios.

    diff is second − first; diff_pct is diff relative to |first| in percent,
    reported as 0 when the first value is 0.

    Returns
    -------
    DataFrame with one row per KPI:
        metric, unit, first, second, diff, diff_pct
    """
    rows = []
    for attr, label, unit in _COMPARED_METRICS:
        v1 = float(getattr(first, attr))
        v2 = float(getattr(second, attr))
        diff = v2 - v1
        rows.append({
            "metric": label,
            "unit": unit,
            "first": v1,
            "second": v2,
            "diff": diff,
            "diff_pct": diff / abs(v1) * 100.0 if v1 != 0 else 0.0,
        })
    return pd.DataFrame(rows)


@dataclass
class RiskReport:
    """Structured risk summary of one Monte Carlo run."""
    n_trials: int
    mean_ebitda: float
    median_ebitda: float
    var95: float
    cvar95: float

    # P(EBITDA > 0) over the retained trials; None when none were retained
    prob_positive_ebitda: Optional[float]

    p5_p95_range: float
    interquartile_range: float
    coefficient_of_variation: Optional[float]

    flags: List[str] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        rows = [
            {"Metric": "Trials", "Value": f"{self.n_trials:,}"},
            {"Metric": "Mean EBITDA", "Value": f"{self.mean_ebitda:,.0f}"},
            {"Metric": "Median EBITDA", "Value": f"{self.median_ebitda:,.0f}"},
            {"Metric": "VaR 95%", "Value": f"{self.var95:,.0f}"},
            {"Metric": "CVaR 95%", "Value": f"{self.cvar95:,.0f}"},
            {"Metric": "P(EBITDA > 0)",
             "Value": f"{self.prob_positive_ebitda:.1%}" if self.prob_positive_ebitda is not None else "N/A"},
            {"Metric": "Range (P05-P95)", "Value": f"{self.p5_p95_range:,.0f}"},
            {"Metric": "Range (P25-P75)", "Value": f"{self.interquartile_range:,.0f}"},
        ]
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags)})
        return pd.DataFrame(rows)


def generate_risk_report(
    result: MonteCarloResult,
    *,
    max_loss_probability: float = 0.10,
    max_coefficient_of_variation: float = 0.50,
) -> RiskReport:
    """
    Build a RiskReport from a MonteCarloResult.

    Parameters
    ----------
    max_loss_probability : float
        Flag when P(EBITDA <= 0) over retained trials exceeds this.
    max_coefficient_of_variation : float
        Flag when std / |mean| of EBITDA exceeds this.
    """
    stats = result.statistics
    pct = result.percentiles

    prob_positive = None
    if len(result.simulations) > 0 and "ebitda" in result.simulations.columns:
        prob_positive = float(np.mean(result.simulations["ebitda"].to_numpy(dtype=float) > 0))

    cov = stats.std_dev / abs(stats.mean) if stats.mean != 0 else None

    flags = []
    if stats.var95 < 0:
        flags.append("NEGATIVE_VAR: 5th percentile EBITDA is below zero")
    if prob_positive is not None and (1.0 - prob_positive) > max_loss_probability:
        flags.append(f"LOSS_RISK: {1.0 - prob_positive:.0%} chance of non-positive EBITDA")
    if cov is not None and cov > max_coefficient_of_variation:
        flags.append(f"HIGH_DISPERSION: EBITDA std exceeds {max_coefficient_of_variation:.0%} of mean")
    if result.cancelled:
        flags.append(f"PARTIAL_RUN: cancelled after {result.n_trials:,} trials")

    return RiskReport(
        n_trials=result.n_trials,
        mean_ebitda=stats.mean,
        median_ebitda=pct.p50,
        var95=stats.var95,
        cvar95=stats.cvar95,
        prob_positive_ebitda=prob_positive,
        p5_p95_range=pct.p95 - pct.p5,
        interquartile_range=pct.p75 - pct.p25,
        coefficient_of_variation=cov,
        flags=flags,
    )
