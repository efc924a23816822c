"""
Aggregate per-trial outcomes into the MonteCarloResult consumed by presentation layers.

Instead of: "EBITDA next month = 185bn" (one number, no context)
The result gives: the EBITDA distribution (histogram), its percentiles,
mean/std, and the downside tail (VaR95 / CVaR95), plus revenue and cash
histograms and the first 500 trials for inspection.

Histogram bin edges come from each run's own min/max, so two runs are never
bin-aligned; compare runs on percentiles/statistics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import numpy as np
import pandas as pd

from core.errors import InvalidInput
from core.utils import require_columns

from .metrics import Percentiles, RiskStatistics, compute_percentiles, compute_statistics

_SIMULATION_KEYS: Dict[str, str] = {
    "trial_id": "trial",
    "revenue_growth_pct": "revenueGrowthPct",
    "gross_margin_pct": "grossMarginPct",
    "opex_change_pct": "opexChangePct",
    "ar_days": "arDays",
    "revenue": "revenue",
    "ebitda": "ebitda",
    "cash": "cash",
}


@dataclass
class MonteCarloResult:
    """Durable output of one simulation run."""
    revenue_distribution: pd.DataFrame  # columns: value (bin midpoint), frequency (% of trials)
    cash_distribution: pd.DataFrame
    ebitda_distribution: pd.DataFrame
    percentiles: Percentiles
    statistics: RiskStatistics
    simulations: pd.DataFrame  # first retained trials, generation order
    n_trials: int
    cancelled: bool = False

    def to_dict(self) -> Dict[str, object]:
        """Presentation contract: camelCase keys, currency as raw magnitudes."""
        sims = self.simulations.rename(columns=_SIMULATION_KEYS)
        return {
            "revenueDistribution": _histogram_records(self.revenue_distribution),
            "cashDistribution": _histogram_records(self.cash_distribution),
            "ebitdaDistribution": _histogram_records(self.ebitda_distribution),
            "percentiles": self.percentiles.to_dict(),
            "statistics": self.statistics.to_dict(),
            "simulations": sims.to_dict(orient="records"),
        }


def _histogram_records(hist: pd.DataFrame) -> List[Dict[str, float]]:
    return [
        {"value": float(v), "frequency": float(f)}
        for v, f in zip(hist["value"], hist["frequency"])
    ]


def empty_histogram() -> pd.DataFrame:
    return pd.DataFrame({"value": pd.Series(dtype=float), "frequency": pd.Series(dtype=float)})


def build_histogram(values, bins: int = 30) -> pd.DataFrame:
    """
    Equal-width histogram over the series' own [min, max].

    Each bin covers [start, end) except the last, which is closed so the
    maximum is counted. A series with min == max, or one whose range is only a
    few floating-point steps wide, is spread over a unit-wide range around its
    midpoint, so frequencies still sum to 100.

    Returns
    -------
    DataFrame with columns value (bin midpoint) and frequency (percent of values).
    """
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise InvalidInput("Cannot build a histogram from an empty series.")
    if bins < 1:
        raise InvalidInput(f"bins must be >= 1, got {bins}")

    bins = int(bins)
    lo, hi = float(values.min()), float(values.max())
    # fewer representable floats than bins between min and max: numpy cannot
    # build finite-width edges, so center a wider range on the values
    ulp = float(np.spacing(max(abs(lo), abs(hi))))
    if hi - lo <= 4 * bins * ulp:
        mid = (lo + hi) / 2.0
        half = max(0.5, 4 * bins * ulp)
        counts, edges = np.histogram(values, bins=bins, range=(mid - half, mid + half))
    else:
        counts, edges = np.histogram(values, bins=bins)
    midpoints = (edges[:-1] + edges[1:]) / 2.0
    return pd.DataFrame({
        "value": midpoints,
        "frequency": counts / values.size * 100.0,
    })


def aggregate_trials(
    trials: pd.DataFrame,
    *,
    bins: int = 30,
    retain: int = 500,
    cancelled: bool = False,
) -> MonteCarloResult:
    """
    Collapse per-trial outcomes into a MonteCarloResult.

    Parameters
    ----------
    trials : pd.DataFrame
        One row per trial in generation order.
        Required columns: revenue, ebitda, cash
    bins : int
        Histogram bins per series
    retain : int
        Number of leading trials kept in `simulations`
    cancelled : bool
        Marks a result built from a run stopped early
    """
    require_columns(trials, ["revenue", "ebitda", "cash"])
    n = len(trials)
    if n == 0:
        raise InvalidInput("No trials to aggregate.")

    ebitda_sorted = np.sort(trials["ebitda"].to_numpy(dtype=float))

    return MonteCarloResult(
        revenue_distribution=build_histogram(trials["revenue"].to_numpy(dtype=float), bins),
        cash_distribution=build_histogram(trials["cash"].to_numpy(dtype=float), bins),
        ebitda_distribution=build_histogram(ebitda_sorted, bins),
        percentiles=compute_percentiles(ebitda_sorted),
        statistics=compute_statistics(ebitda_sorted),
        simulations=trials.head(retain).reset_index(drop=True),
        n_trials=n,
        cancelled=cancelled,
    )
