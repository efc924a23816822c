"""
Simulation-history record codec.

The history store itself is external; this module only defines the row shape
(simulation_count, mean/std/min/max EBITDA, p10/p50/p90 columns, and a
distribution_data blob) and restores a display-only MonteCarloResult from it.

The store's p10/p90 columns carry the run's p5/p95 values.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import pandas as pd

from core.errors import InvalidInput

from .aggregator import MonteCarloResult, empty_histogram
from .metrics import Percentiles, RiskStatistics


def to_history_record(
    result: MonteCarloResult,
    *,
    scenario_id: Optional[str] = None,
    created_by: Optional[str] = None,
    created_at: Optional[pd.Timestamp] = None,
) -> Dict[str, Any]:
    """Row for the simulation-history store, keyed by creation time and trial count."""
    payload = result.to_dict()
    ts = pd.Timestamp(created_at) if created_at is not None else pd.Timestamp.now(tz="UTC")
    return {
        "scenario_id": scenario_id,
        "simulation_count": int(result.n_trials),
        "mean_ebitda": result.statistics.mean,
        "std_dev_ebitda": result.statistics.std_dev,
        "p10_ebitda": result.percentiles.p5,
        "p50_ebitda": result.percentiles.p50,
        "p90_ebitda": result.percentiles.p95,
        "min_ebitda": result.statistics.min,
        "max_ebitda": result.statistics.max,
        "distribution_data": {
            "percentiles": payload["percentiles"],
            "statistics": payload["statistics"],
            "ebitdaDistribution": payload["ebitdaDistribution"],
        },
        "created_by": created_by,
        "created_at": ts.isoformat(),
    }


def _num(record: Mapping[str, Any], key: str) -> float:
    value = record.get(key)
    return float(value) if value is not None else 0.0


# stored key -> flat column it falls back to (None -> 0)
_PERCENTILE_FALLBACKS = {
    "p5": "p10_ebitda",
    "p25": None,
    "p50": "p50_ebitda",
    "p75": None,
    "p95": "p90_ebitda",
}
_STATISTIC_FALLBACKS = {
    "mean": "mean_ebitda",
    "stdDev": "std_dev_ebitda",
    "min": "min_ebitda",
    "max": "max_ebitda",
    "var95": "p10_ebitda",
    "cvar95": None,
}


def _restore(stored: Mapping[str, Any], fallbacks: Mapping[str, Optional[str]], record) -> Dict[str, float]:
    out = {}
    for key, column in fallbacks.items():
        value = stored.get(key)
        if value is not None:
            out[key] = float(value)
        else:
            out[key] = _num(record, column) if column else 0.0
    return out


def from_history_record(record: Mapping[str, Any]) -> MonteCarloResult:
    """
    Restore a stored run for display.

    Retained trials and the revenue/cash histograms are not stored, so they
    come back empty. Any percentile or statistic missing from
    distribution_data falls back to the flat columns (var95 = p10 column;
    quartiles and cvar95 = 0).
    """
    if "simulation_count" not in record:
        raise InvalidInput("History record has no simulation_count.")

    data = record.get("distribution_data") or {}

    percentiles = Percentiles(
        **_restore(data.get("percentiles") or {}, _PERCENTILE_FALLBACKS, record)
    )
    stats = _restore(data.get("statistics") or {}, _STATISTIC_FALLBACKS, record)
    statistics = RiskStatistics(
        mean=stats["mean"],
        std_dev=stats["stdDev"],
        min=stats["min"],
        max=stats["max"],
        var95=stats["var95"],
        cvar95=stats["cvar95"],
    )

    hist = data.get("ebitdaDistribution") or []
    ebitda_distribution = (
        pd.DataFrame(hist, columns=["value", "frequency"]).astype(float)
        if hist else empty_histogram()
    )

    return MonteCarloResult(
        revenue_distribution=empty_histogram(),
        cash_distribution=empty_histogram(),
        ebitda_distribution=ebitda_distribution,
        percentiles=percentiles,
        statistics=statistics,
        simulations=pd.DataFrame(),
        n_trials=int(record["simulation_count"]),
    )
