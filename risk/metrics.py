"""
EBITDA distribution statistics for a completed run.

Percentiles are nearest-rank: sorted[floor(n × p / 100)], no interpolation.
mean / std_dev are population statistics over every trial (unlike the
ScenarioSpread used when blending, these are true moments).

  var95  = 5th percentile EBITDA
  cvar95 = mean of all trial EBITDA values <= var95
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict

import numpy as np

from core.errors import InvalidInput


@dataclass(frozen=True)
class Percentiles:
    p5: float
    p25: float
    p50: float
    p75: float
    p95: float

    def to_dict(self) -> Dict[str, float]:
        return {"p5": self.p5, "p25": self.p25, "p50": self.p50, "p75": self.p75, "p95": self.p95}


@dataclass(frozen=True)
class RiskStatistics:
    mean: float
    std_dev: float
    min: float
    max: float
    var95: float
    cvar95: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "mean": self.mean,
            "stdDev": self.std_dev,
            "min": self.min,
            "max": self.max,
            "var95": self.var95,
            "cvar95": self.cvar95,
        }


def nearest_rank_percentile(sorted_values: np.ndarray, p: float) -> float:
    """Value at index floor(n × p / 100) of an ascending array (index capped at n − 1)."""
    n = len(sorted_values)
    if n == 0:
        raise InvalidInput("Cannot take a percentile of an empty series.")
    idx = min(int(math.floor(n * p / 100.0)), n - 1)
    return float(sorted_values[idx])


def compute_percentiles(sorted_values: np.ndarray) -> Percentiles:
    return Percentiles(
        p5=nearest_rank_percentile(sorted_values, 5),
        p25=nearest_rank_percentile(sorted_values, 25),
        p50=nearest_rank_percentile(sorted_values, 50),
        p75=nearest_rank_percentile(sorted_values, 75),
        p95=nearest_rank_percentile(sorted_values, 95),
    )


def conditional_value_at_risk(sorted_values: np.ndarray, var_threshold: float) -> float:
    """Mean of the tail at or below the VaR threshold; the threshold itself if the tail is empty."""
    tail = sorted_values[sorted_values <= var_threshold]
    if len(tail) == 0:
        return float(var_threshold)
    return float(np.mean(tail))


def compute_statistics(sorted_values: np.ndarray) -> RiskStatistics:
    if len(sorted_values) == 0:
        raise InvalidInput("Cannot compute statistics of an empty series.")
    var95 = nearest_rank_percentile(sorted_values, 5)
    return RiskStatistics(
        mean=float(np.mean(sorted_values)),
        std_dev=float(np.std(sorted_values)),
        min=float(sorted_values[0]),
        max=float(sorted_values[-1]),
        var95=var95,
        cvar95=conditional_value_at_risk(sorted_values, var95),
    )
