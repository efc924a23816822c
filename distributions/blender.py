"""
ScenarioBlender — collapse a probability-weighted scenario set into one
aggregate parameter vector plus a ScenarioSpread per parameter.

Weighted value:  Σ value_s × weight_s / 100   (weights used as given, never renormalized)
ScenarioSpread:  max |value_s − weighted|     over all scenarios in the set

The spread is a heuristic width for a handful of hand-authored scenarios. It is
NOT a standard deviation (it needs no minimum sample size and is driven by the
single most extreme scenario). The true standard deviation only appears later,
over simulated EBITDA, in risk/metrics.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np
import pandas as pd

from core.errors import InvalidInput
from core.schema import ScenarioDefinition, TUNABLE_PARAMETERS

logger = logging.getLogger(__name__)

_SPREAD_FIELDS: Dict[str, str] = {
    "revenue_growth_pct": "revenue_growth_spread",
    "gross_margin_pct": "gross_margin_spread",
    "opex_change_pct": "opex_change_spread",
    "ar_days": "ar_days_spread",
}


@dataclass(frozen=True)
class AggregateParameters:
    """Blended center and ScenarioSpread for each tunable parameter."""

    revenue_growth_pct: float
    gross_margin_pct: float
    opex_change_pct: float
    ar_days: float

    revenue_growth_spread: float = 0.0
    gross_margin_spread: float = 0.0
    opex_change_spread: float = 0.0
    ar_days_spread: float = 0.0

    weight_total: float = 100.0
    n_scenarios: int = 1

    def weighted(self, parameter: str) -> float:
        if parameter not in _SPREAD_FIELDS:
            raise KeyError(f"Unknown parameter {parameter!r}. Available: {list(_SPREAD_FIELDS)}")
        return float(getattr(self, parameter))

    def spread(self, parameter: str) -> float:
        if parameter not in _SPREAD_FIELDS:
            raise KeyError(f"Unknown parameter {parameter!r}. Available: {list(_SPREAD_FIELDS)}")
        return float(getattr(self, _SPREAD_FIELDS[parameter]))

    def summary(self) -> pd.DataFrame:
        """One row per parameter: weighted value and spread."""
        return pd.DataFrame([
            {"Parameter": p, "Weighted": self.weighted(p), "Spread": self.spread(p)}
            for p in TUNABLE_PARAMETERS
        ])


def blend_scenarios(scenarios: Sequence[ScenarioDefinition]) -> AggregateParameters:
    """
    Blend a scenario set into AggregateParameters.

    Parameters
    ----------
    scenarios : sequence of ScenarioDefinition
        Must be non-empty. Weights are expected to sum to 100; any other total
        is logged and used as-is.

    Raises
    ------
    InvalidInput
        If the scenario set is empty (the aggregate is undefined).
    """
    scenarios = list(scenarios)
    if not scenarios:
        raise InvalidInput("Cannot blend an empty scenario set.")

    weights = np.array([float(s.probability_weight) for s in scenarios], dtype=float)
    weight_total = float(weights.sum())
    sums_to_100 = bool(np.isclose(weight_total, 100.0))
    if not sums_to_100:
        logger.warning(
            "Scenario weights sum to %.2f, not 100; blending without renormalization.",
            weight_total,
        )

    fields: Dict[str, float] = {}
    for param in TUNABLE_PARAMETERS:
        values = np.array([float(getattr(s, param)) for s in scenarios], dtype=float)
        if sums_to_100 and np.ptp(values) == 0:
            # scenarios agree: keep the value exact so trials do not scatter by rounding
            fields[param] = float(values[0])
            fields[_SPREAD_FIELDS[param]] = 0.0
            continue
        weighted = float(np.sum(values * weights / 100.0))
        fields[param] = weighted
        fields[_SPREAD_FIELDS[param]] = float(np.max(np.abs(values - weighted)))

    aggregate = AggregateParameters(
        **fields,
        weight_total=weight_total,
        n_scenarios=len(scenarios),
    )
    logger.debug("Blended %d scenarios: %s", len(scenarios), aggregate)
    return aggregate
