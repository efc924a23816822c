"""
Simulation configuration.

Tuning constants of the Monte Carlo engine live here so the sampling and
aggregation code carries no magic numbers. The opex/cash anchors for trials are
not configuration; they are an OpexCashModel (see assumptions/).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class SimulationConfig:
    n_trials: int = 10_000
    seed: Optional[int] = None  # None -> fresh entropy on every run

    # output size controls
    histogram_bins: int = 30
    retained_trials: int = 500
    chunk_size: int = 5_000  # trials generated between cancellation checks

    # trial sampling
    spread_dampening: float = 2.0
    margin_floor: float = 10.0
    margin_cap: float = 60.0
    ar_days_floor: float = 15.0

    days_per_month: float = 30.0

    # outside this range runs still execute, with a warning
    min_supported_trials: int = 1_000
    max_supported_trials: int = 50_000


def get_simulation_config(base: Optional[SimulationConfig] = None) -> SimulationConfig:
    """Overlay SCENARIO_ENGINE_* environment variables on a config (defaults if None)."""
    cfg = base or SimulationConfig()
    overrides = {}
    trials = os.getenv("SCENARIO_ENGINE_TRIALS")
    if trials:
        overrides["n_trials"] = int(trials)
    bins = os.getenv("SCENARIO_ENGINE_BINS")
    if bins:
        overrides["histogram_bins"] = int(bins)
    seed = os.getenv("SCENARIO_ENGINE_SEED")
    if seed:
        overrides["seed"] = int(seed)
    return replace(cfg, **overrides) if overrides else cfg
