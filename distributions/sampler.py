"""
Trial sampling — Box–Muller normal draws and per-trial parameter perturbation.

Input:  AggregateParameters (blended centers + ScenarioSpread per parameter)
Output: N sampled parameter vectors, one per Monte Carlo trial

Each trial draws every tunable parameter from a normal centered on the blended
value with std = spread / 2:

  revenue_growth = N(w_rev,    spread_rev / 2)
  gross_margin   = clamp(N(w_margin, spread_margin / 2), 10, 60)
  opex_change    = N(w_opex,   spread_opex / 2)
  ar_days        = max(15, N(w_ar, spread_ar / 2))

Halving the spread is a tuning constant (trials cluster tighter than the widest
scenario disagreement), not a statistically derived factor.

Randomness comes from an injected numpy Generator. Without one, each sampler
pulls fresh OS entropy, so default runs are not reproducible.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from core.config import SimulationConfig
from core.errors import InvalidInput
from core.utils import clamp

from .blender import AggregateParameters


class RandomSampler:
    """
    Standard-normal source built on the Box–Muller transform.

    Usage:
        sampler = RandomSampler()                 # fresh entropy
        sampler = RandomSampler(seed=7)           # reproducible
        x = sampler.normal(10.0, 2.5)
        xs = sampler.normal_array(10.0, 2.5, size=1000)
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        *,
        seed: Optional[int] = None,
    ):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def _uniform_open(self, size=None):
        # Generator.random() is [0, 1); flipping keeps log() away from zero
        return 1.0 - self.rng.random(size)

    def normal(self, mean: float, std_dev: float) -> float:
        """One draw from N(mean, std_dev). std_dev == 0 returns mean."""
        if std_dev < 0:
            raise InvalidInput(f"std_dev must be non-negative, got {std_dev}")
        if std_dev == 0:
            return float(mean)
        u1 = float(self._uniform_open())
        u2 = float(self.rng.random())
        z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return z0 * std_dev + mean

    def normal_array(self, mean: float, std_dev: float, size: int) -> np.ndarray:
        """Vectorized normal(): `size` independent Box–Muller draws."""
        if std_dev < 0:
            raise InvalidInput(f"std_dev must be non-negative, got {std_dev}")
        if std_dev == 0:
            return np.full(size, float(mean), dtype=float)
        u1 = self._uniform_open(size)
        u2 = self.rng.random(size)
        z0 = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
        return z0 * std_dev + mean


@dataclass(frozen=True)
class TrialParameters:
    """Sampled inputs of a single trial."""
    revenue_growth_pct: float
    gross_margin_pct: float
    opex_change_pct: float
    ar_days: float


@dataclass
class SampledTrials:
    """
    N sampled parameter vectors — the (N × 4) table fed to the projection model.
    """
    revenue_growth_pct: np.ndarray  # shape (n_trials,)
    gross_margin_pct: np.ndarray    # shape (n_trials,), within [margin_floor, margin_cap]
    opex_change_pct: np.ndarray     # shape (n_trials,)
    ar_days: np.ndarray             # shape (n_trials,), >= ar_days_floor

    @property
    def n_trials(self) -> int:
        return len(self.revenue_growth_pct)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({
            "trial_id": np.arange(self.n_trials),
            "revenue_growth_pct": self.revenue_growth_pct,
            "gross_margin_pct": self.gross_margin_pct,
            "opex_change_pct": self.opex_change_pct,
            "ar_days": self.ar_days,
        })

    def get_trial(self, trial_idx: int) -> TrialParameters:
        return TrialParameters(
            revenue_growth_pct=float(self.revenue_growth_pct[trial_idx]),
            gross_margin_pct=float(self.gross_margin_pct[trial_idx]),
            opex_change_pct=float(self.opex_change_pct[trial_idx]),
            ar_days=float(self.ar_days[trial_idx]),
        )

    def summary(self) -> pd.DataFrame:
        """Percentile summary of sampled parameters."""
        pcts = [0.05, 0.25, 0.50, 0.75, 0.95]
        rows = []
        for name, arr in [("Revenue Growth %", self.revenue_growth_pct),
                          ("Gross Margin %", self.gross_margin_pct),
                          ("Opex Change %", self.opex_change_pct),
                          ("AR Days", self.ar_days)]:
            row = {"Variable": name, "Mean": np.mean(arr), "Std": np.std(arr)}
            for p in pcts:
                row[f"P{int(p*100):02d}"] = np.percentile(arr, p * 100)
            rows.append(row)
        return pd.DataFrame(rows)


class TrialGenerator:
    """
    Perturbs the blended parameters once per trial and clamps to valid ranges.

    Usage:
        aggregate = blend_scenarios(scenarios)
        generator = TrialGenerator(aggregate, RandomSampler(seed=42))
        one = generator.sample()           # TrialParameters
        many = generator.sample_many(5000) # SampledTrials
    """

    def __init__(
        self,
        aggregate: AggregateParameters,
        sampler: Optional[RandomSampler] = None,
        *,
        config: Optional[SimulationConfig] = None,
    ):
        self.aggregate = aggregate
        self.sampler = sampler or RandomSampler()
        self.config = config or SimulationConfig()

    def _std(self, parameter: str) -> float:
        return self.aggregate.spread(parameter) / self.config.spread_dampening

    def sample(self) -> TrialParameters:
        a, cfg, s = self.aggregate, self.config, self.sampler
        revenue_growth = s.normal(a.revenue_growth_pct, self._std("revenue_growth_pct"))
        margin = s.normal(a.gross_margin_pct, self._std("gross_margin_pct"))
        margin = clamp(margin, cfg.margin_floor, cfg.margin_cap)
        opex_change = s.normal(a.opex_change_pct, self._std("opex_change_pct"))
        ar_days = max(cfg.ar_days_floor, s.normal(a.ar_days, self._std("ar_days")))
        return TrialParameters(
            revenue_growth_pct=revenue_growth,
            gross_margin_pct=margin,
            opex_change_pct=opex_change,
            ar_days=ar_days,
        )

    def sample_many(self, n_trials: int) -> SampledTrials:
        """Generate n_trials independent parameter vectors in one vectorized pass."""
        a, cfg, s = self.aggregate, self.config, self.sampler
        n = int(n_trials)

        revenue_growth = s.normal_array(a.revenue_growth_pct, self._std("revenue_growth_pct"), n)

        margin = s.normal_array(a.gross_margin_pct, self._std("gross_margin_pct"), n)
        margin = clamp(margin, cfg.margin_floor, cfg.margin_cap)

        opex_change = s.normal_array(a.opex_change_pct, self._std("opex_change_pct"), n)

        ar_days = s.normal_array(a.ar_days, self._std("ar_days"), n)
        ar_days = np.maximum(ar_days, cfg.ar_days_floor)

        return SampledTrials(
            revenue_growth_pct=revenue_growth,
            gross_margin_pct=margin,
            opex_change_pct=opex_change,
            ar_days=ar_days,
        )
