"""
Simulation runner — orchestrates Monte Carlo trials from scenario set to result.

  scenarios ──blend──▶ AggregateParameters
                         │
             for each chunk of trials:
                 TrialGenerator.sample_many()  (Box–Muller draws)
                 project_trials()              (revenue / EBITDA / cash)
                         │
                 aggregate_trials() ──▶ MonteCarloResult

Trials are independent; they are generated in vectorized chunks and the
cancellation token is checked between chunks. A cancelled run returns the
trials completed so far, flagged cancelled=True.

The computation is synchronous and CPU-bound. Callers with an event loop
should use run_monte_carlo_async(), which offloads to a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import numbers
import threading
import time
from typing import Callable, Optional, Sequence

import numpy as np
import pandas as pd

from assumptions.base import OpexCashModel
from assumptions.reference import ReferenceOpexCashModel
from core.config import SimulationConfig
from core.errors import InvalidInput, SimulationCancelled
from core.schema import BaselineSnapshot, ScenarioDefinition
from distributions.blender import blend_scenarios
from distributions.sampler import RandomSampler, TrialGenerator
from risk.aggregator import MonteCarloResult, aggregate_trials

from .projection import project_trials

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


def _validate_trial_count(n_trials, cfg: SimulationConfig) -> int:
    if isinstance(n_trials, bool) or not isinstance(n_trials, numbers.Integral):
        raise InvalidInput(f"n_trials must be a positive integer, got {n_trials!r}")
    n = int(n_trials)
    if n <= 0:
        raise InvalidInput(f"n_trials must be a positive integer, got {n}")
    if n < cfg.min_supported_trials or n > cfg.max_supported_trials:
        logger.warning(
            "n_trials=%d is outside the supported range [%d, %d].",
            n, cfg.min_supported_trials, cfg.max_supported_trials,
        )
    return n


def run_monte_carlo(
    scenarios: Sequence[ScenarioDefinition],
    baseline: BaselineSnapshot,
    n_trials: Optional[int] = None,
    *,
    config: Optional[SimulationConfig] = None,
    opex_cash_model: Optional[OpexCashModel] = None,
    rng: Optional[np.random.Generator] = None,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> MonteCarloResult:
    """
    Run a Monte Carlo risk simulation over a scenario set.

    Parameters
    ----------
    scenarios : sequence of ScenarioDefinition
        Non-empty, probability-weighted scenario set
    baseline : BaselineSnapshot
        Current-period actuals; supplies monthly revenue for every trial
    n_trials : int, optional
        Number of trials. Defaults to config.n_trials.
    config : SimulationConfig, optional
        Tuning constants, histogram bins, retained trials, seed
    opex_cash_model : OpexCashModel, optional
        Anchor source for trial opex and cash. Defaults to ReferenceOpexCashModel.
    rng : np.random.Generator, optional
        Uniform source for the Box–Muller sampler. Overrides config.seed.
    cancel_event : threading.Event, optional
        When set, the run stops before the next chunk of trials.
    progress_callback : callable, optional
        Called as progress_callback(fraction_done, message) before each chunk.

    Returns
    -------
    MonteCarloResult

    Raises
    ------
    InvalidInput
        Empty scenario set or a trial count that is not a positive integer.
    SimulationCancelled
        Cancellation before any trial completed.
    """
    cfg = config or SimulationConfig()
    scenarios = list(scenarios) if scenarios is not None else []
    if not scenarios:
        raise InvalidInput("Cannot run a simulation on an empty scenario set.")
    n = _validate_trial_count(cfg.n_trials if n_trials is None else n_trials, cfg)

    model = opex_cash_model or ReferenceOpexCashModel()
    aggregate = blend_scenarios(scenarios)
    generator = TrialGenerator(aggregate, RandomSampler(rng, seed=cfg.seed), config=cfg)

    logger.info(
        "Monte Carlo run: %d scenarios, %d trials, %s opex/cash anchors",
        len(scenarios), n, model.name,
    )
    start = time.perf_counter()

    chunk_size = max(int(cfg.chunk_size), 1)
    chunks = []
    done = 0
    cancelled = False

    # ========= MAIN TRIAL LOOP =========
    while done < n:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning("Cancellation requested at trial %d/%d", done, n)
            cancelled = True
            break
        if progress_callback is not None:
            progress_callback(done / n, f"Monte Carlo {done}/{n}")

        size = min(chunk_size, n - done)
        trials = generator.sample_many(size)
        chunks.append(project_trials(trials, baseline, model=model, config=cfg, start_id=done))
        done += size

    if done == 0:
        raise SimulationCancelled("Simulation cancelled before any trial completed.")

    frame = pd.concat(chunks, ignore_index=True)
    result = aggregate_trials(
        frame,
        bins=cfg.histogram_bins,
        retain=cfg.retained_trials,
        cancelled=cancelled,
    )

    if progress_callback is not None and not cancelled:
        progress_callback(1.0, f"Monte Carlo {n}/{n}")
    logger.info(
        "Monte Carlo run complete: %d trials in %.2fs (mean EBITDA %.2f)",
        done, time.perf_counter() - start, result.statistics.mean,
    )
    return result


async def run_monte_carlo_async(
    scenarios: Sequence[ScenarioDefinition],
    baseline: BaselineSnapshot,
    n_trials: Optional[int] = None,
    **kwargs,
) -> MonteCarloResult:
    """run_monte_carlo() on a worker thread, so an event loop is not blocked."""
    return await asyncio.to_thread(run_monte_carlo, scenarios, baseline, n_trials, **kwargs)


class SimulationRunner:
    """
    Configured runner for repeated simulations against changing inputs.

    Usage:
        runner = SimulationRunner(config=SimulationConfig(seed=42))
        result = runner.run(scenarios, baseline, 10_000)
        result = await runner.run_async(scenarios, baseline, 10_000)
    """

    def __init__(
        self,
        *,
        config: Optional[SimulationConfig] = None,
        opex_cash_model: Optional[OpexCashModel] = None,
    ):
        self.config = config or SimulationConfig()
        self.opex_cash_model = opex_cash_model

    def run(
        self,
        scenarios: Sequence[ScenarioDefinition],
        baseline: BaselineSnapshot,
        n_trials: Optional[int] = None,
        **kwargs,
    ) -> MonteCarloResult:
        """run_monte_carlo() with the runner's config and opex/cash model, unless overridden per call."""
        kwargs.setdefault("config", self.config)
        kwargs.setdefault("opex_cash_model", self.opex_cash_model)
        return run_monte_carlo(scenarios, baseline, n_trials, **kwargs)

    async def run_async(
        self,
        scenarios: Sequence[ScenarioDefinition],
        baseline: BaselineSnapshot,
        n_trials: Optional[int] = None,
        **kwargs,
    ) -> MonteCarloResult:
        return await asyncio.to_thread(self.run, scenarios, baseline, n_trials, **kwargs)
