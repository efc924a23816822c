"""
Projection model — deterministic scenario KPIs and vectorized per-trial outcomes.

Both entry points share one set of formulas:

  revenue      = monthly_revenue × (1 + revenue_growth_pct / 100)
  gross_profit = revenue × gross_margin_pct / 100
  opex         = opex_anchor × (1 + opex_change_pct / 100)
  ebitda       = gross_profit − opex
  cash         = cash_anchor − (revenue / 30) × (ar_days − dso_anchor)

The anchors come from an OpexCashModel. project_scenario() always anchors on
the caller's baseline; project_trials() defaults to the reference anchors of
the stochastic model (25% revenue opex, 8.5bn cash, 52-day DSO).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from assumptions.base import OpexCashAnchors, OpexCashModel
from assumptions.baseline import BaselineOpexCashModel
from assumptions.reference import ReferenceOpexCashModel
from core.config import SimulationConfig
from core.errors import InvalidInput
from core.schema import BaselineSnapshot, ScenarioDefinition, TRIAL_COLUMNS
from core.utils import pct_change
from distributions.sampler import SampledTrials

# Output contract keys consumed by charts/tables; do not rename.
_KPI_KEYS: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "revenue": "revenue",
    "revenue_change_pct": "revenueChangePct",
    "gross_profit": "grossProfit",
    "opex": "opex",
    "ebitda": "ebitda",
    "ebitda_change_pct": "ebitdaChangePct",
    "cash": "cash",
    "cash_change_pct": "cashChangePct",
    "dso": "dso",
    "dso_change": "dsoChange",
    "ccc": "ccc",
    "ccc_change": "cccChange",
    "gross_margin": "grossMargin",
    "margin_change": "marginChange",
}


@dataclass(frozen=True)
class ProjectedKPIs:
    """Projected next-period KPIs for one scenario, with deltas against the baseline."""
    id: str
    name: str
    revenue: float
    revenue_change_pct: float
    gross_profit: float
    opex: float
    ebitda: float
    ebitda_change_pct: float
    cash: float
    cash_change_pct: float
    dso: float
    dso_change: float
    ccc: float
    ccc_change: float
    gross_margin: float
    margin_change: float

    def to_dict(self) -> Dict[str, object]:
        return {_KPI_KEYS[k]: v for k, v in asdict(self).items()}


def _project(
    revenue_growth_pct,
    gross_margin_pct,
    opex_change_pct,
    ar_days,
    *,
    monthly_revenue: float,
    anchors: OpexCashAnchors,
    days_per_month: float,
):
    """Shared formulas; accepts scalars or equally-shaped numpy arrays."""
    revenue = monthly_revenue * (1.0 + revenue_growth_pct / 100.0)
    gross_profit = revenue * (gross_margin_pct / 100.0)
    opex = anchors.opex_anchor * (1.0 + opex_change_pct / 100.0)
    ebitda = gross_profit - opex

    daily_sales = revenue / days_per_month
    ar_delta = daily_sales * (ar_days - anchors.dso_anchor)
    cash = anchors.cash_anchor - ar_delta
    return revenue, gross_profit, opex, ebitda, cash


def project_scenario(
    scenario: ScenarioDefinition,
    baseline: BaselineSnapshot,
    *,
    config: Optional[SimulationConfig] = None,
) -> ProjectedKPIs:
    """
    Deterministic projection of one scenario against the baseline.

    Raises
    ------
    InvalidInput
        If no scenario is given.
    DivisionUndefined
        If baseline revenue, EBITDA or cash is zero (percent change undefined).
        Break-even businesses (EBITDA == 0) hit this; callers should show a
        "cannot compute projection" message rather than a number.
    """
    if scenario is None:
        raise InvalidInput("No scenario to project.")
    cfg = config or SimulationConfig()
    anchors = BaselineOpexCashModel().anchors(baseline)

    revenue, gross_profit, opex, ebitda, cash = _project(
        float(scenario.revenue_growth_pct),
        float(scenario.gross_margin_pct),
        float(scenario.opex_change_pct),
        float(scenario.ar_days),
        monthly_revenue=float(baseline.monthly_revenue),
        anchors=anchors,
        days_per_month=cfg.days_per_month,
    )
    ccc = float(scenario.ar_days) + float(scenario.inventory_days) - float(scenario.ap_days)

    return ProjectedKPIs(
        id=scenario.id,
        name=scenario.name,
        revenue=revenue,
        revenue_change_pct=pct_change(revenue, baseline.monthly_revenue, "revenue"),
        gross_profit=gross_profit,
        opex=opex,
        ebitda=ebitda,
        ebitda_change_pct=pct_change(ebitda, baseline.ebitda, "ebitda"),
        cash=cash,
        cash_change_pct=pct_change(cash, baseline.cash_on_hand, "cash"),
        dso=float(scenario.ar_days),
        dso_change=float(scenario.ar_days) - float(baseline.dso_days),
        ccc=ccc,
        ccc_change=ccc - float(baseline.ccc_days),
        gross_margin=float(scenario.gross_margin_pct),
        margin_change=float(scenario.gross_margin_pct) - float(baseline.gross_margin_pct),
    )


def project_scenarios(
    scenarios: Sequence[ScenarioDefinition],
    baseline: BaselineSnapshot,
    *,
    config: Optional[SimulationConfig] = None,
) -> List[ProjectedKPIs]:
    """Project every scenario of a set, in input order."""
    scenarios = list(scenarios)
    if not scenarios:
        raise InvalidInput("Cannot project an empty scenario set.")
    return [project_scenario(s, baseline, config=config) for s in scenarios]


def projections_to_dataframe(projections: Sequence[ProjectedKPIs]) -> pd.DataFrame:
    return pd.DataFrame([asdict(p) for p in projections])


def project_trials(
    trials: SampledTrials,
    baseline: BaselineSnapshot,
    *,
    model: Optional[OpexCashModel] = None,
    config: Optional[SimulationConfig] = None,
    start_id: int = 0,
) -> pd.DataFrame:
    """
    Per-trial outcomes for a batch of sampled parameter vectors.

    Parameters
    ----------
    trials : SampledTrials
        Output of TrialGenerator.sample_many()
    baseline : BaselineSnapshot
        Supplies monthly revenue (and the anchors, for baseline-fed models)
    model : OpexCashModel, optional
        Anchor source. Defaults to ReferenceOpexCashModel.
    start_id : int
        trial_id of the first row, so chunked runs keep generation order.

    Returns
    -------
    DataFrame with TRIAL_COLUMNS, one row per trial.
    """
    cfg = config or SimulationConfig()
    anchors = (model or ReferenceOpexCashModel()).anchors(baseline)

    revenue, _, _, ebitda, cash = _project(
        trials.revenue_growth_pct,
        trials.gross_margin_pct,
        trials.opex_change_pct,
        trials.ar_days,
        monthly_revenue=float(baseline.monthly_revenue),
        anchors=anchors,
        days_per_month=cfg.days_per_month,
    )

    frame = pd.DataFrame({
        "trial_id": np.arange(start_id, start_id + trials.n_trials),
        "revenue_growth_pct": trials.revenue_growth_pct,
        "gross_margin_pct": trials.gross_margin_pct,
        "opex_change_pct": trials.opex_change_pct,
        "ar_days": trials.ar_days,
        "revenue": revenue,
        "ebitda": ebitda,
        "cash": cash,
    })
    return frame.loc[:, list(TRIAL_COLUMNS)]
