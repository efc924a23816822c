"""
Data model shared by every layer: scenarios in, baseline anchor, column names out.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ScenarioDefinition:
    """
    One named, probability-weighted hypothesis about the next period.

    Percent fields are in percent units (10.0 means +10%), day fields in days.
    probability_weight is 0-100; weights across a set are meant to sum to 100
    but that is not enforced anywhere in the engine.
    """

    id: str
    name: str
    probability_weight: float = 0.0
    revenue_growth_pct: float = 0.0
    cost_change_pct: float = 0.0
    gross_margin_pct: float = 35.0
    opex_change_pct: float = 0.0
    ar_days: float = 52.0
    ap_days: float = 35.0
    inventory_days: float = 28.0
    is_primary: bool = False
    description: str = ""


@dataclass(frozen=True)
class BaselineSnapshot:
    """Current-period actuals used as the projection anchor. Currency is a raw magnitude."""

    monthly_revenue: float
    cash_on_hand: float
    ebitda: float
    dso_days: float
    ccc_days: float = 0.0
    gross_margin_pct: float = 0.0


# Parameters blended across a scenario set and perturbed per trial.
TUNABLE_PARAMETERS: Tuple[str, ...] = (
    "revenue_growth_pct",
    "gross_margin_pct",
    "opex_change_pct",
    "ar_days",
)

# Columns of the per-trial outcome table, in output order.
TRIAL_COLUMNS: Tuple[str, ...] = (
    "trial_id",
    "revenue_growth_pct",
    "gross_margin_pct",
    "opex_change_pct",
    "ar_days",
    "revenue",
    "ebitda",
    "cash",
)

# Tabular scenario inputs, in sheet order.
SCENARIO_COLUMNS: Tuple[str, ...] = (
    "id",
    "name",
    "probability_weight",
    "revenue_growth_pct",
    "cost_change_pct",
    "gross_margin_pct",
    "opex_change_pct",
    "ar_days",
    "ap_days",
    "inventory_days",
    "is_primary",
)
