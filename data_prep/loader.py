"""
Load scenario sets from CSV / Excel sheets exported by planners.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Dict, List, Union

import pandas as pd

from core.errors import InvalidInput
from core.schema import SCENARIO_COLUMNS, ScenarioDefinition
from core.utils import require_columns

logger = logging.getLogger(__name__)

_COLUMN_ALIASES: Dict[str, str] = {
    # identifiers
    "scenario_id": "id",
    "ScenarioID": "id",
    "Scenario": "name",
    "scenario_name": "name",
    # weights
    "probability": "probability_weight",
    "Probability": "probability_weight",
    "weight": "probability_weight",
    # drivers (dashboard / stored-record spellings)
    "revenueGrowth": "revenue_growth_pct",
    "revenue_growth": "revenue_growth_pct",
    "revenue_change": "revenue_growth_pct",
    "costChange": "cost_change_pct",
    "cost_change": "cost_change_pct",
    "grossMargin": "gross_margin_pct",
    "gross_margin": "gross_margin_pct",
    "opexChange": "opex_change_pct",
    "opex_change": "opex_change_pct",
    # working capital days
    "arDays": "ar_days",
    "apDays": "ap_days",
    "inventoryDays": "inventory_days",
    # flags
    "isPrimary": "is_primary",
}

_TRUE_STRINGS = {"true", "t", "yes", "y", "1"}

_NUMERIC_FIELDS = (
    "probability_weight",
    "revenue_growth_pct",
    "cost_change_pct",
    "gross_margin_pct",
    "opex_change_pct",
    "ar_days",
    "ap_days",
    "inventory_days",
)


def canonicalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with common scenario column aliases normalized."""
    ren = {c: _COLUMN_ALIASES.get(str(c).strip(), str(c).strip()) for c in df.columns}
    return df.rename(columns=ren).copy()


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if pd.isna(value):
        return False
    return bool(value)


def scenarios_from_dataframe(df: pd.DataFrame) -> List[ScenarioDefinition]:
    """
    One ScenarioDefinition per row. `id` and `name` are required; any other
    missing column takes the ScenarioDefinition default.
    """
    data = canonicalize_columns(df)
    require_columns(data, ["id", "name"])

    for col in _NUMERIC_FIELDS:
        if col in data.columns:
            data[col] = pd.to_numeric(data[col], errors="coerce")
            n_bad = int(data[col].isna().sum())
            if n_bad > 0:
                raise InvalidInput(f"{n_bad} rows have null/unparseable {col}.")

    known = {f.name for f in fields(ScenarioDefinition)}
    ignored = [c for c in data.columns if c not in known]
    if ignored:
        logger.debug("Ignoring non-scenario columns: %s", ignored)
    defaulted = [c for c in SCENARIO_COLUMNS if c not in data.columns]
    if defaulted:
        logger.debug("Columns missing, using defaults: %s", defaulted)

    scenarios = []
    for row in data.to_dict(orient="records"):
        kwargs = {k: v for k, v in row.items() if k in known}
        kwargs["id"] = str(kwargs["id"])
        kwargs["name"] = str(kwargs["name"])
        for col in _NUMERIC_FIELDS:
            if col in kwargs:
                kwargs[col] = float(kwargs[col])
        if "is_primary" in kwargs:
            kwargs["is_primary"] = _parse_bool(kwargs["is_primary"])
        if "description" in kwargs:
            kwargs["description"] = "" if pd.isna(kwargs["description"]) else str(kwargs["description"])
        scenarios.append(ScenarioDefinition(**kwargs))
    return scenarios


def load_scenarios(path: Union[str, Path], *, sheet_name: Union[str, int] = 0) -> List[ScenarioDefinition]:
    """Load a scenario set from .csv or .xlsx (first sheet unless sheet_name is given)."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(path)
    elif suffix in (".xlsx", ".xlsm"):
        df = pd.read_excel(path, sheet_name=sheet_name, engine="openpyxl")
    else:
        raise InvalidInput(f"Unsupported scenario file type: {path.suffix!r} (expected .csv or .xlsx)")
    scenarios = scenarios_from_dataframe(df)
    logger.info("Loaded %d scenarios from %s", len(scenarios), path.name)
    return scenarios
