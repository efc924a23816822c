"""
Build engine inputs from stored records.

Stored scenario rows only carry revenue/cost changes; the remaining drivers get
the planning defaults (weight 33, AR 52 / AP 35 / inventory 28 days, margin =
current gross margin rounded to one decimal, opex change = cost change).
Baselines come from the central financial-metrics record.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from core.errors import InvalidInput
from core.schema import BaselineSnapshot, ScenarioDefinition

DEFAULT_PROBABILITY_WEIGHT = 33.0
DEFAULT_GROSS_MARGIN_PCT = 35.0
DEFAULT_AR_DAYS = 52.0
DEFAULT_AP_DAYS = 35.0
DEFAULT_INVENTORY_DAYS = 28.0


class ScenarioRecord(BaseModel):
    """A row of the scenario-record store (only the fields the engine reads)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    revenue_change: Optional[float] = None
    cost_change: Optional[float] = None
    is_primary: Optional[bool] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value


class FinancialMetricsRecord(BaseModel):
    """Central financial metrics for the current period; accepts snake or camel case keys."""

    model_config = ConfigDict(extra="ignore")

    total_revenue: float = Field(0.0, validation_alias=AliasChoices("total_revenue", "totalRevenue"))
    days_in_period: float = Field(30.0, validation_alias=AliasChoices("days_in_period", "daysInPeriod"))
    cash_on_hand: float = Field(0.0, validation_alias=AliasChoices("cash_on_hand", "cashOnHand"))
    ebitda: float = 0.0
    dso: float = 0.0
    ccc: float = 0.0
    gross_margin: float = Field(0.0, validation_alias=AliasChoices("gross_margin", "grossMargin"))

    @field_validator("*", mode="before")
    @classmethod
    def _none_is_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


def _round_half_up(x: float, decimals: int = 1) -> float:
    m = 10 ** decimals
    return math.floor(x * m + 0.5) / m


def scenario_from_record(
    record: Mapping[str, Any],
    *,
    current_gross_margin: Optional[float] = DEFAULT_GROSS_MARGIN_PCT,
) -> ScenarioDefinition:
    """Map a stored scenario row to a ScenarioDefinition with planning defaults."""
    try:
        row = ScenarioRecord.model_validate(dict(record))
    except ValidationError as exc:
        raise InvalidInput(f"Invalid scenario record: {exc}") from exc

    margin = _round_half_up(current_gross_margin or DEFAULT_GROSS_MARGIN_PCT)
    cost_change = row.cost_change or 0.0

    return ScenarioDefinition(
        id=row.id,
        name=row.name,
        description=row.description or "",
        probability_weight=DEFAULT_PROBABILITY_WEIGHT,
        revenue_growth_pct=row.revenue_change or 0.0,
        cost_change_pct=cost_change,
        gross_margin_pct=margin,
        opex_change_pct=cost_change,
        ar_days=DEFAULT_AR_DAYS,
        ap_days=DEFAULT_AP_DAYS,
        inventory_days=DEFAULT_INVENTORY_DAYS,
        is_primary=bool(row.is_primary),
    )


def baseline_from_metrics(metrics: Mapping[str, Any]) -> BaselineSnapshot:
    """
    Derive the projection baseline from a financial-metrics record.

    Revenue is normalized to a 30-day month: total_revenue / (days_in_period / 30).
    Missing values are zero, never invented.
    """
    try:
        m = FinancialMetricsRecord.model_validate(dict(metrics))
    except ValidationError as exc:
        raise InvalidInput(f"Invalid financial metrics record: {exc}") from exc
    if m.days_in_period <= 0:
        raise InvalidInput(f"days_in_period must be positive, got {m.days_in_period}")

    monthly_revenue = m.total_revenue / (m.days_in_period / 30.0) if m.total_revenue else 0.0
    return BaselineSnapshot(
        monthly_revenue=monthly_revenue,
        cash_on_hand=m.cash_on_hand,
        ebitda=m.ebitda,
        dso_days=m.dso,
        ccc_days=m.ccc,
        gross_margin_pct=m.gross_margin,
    )
