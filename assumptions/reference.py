"""
ReferenceOpexCashModel — fixed anchors used by the stochastic model.

Opex is 25% of baseline monthly revenue, the cash anchor is a fixed 8.5 billion
and receivables are measured against a 52-day reference DSO, regardless of the
caller's baseline cash and DSO. This is the default for Monte Carlo trials so
existing risk numbers stay comparable; BaselineOpexCashModel is the unified
alternative.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from core.schema import BaselineSnapshot

from .base import OpexCashAnchors, OpexCashModel


@dataclass(frozen=True)
class ReferenceOpexCashModel(OpexCashModel):

    opex_revenue_ratio: float = 0.25
    reference_cash: float = 8_500_000_000.0
    reference_dso_days: float = 52.0

    name: ClassVar[str] = "reference"

    def anchors(self, baseline: BaselineSnapshot) -> OpexCashAnchors:
        return OpexCashAnchors(
            opex_anchor=float(baseline.monthly_revenue) * self.opex_revenue_ratio,
            cash_anchor=float(self.reference_cash),
            dso_anchor=float(self.reference_dso_days),
        )
