"""
BaselineOpexCashModel — anchors taken straight from the caller's BaselineSnapshot.

The deterministic single-scenario projection always uses this model:
  opex anchor = baseline EBITDA (stand-in for a true opex figure)
  cash anchor = baseline cash on hand
  dso anchor  = baseline DSO

Passing it to the Monte Carlo runner makes trials consistent with the
deterministic path: a single-scenario run then reproduces the deterministic
EBITDA exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from core.schema import BaselineSnapshot

from .base import OpexCashAnchors, OpexCashModel


@dataclass(frozen=True)
class BaselineOpexCashModel(OpexCashModel):

    name: ClassVar[str] = "baseline"

    def anchors(self, baseline: BaselineSnapshot) -> OpexCashAnchors:
        return OpexCashAnchors(
            opex_anchor=float(baseline.ebitda),
            cash_anchor=float(baseline.cash_on_hand),
            dso_anchor=float(baseline.dso_days),
        )
