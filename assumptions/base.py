"""
Base classes for opex/cash anchor models.

Every projection, deterministic or per-trial, uses the same formulas:

  opex = opex_anchor × (1 + opex_change_pct / 100)
  cash = cash_anchor − (revenue / 30) × (ar_days − dso_anchor)

A model only decides where the three anchors come from.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.schema import BaselineSnapshot


@dataclass(frozen=True)
class OpexCashAnchors:
    """
    Anchors resolved against one baseline.

    opex_anchor is the opex level at a 0% opex change, cash_anchor the cash
    position before the receivables adjustment, dso_anchor the reference
    collection period (days) that AR days are measured against.
    """

    opex_anchor: float
    cash_anchor: float
    dso_anchor: float


class OpexCashModel:
    """Interface for resolving opex/cash anchors from a baseline."""

    name: str = "abstract"

    def anchors(self, baseline: BaselineSnapshot) -> OpexCashAnchors:
        raise NotImplementedError
