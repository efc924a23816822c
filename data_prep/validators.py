"""
Input quality checks for scenario sets and baselines before they enter the engine.

Catches problems early:
- Empty scenario sets
- Weights that do not sum to 100 (the engine uses them as given)
- More than one primary scenario
- Negative working-capital days
- Zero baseline values that make percent changes undefined
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from core.schema import BaselineSnapshot, ScenarioDefinition


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a set of inputs."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_scenarios(scenarios: Sequence[ScenarioDefinition]) -> ValidationResult:
    """
    Run all checks on a scenario set.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()
    scenarios = list(scenarios)

    if not scenarios:
        result.errors.append("Scenario set is empty.")
        return result

    # --- Identifiers ---
    ids = [s.id for s in scenarios]
    n_dup = len(ids) - len(set(ids))
    if n_dup > 0:
        result.warnings.append(f"{n_dup} duplicate scenario ids found.")

    # --- Weights ---
    weights = np.array([s.probability_weight for s in scenarios], dtype=float)
    total = float(weights.sum())
    if not np.isclose(total, 100.0):
        result.warnings.append(
            f"Probability weights sum to {total:.2f}, not 100; they are used as given."
        )
    n_out = int(((weights < 0) | (weights > 100)).sum())
    if n_out > 0:
        result.warnings.append(f"{n_out} scenarios have a probability weight outside 0-100.")

    # --- Primary flag ---
    n_primary = sum(1 for s in scenarios if s.is_primary)
    if n_primary > 1:
        result.warnings.append(f"{n_primary} scenarios are marked primary; expected at most one.")

    # --- Margins ---
    n_margin = sum(1 for s in scenarios if not 0 <= s.gross_margin_pct <= 100)
    if n_margin > 0:
        result.warnings.append(f"{n_margin} scenarios have a gross margin outside 0-100%.")

    # --- Working capital days ---
    for attr, label in [("ar_days", "AR days"), ("ap_days", "AP days"), ("inventory_days", "inventory days")]:
        n_neg = sum(1 for s in scenarios if getattr(s, attr) < 0)
        if n_neg > 0:
            result.errors.append(f"{n_neg} scenarios have negative {label}.")

    return result


def validate_baseline(baseline: BaselineSnapshot) -> ValidationResult:
    """Check a baseline for values the projection cannot compute against."""
    result = ValidationResult()

    for attr, label in [
        ("monthly_revenue", "monthly revenue"),
        ("ebitda", "EBITDA"),
        ("cash_on_hand", "cash on hand"),
    ]:
        if getattr(baseline, attr) == 0:
            result.errors.append(
                f"Baseline {label} is zero; percent change against it is undefined."
            )

    if baseline.monthly_revenue < 0:
        result.errors.append("Baseline monthly revenue is negative.")
    if baseline.dso_days < 0:
        result.errors.append("Baseline DSO is negative.")
    if baseline.dso_days == 0:
        result.warnings.append("Baseline DSO is zero; cash projection treats all AR days as new.")

    return result
