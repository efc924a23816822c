from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from .errors import DivisionUndefined


def require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def pct_change(projected: float, base: float, field: str) -> float:
    """(projected / base - 1) * 100, refusing a zero base instead of returning inf/NaN."""
    if base == 0:
        raise DivisionUndefined(field)
    return (projected / base - 1.0) * 100.0


def clamp(values, lower: float, upper: float):
    """np.clip that hands back a float for scalar input."""
    out = np.clip(values, lower, upper)
    return float(out) if np.ndim(out) == 0 else out
