"""
Opex/cash anchor models — where projections take their opex, cash and DSO reference from.
"""

from .base import OpexCashAnchors, OpexCashModel
from .baseline import BaselineOpexCashModel
from .reference import ReferenceOpexCashModel

__all__ = [
    "OpexCashAnchors",
    "OpexCashModel",
    "BaselineOpexCashModel",
    "ReferenceOpexCashModel",
]
