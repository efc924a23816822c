"""
Risk outputs — aggregation, distribution statistics, decision support, history records.
"""

from .aggregator import MonteCarloResult, aggregate_trials, build_histogram
from .decisions import RiskReport, compare_scenarios, generate_risk_report
from .history import from_history_record, to_history_record
from .metrics import Percentiles, RiskStatistics, nearest_rank_percentile

__all__ = [
    "MonteCarloResult",
    "aggregate_trials",
    "build_histogram",
    "RiskReport",
    "compare_scenarios",
    "generate_risk_report",
    "from_history_record",
    "to_history_record",
    "Percentiles",
    "RiskStatistics",
    "nearest_rank_percentile",
]
