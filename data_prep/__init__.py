"""
Data preparation — loading scenario sheets, mapping stored records, validation.
"""

from .loader import canonicalize_columns, load_scenarios, scenarios_from_dataframe
from .scenario_builder import baseline_from_metrics, scenario_from_record
from .validators import ValidationResult, validate_baseline, validate_scenarios

__all__ = [
    "canonicalize_columns",
    "load_scenarios",
    "scenarios_from_dataframe",
    "baseline_from_metrics",
    "scenario_from_record",
    "ValidationResult",
    "validate_baseline",
    "validate_scenarios",
]
