"""
Core package — data model, configuration, error taxonomy, and shared utilities.
No business logic lives here.
"""

from .config import SimulationConfig, get_simulation_config
from .errors import DivisionUndefined, InvalidInput, SimulationCancelled
from .schema import (
    BaselineSnapshot,
    ScenarioDefinition,
    SCENARIO_COLUMNS,
    TRIAL_COLUMNS,
    TUNABLE_PARAMETERS,
)
from .utils import clamp, pct_change, require_columns

__all__ = [
    "SimulationConfig",
    "get_simulation_config",
    "DivisionUndefined",
    "InvalidInput",
    "SimulationCancelled",
    "BaselineSnapshot",
    "ScenarioDefinition",
    "SCENARIO_COLUMNS",
    "TRIAL_COLUMNS",
    "TUNABLE_PARAMETERS",
    "clamp",
    "pct_change",
    "require_columns",
]
