"""
Projection engine — deterministic scenario KPIs + Monte Carlo runner.
"""

from .projection import ProjectedKPIs, project_scenario, project_scenarios, project_trials
from .forecast import kpi_comparison_table, monthly_revenue_forecast
from .runner import SimulationRunner, run_monte_carlo, run_monte_carlo_async

__all__ = [
    "ProjectedKPIs",
    "project_scenario",
    "project_scenarios",
    "project_trials",
    "kpi_comparison_table",
    "monthly_revenue_forecast",
    "SimulationRunner",
    "run_monte_carlo",
    "run_monte_carlo_async",
]
