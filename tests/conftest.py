"""
Shared fixtures: the reference baseline, a single growth scenario and a
three-scenario weighted set.
"""

import numpy as np
import pytest

from core.schema import BaselineSnapshot, ScenarioDefinition


@pytest.fixture
def baseline():
    return BaselineSnapshot(
        monthly_revenue=1_000_000_000,
        cash_on_hand=500_000_000,
        ebitda=200_000_000,
        dso_days=45,
        ccc_days=40,
        gross_margin_pct=33,
    )


@pytest.fixture
def growth_scenario():
    return ScenarioDefinition(
        id="growth",
        name="Growth",
        probability_weight=100,
        revenue_growth_pct=10,
        gross_margin_pct=35,
        opex_change_pct=0,
        ar_days=45,
        ap_days=30,
        inventory_days=20,
        is_primary=True,
    )


@pytest.fixture
def scenario_set():
    return [
        ScenarioDefinition(
            id="base", name="Base", probability_weight=50,
            revenue_growth_pct=10, gross_margin_pct=35, opex_change_pct=0,
            ar_days=45, ap_days=30, inventory_days=20, is_primary=True,
        ),
        ScenarioDefinition(
            id="upside", name="Upside", probability_weight=25,
            revenue_growth_pct=20, gross_margin_pct=40, opex_change_pct=-5,
            ar_days=40, ap_days=35, inventory_days=18,
        ),
        ScenarioDefinition(
            id="downside", name="Downside", probability_weight=25,
            revenue_growth_pct=-5, gross_margin_pct=30, opex_change_pct=10,
            ar_days=60, ap_days=25, inventory_days=30,
        ),
    ]


@pytest.fixture
def rng():
    return np.random.default_rng(20240611)
