import logging

import numpy as np
import pytest

from core.errors import InvalidInput
from core.schema import ScenarioDefinition, TUNABLE_PARAMETERS
from distributions.blender import blend_scenarios


def test_weighted_values_and_spread(scenario_set):
    aggregate = blend_scenarios(scenario_set)

    # 10*0.5 + 20*0.25 - 5*0.25
    assert aggregate.revenue_growth_pct == pytest.approx(8.75)
    assert aggregate.gross_margin_pct == pytest.approx(35.0)
    assert aggregate.opex_change_pct == pytest.approx(1.25)
    assert aggregate.ar_days == pytest.approx(47.5)

    # max |x - weighted|
    assert aggregate.revenue_growth_spread == pytest.approx(13.75)
    assert aggregate.gross_margin_spread == pytest.approx(5.0)
    assert aggregate.opex_change_spread == pytest.approx(8.75)
    assert aggregate.ar_days_spread == pytest.approx(12.5)

    assert aggregate.n_scenarios == 3
    assert aggregate.weight_total == pytest.approx(100.0)


def test_weighted_value_within_scenario_range():
    gen = np.random.default_rng(3)
    for _ in range(50):
        n = int(gen.integers(1, 6))
        weights = gen.dirichlet(np.ones(n)) * 100
        scenarios = [
            ScenarioDefinition(
                id=str(i),
                name=f"S{i}",
                probability_weight=float(w),
                revenue_growth_pct=float(gen.normal(5, 10)),
                gross_margin_pct=float(gen.uniform(20, 50)),
                opex_change_pct=float(gen.normal(0, 5)),
                ar_days=float(gen.uniform(20, 90)),
            )
            for i, w in enumerate(weights)
        ]
        aggregate = blend_scenarios(scenarios)
        for param in TUNABLE_PARAMETERS:
            values = [getattr(s, param) for s in scenarios]
            assert min(values) - 1e-9 <= aggregate.weighted(param) <= max(values) + 1e-9


def test_single_scenario_has_zero_spread(growth_scenario):
    aggregate = blend_scenarios([growth_scenario])
    for param in TUNABLE_PARAMETERS:
        assert aggregate.spread(param) == pytest.approx(0.0, abs=1e-9)
        assert aggregate.weighted(param) == pytest.approx(getattr(growth_scenario, param))


def test_empty_set_rejected():
    with pytest.raises(InvalidInput):
        blend_scenarios([])


def test_weights_not_renormalized(caplog):
    scenarios = [
        ScenarioDefinition(id="a", name="A", probability_weight=33, revenue_growth_pct=10),
        ScenarioDefinition(id="b", name="B", probability_weight=33, revenue_growth_pct=10),
    ]
    with caplog.at_level(logging.WARNING, logger="distributions.blender"):
        aggregate = blend_scenarios(scenarios)

    assert aggregate.revenue_growth_pct == pytest.approx(6.6)
    assert aggregate.weight_total == pytest.approx(66.0)
    assert "not 100" in caplog.text


def test_summary_and_unknown_parameter(scenario_set):
    aggregate = blend_scenarios(scenario_set)
    summary = aggregate.summary()
    assert summary["Parameter"].tolist() == list(TUNABLE_PARAMETERS)
    with pytest.raises(KeyError):
        aggregate.spread("ap_days")


def test_identical_drivers_blend_exactly():
    scenarios = [
        ScenarioDefinition(
            id=str(i), name=f"S{i}", probability_weight=w,
            revenue_growth_pct=15.307, gross_margin_pct=33.37, opex_change_pct=0, ar_days=45,
            ap_days=ap,
        )
        for i, (w, ap) in enumerate([(33.3, 30), (33.3, 35), (33.4, 40)])
    ]
    aggregate = blend_scenarios(scenarios)

    assert aggregate.revenue_growth_pct == 15.307
    assert aggregate.gross_margin_pct == 33.37
    assert aggregate.ar_days == 45
    for param in TUNABLE_PARAMETERS:
        assert aggregate.spread(param) == 0.0


def test_identical_drivers_without_full_weight_still_scaled():
    scenarios = [
        ScenarioDefinition(id="a", name="A", probability_weight=25, revenue_growth_pct=8),
        ScenarioDefinition(id="b", name="B", probability_weight=25, revenue_growth_pct=8),
    ]
    aggregate = blend_scenarios(scenarios)
    assert aggregate.revenue_growth_pct == pytest.approx(4.0)
    assert aggregate.revenue_growth_spread == pytest.approx(4.0)
