import pandas as pd
import pytest

from core.config import SimulationConfig, get_simulation_config
from core.errors import InvalidInput
from engine.forecast import kpi_comparison_table, monthly_revenue_forecast
from engine.projection import project_scenarios
from engine.runner import run_monte_carlo
from risk.decisions import compare_scenarios, generate_risk_report
from risk.history import from_history_record, to_history_record


@pytest.fixture
def result(scenario_set, baseline):
    return run_monte_carlo(scenario_set, baseline, 2000, config=SimulationConfig(seed=31))


# --------------------------------------------------------------------------
# scenario comparison and views
# --------------------------------------------------------------------------

def test_compare_scenarios(scenario_set, baseline):
    base, upside, _ = project_scenarios(scenario_set, baseline)
    table = compare_scenarios(base, upside).set_index("metric")

    assert list(table.columns) == ["unit", "first", "second", "diff", "diff_pct"]
    assert table.loc["Revenue", "diff"] == pytest.approx(1.2e9 - 1.1e9)
    assert table.loc["Revenue", "diff_pct"] == pytest.approx(100 / 11)
    assert table.loc["DSO", "diff"] == pytest.approx(-5)
    assert table.loc["Gross Margin", "unit"] == "percent"


def test_compare_zero_first_value(scenario_set, baseline):
    base, upside, _ = project_scenarios(scenario_set, baseline)
    from dataclasses import replace

    table = compare_scenarios(replace(base, ccc=0.0), upside).set_index("metric")
    assert table.loc["Cash Conversion Cycle", "diff_pct"] == 0.0


def test_monthly_revenue_forecast(scenario_set, baseline):
    df = monthly_revenue_forecast(scenario_set, baseline, months=12)

    assert df["month"].tolist()[:2] == ["T1", "T2"]
    assert len(df) == 12
    assert df.loc[0, "base"] == pytest.approx(1e9)
    assert df.loc[11, "base"] == pytest.approx(1e9 * (1 + 0.10 / 12) ** 11)
    assert df["downside"].is_monotonic_decreasing

    with pytest.raises(InvalidInput):
        monthly_revenue_forecast([], baseline)
    with pytest.raises(InvalidInput):
        monthly_revenue_forecast(scenario_set, baseline, months=0)


def test_kpi_comparison_table(scenario_set, baseline):
    table = kpi_comparison_table(project_scenarios(scenario_set, baseline), baseline)
    assert table["metric"].tolist() == ["Revenue", "EBITDA", "Cash"]
    assert list(table.columns) == ["metric", "current", "base", "upside", "downside"]
    assert table.loc[1, "current"] == 200_000_000


# --------------------------------------------------------------------------
# risk report
# --------------------------------------------------------------------------

def test_risk_report_on_healthy_run(result):
    report = generate_risk_report(result)

    assert report.n_trials == 2000
    assert report.median_ebitda == result.percentiles.p50
    assert 0.0 <= report.prob_positive_ebitda <= 1.0
    assert report.p5_p95_range >= report.interquartile_range >= 0
    assert not any(f.startswith("PARTIAL_RUN") for f in report.flags)

    table = report.to_dataframe()
    assert "P(EBITDA > 0)" in table["Metric"].tolist()


def test_risk_report_flags_loss_making_run(scenario_set):
    from assumptions import BaselineOpexCashModel
    from core.schema import BaselineSnapshot

    # opex anchored at 300m against ~266m gross profit: mostly loss-making trials
    thin = BaselineSnapshot(monthly_revenue=700_000_000, cash_on_hand=1e8, ebitda=3e8, dso_days=45)
    result = run_monte_carlo(
        scenario_set,
        thin,
        2000,
        config=SimulationConfig(seed=4),
        opex_cash_model=BaselineOpexCashModel(),
    )
    report = generate_risk_report(result)

    prefixes = {f.split(":")[0] for f in report.flags}
    assert {"NEGATIVE_VAR", "LOSS_RISK", "HIGH_DISPERSION"} <= prefixes


def test_risk_report_without_retained_trials(result):
    restored = from_history_record(to_history_record(result))
    report = generate_risk_report(restored)
    assert report.prob_positive_ebitda is None
    assert report.to_dataframe().iloc[5]["Value"] == "N/A"


# --------------------------------------------------------------------------
# history records
# --------------------------------------------------------------------------

def test_history_record_shape(result):
    record = to_history_record(
        result,
        scenario_id="base",
        created_by="analyst",
        created_at=pd.Timestamp("2024-06-30T12:00:00Z"),
    )

    assert record["simulation_count"] == 2000
    assert record["p10_ebitda"] == result.percentiles.p5
    assert record["p90_ebitda"] == result.percentiles.p95
    assert record["created_at"].startswith("2024-06-30T12:00:00")
    assert len(record["distribution_data"]["ebitdaDistribution"]) == 30


def test_history_round_trip(result):
    restored = from_history_record(to_history_record(result))

    assert restored.n_trials == result.n_trials
    assert restored.percentiles == result.percentiles
    assert restored.statistics == result.statistics
    assert restored.ebitda_distribution["frequency"].sum() == pytest.approx(100.0)
    assert restored.revenue_distribution.empty
    assert restored.simulations.empty


def test_history_fallback_without_distribution_data():
    restored = from_history_record({
        "simulation_count": 10_000,
        "mean_ebitda": 120.0,
        "std_dev_ebitda": 30.0,
        "p10_ebitda": 70.0,
        "p50_ebitda": 118.0,
        "p90_ebitda": 170.0,
        "min_ebitda": 5.0,
        "max_ebitda": 240.0,
    })

    assert restored.percentiles.p5 == 70.0
    assert restored.percentiles.p95 == 170.0
    assert (restored.percentiles.p25, restored.percentiles.p75) == (0.0, 0.0)
    assert restored.statistics.var95 == 70.0
    assert restored.statistics.cvar95 == 0.0
    assert restored.ebitda_distribution.empty


def test_history_requires_count():
    with pytest.raises(InvalidInput):
        from_history_record({"mean_ebitda": 1.0})


# --------------------------------------------------------------------------
# configuration
# --------------------------------------------------------------------------

def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SCENARIO_ENGINE_TRIALS", "2500")
    monkeypatch.setenv("SCENARIO_ENGINE_BINS", "20")
    monkeypatch.setenv("SCENARIO_ENGINE_SEED", "42")

    cfg = get_simulation_config(SimulationConfig(retained_trials=100))
    assert (cfg.n_trials, cfg.histogram_bins, cfg.seed) == (2500, 20, 42)
    assert cfg.retained_trials == 100


def test_env_defaults(monkeypatch):
    for var in ("SCENARIO_ENGINE_TRIALS", "SCENARIO_ENGINE_BINS", "SCENARIO_ENGINE_SEED"):
        monkeypatch.delenv(var, raising=False)
    assert get_simulation_config() == SimulationConfig()


def test_history_partial_distribution_data():
    restored = from_history_record({
        "simulation_count": 500,
        "mean_ebitda": 120.0,
        "std_dev_ebitda": 30.0,
        "p10_ebitda": 70.0,
        "p50_ebitda": 118.0,
        "p90_ebitda": 170.0,
        "min_ebitda": 5.0,
        "max_ebitda": 240.0,
        "distribution_data": {
            "percentiles": {"p25": 95.0, "p50": 119.0},
            "statistics": {"mean": 121.0, "cvar95": 40.0},
        },
    })

    p, s = restored.percentiles, restored.statistics
    assert (p.p5, p.p25, p.p50, p.p75, p.p95) == (70.0, 95.0, 119.0, 0.0, 170.0)
    assert (s.mean, s.std_dev, s.min, s.max) == (121.0, 30.0, 5.0, 240.0)
    assert (s.var95, s.cvar95) == (70.0, 40.0)
