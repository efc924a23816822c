import pandas as pd
import pytest

from core.errors import InvalidInput
from core.schema import BaselineSnapshot, ScenarioDefinition
from data_prep import (
    baseline_from_metrics,
    canonicalize_columns,
    load_scenarios,
    scenario_from_record,
    scenarios_from_dataframe,
    validate_baseline,
    validate_scenarios,
)


# --------------------------------------------------------------------------
# stored records
# --------------------------------------------------------------------------

def test_record_gets_planning_defaults():
    s = scenario_from_record(
        {"id": 7, "name": "Cost push", "revenue_change": 4.0, "cost_change": 12.5, "owner": "fp&a"},
        current_gross_margin=33.25,
    )
    assert s.id == "7"
    assert s.probability_weight == 33
    assert (s.ar_days, s.ap_days, s.inventory_days) == (52, 35, 28)
    assert s.revenue_growth_pct == 4.0
    assert s.cost_change_pct == 12.5
    assert s.opex_change_pct == 12.5
    assert s.gross_margin_pct == 33.3
    assert not s.is_primary


def test_record_missing_values():
    s = scenario_from_record({"id": "a", "name": "A", "revenue_change": None}, current_gross_margin=None)
    assert s.revenue_growth_pct == 0
    assert s.opex_change_pct == 0
    assert s.gross_margin_pct == 35.0
    assert s.description == ""


def test_record_without_name_rejected():
    with pytest.raises(InvalidInput):
        scenario_from_record({"id": "a"})


def test_baseline_from_metrics_normalizes_period():
    b = baseline_from_metrics({
        "totalRevenue": 3_000_000_000,
        "daysInPeriod": 90,
        "cashOnHand": 400_000_000,
        "ebitda": 150_000_000,
        "dso": 48,
        "ccc": 41,
        "grossMargin": 31.5,
    })
    assert b.monthly_revenue == pytest.approx(1_000_000_000)
    assert b.cash_on_hand == 400_000_000
    assert b.dso_days == 48
    assert b.ccc_days == 41
    assert b.gross_margin_pct == 31.5


def test_baseline_from_metrics_missing_values_are_zero():
    b = baseline_from_metrics({"total_revenue": 600, "days_in_period": 30, "ebitda": None})
    assert b.monthly_revenue == 600
    assert b.ebitda == 0
    assert b.cash_on_hand == 0


def test_baseline_from_metrics_rejects_empty_period():
    with pytest.raises(InvalidInput):
        baseline_from_metrics({"total_revenue": 100, "days_in_period": 0})


# --------------------------------------------------------------------------
# tabular input
# --------------------------------------------------------------------------

@pytest.fixture
def scenario_sheet():
    return pd.DataFrame({
        "scenario_id": ["base", "down"],
        "Scenario": ["Base", "Downside"],
        "probability": [60, 40],
        "revenueGrowth": [5.0, -8.0],
        "grossMargin": [34.0, 29.5],
        "opexChange": [0.0, 6.0],
        "arDays": [50, 63],
        "isPrimary": ["yes", "no"],
        "comment": ["keep", "drop"],
    })


def test_canonicalize_columns(scenario_sheet):
    cols = canonicalize_columns(scenario_sheet).columns
    assert {"id", "name", "probability_weight", "revenue_growth_pct", "ar_days", "is_primary"} <= set(cols)
    assert "comment" in cols


def test_scenarios_from_dataframe(scenario_sheet):
    scenarios = scenarios_from_dataframe(scenario_sheet)
    assert [s.id for s in scenarios] == ["base", "down"]

    down = scenarios[1]
    assert down.probability_weight == 40
    assert down.revenue_growth_pct == -8.0
    assert down.ar_days == 63
    assert down.ap_days == 35  # default
    assert scenarios[0].is_primary and not down.is_primary


def test_dataframe_requires_identity_columns():
    with pytest.raises(ValueError):
        scenarios_from_dataframe(pd.DataFrame({"name": ["x"]}))


def test_dataframe_rejects_unparseable_numbers(scenario_sheet):
    scenario_sheet["arDays"] = ["50", "sixty"]
    with pytest.raises(InvalidInput):
        scenarios_from_dataframe(scenario_sheet)


def test_load_csv(tmp_path, scenario_sheet):
    path = tmp_path / "scenarios.csv"
    scenario_sheet.to_csv(path, index=False)
    scenarios = load_scenarios(path)
    assert len(scenarios) == 2
    assert scenarios[0].gross_margin_pct == 34.0


def test_load_xlsx(tmp_path, scenario_sheet):
    path = tmp_path / "scenarios.xlsx"
    scenario_sheet.to_excel(path, index=False, sheet_name="plan")
    scenarios = load_scenarios(path, sheet_name="plan")
    assert [s.name for s in scenarios] == ["Base", "Downside"]


def test_load_unsupported_suffix(tmp_path):
    path = tmp_path / "scenarios.json"
    path.write_text("[]")
    with pytest.raises(InvalidInput):
        load_scenarios(path)


# --------------------------------------------------------------------------
# validators
# --------------------------------------------------------------------------

def test_valid_set_passes(scenario_set):
    result = validate_scenarios(scenario_set)
    assert result.is_valid
    assert result.warnings == []
    assert "All checks passed" in result.summary()


def test_scenario_warnings_and_errors():
    scenarios = [
        ScenarioDefinition(id="a", name="A", probability_weight=70, is_primary=True),
        ScenarioDefinition(id="a", name="A2", probability_weight=120, is_primary=True, gross_margin_pct=140),
        ScenarioDefinition(id="c", name="C", probability_weight=5, ar_days=-1),
    ]
    result = validate_scenarios(scenarios)

    assert not result.is_valid
    assert any("negative AR days" in e for e in result.errors)
    joined = " ".join(result.warnings)
    assert "duplicate" in joined
    assert "not 100" in joined
    assert "outside 0-100" in joined
    assert "primary" in joined
    assert "gross margin" in joined


def test_empty_set_is_an_error():
    assert not validate_scenarios([]).is_valid


def test_baseline_checks(baseline):
    assert validate_baseline(baseline).is_valid

    broken = BaselineSnapshot(monthly_revenue=1e6, cash_on_hand=2e6, ebitda=0, dso_days=0)
    result = validate_baseline(broken)
    assert len(result.errors) == 1
    assert "EBITDA" in result.errors[0]
    assert len(result.warnings) == 1
