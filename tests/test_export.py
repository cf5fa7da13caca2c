import json

import pandas as pd
import pytest

from retirement_planner.projections.runner import run_scenario
from retirement_planner.reporting.export import (
    kpi_summary_frame,
    monthly_frame,
    write_kpis,
    write_monthly_csv,
)
from retirement_planner.state.schema import DETAIL_COLS, EXPORT_COLS, KPI_SUMMARY_FIELDS


@pytest.fixture
def result(base_input, settings):
    return run_scenario(base_input, settings)


def test_monthly_frame_export_columns(result):
    df = monthly_frame(result)
    assert list(df.columns) == [
        "month", "age", "net_worth", "super_balance", "outside_super_balance",
        "cash_balance", "property_value", "loan_balance", "dca_paused",
    ]
    assert list(df.columns) == EXPORT_COLS
    assert len(df) == 420
    assert df["dca_paused"].dtype == bool


def test_detailed_frame(result):
    df = result.to_frame(detailed=True)
    assert list(df.columns) == DETAIL_COLS
    assert df["cap_warning"].dtype == bool


def test_write_monthly_csv(result, tmp_path):
    path = write_monthly_csv(result, tmp_path / "out" / "monthly.csv")
    df = pd.read_csv(path)
    assert list(df.columns) == EXPORT_COLS
    assert len(df) == 420
    assert df["month"].iloc[-1] == 420


def test_write_kpis_json(result, tmp_path):
    path = write_kpis(result, tmp_path / "kpis.json")
    payload = json.loads(path.read_text())
    assert payload["kpis"]["net_worth_at_retirement"] == pytest.approx(
        result.kpis.net_worth_at_retirement
    )
    assert payload["metadata"]["data_points"] == 420
    assert payload["warnings"] == list(result.warnings)


def test_kpi_summary_frame(result):
    summary = kpi_summary_frame({"base": result})
    assert list(summary.columns) == KPI_SUMMARY_FIELDS
    assert summary.index.name == "scenario"
