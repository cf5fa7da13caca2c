import math

import pytest

from retirement_planner.projections.runner import run_scenario
from retirement_planner.reporting.metrics import (
    bridge_analysis,
    collect_warnings,
    required_monthly_saving,
)


def test_no_bridge_needed_at_preservation_age():
    required, covered, ratio = bridge_analysis(500000, 80000, 60, 65)
    assert required == 0
    assert covered == pytest.approx(6.25)
    assert ratio == 1.0


def test_bridge_for_early_retirement():
    required, covered, ratio = bridge_analysis(400000, 80000, 60, 50)
    assert required == 10
    assert covered == pytest.approx(5)
    assert ratio == pytest.approx(0.5)


def test_bridge_coverage_monotonic_in_outside_super_balance():
    ratios = [bridge_analysis(balance, 80000, 60, 50)[2] for balance in range(0, 1_000_001, 100_000)]
    assert all(later >= earlier for earlier, later in zip(ratios, ratios[1:]))


def test_required_monthly_saving_zero_rate_is_linear():
    assert required_monthly_saving(120000, 0.0, 120) == pytest.approx(1000)


def test_required_monthly_saving_compounds():
    saving = required_monthly_saving(120000, 0.06, 120)
    r = 0.06 / 12
    assert saving == pytest.approx(120000 * r / ((1 + r) ** 120 - 1))
    assert saving < 1000


def test_required_monthly_saving_edge_cases():
    assert required_monthly_saving(0, 0.06, 120) == 0
    assert required_monthly_saving(50000, 0.06, 0) == 50000


def test_income_goal_kpis(base_input_dict, settings):
    result = run_scenario(base_input_dict, settings)
    k = result.kpis
    assert k.projected_income_yearly == pytest.approx(k.net_worth_at_retirement * 0.04)
    assert k.projected_income_monthly == pytest.approx(k.projected_income_yearly / 12)
    assert k.target == 80000
    assert k.actual == pytest.approx(k.projected_income_yearly)
    assert k.gap == pytest.approx(max(0, 80000 - k.actual))
    assert k.can_retire is (k.gap == 0)
    assert k.income_replacement_ratio == pytest.approx(k.projected_income_yearly / 48000)
    assert sum(k.bucket_shares.values()) == pytest.approx(100)
    assert k.property_stress_cashflow == {}
    assert k.loan_paid_off_age is None


def test_capital_goal_gap_conversions(base_input_dict, settings):
    del base_input_dict["goal"]["target_income_yearly"]
    base_input_dict["goal"]["target_capital"] = 50_000_000
    k = run_scenario(base_input_dict, settings).kpis
    assert k.target == 50_000_000
    assert k.actual == pytest.approx(k.net_worth_at_retirement)
    assert k.gap == pytest.approx(50_000_000 - k.net_worth_at_retirement)
    assert k.monthly_gap_to_close_target == pytest.approx(k.gap * 0.04 / 12)
    assert k.capital_shortfall == pytest.approx(k.gap)
    assert k.monthly_savings_required > 0
    assert k.can_retire is False


def test_unreachable_income_goal_reports_shortfall(base_input_dict, settings):
    base_input_dict["goal"]["target_income_yearly"] = 1_000_000
    k = run_scenario(base_input_dict, settings).kpis
    assert k.gap > 0
    assert k.monthly_gap_to_close_target == pytest.approx(k.gap / 12)
    assert k.capital_shortfall == pytest.approx(k.gap / 0.04)


def test_property_kpis(property_input_dict, settings):
    property_input_dict["property"]["extra_repayment_monthly"] = 2000
    k = run_scenario(property_input_dict, settings).kpis
    assert k.loan_paid_off_age is not None
    assert 30 < k.loan_paid_off_age <= 65
    assert k.final_lvr == 0
    assert set(k.property_stress_cashflow) == {"base", "+2.0%", "+3.0%"}
    assert k.total_fees["property"] > 0


def test_cumulative_totals(base_input_dict, settings):
    base_input_dict["super"]["salary_sacrifice_monthly"] = 500
    base_input_dict["income_expense"]["wage_growth"] = 0
    result = run_scenario(base_input_dict, settings)
    k = result.kpis
    assert k.total_tax_saved == pytest.approx(sum(p.tax_saved for p in result.monthly_data))
    assert k.total_tax_saved > 0
    assert k.total_contributions["super"] > 0
    assert k.total_contributions["portfolio"] > 0
    assert 0 < k.average_cap_utilization <= 1
    assert k.months_dca_paused == sum(1 for p in result.monthly_data if p.dca_paused)


def test_warnings_for_cap_and_pause(base_input_dict, settings):
    base_input_dict["super"]["salary_sacrifice_monthly"] = 5000
    base_input_dict["buffers"] = {"balance": 0, "trigger_months": 3, "recovery_months": 6}
    result = run_scenario(base_input_dict, settings)
    text = " ".join(result.warnings)
    assert "cap" in text
    assert "paused" in text
    assert "recovery target" in text


def test_negative_balance_warning(negative_cash_points):
    warnings = collect_warnings(negative_cash_points)
    assert any("Negative balance" in w for w in warnings)


@pytest.fixture
def negative_cash_points(base_input_dict, settings):
    base_input_dict["goal"]["retire_age"] = 30
    base_input_dict["buffers"]["balance"] = -5000
    base_input_dict["buffers"]["trigger_months"] = 0
    base_input_dict["buffers"]["recovery_months"] = 0
    return run_scenario(base_input_dict, settings).monthly_data


def test_zero_horizon_kpis(base_input_dict, settings):
    base_input_dict["goal"]["retire_age"] = 30
    result = run_scenario(base_input_dict, settings)
    assert result.metadata.data_points == 1
    assert result.kpis.net_worth_at_retirement == pytest.approx(50000 + 10000 + 20000)
    assert math.isfinite(result.kpis.monthly_savings_required)
    assert result.kpis.months_dca_paused == 0
    assert result.kpis.average_cap_utilization == 0
