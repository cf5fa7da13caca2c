import pytest
from pydantic import ValidationError

from retirement_planner.config.models import PlannerInput
from retirement_planner.config.validation import check_weights, validate_inputs
from retirement_planner.exceptions import (
    AllocationWeightsError,
    ConfigurationError,
    InvalidBufferConfigError,
    InvalidGoalError,
    InvalidInputError,
)
from retirement_planner.projections import runner


def test_valid_input_passes(base_input, settings):
    validate_inputs(base_input, settings)


def test_weights_off_by_a_percent_rejected(base_input_dict, settings):
    base_input_dict["portfolio"].update(
        {"allocation_preset": "TwoETF", "weights": {"aus": 0.4, "global": 0.59}}
    )
    with pytest.raises(AllocationWeightsError) as exc:
        validate_inputs(PlannerInput(**base_input_dict), settings)
    assert exc.value.field == "portfolio.weights"


def test_weights_rejected_before_projection(base_input_dict, settings, monkeypatch):
    def fail_run(self):
        raise AssertionError("projection should not start")

    monkeypatch.setattr(runner.BalanceProjector, "run", fail_run)
    base_input_dict["portfolio"].update(
        {"allocation_preset": "TwoETF", "weights": {"aus": 0.4, "global": 0.59}}
    )
    with pytest.raises(AllocationWeightsError):
        runner.run_scenario(base_input_dict, settings)


def test_weights_within_tolerance_accepted():
    check_weights({"aus": 0.4, "global": 0.6005})


def test_two_fund_needs_weights(base_input_dict, settings):
    base_input_dict["portfolio"]["allocation_preset"] = "TwoETF"
    with pytest.raises(AllocationWeightsError):
        validate_inputs(PlannerInput(**base_input_dict), settings)


def test_both_goal_targets_rejected(base_input_dict, settings):
    base_input_dict["goal"]["target_capital"] = 2000000
    with pytest.raises(InvalidGoalError):
        validate_inputs(PlannerInput(**base_input_dict), settings)


def test_missing_goal_target_rejected(base_input_dict, settings):
    del base_input_dict["goal"]["target_income_yearly"]
    with pytest.raises(InvalidGoalError):
        validate_inputs(PlannerInput(**base_input_dict), settings)


def test_retire_before_current_age_rejected(base_input_dict, settings):
    base_input_dict["goal"]["retire_age"] = 29
    with pytest.raises(InvalidInputError) as exc:
        validate_inputs(PlannerInput(**base_input_dict), settings)
    assert "field: goal.retire_age" in str(exc.value)


def test_loan_above_value_rejected(property_input_dict, settings):
    property_input_dict["property"]["loan_balance"] = 800000
    with pytest.raises(InvalidInputError):
        validate_inputs(PlannerInput(**property_input_dict), settings)


def test_recovery_below_trigger_rejected(base_input_dict, settings):
    base_input_dict["buffers"].update({"trigger_months": 6, "recovery_months": 3})
    with pytest.raises(InvalidBufferConfigError):
        validate_inputs(PlannerInput(**base_input_dict), settings)


def test_configuration_errors_share_a_base(base_input_dict, settings):
    base_input_dict["goal"]["retire_age"] = 20
    with pytest.raises(ConfigurationError):
        validate_inputs(PlannerInput(**base_input_dict), settings)


def test_contributions_tax_fixed_at_fifteen_percent(base_input_dict):
    base_input_dict["super"]["contributions_tax_pct"] = 0.30
    with pytest.raises(ValidationError):
        PlannerInput(**base_input_dict)


def test_negative_salary_is_structural_error(base_input_dict):
    base_input_dict["income_expense"]["salary"] = -1
    with pytest.raises(ValidationError):
        PlannerInput(**base_input_dict)


def test_zero_expenses_accepted(base_input_dict, settings):
    base_input_dict["income_expense"]["expenses_monthly"] = 0
    validate_inputs(PlannerInput(**base_input_dict), settings)


def test_negative_expenses_is_structural_error(base_input_dict):
    base_input_dict["income_expense"]["expenses_monthly"] = -1
    with pytest.raises(ValidationError):
        PlannerInput(**base_input_dict)
