from pathlib import Path

import pytest
import yaml

from retirement_planner.config.loaders import (
    load_planner_input,
    load_scenario_directory,
    load_settings,
    load_yaml_config,
    planner_input_from_dict,
)
from retirement_planner.config.models import Settings
from retirement_planner.exceptions import ConfigLoadError

REPO_CONFIG = Path(__file__).resolve().parents[1] / "config"


def _write(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


def test_default_settings_without_file():
    settings = load_settings(None)
    assert settings.concessional_cap_yearly == 27500
    assert settings.preservation_age == 60
    assert set(settings.assumption_presets) == {"Conservative", "Base", "Optimistic"}


def test_settings_file_overrides_defaults(tmp_path):
    path = _write(
        tmp_path / "settings.yaml",
        {"concessional_cap_yearly": 30000, "assumption_presets": {"Base": {"inflation": 0.025}}},
    )
    settings = load_settings(path)
    assert settings.concessional_cap_yearly == 30000
    assert settings.assumption_presets["Base"].inflation == pytest.approx(0.025)
    assert settings.assumption_presets["Base"].super_return == pytest.approx(0.07)


def test_settings_schema_rejects_wrong_types(tmp_path):
    path = _write(tmp_path / "settings.yaml", {"preservation_age": "sixty"})
    with pytest.raises(ConfigLoadError):
        load_settings(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigLoadError):
        load_yaml_config(tmp_path / "missing.yaml")
    with pytest.raises(ConfigLoadError):
        load_planner_input(tmp_path / "missing.yaml")


def test_non_mapping_yaml_raises(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigLoadError):
        load_yaml_config(path)


def test_planner_input_requires_goal(base_input_dict):
    del base_input_dict["goal"]
    with pytest.raises(ConfigLoadError):
        planner_input_from_dict(base_input_dict)


def test_planner_input_pydantic_errors_wrapped(base_input_dict):
    base_input_dict["income_expense"]["salary"] = -5
    with pytest.raises(ConfigLoadError):
        planner_input_from_dict(base_input_dict)


def test_load_planner_input_with_extends(tmp_path, base_input_dict):
    _write(tmp_path / "base.yaml", base_input_dict)
    child = _write(
        tmp_path / "early.yaml",
        {"extends": "base.yaml", "name": "Early", "goal": {"retire_age": 50}},
    )
    planner_input = load_planner_input(child)
    assert planner_input.goal.retire_age == 50
    assert planner_input.goal.current_age == 30
    assert planner_input.super_.balance == 50000


def test_repo_settings_file_loads():
    settings = load_settings(REPO_CONFIG / "settings.yaml")
    assert settings.assumption_presets["Base"].fund_returns["global"] == pytest.approx(0.078)


def test_repo_scenarios_load():
    scenarios = load_scenario_directory(REPO_CONFIG / "scenarios")
    assert set(scenarios) == {"baseline", "early_retirement", "investment_property"}
    assert scenarios["early_retirement"].goal.retire_age == 50
    assert scenarios["investment_property"].property.loan_balance == 600000


def test_scenario_directory_missing(tmp_path):
    with pytest.raises(ConfigLoadError):
        load_scenario_directory(tmp_path / "nope")


def test_repo_settings_file_matches_defaults():
    assert load_settings(REPO_CONFIG / "settings.yaml") == Settings()


def test_settings_schema_rejects_unknown_keys(tmp_path):
    path = _write(tmp_path / "settings.yaml", {"concessional_cap_label": "FY25 cap"})
    with pytest.raises(ConfigLoadError):
        load_settings(path)
    assert "concessional_cap_label" not in Settings.model_fields
