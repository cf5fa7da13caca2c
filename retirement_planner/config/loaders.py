import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from cerberus import Validator
from pydantic import ValidationError

from retirement_planner.config.accessors import merge_settings
from retirement_planner.config.models import PlannerInput, Settings
from retirement_planner.exceptions import ConfigLoadError
from retirement_planner.scenario_loader import load as load_scenario_file

# Configure logger for this module
logger = logging.getLogger(__name__)

SETTINGS_SCHEMA = {
    "assumption_presets": {"type": "dict", "required": False},
    "concessional_cap_yearly": {"type": "number", "required": False, "min": 0},
    "preservation_age": {"type": "integer", "required": False, "min": 0},
    "withdrawal_rate": {"type": "number", "required": False, "min": 0, "max": 1},
    "super_earnings_tax": {"type": "number", "required": False, "min": 0, "max": 1},
    "financial_year_start_month": {"type": "integer", "required": False, "min": 1, "max": 12},
    "super_option_returns": {"type": "dict", "required": False},
    "default_property_costs": {"type": "dict", "required": False},
    "stress_test_buffers": {"type": "list", "required": False, "schema": {"type": "number"}},
    "tax_brackets": {
        "type": "list",
        "required": False,
        "schema": {
            "type": "dict",
            "schema": {
                "threshold": {"type": "number", "required": True},
                "rate": {"type": "number", "required": True},
                "base_amount": {"type": "number", "required": False},
            },
        },
    },
    "medicare_levy_rate": {"type": "number", "required": False},
}

PLANNER_INPUT_SCHEMA = {
    "name": {"type": "string", "required": False},
    "description": {"type": "string", "required": False},
    "goal": {"type": "dict", "required": True},
    "income_expense": {"type": "dict", "required": True},
    "super": {"type": "dict", "required": False},
    "property": {"type": "dict", "required": False, "nullable": True},
    "portfolio": {"type": "dict", "required": False},
    "buffers": {"type": "dict", "required": False},
    "start_month": {"type": "integer", "required": False, "min": 1, "max": 12},
    "assumption_overrides": {"type": "dict", "required": False, "nullable": True},
}


def load_yaml_config(config_path: Union[Path, str]) -> Dict[str, Any]:
    """
    Loads configuration data from a YAML file.

    Args:
        config_path: Path pointing to the YAML configuration file.

    Returns:
        A dictionary containing the loaded configuration.

    Raises:
        ConfigLoadError: If the file cannot be found or parsed, or is not a mapping.
    """
    if not isinstance(config_path, Path):
        config_path = Path(config_path)

    logger.info(f"Attempting to load configuration from: {config_path}")

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise ConfigLoadError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.exception(f"Error parsing YAML configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Error parsing YAML file {config_path}") from e

    if config_data is None:
        config_data = {}
    if not isinstance(config_data, dict):
        logger.error(f"Configuration file {config_path} did not parse into a dictionary.")
        raise ConfigLoadError(
            f"Invalid configuration format in {config_path}: Expected a dictionary."
        )

    logger.info(f"Successfully loaded configuration from {config_path}")
    return config_data


def _check_schema(data: Dict[str, Any], schema: Dict[str, Any], source: str) -> None:
    v = Validator(schema)
    if not v.validate(data):
        raise ConfigLoadError(f"Config validation failed for {source}: {v.errors}")


def settings_from_dict(data: Optional[Dict[str, Any]], source: str = "<dict>") -> Settings:
    """Validate a settings mapping and layer it over the built-in defaults."""
    data = data or {}
    _check_schema(data, SETTINGS_SCHEMA, source)
    try:
        return merge_settings(data)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid settings in {source}: {e}") from e


def load_settings(config_path: Optional[Union[Path, str]] = None) -> Settings:
    """
    Load Settings from a YAML file. Keys not present in the file keep their
    defaults; assumption presets are merged per preset.
    With no path, returns the built-in defaults.
    """
    if config_path is None:
        logger.info("No settings file given; using built-in defaults")
        return Settings()
    data = load_yaml_config(config_path)
    return settings_from_dict(data, source=str(config_path))


def planner_input_from_dict(data: Dict[str, Any], source: str = "<dict>") -> PlannerInput:
    """Validate a scenario mapping into a PlannerInput."""
    _check_schema(data, PLANNER_INPUT_SCHEMA, source)
    try:
        return PlannerInput(**data)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid planner input in {source}: {e}") from e


def load_planner_input(config_path: Union[Path, str]) -> PlannerInput:
    """
    Load a scenario YAML file (resolving any ``extends:`` chain) into a PlannerInput.

    Raises:
        ConfigLoadError: If the file is missing, malformed or fails validation.
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ConfigLoadError(f"Scenario file not found: {config_path}")
    try:
        data = load_scenario_file(str(config_path))
    except (FileNotFoundError, ValueError) as e:
        raise ConfigLoadError(f"Could not resolve scenario {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Error parsing YAML file {config_path}") from e
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Invalid scenario format in {config_path}: Expected a dictionary.")
    return planner_input_from_dict(data, source=str(config_path))


def load_scenario_directory(dir_path: Union[Path, str]) -> Dict[str, PlannerInput]:
    """Load every scenario YAML in a directory, resolving ``extends:`` between them."""
    dir_path = Path(dir_path)
    if not dir_path.is_dir():
        raise ConfigLoadError(f"Scenario directory not found: {dir_path}")
    try:
        raw = load_scenario_file(str(dir_path))
    except (FileNotFoundError, ValueError) as e:
        raise ConfigLoadError(f"Could not resolve scenarios in {dir_path}: {e}") from e
    return {
        name: planner_input_from_dict(cfg, source=f"{dir_path}/{name}")
        for name, cfg in raw.items()
    }


# Expose for import
__all__ = [
    "load_yaml_config",
    "load_settings",
    "settings_from_dict",
    "load_planner_input",
    "planner_input_from_dict",
    "load_scenario_directory",
    "ConfigLoadError",
]
