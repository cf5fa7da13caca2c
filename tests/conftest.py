import copy

import pytest

from retirement_planner.config.models import PlannerInput, Settings


# Define pytest markers for test categories
def pytest_configure(config):
    """
    Register custom markers to avoid pytest warnings.
    """
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "integration: mark a test as an integration test")
    config.addinivalue_line("markers", "config: mark a test as a config test")
    config.addinivalue_line("markers", "rules: mark a test as a rules test")
    config.addinivalue_line("markers", "projections: mark a test as a projections test")
    config.addinivalue_line("markers", "reporting: mark a test as a reporting test")


BASE_INPUT = {
    "goal": {
        "current_age": 30,
        "retire_age": 65,
        "target_income_yearly": 80000,
        "assumption_preset": "Base",
    },
    "income_expense": {"salary": 120000, "expenses_monthly": 4000},
    "super": {"balance": 50000, "sg_rate": 0.115, "salary_sacrifice_monthly": 0},
    "portfolio": {"starting_balance": 10000, "dca_monthly": 1000},
    "buffers": {"balance": 20000, "trigger_months": 3, "recovery_months": 6},
}

PROPERTY = {
    "value": 750000,
    "loan_balance": 600000,
    "rate_pct": 0.06,
    "loan_type": "PI",
    "term_months": 360,
    "rent_per_week": 600,
}


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def base_input_dict():
    """A fresh copy of the 30 -> 65 household used across tests."""
    return copy.deepcopy(BASE_INPUT)


@pytest.fixture
def base_input(base_input_dict):
    return PlannerInput(**base_input_dict)


@pytest.fixture
def property_input_dict(base_input_dict):
    data = copy.deepcopy(base_input_dict)
    data["property"] = copy.deepcopy(PROPERTY)
    return data
