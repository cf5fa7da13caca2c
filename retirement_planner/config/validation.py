# retirement_planner/config/validation.py
"""
Cross-field invariant checks on a PlannerInput.

Every check raises a specific ConfigurationError subclass before any projection
work begins. Nothing is coerced.
"""

import logging
from typing import Dict

import numpy as np

from retirement_planner.config.models import PlannerInput, Settings
from retirement_planner.exceptions import (
    AllocationWeightsError,
    InvalidBufferConfigError,
    InvalidGoalError,
    InvalidInputError,
)

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 0.001


def check_weights(weights: Dict[str, float]) -> None:
    """Raise AllocationWeightsError unless the sleeve weights sum to 1 within tolerance."""
    if not weights:
        raise AllocationWeightsError(
            "A two-fund allocation needs explicit weights",
            field="portfolio.weights",
            constraint="required for TwoETF",
        )
    negative = [k for k, w in weights.items() if w < 0 or w > 1]
    if negative:
        raise AllocationWeightsError(
            f"Allocation weights must lie in [0, 1], got {weights}",
            field="portfolio.weights",
            constraint="0 <= weight <= 1",
        )
    total = float(sum(weights.values()))
    if not np.isclose(total, 1.0, rtol=0.0, atol=WEIGHT_TOLERANCE):
        raise AllocationWeightsError(
            f"Allocation weights must sum to 1.0, got {total:.4f}",
            field="portfolio.weights",
            constraint=f"sum == 1 +/- {WEIGHT_TOLERANCE}",
        )


def validate_inputs(planner_input: PlannerInput, settings: Settings) -> None:
    """
    Validate the invariants a projection relies on.

    Args:
        planner_input: The structurally valid input snapshot.
        settings: Settings for the run (used for the effective concessional cap).

    Raises:
        InvalidGoalError: both or neither goal targets set.
        InvalidInputError: retire age before current age, loan above property value.
        AllocationWeightsError: two-fund weights missing or not summing to one.
        InvalidBufferConfigError: recovery target below the trigger level.
    """
    goal = planner_input.goal
    has_income = goal.target_income_yearly is not None
    has_capital = goal.target_capital is not None
    if has_income == has_capital:
        raise InvalidGoalError(
            "Set exactly one of target_income_yearly or target_capital",
            field="goal.target_income_yearly",
            constraint="exactly one of target_income_yearly / target_capital",
        )

    if goal.retire_age < goal.current_age:
        raise InvalidInputError(
            f"Retirement age {goal.retire_age} is before current age {goal.current_age}",
            field="goal.retire_age",
            constraint="retire_age >= current_age",
        )

    portfolio = planner_input.portfolio
    if portfolio.allocation_preset == "TwoETF" or portfolio.weights:
        check_weights(portfolio.weights or {})

    prop = planner_input.property
    if prop is not None and prop.loan_balance > prop.value:
        raise InvalidInputError(
            f"Loan balance {prop.loan_balance:,.0f} exceeds property value {prop.value:,.0f}",
            field="property.loan_balance",
            constraint="loan_balance <= value",
        )

    buffers = planner_input.buffers
    if buffers.recovery_months < buffers.trigger_months:
        raise InvalidBufferConfigError(
            f"Buffer recovery target ({buffers.recovery_months} months) is below the "
            f"trigger level ({buffers.trigger_months} months)",
            field="buffers.recovery_months",
            constraint="recovery_months >= trigger_months",
        )

    cap = planner_input.super_.concessional_cap_yearly or settings.concessional_cap_yearly
    logger.debug(
        f"Input validated: ages {goal.current_age}->{goal.retire_age}, "
        f"goal={goal.target}, concessional cap={cap:,.0f}"
    )
