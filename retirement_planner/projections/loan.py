"""
Loan repayment and investment-property cash-flow helpers.
"""

import logging
from typing import Dict, List, Optional

from retirement_planner.config.models import PropertyInputs

logger = logging.getLogger(__name__)

RATE_EPSILON = 1e-12
WEEKS_PER_MONTH = 52 / 12


def amortization_payment(principal: float, annual_rate: float, term_months: int) -> float:
    """
    Level monthly payment that repays `principal` over `term_months`.

    Falls back to straight-line principal repayment when the rate is zero.
    """
    if principal <= 0 or term_months <= 0:
        return 0.0
    r = annual_rate / 12
    if abs(r) < RATE_EPSILON:
        return principal / term_months
    growth = (1 + r) ** term_months
    return principal * r * growth / (growth - 1)


def interest_only_payment(loan_balance: float, annual_rate: float, offset_balance: float = 0.0) -> float:
    return max(0.0, loan_balance - offset_balance) * annual_rate / 12


def scheduled_repayment(prop: PropertyInputs, annual_rate: Optional[float] = None) -> float:
    """Opening scheduled monthly repayment for the configured loan type."""
    rate = prop.rate_pct if annual_rate is None else annual_rate
    if prop.loan_type == "IO":
        return interest_only_payment(prop.loan_balance, rate, prop.offset_balance)
    return amortization_payment(prop.loan_balance, rate, prop.term_months)


def monthly_rent(weekly_rent: float, vacancy_pct: float) -> float:
    return weekly_rent * WEEKS_PER_MONTH * (1 - vacancy_pct)


def monthly_holding_costs(rent: float, prop: PropertyInputs) -> float:
    """Management, insurance, council rates and maintenance for one month.

    Expects cost fields already filled by ``PropertyInputs.with_cost_defaults``.
    """
    return (
        prop.mgmt_fee_pct * rent
        + prop.insurance_yearly / 12
        + prop.council_rates_yearly / 12
        + prop.maintenance_pct_of_rent * rent
    )


def opening_net_cashflow(prop: PropertyInputs, rate_buffer: float = 0.0) -> float:
    """Net monthly cash flow in the first period at `rate_pct + rate_buffer`."""
    rent = monthly_rent(prop.rent_per_week or 0.0, prop.vacancy_pct)
    repayment = scheduled_repayment(prop, prop.rate_pct + rate_buffer)
    return rent - monthly_holding_costs(rent, prop) - repayment


def stress_test_cashflows(prop: PropertyInputs, buffers: List[float]) -> Dict[str, float]:
    """
    Opening net cash flow at the base rate and at each interest-rate buffer.

    Keys are ``"base"`` and ``"+2.0%"`` style labels.
    """
    results = {"base": opening_net_cashflow(prop)}
    for buffer in buffers:
        results[f"+{buffer * 100:.1f}%"] = opening_net_cashflow(prop, buffer)
    logger.debug(f"Property stress cash flows: {results}")
    return results
