"""
retirement_planner/rules/contributions.py

Calculates the per-period contribution flowing into each bucket:
  1. Super guarantee + salary sacrifice, clamped to the concessional cap
  2. Portfolio DCA and extra property repayments, gated by the buffer policy
"""

import logging
from dataclasses import dataclass

from retirement_planner.state.models import BufferMode

logger = logging.getLogger(__name__)

EPSILON = 1e-9


@dataclass(frozen=True)
class SuperContribution:
    employer: float
    salary_sacrifice: float
    requested_sacrifice: float
    contributions_tax: float
    cap_warning: bool
    fy_total: float
    cap_utilization: float

    @property
    def gross(self) -> float:
        return self.employer + self.salary_sacrifice

    @property
    def net(self) -> float:
        """Amount credited to the fund after contributions tax."""
        return self.gross - self.contributions_tax


@dataclass(frozen=True)
class DiscretionaryContribution:
    portfolio: float
    property_extra: float
    redirected_to_buffer: float
    paused: bool


def calendar_month_for_period(start_month: int, period: int) -> int:
    """Calendar month (1..12) of projection period `period` (1-based)."""
    return ((start_month - 1 + period - 1) % 12) + 1


def months_remaining_in_fy(calendar_month: int, fy_start_month: int = 7) -> int:
    """Months left in the financial year, counting `calendar_month` itself (1..12)."""
    return ((fy_start_month - calendar_month - 1) % 12) + 1


def super_contribution(
    monthly_salary: float,
    sg_rate: float,
    requested_sacrifice: float,
    concessional_cap: float,
    fy_concessional_to_date: float,
    months_remaining: int,
    contributions_tax_rate: float,
) -> SuperContribution:
    """
    Employer guarantee plus salary sacrifice for one month.

    Salary sacrifice is limited so that the financial year's concessional total
    (contributions to date, this month, and the employer contributions still
    due before year end) stays within the cap. The remaining headroom is spread
    evenly over the months left. Clamping is a soft flag, never an error.

    Args:
        monthly_salary: Salary for this month (annual / 12).
        sg_rate: Employer super guarantee rate.
        requested_sacrifice: Configured monthly salary sacrifice.
        concessional_cap: Annual concessional contributions cap.
        fy_concessional_to_date: Concessional contributions already made this FY.
        months_remaining: Months left in the FY including this one.
        contributions_tax_rate: Tax levied on concessional contributions.

    Returns:
        SuperContribution with the realised amounts and cap flags.
    """
    months_remaining = max(1, months_remaining)
    employer = monthly_salary * sg_rate
    employer_still_due = employer * months_remaining
    headroom = concessional_cap - fy_concessional_to_date - employer_still_due
    allowance = max(0.0, headroom) / months_remaining

    sacrifice = min(requested_sacrifice, allowance)
    clamped = requested_sacrifice - sacrifice > EPSILON
    fy_total = fy_concessional_to_date + employer + sacrifice
    over_cap = fy_total - concessional_cap > EPSILON

    if clamped:
        logger.debug(
            f"Salary sacrifice clamped from {requested_sacrifice:,.2f} to {sacrifice:,.2f} "
            f"(headroom {headroom:,.2f} over {months_remaining} months)"
        )
    if over_cap:
        logger.debug(
            f"Employer contributions alone take the FY total to {fy_total:,.2f}, above the cap {concessional_cap:,.2f}"
        )

    gross = employer + sacrifice
    return SuperContribution(
        employer=employer,
        salary_sacrifice=sacrifice,
        requested_sacrifice=requested_sacrifice,
        contributions_tax=gross * contributions_tax_rate,
        cap_warning=clamped or over_cap,
        fy_total=fy_total,
        cap_utilization=fy_total / concessional_cap if concessional_cap > 0 else 0.0,
    )


def discretionary_contributions(
    dca_monthly: float,
    extra_repayment: float,
    mode: BufferMode,
    pause_scope: str = "portfolio_and_property",
) -> DiscretionaryContribution:
    """
    Gate the discretionary contributions on the buffer policy mode.

    While paused, DCA (and the extra property repayment unless the scope is
    ``portfolio_only``) is not invested; the same dollars go to the buffer.
    """
    if mode is not BufferMode.PAUSED:
        return DiscretionaryContribution(
            portfolio=dca_monthly, property_extra=extra_repayment,
            redirected_to_buffer=0.0, paused=False,
        )

    if pause_scope == "portfolio_only":
        return DiscretionaryContribution(
            portfolio=0.0, property_extra=extra_repayment,
            redirected_to_buffer=dca_monthly, paused=True,
        )
    return DiscretionaryContribution(
        portfolio=0.0, property_extra=0.0,
        redirected_to_buffer=dca_monthly + extra_repayment, paused=True,
    )
