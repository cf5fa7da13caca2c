# retirement_planner/reporting/metrics.py
"""
Functions to calculate retirement KPIs and soft warnings from a projected
monthly series.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from retirement_planner.config.models import CapitalGoal, IncomeGoal, PlannerInput, Settings
from retirement_planner.projections.loan import stress_test_cashflows
from retirement_planner.state.models import KPIs, MonthlyDataPoint, ProjectionState, RateSet

logger = logging.getLogger(__name__)

RATE_EPSILON = 1e-12


def required_monthly_saving(shortfall: float, annual_rate: float, months: int) -> float:
    """
    Level monthly saving that grows to `shortfall` after `months` at `annual_rate`.

    Uses the future-value-of-annuity inversion; linear when the rate is ~0.
    With no months left the whole shortfall is due now.
    """
    if shortfall <= 0:
        return 0.0
    if months <= 0:
        return shortfall
    r = annual_rate / 12
    if abs(r) < RATE_EPSILON:
        return shortfall / months
    return shortfall * r / ((1 + r) ** months - 1)


def bridge_analysis(
    outside_super_balance: float,
    annual_need: float,
    preservation_age: int,
    retire_age: int,
) -> Tuple[float, float, float]:
    """
    Years between retirement and super preservation age, and how many of them
    the outside-super balance can fund.

    Returns:
        Tuple of (years required, years covered, coverage ratio). The ratio is
        1.0 when no bridge is required.
    """
    required = float(max(0, preservation_age - retire_age))
    covered = outside_super_balance / annual_need if annual_need > 0 else 0.0
    covered = max(0.0, covered)
    ratio = 1.0 if required == 0 else covered / required
    return required, covered, ratio


def _loan_paid_off_age(points: Sequence[MonthlyDataPoint], opening_loan: float) -> Optional[float]:
    if opening_loan <= 0:
        return None
    for point in points:
        if point.loan_balance <= 0:
            return point.age
    return None


def compute_kpis(
    planner_input: PlannerInput,
    settings: Settings,
    rates: RateSet,
    monthly_data: Sequence[MonthlyDataPoint],
    final_state: ProjectionState,
) -> KPIs:
    """
    Aggregate the KPIs for a finished run.

    Args:
        planner_input: The validated input that was projected.
        settings: Settings used for the run (withdrawal rate, preservation age).
        rates: The run's resolved rates (portfolio net rate for savings required).
        monthly_data: All projected points; the last one is the retirement point.
        final_state: ProjectionState after the last period, for cumulative totals.
    """
    final = monthly_data[-1]
    goal = planner_input.goal
    wr = settings.withdrawal_rate

    net_worth = final.net_worth
    income_yearly = net_worth * wr

    bucket_values = {
        "super": final.super_balance,
        "outside_super": final.outside_super_balance,
        "cash": final.cash_balance,
        "property_equity": final.property_equity,
    }
    shares = {
        name: (value / net_worth * 100 if net_worth > 0 else 0.0)
        for name, value in bucket_values.items()
    }

    target_goal = goal.target
    if isinstance(target_goal, IncomeGoal):
        target = target_goal.yearly
        actual = income_yearly
        annual_need = target_goal.yearly
    elif isinstance(target_goal, CapitalGoal):
        target = target_goal.amount
        actual = net_worth
        annual_need = target_goal.amount * wr
    else:
        raise TypeError(f"Unsupported goal type: {type(target_goal).__name__}")

    gap = max(0.0, target - actual)
    income_gap = gap if isinstance(target_goal, IncomeGoal) else gap * wr
    capital_shortfall = income_gap / wr

    bridge_required, bridge_covered, bridge_ratio = bridge_analysis(
        final.outside_super_balance, annual_need, settings.preservation_age, goal.retire_age
    )

    months = 12 * max(0, goal.years_to_retirement)
    annual_expenses = planner_input.income_expense.expenses_monthly * 12
    projected = [p for p in monthly_data if p.month > 0]

    stress = {}
    prop = planner_input.property
    if prop is not None:
        stress = stress_test_cashflows(
            prop.with_cost_defaults(settings.default_property_costs), settings.stress_test_buffers
        )

    kpis = KPIs(
        net_worth_at_retirement=net_worth,
        super_balance_at_retirement=final.super_balance,
        outside_super_balance_at_retirement=final.outside_super_balance,
        cash_balance_at_retirement=final.cash_balance,
        property_equity_at_retirement=final.property_equity,
        bucket_shares=shares,
        projected_income_yearly=income_yearly,
        projected_income_monthly=income_yearly / 12,
        bridge_years_required=bridge_required,
        bridge_years_covered=bridge_covered,
        bridge_coverage_ratio=bridge_ratio,
        target=target,
        actual=actual,
        gap=gap,
        monthly_gap_to_close_target=income_gap / 12,
        capital_shortfall=capital_shortfall,
        monthly_savings_required=required_monthly_saving(capital_shortfall, rates.etf_net_return, months),
        can_retire=actual >= target,
        income_replacement_ratio=income_yearly / annual_expenses if annual_expenses > 0 else 0.0,
        final_lvr=final.lvr,
        loan_paid_off_age=_loan_paid_off_age(projected, prop.loan_balance if prop else 0.0),
        total_tax_saved=final_state.tax_saved,
        average_cap_utilization=(
            sum(p.cap_utilization for p in projected) / len(projected) if projected else 0.0
        ),
        months_dca_paused=sum(1 for p in projected if p.dca_paused),
        total_contributions=dict(final_state.contributions),
        total_fees=dict(final_state.fees),
        property_stress_cashflow=stress,
    )
    logger.info(
        f"KPIs: net worth {net_worth:,.0f}, income {income_yearly:,.0f}/yr, "
        f"gap {gap:,.0f}, bridge {bridge_covered:.1f}/{bridge_required:.0f} years"
    )
    return kpis


def collect_warnings(monthly_data: Sequence[MonthlyDataPoint]) -> List[str]:
    """Human-readable soft warnings. Never raises."""
    projected = [p for p in monthly_data if p.month > 0]
    warnings: List[str] = []

    clamped = sum(1 for p in projected if p.cap_warning)
    if clamped:
        warnings.append(
            f"Concessional contributions reached the cap in {clamped} month(s); salary sacrifice was limited"
        )

    paused = sum(1 for p in projected if p.dca_paused)
    if paused:
        warnings.append(f"Investing was paused for {paused} month(s) to rebuild the cash buffer")

    below = sum(1 for p in projected if p.buffers_below_target)
    if below:
        warnings.append(f"Cash buffer was below its recovery target in {below} month(s)")

    final = monthly_data[-1]
    negative = [
        name
        for name, value in (
            ("super", final.super_balance),
            ("outside_super", final.outside_super_balance),
            ("cash", final.cash_balance),
        )
        if value < 0
    ]
    if negative:
        warnings.append(f"Negative balance at retirement in: {', '.join(negative)}")

    for w in warnings:
        logger.info(f"Projection warning: {w}")
    return warnings
