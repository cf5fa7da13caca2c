# retirement_planner/projections/projector.py
"""
Month-by-month balance projector for super, the ETF portfolio, an investment
property and the cash buffer.

Each period runs in a fixed order:
  1. Financial-year rollover (indexation, concessional total reset)
  2. Contributions (cap-clamped super, buffer-gated DCA and extra repayments)
  3. Growth, fees and property costs per bucket
  4. Buffer policy transition for the next period

## QuickStart

```python
from retirement_planner.config.accessors import resolve_rates
from retirement_planner.config.models import Settings
from retirement_planner.projections.projector import BalanceProjector

settings = Settings()
rates = resolve_rates(planner_input, settings)
points, final_state = BalanceProjector(planner_input, settings, rates).run()
```
"""

import logging
from typing import List, Optional, Tuple

from retirement_planner.config.models import PlannerInput, PropertyInputs, Settings
from retirement_planner.logging_config import PROJECTION_LOGGER
from retirement_planner.projections.loan import (
    monthly_holding_costs,
    monthly_rent,
    scheduled_repayment,
)
from retirement_planner.rules.buffer_policy import BufferPolicy
from retirement_planner.rules.contributions import (
    DiscretionaryContribution,
    SuperContribution,
    calendar_month_for_period,
    discretionary_contributions,
    months_remaining_in_fy,
    super_contribution,
)
from retirement_planner.rules.tax import estimate_tax_saving
from retirement_planner.state.models import (
    BufferMode,
    MonthlyDataPoint,
    ProjectionState,
    RateSet,
)

logger = logging.getLogger(__name__)
projection_logger = logging.getLogger(PROJECTION_LOGGER)


class BalanceProjector:
    """
    Projects one PlannerInput forward using a resolved RateSet.

    The projector holds no state between runs: every call to ``run`` builds a
    fresh ProjectionState, so one instance can be run repeatedly.
    """

    def __init__(self, planner_input: PlannerInput, settings: Settings, rates: RateSet):
        self.planner_input = planner_input
        self.settings = settings
        self.rates = rates
        self.policy = BufferPolicy(
            trigger_months=planner_input.buffers.trigger_months,
            recovery_months=planner_input.buffers.recovery_months,
        )
        self.property: Optional[PropertyInputs] = None
        if planner_input.property is not None:
            self.property = planner_input.property.with_cost_defaults(settings.default_property_costs)
        self.concessional_cap = (
            planner_input.super_.concessional_cap_yearly or settings.concessional_cap_yearly
        )
        self.fy_start_month = settings.financial_year_start_month

    @property
    def horizon_months(self) -> int:
        return 12 * max(0, self.planner_input.goal.years_to_retirement)

    def initial_state(self) -> ProjectionState:
        inp = self.planner_input
        prop = self.property
        state = ProjectionState(
            super_balance=inp.super_.balance,
            portfolio_balance=inp.portfolio.starting_balance,
            cash_balance=inp.buffers.balance,
            property_value=prop.value if prop else 0.0,
            loan_balance=prop.loan_balance if prop else 0.0,
            weekly_rent=(prop.rent_per_week or 0.0) if prop else 0.0,
            scheduled_repayment=scheduled_repayment(prop) if prop else 0.0,
            salary=inp.income_expense.salary,
            bonus=inp.income_expense.bonus,
            expenses_monthly=inp.income_expense.expenses_monthly,
            admin_fee_yearly=inp.super_.admin_fee_yearly,
        )
        state.mode = self.policy.initial_mode(self._coverage(state))
        return state

    def _coverage(self, state: ProjectionState) -> float:
        return BufferPolicy.coverage(state.cash_balance, state.expenses_monthly)

    def _roll_financial_year(self, state: ProjectionState, period: int) -> None:
        r = self.rates
        state.salary *= 1 + r.wage_growth
        state.bonus *= 1 + r.wage_growth
        state.expenses_monthly *= 1 + r.inflation
        state.admin_fee_yearly *= 1 + r.inflation
        state.weekly_rent *= 1 + r.rental_growth
        state.fy_concessional = 0.0
        logger.debug(
            f"FY rollover at period {period}: salary={state.salary:,.2f}, "
            f"expenses={state.expenses_monthly:,.2f}/mo, rent={state.weekly_rent:,.2f}/wk"
        )

    def _step_super(self, state: ProjectionState, contribution: SuperContribution) -> None:
        r = self.rates
        opening = state.super_balance
        admin = state.admin_fee_yearly / 12
        state.super_balance = opening * (1 + r.super_net_return / 12) + contribution.net - admin
        state.contributions["super"] += contribution.net
        state.fees["super"] += opening * r.super_fee / 12 + admin

    def _step_portfolio(self, state: ProjectionState, dca: float) -> None:
        r = self.rates
        opening = state.portfolio_balance
        state.portfolio_balance = opening * (1 + r.etf_net_return / 12) + dca
        state.contributions["portfolio"] += dca
        state.fees["portfolio"] += opening * r.etf_fee / 12

    def _step_property(self, state: ProjectionState, extra: float) -> Tuple[float, float, float]:
        """Returns (net cash flow, scheduled repayment paid, extra repayment applied)."""
        prop = self.property
        if prop is None:
            return 0.0, 0.0, 0.0

        state.property_value *= 1 + self.rates.property_growth / 12
        rent = monthly_rent(state.weekly_rent, prop.vacancy_pct)
        costs = monthly_holding_costs(rent, prop)

        repayment = 0.0
        applied_extra = 0.0
        if state.loan_balance > 0:
            interest = max(0.0, state.loan_balance - prop.offset_balance) * prop.rate_pct / 12
            if prop.loan_type == "IO":
                repayment = interest
            else:
                repayment = min(state.scheduled_repayment, state.loan_balance + interest)
            state.loan_balance = state.loan_balance + interest - repayment
            applied_extra = min(extra, max(0.0, state.loan_balance))
            state.loan_balance = max(0.0, state.loan_balance - applied_extra)

        state.contributions["property"] += applied_extra
        state.fees["property"] += costs
        return rent - costs - repayment, repayment, applied_extra

    def _step_buffer(self, state: ProjectionState, redirected: float, property_cashflow: float) -> float:
        buffers = self.planner_input.buffers
        inflow = buffers.monthly_top_up + redirected
        state.cash_balance = state.cash_balance * (1 + self.rates.buffer_rate / 12) + inflow
        if buffers.absorb_property_cashflow:
            state.cash_balance += property_cashflow
        state.contributions["cash"] += inflow
        return inflow

    def step(self, state: ProjectionState, period: int) -> MonthlyDataPoint:
        """Advance `state` by one month and return the period's data point."""
        inp = self.planner_input
        calendar_month = calendar_month_for_period(inp.start_month, period)
        if period > 1 and calendar_month == self.fy_start_month:
            self._roll_financial_year(state, period)

        sup = super_contribution(
            monthly_salary=state.salary / 12,
            sg_rate=inp.super_.sg_rate,
            requested_sacrifice=inp.super_.salary_sacrifice_monthly,
            concessional_cap=self.concessional_cap,
            fy_concessional_to_date=state.fy_concessional,
            months_remaining=months_remaining_in_fy(calendar_month, self.fy_start_month),
            contributions_tax_rate=inp.super_.contributions_tax_pct,
        )
        state.fy_concessional = sup.fy_total

        tax_saved = estimate_tax_saving(
            sup.salary_sacrifice,
            state.salary + state.bonus,
            self.settings,
            inp.super_.contributions_tax_pct,
        )
        state.tax_saved += tax_saved

        extra_available = self.property.extra_repayment_monthly if self.property is not None else 0.0
        gated: DiscretionaryContribution = discretionary_contributions(
            inp.portfolio.dca_monthly, extra_available, state.mode, inp.buffers.pause_scope
        )

        self._step_super(state, sup)
        self._step_portfolio(state, gated.portfolio)
        cashflow, repayment, applied_extra = self._step_property(state, gated.property_extra)
        # Extra repayment the loan could not absorb is saved to the buffer
        leftover = gated.property_extra - applied_extra
        buffer_inflow = self._step_buffer(state, gated.redirected_to_buffer + leftover, cashflow)

        coverage = self._coverage(state)
        next_mode = self.policy.next_mode(state.mode, coverage)
        if next_mode is not state.mode:
            logger.debug(
                f"Buffer policy {state.mode.value} -> {next_mode.value} after period {period} "
                f"(coverage {coverage:.2f} months)"
            )
        state.mode = next_mode

        return self._data_point(
            state,
            month=period,
            calendar_month=calendar_month,
            gross_income=(state.salary + state.bonus) / 12,
            super_contribution=sup.gross,
            salary_sacrifice=sup.salary_sacrifice,
            portfolio_contribution=gated.portfolio,
            property_repayment=repayment,
            property_extra_repayment=applied_extra,
            property_net_cashflow=cashflow,
            buffer_contribution=buffer_inflow,
            coverage=coverage,
            tax_saved=tax_saved,
            cap_utilization=sup.cap_utilization,
            dca_paused=gated.paused,
            cap_warning=sup.cap_warning,
        )

    def _data_point(self, state: ProjectionState, month: int, calendar_month: int, coverage: float, **flows) -> MonthlyDataPoint:
        value = state.property_value
        return MonthlyDataPoint(
            month=month,
            age=self.planner_input.goal.current_age + month / 12,
            calendar_month=calendar_month,
            super_balance=state.super_balance,
            outside_super_balance=state.portfolio_balance,
            cash_balance=state.cash_balance,
            property_value=value,
            loan_balance=state.loan_balance,
            property_equity=state.property_equity,
            lvr=state.loan_balance / value if value > 0 else 0.0,
            net_worth=state.net_worth,
            buffer_coverage=coverage,
            buffers_below_target=self.policy.below_target(coverage),
            **flows,
        )

    def snapshot(self, state: ProjectionState) -> MonthlyDataPoint:
        """The month-0 point: input balances with no growth or flows applied."""
        return self._data_point(
            state,
            month=0,
            calendar_month=self.planner_input.start_month,
            coverage=self._coverage(state),
            gross_income=(state.salary + state.bonus) / 12,
            super_contribution=0.0,
            salary_sacrifice=0.0,
            portfolio_contribution=0.0,
            property_repayment=0.0,
            property_extra_repayment=0.0,
            property_net_cashflow=0.0,
            buffer_contribution=0.0,
            tax_saved=0.0,
            cap_utilization=0.0,
            dca_paused=state.mode is BufferMode.PAUSED,
            cap_warning=False,
        )

    def run(self) -> Tuple[Tuple[MonthlyDataPoint, ...], ProjectionState]:
        """
        Project every month up to retirement.

        Returns:
            The monthly data points (a single month-0 snapshot when the horizon
            is zero) and the final ProjectionState with cumulative totals.
        """
        state = self.initial_state()
        n_months = self.horizon_months
        projection_logger.info(
            f"Projecting {n_months} months from age {self.planner_input.goal.current_age} "
            f"to {self.planner_input.goal.retire_age}"
        )
        if n_months == 0:
            logger.info("Zero horizon: returning the opening balances only")
            return (self.snapshot(state),), state

        points: List[MonthlyDataPoint] = []
        for period in range(1, n_months + 1):
            points.append(self.step(state, period))
        return tuple(points), state
