"""
Value objects produced and consumed by a projection run.

RateSet, MonthlyDataPoint, KPIs and ScenarioResult are frozen once built.
ProjectionState is the only mutable record and never leaves the run that
created it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Tuple

if TYPE_CHECKING:
    import pandas as pd

    from retirement_planner.config.models import PlannerInput


class BufferMode(Enum):
    """Mode of the buffer policy state machine."""

    INVESTING = "investing"
    PAUSED = "paused"


BUCKETS = ("super", "portfolio", "cash", "property")


@dataclass(frozen=True)
class RateSet:
    """Annual rates resolved once per run from the preset plus bucket overrides."""

    super_return: float
    super_fee: float
    super_tax: float
    etf_return: float
    etf_fee: float
    property_growth: float
    rental_growth: float
    inflation: float
    wage_growth: float
    etf_tax_drag: float = 0.0
    buffer_rate: float = 0.0

    @property
    def super_net_return(self) -> float:
        return self.super_return * (1 - self.super_tax) - self.super_fee

    @property
    def etf_net_return(self) -> float:
        return self.etf_return - self.etf_fee - self.etf_tax_drag


@dataclass
class ProjectionState:
    """Running balances and policy state for a single run."""

    super_balance: float
    portfolio_balance: float
    cash_balance: float
    property_value: float
    loan_balance: float
    weekly_rent: float
    scheduled_repayment: float
    salary: float
    bonus: float
    expenses_monthly: float
    admin_fee_yearly: float
    mode: BufferMode = BufferMode.INVESTING
    fy_concessional: float = 0.0
    tax_saved: float = 0.0
    contributions: Dict[str, float] = field(default_factory=lambda: {b: 0.0 for b in BUCKETS})
    fees: Dict[str, float] = field(default_factory=lambda: {b: 0.0 for b in BUCKETS})

    @property
    def property_equity(self) -> float:
        return self.property_value - self.loan_balance

    @property
    def net_worth(self) -> float:
        return self.super_balance + self.portfolio_balance + self.cash_balance + self.property_equity


@dataclass(frozen=True)
class MonthlyDataPoint:
    month: int
    age: float
    calendar_month: int
    super_balance: float
    outside_super_balance: float
    cash_balance: float
    property_value: float
    loan_balance: float
    property_equity: float
    lvr: float
    property_net_cashflow: float
    net_worth: float
    gross_income: float
    super_contribution: float
    salary_sacrifice: float
    portfolio_contribution: float
    property_repayment: float
    property_extra_repayment: float
    buffer_contribution: float
    buffer_coverage: float
    tax_saved: float
    cap_utilization: float
    dca_paused: bool
    cap_warning: bool
    buffers_below_target: bool


@dataclass(frozen=True)
class KPIs:
    net_worth_at_retirement: float
    super_balance_at_retirement: float
    outside_super_balance_at_retirement: float
    cash_balance_at_retirement: float
    property_equity_at_retirement: float
    bucket_shares: Dict[str, float]
    projected_income_yearly: float
    projected_income_monthly: float
    bridge_years_required: float
    bridge_years_covered: float
    bridge_coverage_ratio: float
    target: float
    actual: float
    gap: float
    monthly_gap_to_close_target: float
    capital_shortfall: float
    monthly_savings_required: float
    can_retire: bool
    income_replacement_ratio: float
    final_lvr: float
    loan_paid_off_age: Optional[float]
    total_tax_saved: float
    average_cap_utilization: float
    months_dca_paused: int
    total_contributions: Dict[str, float]
    total_fees: Dict[str, float]
    property_stress_cashflow: Dict[str, float]


@dataclass(frozen=True)
class RunMetadata:
    duration_ms: float
    data_points: int
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScenarioResult:
    input: "PlannerInput"
    kpis: KPIs
    monthly_data: Tuple[MonthlyDataPoint, ...]
    metadata: RunMetadata

    @property
    def warnings(self) -> Tuple[str, ...]:
        return self.metadata.warnings

    @property
    def final_point(self) -> MonthlyDataPoint:
        return self.monthly_data[-1]

    def to_frame(self, detailed: bool = False) -> "pd.DataFrame":
        """Monthly series as a DataFrame in the CSV export shape."""
        from retirement_planner.reporting.export import monthly_frame

        return monthly_frame(self, detailed=detailed)
