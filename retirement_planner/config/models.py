# retirement_planner/config/models.py
"""
Pydantic models for the planner input snapshot and the process-wide settings
(assumption presets, concessional cap, preservation age).

Field-level checks (types, ranges) live here. Cross-field invariants such as
"exactly one goal target" or "weights sum to one" are enforced by
``retirement_planner.config.validation`` so that each one raises its own
typed error before a projection starts.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

RiskProfile = Literal["conservative", "balanced", "growth"]
SuperOption = Literal["Conservative", "Balanced", "Growth", "HighGrowth"]
LoanType = Literal["IO", "PI"]
AllocationPreset = Literal["OneETF", "TwoETF"]
PauseScope = Literal["portfolio_and_property", "portfolio_only"]


# --- Goal variants ---


@dataclass(frozen=True)
class IncomeGoal:
    """Retire on a yearly income target."""

    yearly: float


@dataclass(frozen=True)
class CapitalGoal:
    """Retire with a lump-sum capital target."""

    amount: float


Goal = Union[IncomeGoal, CapitalGoal]


# --- Settings models ---


class AssumptionPreset(BaseModel):
    """Fixed annual rates for one economic scenario."""

    super_return: float = Field(..., description="Expected gross return inside super")
    etf_return: float = Field(..., description="Expected gross return of the ETF portfolio")
    property_growth: float = Field(0.0, description="Annual capital growth of property")
    rental_growth: float = Field(0.0, description="Annual growth of rent")
    inflation: float = Field(0.0)
    wage_growth: float = Field(0.0)
    etf_tax_drag: float = Field(0.0, ge=0.0, description="Annual tax drag on the portfolio while accumulating")
    fund_returns: Optional[Dict[str, float]] = Field(
        None, description="Per-sleeve returns used to blend a two-fund allocation"
    )


class PropertyCostDefaults(BaseModel):
    mgmt_fee_pct: float = Field(0.07, ge=0.0)
    insurance_yearly: float = Field(500.0, ge=0.0)
    council_rates_yearly: float = Field(1800.0, ge=0.0)
    maintenance_pct_of_rent: float = Field(0.05, ge=0.0)
    vacancy_pct: float = Field(0.02, ge=0.0, le=1.0)


class TaxBracket(BaseModel):
    """One resident income tax bracket: ``base_amount + rate * (income - threshold)``."""

    threshold: float = Field(..., ge=0.0)
    rate: float = Field(..., ge=0.0, le=1.0)
    base_amount: float = Field(0.0, ge=0.0)


def _default_presets() -> Dict[str, AssumptionPreset]:
    return {
        "Conservative": AssumptionPreset(
            super_return=0.06, etf_return=0.065, property_growth=0.04,
            rental_growth=0.025, inflation=0.025, wage_growth=0.025,
            fund_returns={"aus": 0.062, "global": 0.068},
        ),
        "Base": AssumptionPreset(
            super_return=0.07, etf_return=0.075, property_growth=0.05,
            rental_growth=0.03, inflation=0.03, wage_growth=0.03,
            fund_returns={"aus": 0.07, "global": 0.078},
        ),
        "Optimistic": AssumptionPreset(
            super_return=0.08, etf_return=0.085, property_growth=0.06,
            rental_growth=0.035, inflation=0.035, wage_growth=0.035,
            fund_returns={"aus": 0.08, "global": 0.088},
        ),
    }


def _default_tax_brackets() -> List[TaxBracket]:
    # Australian resident rates, 2024-25
    return [
        TaxBracket(threshold=0, rate=0.0, base_amount=0),
        TaxBracket(threshold=18200, rate=0.16, base_amount=0),
        TaxBracket(threshold=45000, rate=0.30, base_amount=4288),
        TaxBracket(threshold=135000, rate=0.37, base_amount=31288),
        TaxBracket(threshold=190000, rate=0.45, base_amount=51638),
    ]


class Settings(BaseModel):
    """Process-wide defaults. Passed explicitly into every run, never read from module state."""

    assumption_presets: Dict[str, AssumptionPreset] = Field(default_factory=_default_presets)
    concessional_cap_yearly: float = Field(27500.0, gt=0.0)
    preservation_age: int = Field(60, ge=0)
    withdrawal_rate: float = Field(0.04, gt=0.0, le=1.0)
    super_earnings_tax: float = Field(0.15, ge=0.0, le=1.0)
    financial_year_start_month: int = Field(7, ge=1, le=12)
    super_option_returns: Dict[str, float] = Field(
        default_factory=lambda: {
            "Conservative": 0.05,
            "Balanced": 0.065,
            "Growth": 0.075,
            "HighGrowth": 0.08,
        }
    )
    default_property_costs: PropertyCostDefaults = Field(default_factory=PropertyCostDefaults)
    stress_test_buffers: List[float] = Field(default_factory=lambda: [0.02, 0.03])
    tax_brackets: List[TaxBracket] = Field(default_factory=_default_tax_brackets)
    medicare_levy_rate: float = Field(0.02, ge=0.0, le=1.0)


# --- Planner input models ---


class GoalInputs(BaseModel):
    current_age: int = Field(..., ge=0, le=120)
    retire_age: int = Field(..., ge=0, le=120)
    target_income_yearly: Optional[float] = Field(None, gt=0.0)
    target_capital: Optional[float] = Field(None, gt=0.0)
    risk_profile: RiskProfile = Field("balanced", description="Carried through to results; rates come from assumption_preset")
    assumption_preset: str = "Base"

    @property
    def years_to_retirement(self) -> int:
        return self.retire_age - self.current_age

    @property
    def target(self) -> Goal:
        """The goal as a tagged variant. Call only on validated input."""
        if self.target_income_yearly is not None:
            return IncomeGoal(yearly=self.target_income_yearly)
        return CapitalGoal(amount=self.target_capital)


class IncomeExpenseInputs(BaseModel):
    salary: float = Field(..., ge=0.0, description="Annual gross salary")
    bonus: float = Field(0.0, ge=0.0, description="Annual bonus")
    wage_growth: Optional[float] = Field(None, description="Overrides the preset wage growth")
    expenses_monthly: float = Field(..., ge=0.0)


class SuperInputs(BaseModel):
    balance: float = Field(0.0)
    sg_rate: float = Field(0.115, ge=0.0, le=1.0)
    salary_sacrifice_monthly: float = Field(0.0, ge=0.0)
    investment_option: Optional[SuperOption] = "HighGrowth"
    expected_return: Optional[float] = Field(None, description="Overrides the option/preset return")
    fee_pct: float = Field(0.007, ge=0.0)
    admin_fee_yearly: float = Field(0.0, ge=0.0, description="Flat dollar fee, inflation-indexed")
    concessional_cap_yearly: Optional[float] = Field(None, gt=0.0)
    contributions_tax_pct: float = Field(0.15, ge=0.15, le=0.15, description="Fixed at 15%")


class PropertyInputs(BaseModel):
    value: float = Field(..., ge=0.0)
    loan_balance: float = Field(0.0, ge=0.0)
    rate_pct: float = Field(0.065, ge=0.0)
    loan_type: LoanType = "PI"
    term_months: int = Field(300, ge=1, le=600)
    offset_balance: float = Field(0.0, ge=0.0)
    rent_per_week: Optional[float] = Field(None, ge=0.0)
    mgmt_fee_pct: Optional[float] = Field(None, ge=0.0)
    insurance_yearly: Optional[float] = Field(None, ge=0.0)
    council_rates_yearly: Optional[float] = Field(None, ge=0.0)
    maintenance_pct_of_rent: Optional[float] = Field(None, ge=0.0)
    vacancy_pct: Optional[float] = Field(None, ge=0.0, le=1.0)
    growth_rate: Optional[float] = None
    rental_growth_rate: Optional[float] = None
    extra_repayment_monthly: float = Field(0.0, ge=0.0)

    def with_cost_defaults(self, defaults: PropertyCostDefaults) -> "PropertyInputs":
        """Fill unset cost fields from the settings defaults."""
        updates = {
            name: getattr(defaults, name)
            for name in PropertyCostDefaults.model_fields
            if getattr(self, name) is None
        }
        return self.model_copy(update=updates) if updates else self


class PortfolioInputs(BaseModel):
    starting_balance: float = Field(0.0)
    dca_monthly: float = Field(0.0, ge=0.0)
    allocation_preset: AllocationPreset = "OneETF"
    weights: Optional[Dict[str, float]] = Field(
        None, description="Sleeve weights for a two-fund split, e.g. {'aus': 0.4, 'global': 0.6}"
    )
    fee_pct: float = Field(0.0015, ge=0.0)
    expected_return: Optional[float] = Field(None, description="Overrides the preset ETF return")


class BufferInputs(BaseModel):
    balance: float = Field(0.0)
    monthly_top_up: float = Field(0.0, ge=0.0)
    trigger_months: float = Field(3.0, ge=0.0, description="Coverage below which DCA pauses")
    recovery_months: float = Field(6.0, ge=0.0, description="Coverage required to resume DCA")
    interest_rate: float = Field(0.0, ge=0.0)
    pause_scope: PauseScope = "portfolio_and_property"
    absorb_property_cashflow: bool = False


class RateOverrides(BaseModel):
    """Explicit per-rate overrides applied last when resolving a RateSet."""

    super_return: Optional[float] = None
    super_fee: Optional[float] = None
    super_tax: Optional[float] = None
    etf_return: Optional[float] = None
    etf_fee: Optional[float] = None
    etf_tax_drag: Optional[float] = None
    property_growth: Optional[float] = None
    rental_growth: Optional[float] = None
    inflation: Optional[float] = None
    wage_growth: Optional[float] = None
    buffer_rate: Optional[float] = None


class PlannerInput(BaseModel):
    """The full, validated input snapshot for one projection run."""

    model_config = ConfigDict(populate_by_name=True)

    goal: GoalInputs
    income_expense: IncomeExpenseInputs
    super_: SuperInputs = Field(default_factory=SuperInputs, alias="super")
    property: Optional[PropertyInputs] = None
    portfolio: PortfolioInputs = Field(default_factory=PortfolioInputs)
    buffers: BufferInputs = Field(default_factory=BufferInputs)
    start_month: int = Field(7, ge=1, le=12, description="Calendar month of the first projected period")
    assumption_overrides: Optional[RateOverrides] = None
