# retirement_planner/state/schema.py

# Monthly series columns (CSV export)
MONTH = "month"
AGE = "age"
NET_WORTH = "net_worth"
SUPER_BALANCE = "super_balance"
OUTSIDE_SUPER_BALANCE = "outside_super_balance"
CASH_BALANCE = "cash_balance"
PROPERTY_VALUE = "property_value"
LOAN_BALANCE = "loan_balance"
DCA_PAUSED = "dca_paused"

# Detail columns
CALENDAR_MONTH = "calendar_month"
PROPERTY_EQUITY = "property_equity"
LVR = "lvr"
PROPERTY_NET_CASHFLOW = "property_net_cashflow"
GROSS_INCOME = "gross_income"
SUPER_CONTRIBUTION = "super_contribution"
SALARY_SACRIFICE = "salary_sacrifice"
PORTFOLIO_CONTRIBUTION = "portfolio_contribution"
PROPERTY_REPAYMENT = "property_repayment"
PROPERTY_EXTRA_REPAYMENT = "property_extra_repayment"
BUFFER_CONTRIBUTION = "buffer_contribution"
BUFFER_COVERAGE = "buffer_coverage"
TAX_SAVED = "tax_saved"
CAP_UTILIZATION = "cap_utilization"
CAP_WARNING = "cap_warning"
BUFFERS_BELOW_TARGET = "buffers_below_target"

EXPORT_COLS = [
    MONTH,
    AGE,
    NET_WORTH,
    SUPER_BALANCE,
    OUTSIDE_SUPER_BALANCE,
    CASH_BALANCE,
    PROPERTY_VALUE,
    LOAN_BALANCE,
    DCA_PAUSED,
]

DETAIL_COLS = EXPORT_COLS + [
    CALENDAR_MONTH,
    PROPERTY_EQUITY,
    LVR,
    PROPERTY_NET_CASHFLOW,
    GROSS_INCOME,
    SUPER_CONTRIBUTION,
    SALARY_SACRIFICE,
    PORTFOLIO_CONTRIBUTION,
    PROPERTY_REPAYMENT,
    PROPERTY_EXTRA_REPAYMENT,
    BUFFER_CONTRIBUTION,
    BUFFER_COVERAGE,
    TAX_SAVED,
    CAP_UTILIZATION,
    CAP_WARNING,
    BUFFERS_BELOW_TARGET,
]

BOOL_COLS = [DCA_PAUSED, CAP_WARNING, BUFFERS_BELOW_TARGET]

# Comparison frame columns
SCENARIO = "scenario"
KPI_SUMMARY_FIELDS = [
    "net_worth_at_retirement",
    "super_balance_at_retirement",
    "outside_super_balance_at_retirement",
    "property_equity_at_retirement",
    "projected_income_yearly",
    "bridge_years_required",
    "bridge_years_covered",
    "gap",
    "monthly_gap_to_close_target",
    "can_retire",
    "months_dca_paused",
    "total_tax_saved",
]
