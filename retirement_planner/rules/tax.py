"""
rules/tax.py

Resident income tax helpers used to estimate the tax saved by salary
sacrifice. Brackets come from Settings so a new financial year only needs a
settings change.
"""

import logging
from typing import List

from retirement_planner.config.models import Settings, TaxBracket

logger = logging.getLogger(__name__)


def _bracket_for(income: float, brackets: List[TaxBracket]) -> TaxBracket:
    ordered = sorted(brackets, key=lambda b: b.threshold)
    current = ordered[0]
    for bracket in ordered:
        if income > bracket.threshold:
            current = bracket
    return current


def income_tax(annual_income: float, settings: Settings) -> float:
    """Income tax before levies and offsets."""
    if annual_income <= 0 or not settings.tax_brackets:
        return 0.0
    bracket = _bracket_for(annual_income, settings.tax_brackets)
    return max(0.0, bracket.base_amount + (annual_income - bracket.threshold) * bracket.rate)


def marginal_rate(annual_income: float, settings: Settings) -> float:
    """Marginal income tax rate plus the Medicare levy."""
    if annual_income <= 0 or not settings.tax_brackets:
        return 0.0
    return _bracket_for(annual_income, settings.tax_brackets).rate + settings.medicare_levy_rate


def estimate_tax_saving(
    sacrifice: float,
    annual_taxable_income: float,
    settings: Settings,
    contributions_tax: float,
) -> float:
    """
    Tax saved by sacrificing `sacrifice` dollars of salary into super.

    The sacrificed amount escapes the marginal rate (plus Medicare levy) but is
    taxed at the contributions tax rate inside the fund. Never negative: below
    the contributions tax rate there is no saving.
    """
    if sacrifice <= 0:
        return 0.0
    rate = marginal_rate(annual_taxable_income, settings)
    return max(0.0, sacrifice * (rate - contributions_tax))
