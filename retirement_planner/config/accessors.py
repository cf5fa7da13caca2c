# retirement_planner/config/accessors.py
"""
Helper functions to access and resolve configuration data: merging settings
overrides onto the defaults, looking up assumption presets, and resolving the
per-run RateSet.
"""

import logging
from typing import Any, Dict, Optional

from retirement_planner.config.models import AssumptionPreset, PlannerInput, Settings
from retirement_planner.exceptions import InvalidPresetError
from retirement_planner.scenario_loader import deep_merge
from retirement_planner.state.models import RateSet

logger = logging.getLogger(__name__)

REQUIRED_RATES = ("super_return", "etf_return", "inflation", "wage_growth")
PROPERTY_RATES = ("property_growth", "rental_growth")


def merge_settings(overrides: Optional[Dict[str, Any]], base: Optional[Settings] = None) -> Settings:
    """
    Build a Settings object from partial overrides layered on top of `base`
    (or the built-in defaults).

    Preset entries are merged key by key, so an override of
    ``{'assumption_presets': {'Base': {'inflation': 0.02}}}`` keeps the other Base rates.
    """
    base_dict = (base or Settings()).model_dump()
    merged = deep_merge(base_dict, overrides or {})
    return Settings(**merged)


def get_preset(settings: Settings, name: str) -> Optional[AssumptionPreset]:
    """Look up an assumption preset by name, case-insensitively. Returns None when unknown."""
    preset = settings.assumption_presets.get(name)
    if preset is not None:
        return preset
    lowered = name.lower()
    for key, value in settings.assumption_presets.items():
        if key.lower() == lowered:
            return value
    return None


def _etf_return_from_allocation(planner_input: PlannerInput, preset: Optional[AssumptionPreset]) -> Optional[float]:
    """Blend per-sleeve returns for a two-fund split when the preset defines them."""
    portfolio = planner_input.portfolio
    if preset is None or not preset.fund_returns:
        return None
    if portfolio.allocation_preset != "TwoETF" or not portfolio.weights:
        return None
    missing = [k for k in portfolio.weights if k not in preset.fund_returns]
    if missing:
        logger.warning(
            f"No fund return for sleeves {missing} in preset; using the preset ETF return instead"
        )
        return None
    return sum(w * preset.fund_returns[k] for k, w in portfolio.weights.items())


def resolve_rates(planner_input: PlannerInput, settings: Settings) -> RateSet:
    """
    Resolve the immutable RateSet for a run.

    Resolution order, later wins: preset values, bucket-level fields on the
    input (super option / expected return / fee, portfolio return / fee,
    property growth, wage growth, buffer interest), then the explicit
    ``assumption_overrides``.

    Raises:
        InvalidPresetError: If the preset name is unknown and some required rate
            is not supplied by a bucket field or an override.
    """
    preset_name = planner_input.goal.assumption_preset
    preset = get_preset(settings, preset_name)

    rates: Dict[str, Optional[float]] = {
        "super_return": None,
        "super_fee": None,
        "super_tax": settings.super_earnings_tax,
        "etf_return": None,
        "etf_fee": None,
        "etf_tax_drag": 0.0,
        "property_growth": None,
        "rental_growth": None,
        "inflation": None,
        "wage_growth": None,
        "buffer_rate": None,
    }

    # 1. Preset
    if preset is not None:
        for key in ("super_return", "etf_return", "property_growth", "rental_growth",
                    "inflation", "wage_growth", "etf_tax_drag"):
            rates[key] = getattr(preset, key)
    else:
        logger.info(f"Assumption preset '{preset_name}' not found; relying on overrides")

    # 2. Bucket-level fields
    sup = planner_input.super_
    option_return = settings.super_option_returns.get(sup.investment_option) if sup.investment_option else None
    if option_return is not None:
        rates["super_return"] = option_return
    if sup.expected_return is not None:
        rates["super_return"] = sup.expected_return
    rates["super_fee"] = sup.fee_pct

    blended = _etf_return_from_allocation(planner_input, preset)
    if blended is not None:
        rates["etf_return"] = blended
    if planner_input.portfolio.expected_return is not None:
        rates["etf_return"] = planner_input.portfolio.expected_return
    rates["etf_fee"] = planner_input.portfolio.fee_pct

    prop = planner_input.property
    if prop is not None:
        if prop.growth_rate is not None:
            rates["property_growth"] = prop.growth_rate
        if prop.rental_growth_rate is not None:
            rates["rental_growth"] = prop.rental_growth_rate

    if planner_input.income_expense.wage_growth is not None:
        rates["wage_growth"] = planner_input.income_expense.wage_growth
    rates["buffer_rate"] = planner_input.buffers.interest_rate

    # 3. Explicit overrides
    if planner_input.assumption_overrides is not None:
        overrides = planner_input.assumption_overrides.model_dump(exclude_none=True)
        rates.update(overrides)

    required = REQUIRED_RATES + (PROPERTY_RATES if prop is not None else ())
    missing = [k for k in required if rates.get(k) is None]
    if missing:
        raise InvalidPresetError(
            f"Unknown assumption preset '{preset_name}' and no override supplied for: {', '.join(missing)}",
            field="goal.assumption_preset",
            constraint=f"preset in {sorted(settings.assumption_presets)} or override all required rates",
        )

    # Property rates are irrelevant without a property
    for key in PROPERTY_RATES:
        if rates[key] is None:
            rates[key] = 0.0

    rate_set = RateSet(**rates)
    logger.debug(f"Resolved rates for preset '{preset_name}': {rate_set}")
    return rate_set
