# retirement_planner/projections/runner.py
"""
Core projection runner: validate -> resolve rates -> project -> aggregate.

## QuickStart

```python
from retirement_planner.projections.runner import run_scenario

result = run_scenario({
    "goal": {"current_age": 30, "retire_age": 65, "target_income_yearly": 80000},
    "income_expense": {"salary": 120000, "expenses_monthly": 4000},
    "super": {"balance": 50000},
    "portfolio": {"starting_balance": 10000, "dca_monthly": 1000},
    "buffers": {"balance": 20000, "trigger_months": 3, "recovery_months": 6},
})
print(result.kpis.net_worth_at_retirement, result.warnings)
```
"""

import logging
import time
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import pandas as pd

from retirement_planner.config.accessors import resolve_rates
from retirement_planner.config.models import PlannerInput, Settings
from retirement_planner.config.validation import validate_inputs
from retirement_planner.logging_config import PERFORMANCE_LOGGER, PROJECTION_LOGGER
from retirement_planner.projections.projector import BalanceProjector
from retirement_planner.reporting.export import kpi_summary_frame
from retirement_planner.reporting.metrics import collect_warnings, compute_kpis
from retirement_planner.state.models import RunMetadata, ScenarioResult

logger = logging.getLogger(__name__)
projection_logger = logging.getLogger(PROJECTION_LOGGER)
performance_logger = logging.getLogger(PERFORMANCE_LOGGER)


def _coerce_input(planner_input: Union[PlannerInput, Mapping[str, Any]]) -> PlannerInput:
    if isinstance(planner_input, PlannerInput):
        return planner_input
    return PlannerInput.model_validate(dict(planner_input))


def run_scenario(
    planner_input: Union[PlannerInput, Mapping[str, Any]],
    settings: Optional[Settings] = None,
) -> ScenarioResult:
    """
    Run one deterministic projection from today to the retirement age.

    Args:
        planner_input: A PlannerInput or a plain mapping with the same shape.
        settings: Settings for the run; built-in defaults when omitted.

    Returns:
        ScenarioResult with KPIs, the monthly series and run metadata.

    Raises:
        pydantic.ValidationError: If a mapping is structurally invalid.
        ConfigurationError: If any cross-field invariant fails. Raised before
            any projection step runs.
    """
    started = time.perf_counter()
    settings = settings or Settings()
    planner_input = _coerce_input(planner_input)

    validate_inputs(planner_input, settings)
    rates = resolve_rates(planner_input, settings)

    goal = planner_input.goal
    projection_logger.info(
        f"Starting projection: age {goal.current_age} -> {goal.retire_age}, "
        f"preset '{goal.assumption_preset}'"
    )

    monthly_data, final_state = BalanceProjector(planner_input, settings, rates).run()
    kpis = compute_kpis(planner_input, settings, rates, monthly_data, final_state)
    warnings = collect_warnings(monthly_data)

    duration_ms = (time.perf_counter() - started) * 1000
    performance_logger.info(f"Projection of {len(monthly_data)} periods took {duration_ms:.1f} ms")
    projection_logger.info(
        f"Projection complete: net worth at retirement {kpis.net_worth_at_retirement:,.0f}, "
        f"{len(warnings)} warning(s)"
    )

    return ScenarioResult(
        input=planner_input,
        kpis=kpis,
        monthly_data=monthly_data,
        metadata=RunMetadata(
            duration_ms=duration_ms,
            data_points=len(monthly_data),
            warnings=tuple(warnings),
        ),
    )


def compare_scenarios(
    inputs: Mapping[str, Union[PlannerInput, Mapping[str, Any]]],
    settings: Optional[Settings] = None,
) -> Tuple[Dict[str, ScenarioResult], pd.DataFrame]:
    """
    Run several scenarios independently and summarise their headline KPIs.

    Returns:
        The results keyed by scenario name and a DataFrame indexed by scenario.
    """
    settings = settings or Settings()
    results: Dict[str, ScenarioResult] = {}
    for name, planner_input in inputs.items():
        logger.info(f"Running scenario '{name}'")
        results[name] = run_scenario(planner_input, settings)
    return results, kpi_summary_frame(results)
