from retirement_planner.config.loaders import load_planner_input, load_settings
from retirement_planner.config.models import PlannerInput, Settings
from retirement_planner.projections.runner import compare_scenarios, run_scenario

__all__ = [
    'run_scenario',
    'compare_scenarios',
    'load_planner_input',
    'load_settings',
    'PlannerInput',
    'Settings',
]
