# retirement_planner/projections/cli.py
# Command-line interface entry point (argparse)
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from retirement_planner.config.loaders import (
    load_planner_input,
    load_scenario_directory,
    load_settings,
)
from retirement_planner.exceptions import PlannerError
from retirement_planner.logging_config import PERFORMANCE_LOGGER, PROJECTION_LOGGER, setup_logging
from retirement_planner.projections.runner import compare_scenarios, run_scenario
from retirement_planner.reporting.export import (
    DataWriteError,
    write_comparison,
    write_kpis,
    write_monthly_csv,
)

# Get logger for this module
logger = logging.getLogger(__name__)

# Directory for log files
LOG_DIR = Path("output_dev/planner_logs")
OUTPUT_DIR = Path("output_dev")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Run a deterministic retirement projection.")

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input",
        type=str,
        help="Path to a scenario YAML file."
    )
    source.add_argument(
        "--scenario-dir",
        type=str,
        help="Directory of scenario YAML files to run and compare."
    )

    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="Path to a settings YAML file (presets, concessional cap, preservation age)."
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(OUTPUT_DIR),
        help=f"Directory to save output files (default: {OUTPUT_DIR})"
    )
    parser.add_argument(
        "--scenario-name",
        type=str,
        default=None,
        help="Name for the scenario, used in output file naming. Defaults to the input file stem."
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=str(LOG_DIR),
        help=f"Directory to store log files (default: {LOG_DIR})"
    )
    parser.add_argument(
        "--detailed",
        action="store_true",
        help="Write every monthly column instead of the headline export columns"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def initialize_logging(debug: bool = False, log_dir: Path = LOG_DIR) -> None:
    """Initialize the logging configuration.

    Args:
        debug: Whether to enable debug logging
        log_dir: Directory to store log files
    """
    setup_logging(log_dir=log_dir, debug=debug, force=True)

    logger.info("Starting retirement projection")
    logger.info(f"Command line arguments: {sys.argv}")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"Pandas version: {pd.__version__}")
    logger.info(f"NumPy version: {np.__version__}")

    if debug:
        logger.debug("Debug logging enabled")


def _run_single(args: argparse.Namespace, settings, output_dir: Path) -> None:
    input_path = Path(args.input)
    scenario_name = args.scenario_name or input_path.stem
    planner_input = load_planner_input(input_path)

    result = run_scenario(planner_input, settings)

    write_monthly_csv(result, output_dir / f"{scenario_name}_monthly.csv", detailed=args.detailed)
    write_kpis(result, output_dir / f"{scenario_name}_kpis.json")

    kpis = result.kpis
    print(f"Scenario: {scenario_name}")
    print(f"  Net worth at retirement: {kpis.net_worth_at_retirement:,.0f}")
    print(f"  Projected income:        {kpis.projected_income_yearly:,.0f} / year")
    print(f"  Gap to target:           {kpis.gap:,.0f}")
    print(f"  Bridge coverage:         {kpis.bridge_years_covered:.1f} of {kpis.bridge_years_required:.0f} years")
    for warning in result.warnings:
        print(f"  ! {warning}")


def _run_comparison(args: argparse.Namespace, settings, output_dir: Path) -> None:
    scenario_dir = Path(args.scenario_dir)
    inputs = load_scenario_directory(scenario_dir)
    if not inputs:
        raise PlannerError(f"No scenarios found in {scenario_dir}")

    results, summary = compare_scenarios(inputs, settings)
    for name, result in results.items():
        write_monthly_csv(result, output_dir / f"{name}_monthly.csv", detailed=args.detailed)
        write_kpis(result, output_dir / f"{name}_kpis.json")

    comparison_name = args.scenario_name or "comparison"
    write_comparison(summary, output_dir / f"{comparison_name}.csv")
    print(summary.to_string())


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the retirement projection CLI."""
    args = parse_arguments(argv)

    initialize_logging(debug=args.debug, log_dir=Path(args.log_dir))
    proj_logger = logging.getLogger(PROJECTION_LOGGER)
    perf_logger = logging.getLogger(PERFORMANCE_LOGGER)

    output_dir = Path(args.output_dir)
    try:
        settings = load_settings(args.settings)
        if args.input:
            _run_single(args, settings, output_dir)
        else:
            _run_comparison(args, settings, output_dir)
    except (PlannerError, DataWriteError) as e:
        logger.error(f"Projection failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    proj_logger.info(f"Outputs written to {output_dir}")
    perf_logger.info("CLI run finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
