# retirement_planner/reporting/export.py
"""
Functions for writing projection outputs (monthly CSV, KPI JSON, scenario
comparison). Only outer surfaces such as the CLI call these.
"""

import json
import logging
import math
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import pandas as pd

from retirement_planner.state.models import ScenarioResult
from retirement_planner.state.schema import (
    BOOL_COLS,
    DETAIL_COLS,
    EXPORT_COLS,
    KPI_SUMMARY_FIELDS,
    SCENARIO,
)

logger = logging.getLogger(__name__)


class DataWriteError(Exception):
    """Custom exception for errors during output writing."""

    pass


def monthly_frame(result: ScenarioResult, detailed: bool = False) -> pd.DataFrame:
    """Monthly series as a DataFrame with the export columns in order."""
    cols = DETAIL_COLS if detailed else EXPORT_COLS
    df = pd.DataFrame([asdict(p) for p in result.monthly_data])
    if df.empty:
        return pd.DataFrame(columns=cols)
    df = df[cols].copy()
    for col in BOOL_COLS:
        if col in df.columns:
            df[col] = df[col].astype(bool)
    return df


def kpi_summary_frame(results: Mapping[str, ScenarioResult]) -> pd.DataFrame:
    """Headline KPIs for several scenarios, indexed by scenario name."""
    rows = []
    for name, result in results.items():
        row = {SCENARIO: name}
        row.update({f: getattr(result.kpis, f) for f in KPI_SUMMARY_FIELDS})
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=[SCENARIO] + KPI_SUMMARY_FIELDS).set_index(SCENARIO)
    return pd.DataFrame(rows).set_index(SCENARIO)


def _json_safe(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def kpi_payload(result: ScenarioResult) -> Dict[str, Any]:
    return _json_safe(
        {
            "kpis": asdict(result.kpis),
            "warnings": list(result.warnings),
            "metadata": {
                "duration_ms": result.metadata.duration_ms,
                "data_points": result.metadata.data_points,
            },
        }
    )


def write_monthly_csv(result: ScenarioResult, path: Union[Path, str], detailed: bool = False) -> Path:
    """
    Writes the monthly series to CSV.

    Raises:
        DataWriteError: If writing fails.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        monthly_frame(result, detailed=detailed).to_csv(path, index=False)
    except OSError as e:
        logger.exception(f"Failed to write monthly series to {path}")
        raise DataWriteError(f"Failed to write monthly series to {path}") from e
    logger.info(f"Wrote {len(result.monthly_data)} monthly rows to {path}")
    return path


def write_kpis(result: ScenarioResult, path: Union[Path, str]) -> Path:
    """
    Writes KPIs, warnings and run metadata as JSON.

    Raises:
        DataWriteError: If writing fails.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(kpi_payload(result), f, indent=2)
    except OSError as e:
        logger.exception(f"Failed to write KPIs to {path}")
        raise DataWriteError(f"Failed to write KPIs to {path}") from e
    logger.info(f"Wrote KPIs to {path}")
    return path


def write_comparison(summary: pd.DataFrame, path: Union[Path, str]) -> Path:
    """Writes a scenario comparison frame to CSV."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        summary.to_csv(path)
    except OSError as e:
        logger.exception(f"Failed to write comparison to {path}")
        raise DataWriteError(f"Failed to write comparison to {path}") from e
    logger.info(f"Wrote comparison of {len(summary)} scenarios to {path}")
    return path
