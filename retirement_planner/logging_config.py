"""
Structured logging configuration for the retirement planner.

Provides one place to configure logging across the package, with separate
output files for projection events, run timings and warnings.
"""

import logging
import logging.handlers
from pathlib import Path

# Logger names for different concerns
PROJECTION_LOGGER = "retirement_planner.projection"
PERFORMANCE_LOGGER = "retirement_planner.performance"

# Standard log format with module name and line number
LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILES = (
    "projection_events.log",
    "performance_metrics.log",
    "warnings_errors.log",
    "debug_detail.log",
    "combined.log",
)

MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

_LOGGING_CONFIGURED = False


def clear_logs(log_dir: Path) -> None:
    """
    Clear all log files in the specified directory.

    Args:
        log_dir: Directory containing log files to clear
    """
    for name in LOG_FILES:
        log_file = log_dir / name
        if log_file.exists():
            try:
                log_file.unlink()
            except OSError as e:
                logging.getLogger(__name__).warning(f"Could not delete {log_file}: {e}")


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
        mode="a",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _attach(logger_name: str, handler: logging.Handler, level: int) -> None:
    named = logging.getLogger(logger_name)
    for h in named.handlers[:]:
        named.removeHandler(h)
    named.setLevel(level)
    named.addHandler(handler)
    named.propagate = True  # Allow to bubble up to root


def setup_logging(log_dir: Path, debug: bool = False, clear_existing: bool = True, force: bool = False) -> None:
    """
    Configure structured logging for the planner.

    Creates separate log files for different concerns:
    - projection_events.log: run start/finish and scenario events (INFO+)
    - performance_metrics.log: run durations (INFO+)
    - warnings_errors.log: warnings and errors (WARNING+)
    - debug_detail.log: rate resolution and policy transitions (DEBUG, only if debug=True)
    - combined.log: everything at INFO+

    Args:
        log_dir: Directory where log files will be stored
        debug: If True, enables debug logging and creates debug_detail.log
        clear_existing: If True, clears existing log files before starting
        force: Reconfigure even if logging was already set up in this process
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED and not force:
        return

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    if clear_existing:
        clear_logs(log_dir)

    # Remove all handlers from the root logger before setup
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    file_formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    console_formatter = logging.Formatter("%(levelname)-8s %(message)s")

    # Console handler (for warnings and above)
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(console_formatter)
    root_logger.addHandler(console)

    root_logger.addHandler(_rotating_handler(log_dir / "combined.log", logging.INFO, file_formatter))
    root_logger.addHandler(_rotating_handler(log_dir / "warnings_errors.log", logging.WARNING, file_formatter))

    _attach(
        PROJECTION_LOGGER,
        _rotating_handler(log_dir / "projection_events.log", logging.INFO, file_formatter),
        logging.INFO,
    )
    _attach(
        PERFORMANCE_LOGGER,
        _rotating_handler(log_dir / "performance_metrics.log", logging.INFO, file_formatter),
        logging.INFO,
    )

    if debug:
        # Package-wide DEBUG records go to their own file
        debug_handler = _rotating_handler(log_dir / "debug_detail.log", logging.DEBUG, file_formatter)
        root_logger.addHandler(debug_handler)

    _LOGGING_CONFIGURED = True

