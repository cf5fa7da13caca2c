"""
Custom exception classes for the retirement projection engine.

Configuration errors are raised before any projection step runs and carry the
offending field and the constraint it violated, so a caller can surface a
specific message next to the input that caused it.
"""

from typing import Optional


class PlannerError(Exception):
    """Base exception for all planner errors."""

    pass


class ConfigLoadError(PlannerError):
    """Raised when a settings or scenario file cannot be read or parsed."""

    pass


class ConfigurationError(PlannerError):
    """Raised when an input violates a planner invariant."""

    def __init__(self, message: str, field: Optional[str] = None, constraint: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.constraint = constraint

    def __str__(self) -> str:
        base = super().__str__()
        if self.field:
            return f"{base} (field: {self.field})"
        return base


class InvalidPresetError(ConfigurationError):
    """Raised when an assumption preset is unknown and the rates it would supply are not all overridden."""

    pass


class InvalidBufferConfigError(ConfigurationError):
    """Raised when the buffer recovery target is below the trigger level."""

    pass


class InvalidGoalError(ConfigurationError):
    """Raised when the goal sets both or neither of target income and target capital."""

    pass


class AllocationWeightsError(ConfigurationError):
    """Raised when portfolio allocation weights do not sum to one."""

    pass


class InvalidInputError(ConfigurationError):
    """Raised for any other cross-field invariant violation (ages, loan vs value)."""

    pass
