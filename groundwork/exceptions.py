"""Exception classes for groundwork.

Contains:
- GroundworkError: Base exception for all groundwork errors
- SchemaError: Raised when the schema is internally inconsistent
- PlanComputationError: Raised when the project cannot be read while planning
- ActionFailedError: Raised when a single plan action cannot be applied
- ConfigError: Raised when the user configuration cannot be read or written
"""

from typing import Optional


class GroundworkError(Exception):
    """Base exception for groundwork errors."""

    pass


class SchemaError(GroundworkError):
    """Raised when a schema entry is orphaned, overlapping or references missing content."""

    pass


class PlanComputationError(GroundworkError):
    """Raised when the filesystem reader fails while a plan is being computed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class ActionFailedError(GroundworkError):
    """Raised when an action fails during plan execution."""

    def __init__(self, action_type: str, path: str, reason: str, cause: Optional[BaseException] = None):
        self.action_type = action_type
        self.path = path
        self.reason = reason
        self.cause = cause
        super().__init__(f"{action_type} {path} failed: {reason}")


class ConfigError(GroundworkError):
    """Raised when there's an error with the user configuration."""

    pass
