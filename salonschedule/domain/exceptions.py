"""
Domain-specific exception hierarchy for the schedule engine.
"""


class ScheduleError(Exception):
    """Base class for all application-level errors."""


class ScheduleValidationError(ScheduleError):
    """Raised when a template, rule set or date selection is malformed."""


class AuthorizationError(ScheduleError):
    """Raised when an actor may not edit the target employee's schedule."""


class StoreError(ScheduleError):
    """Raised when the schedule store cannot read or write records."""


class StoreNotFoundError(StoreError):
    """Raised when the store reports that a record does not exist."""


class AuthenticationError(ScheduleError):
    """Raised when login or token handling fails."""
