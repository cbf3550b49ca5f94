"""
Domain layer - Pure business logic without external dependencies.
"""

from .grid import GridBuilder, GridLayout, GridWindow, Placement, PlacementKind, SlotState
from .models import (
    Actor,
    Appointment,
    BatchResult,
    Block,
    BreakTemplate,
    DateFailure,
    DaySchedule,
    ResolvedDay,
    Role,
    Rule,
    ScheduleException,
    TimeTemplate,
)
from .policy import AccessPolicy
from .resolver import ScheduleResolver

__all__ = [
    "AccessPolicy",
    "Actor",
    "Appointment",
    "BatchResult",
    "Block",
    "BreakTemplate",
    "DateFailure",
    "DaySchedule",
    "GridBuilder",
    "GridLayout",
    "GridWindow",
    "Placement",
    "PlacementKind",
    "ResolvedDay",
    "Role",
    "Rule",
    "ScheduleException",
    "ScheduleResolver",
    "SlotState",
    "TimeTemplate",
]
