"""
Domain models for work-schedule records and derived views.
"""

from dataclasses import dataclass, field
from datetime import time
from enum import Enum
from typing import Dict, List, Optional, Tuple

import pendulum
from pendulum import Date

from .dates import format_date, format_time, hour_decimal, minutes_of_day


@dataclass(frozen=True)
class Rule:
    """
    Weekly recurring schedule entry for one weekday.

    ``day_of_week`` uses 0=Sunday .. 6=Saturday.
    """
    employee_id: str
    day_of_week: int
    is_working_day: bool
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class ScheduleException:
    """
    Single-date override. When present it replaces the weekday rule entirely.
    """
    employee_id: str
    date: Date
    is_working_day: bool
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class Block:
    """Unavailable sub-interval of a day, e.g. a break."""
    id: str
    employee_id: str
    date: Date
    start_time: time
    end_time: time
    reason: Optional[str] = None

    def overlaps(self, start_hour: float, end_hour: float) -> bool:
        """Check whether the block intersects ``[start_hour, end_hour)``."""
        return hour_decimal(self.start_time) < end_hour and hour_decimal(self.end_time) > start_hour


@dataclass(frozen=True)
class ResolvedDay:
    """
    Outcome of merging rule, exception and blocks for one date.

    Computed on demand and never persisted.
    """
    date: Date
    is_working_day: bool
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    blocks: Tuple[Block, ...] = ()
    source_is_exception: bool = False

    def working_hours(self) -> Tuple[float, float] | None:
        """Return (start, end) as decimal hours, or None on a day off."""
        if not self.is_working_day or self.start_time is None or self.end_time is None:
            return None
        return hour_decimal(self.start_time), hour_decimal(self.end_time)

    def is_hour_blocked(self, hour: int) -> bool:
        """Check whether any block touches the hour row ``[hour, hour + 1)``."""
        return any(block.overlaps(hour, hour + 1) for block in self.blocks)

    def format_display(self) -> str:
        """
        Format the day for display.
        Format: YYYY-MM-DD | HH:MM – HH:MM (n breaks) or YYYY-MM-DD | day off
        """
        date_str = format_date(self.date)
        if not self.is_working_day:
            return f"{date_str} | day off"

        hours = f"{format_time(self.start_time)} – {format_time(self.end_time)}"
        suffix = f" ({len(self.blocks)} breaks)" if self.blocks else ""
        return f"{date_str} | {hours}{suffix}"


@dataclass(frozen=True)
class DaySchedule:
    """Working flag and hours for a single-cell edit."""
    is_working_day: bool
    start_time: Optional[time] = None
    end_time: Optional[time] = None


@dataclass(frozen=True)
class TimeTemplate:
    """Working hours applied to every selected date in a batch edit."""
    start_time: time
    end_time: time

    def duration_minutes(self) -> int:
        return minutes_of_day(self.end_time) - minutes_of_day(self.start_time)


@dataclass(frozen=True)
class BreakTemplate:
    """Break created as a Block on every selected date."""
    start_time: time
    end_time: time
    reason: Optional[str] = None


@dataclass(frozen=True)
class Appointment:
    """
    Scheduled client appointment, consumed read-only for grid layout.
    """
    id: str
    start_time: time
    end_time: time
    label: str = ""

    @classmethod
    def from_timestamps(cls, id: str, start_at: str, end_at: str, label: str = "") -> "Appointment":
        """
        Build an appointment from ISO timestamps, keeping the wall-clock
        time written in the string (no timezone shift).
        """
        start = pendulum.parse(start_at)
        end = pendulum.parse(end_at)
        return cls(
            id=id,
            start_time=time(start.hour, start.minute),
            end_time=time(end.hour, end.minute),
            label=label,
        )


class Role(str, Enum):
    """Roles known to the salon back end."""
    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    MASTER = "master"


@dataclass(frozen=True)
class Actor:
    """
    The user performing an edit.

    Owners have no employee record; everybody else is linked to one.
    """
    user_id: str
    role: Role
    employee_id: Optional[str] = None


@dataclass(frozen=True)
class DateFailure:
    """A date whose batch operation failed."""
    date: Date
    error: str
    rolled_back: bool = False


@dataclass
class BatchResult:
    """
    Per-date outcome of a batch edit.

    A mix of succeeded and failed dates is a normal outcome; callers may
    retry just ``failed_dates``.
    """
    succeeded_dates: List[Date] = field(default_factory=list)
    failures: List[DateFailure] = field(default_factory=list)

    @property
    def failed_dates(self) -> List[Date]:
        return [failure.date for failure in self.failures]

    @property
    def errors(self) -> Dict[Date, str]:
        return {failure.date: failure.error for failure in self.failures}

    def record_success(self, day: Date) -> None:
        self.succeeded_dates.append(day)

    def record_failure(self, day: Date, error: str, rolled_back: bool = False) -> None:
        self.failures.append(DateFailure(date=day, error=error, rolled_back=rolled_back))
