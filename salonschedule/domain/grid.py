"""
Availability grid geometry for day columns.

Converts a resolved day plus its appointments and blocks into vertical
offsets/extents for a fixed-hour display window. The same layout serves the
week timeline and the month mini-grid.
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Iterable, List, Optional, Protocol, Tuple

from pendulum import Date

from .dates import hour_decimal
from .models import Appointment, Block, ResolvedDay


class Interval(Protocol):
    """Anything with a clock-time start and end."""
    start_time: time
    end_time: time


@dataclass(frozen=True)
class GridWindow:
    """
    Display window: visible hours and pixel scale.

    ``padding`` and ``min_height`` only affect rendered heights, never the
    underlying data.
    """
    start_hour: int = 9
    end_hour: int = 23
    slot_height: float = 80
    padding: float = 8
    min_height: float = 40

    def __post_init__(self):
        if self.end_hour <= self.start_hour:
            raise ValueError(
                f"end_hour {self.end_hour} must be later than start_hour {self.start_hour}"
            )
        if self.slot_height <= 0:
            raise ValueError("slot_height must be greater than zero")

    def offset_for(self, hour: float) -> float:
        return (hour - self.start_hour) * self.slot_height

    @property
    def total_height(self) -> float:
        return (self.end_hour - self.start_hour) * self.slot_height


class PlacementKind(str, Enum):
    APPOINTMENT = "appointment"
    BLOCK = "block"
    OTHER = "other"


@dataclass(frozen=True)
class Placement:
    """
    Geometry of one interval inside a day column.

    ``top_offset`` and ``raw_height`` are exact; ``top`` and ``height`` are the
    rendered values with padding and minimum height applied.
    """
    kind: PlacementKind
    source: object
    top_offset: float
    raw_height: float
    top: float
    height: float


@dataclass(frozen=True)
class GridLayout:
    """Placements for one day; ``is_working_day`` drives the disabled-column look."""
    date: Date
    is_working_day: bool
    working_span: Optional[Placement]
    placements: Tuple[Placement, ...] = field(default_factory=tuple)

    def of_kind(self, kind: PlacementKind) -> List[Placement]:
        return [placement for placement in self.placements if placement.kind == kind]


class SlotState(str, Enum):
    AVAILABLE = "available"
    BLOCKED = "blocked"
    OUTSIDE_HOURS = "outside_hours"
    DAY_OFF = "day_off"


class GridBuilder:
    """
    Computes layout geometry. No clamping to the window and no overlap
    resolution: overlapping intervals are placed independently.
    """

    def __init__(self, window: GridWindow | None = None):
        self.window = window or GridWindow()

    def place(self, interval: Interval, window: GridWindow | None = None) -> Placement:
        """
        Compute the placement of one interval.

        top_offset = (start - window.start_hour) * slot_height
        height     = max((end - start) * slot_height - padding, min_height)
        """
        window = window or self.window
        start = hour_decimal(interval.start_time)
        end = hour_decimal(interval.end_time)

        top_offset = window.offset_for(start)
        raw_height = (end - start) * window.slot_height

        return Placement(
            kind=self._kind_of(interval),
            source=interval,
            top_offset=top_offset,
            raw_height=raw_height,
            top=top_offset + window.padding / 2,
            height=max(raw_height - window.padding, window.min_height),
        )

    def layout(
        self,
        resolved_day: ResolvedDay,
        events: Iterable[Interval] = (),
        window: GridWindow | None = None,
    ) -> GridLayout:
        """
        Lay out appointments plus the day's blocks.

        Args:
            resolved_day: Day to lay out; its blocks are always included
            events: Appointments or other intervals for the same day
            window: Display window, defaults to the builder's window

        Returns:
            GridLayout with one placement per interval, appointments first
        """
        window = window or self.window

        intervals: List[Interval] = list(events)
        intervals.extend(resolved_day.blocks)

        placements = tuple(self.place(interval, window) for interval in intervals)

        working_span = None
        if resolved_day.is_working_day and resolved_day.start_time and resolved_day.end_time:
            start = hour_decimal(resolved_day.start_time)
            end = hour_decimal(resolved_day.end_time)
            working_span = Placement(
                kind=PlacementKind.OTHER,
                source=resolved_day,
                top_offset=window.offset_for(start),
                raw_height=(end - start) * window.slot_height,
                top=window.offset_for(start),
                height=(end - start) * window.slot_height,
            )

        return GridLayout(
            date=resolved_day.date,
            is_working_day=resolved_day.is_working_day,
            working_span=working_span,
            placements=placements,
        )

    def slot_states(
        self,
        resolved_day: ResolvedDay,
        window: GridWindow | None = None,
    ) -> List[Tuple[int, SlotState]]:
        """
        Classify each hour row of the window for rendering.

        Blocks take precedence over working-hours bounds, matching the
        calendar screens where a break cell is never clickable.
        """
        window = window or self.window
        working_hours = resolved_day.working_hours()
        states: List[Tuple[int, SlotState]] = []

        for hour in hour_marks(window):
            if not resolved_day.is_working_day:
                state = SlotState.DAY_OFF
            elif resolved_day.is_hour_blocked(hour):
                state = SlotState.BLOCKED
            elif working_hours and (hour < working_hours[0] or hour >= working_hours[1]):
                state = SlotState.OUTSIDE_HOURS
            else:
                state = SlotState.AVAILABLE
            states.append((hour, state))

        return states

    def current_time_offset(self, now: datetime | time, window: GridWindow | None = None) -> Optional[float]:
        """Offset of the "now" indicator, or None when outside the window."""
        window = window or self.window
        hour = now.hour + now.minute / 60
        if hour < window.start_hour or hour > window.end_hour:
            return None
        return window.offset_for(hour)

    @staticmethod
    def _kind_of(interval: Interval) -> PlacementKind:
        if isinstance(interval, Appointment):
            return PlacementKind.APPOINTMENT
        if isinstance(interval, Block):
            return PlacementKind.BLOCK
        return PlacementKind.OTHER


def hour_marks(window: GridWindow) -> List[int]:
    """Hour rows shown in the window, e.g. 9..23 for a 9-23 window."""
    return list(range(window.start_hour, window.end_hour + 1))
