"""
Tests for availability grid geometry.
"""

from datetime import datetime, time

import pendulum
import pytest

from salonschedule.domain.grid import (
    GridBuilder,
    GridWindow,
    PlacementKind,
    SlotState,
    hour_marks,
)
from salonschedule.domain.models import Appointment, Block, ResolvedDay

MONDAY = pendulum.date(2026, 2, 16)


def _appointment(start: time, end: time) -> Appointment:
    return Appointment(id="apt-1", start_time=start, end_time=end)


def _block(start: time, end: time) -> Block:
    return Block(id="blk-1", employee_id="emp-1", date=MONDAY, start_time=start, end_time=end)


def _working_day(*blocks: Block) -> ResolvedDay:
    return ResolvedDay(
        date=MONDAY,
        is_working_day=True,
        start_time=time(10, 0),
        end_time=time(20, 0),
        blocks=blocks,
    )


class TestPlacement:
    """Vertical placement math with the default 9-23 window."""

    def setup_method(self):
        self.builder = GridBuilder(GridWindow(start_hour=9, end_hour=23, slot_height=80))

    def test_ninety_minute_appointment(self):
        placement = self.builder.place(_appointment(time(10, 0), time(11, 30)))

        assert placement.kind == PlacementKind.APPOINTMENT
        assert placement.top_offset == 80
        assert placement.raw_height == 120
        assert placement.top == 84
        assert placement.height == 112

    def test_minimum_height_applies_to_short_intervals(self):
        placement = self.builder.place(_appointment(time(10, 0), time(10, 15)))

        assert placement.raw_height == 20
        assert placement.height == 40

    def test_interval_before_window_is_not_clamped(self):
        placement = self.builder.place(_appointment(time(8, 0), time(9, 0)))

        assert placement.top_offset == -80
        assert placement.raw_height == 80

    def test_window_start_is_configurable(self):
        builder = GridBuilder(GridWindow(start_hour=8, end_hour=20, slot_height=60, padding=0, min_height=0))

        placement = builder.place(_block(time(9, 30), time(10, 0)))

        assert placement.kind == PlacementKind.BLOCK
        assert placement.top_offset == 90
        assert placement.raw_height == 30
        assert placement.height == 30

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            GridWindow(start_hour=20, end_hour=9)
        with pytest.raises(ValueError):
            GridWindow(slot_height=0)


class TestLayout:
    """Tests for whole-day layouts."""

    def setup_method(self):
        self.builder = GridBuilder()

    def test_appointments_and_blocks_are_placed(self):
        day = _working_day(_block(time(13, 0), time(14, 0)))

        layout = self.builder.layout(day, events=[_appointment(time(10, 0), time(11, 30))])

        assert layout.date == MONDAY
        assert layout.is_working_day
        assert [placement.kind for placement in layout.placements] == [
            PlacementKind.APPOINTMENT,
            PlacementKind.BLOCK,
        ]
        assert layout.of_kind(PlacementKind.BLOCK)[0].top_offset == 320

    def test_overlapping_intervals_are_placed_independently(self):
        day = _working_day(_block(time(10, 30), time(11, 0)))

        layout = self.builder.layout(day, events=[_appointment(time(10, 0), time(11, 30))])

        appointment, block = layout.placements
        assert appointment.top_offset == 80
        assert block.top_offset == 120

    def test_working_span(self):
        layout = self.builder.layout(_working_day())

        assert layout.working_span is not None
        assert layout.working_span.top_offset == 80
        assert layout.working_span.raw_height == 800

    def test_day_off_has_no_working_span(self):
        day = ResolvedDay(date=MONDAY, is_working_day=False, blocks=(_block(time(13, 0), time(14, 0)),))

        layout = self.builder.layout(day)

        assert not layout.is_working_day
        assert layout.working_span is None
        assert len(layout.placements) == 1


class TestSlotStates:
    """Tests for per-hour classification."""

    def test_hour_marks_include_both_ends(self):
        assert hour_marks(GridWindow(start_hour=9, end_hour=23)) == list(range(9, 24))

    def test_working_day_states(self):
        builder = GridBuilder(GridWindow(start_hour=9, end_hour=12))
        day = ResolvedDay(
            date=MONDAY,
            is_working_day=True,
            start_time=time(10, 0),
            end_time=time(12, 0),
            blocks=(_block(time(11, 0), time(12, 0)),),
        )

        assert builder.slot_states(day) == [
            (9, SlotState.OUTSIDE_HOURS),
            (10, SlotState.AVAILABLE),
            (11, SlotState.BLOCKED),
            (12, SlotState.OUTSIDE_HOURS),
        ]

    def test_half_hour_break_blocks_its_row(self):
        """A break starting mid-hour still marks that hour row as blocked."""
        builder = GridBuilder(GridWindow(start_hour=12, end_hour=14))
        day = _working_day(_block(time(13, 30), time(14, 0)))

        assert builder.slot_states(day) == [
            (12, SlotState.AVAILABLE),
            (13, SlotState.BLOCKED),
            (14, SlotState.AVAILABLE),
        ]

    def test_day_off_states(self):
        builder = GridBuilder(GridWindow(start_hour=9, end_hour=10))
        day = ResolvedDay(date=MONDAY, is_working_day=False)

        assert builder.slot_states(day) == [(9, SlotState.DAY_OFF), (10, SlotState.DAY_OFF)]


class TestCurrentTimeOffset:
    """Tests for the now-indicator position."""

    def setup_method(self):
        self.builder = GridBuilder()

    def test_inside_window(self):
        assert self.builder.current_time_offset(time(10, 30)) == 120

    def test_accepts_datetime(self):
        assert self.builder.current_time_offset(datetime(2026, 2, 16, 9, 0)) == 0

    def test_outside_window(self):
        assert self.builder.current_time_offset(time(8, 59)) is None
        assert self.builder.current_time_offset(time(23, 30)) is None
