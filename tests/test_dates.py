"""
Tests for calendar-date and clock-time helpers.
"""

from datetime import date, datetime, time

import pendulum
import pytest

from salonschedule.domain.dates import (
    date_range,
    day_name,
    day_of_week,
    format_date,
    format_time,
    hour_decimal,
    month_bounds,
    month_grid,
    optional_clock_time,
    parse_clock_time,
    to_calendar_date,
    week_dates,
    week_start,
)


class TestToCalendarDate:
    """Tests for date normalization."""

    def test_plain_date_string(self):
        assert to_calendar_date("2026-02-16") == pendulum.date(2026, 2, 16)

    def test_timestamp_string_is_truncated(self):
        """Store timestamps keep their written calendar date."""
        assert to_calendar_date("2026-02-16T00:00:00.000Z") == pendulum.date(2026, 2, 16)

    def test_offset_timestamp_is_not_converted(self):
        assert to_calendar_date("2026-02-16T23:30:00+05:00") == pendulum.date(2026, 2, 16)

    def test_stdlib_date_and_datetime(self):
        assert to_calendar_date(date(2026, 2, 16)) == pendulum.date(2026, 2, 16)
        assert to_calendar_date(datetime(2026, 2, 16, 22, 15)) == pendulum.date(2026, 2, 16)

    @pytest.mark.parametrize("value", ["", "   ", "not-a-date"])
    def test_invalid_values_raise(self, value):
        with pytest.raises(ValueError):
            to_calendar_date(value)


class TestClockTimes:
    """Tests for HH:MM parsing and formatting."""

    def test_parse_clock_time(self):
        assert parse_clock_time("10:30") == time(10, 30)

    def test_seconds_suffix_is_tolerated(self):
        assert parse_clock_time("10:30:00") == time(10, 30)

    def test_time_values_lose_seconds(self):
        assert parse_clock_time(time(9, 15, 42)) == time(9, 15)

    @pytest.mark.parametrize("value", ["24:00", "9:3", "ab:cd", "", 930])
    def test_invalid_clock_time(self, value):
        with pytest.raises(ValueError):
            parse_clock_time(value)

    def test_optional_clock_time(self):
        assert optional_clock_time(None) is None
        assert optional_clock_time("") is None
        assert optional_clock_time("22:00") == time(22, 0)

    def test_format_time(self):
        assert format_time(time(9, 5)) == "09:05"
        assert format_time(None) == "-"

    def test_hour_decimal(self):
        assert hour_decimal(time(11, 30)) == 11.5
        assert hour_decimal(time(10, 15)) == 10.25


class TestWeekdays:
    """Weekday indexing is 0=Sunday .. 6=Saturday."""

    def test_day_of_week(self):
        assert day_of_week(pendulum.date(2026, 2, 15)) == 0  # Sunday
        assert day_of_week(pendulum.date(2026, 2, 16)) == 1  # Monday
        assert day_of_week(pendulum.date(2026, 2, 21)) == 6  # Saturday

    def test_day_name(self):
        assert day_name(pendulum.date(2026, 2, 16)) == "Mon"
        assert day_name(pendulum.date(2026, 2, 15), full=True) == "Sunday"


class TestCalendarRanges:
    """Tests for range and calendar layout helpers."""

    def test_date_range_is_inclusive_and_ascending(self):
        days = list(date_range("2026-02-27", "2026-03-02"))

        assert [format_date(day) for day in days] == [
            "2026-02-27",
            "2026-02-28",
            "2026-03-01",
            "2026-03-02",
        ]

    def test_date_range_single_day(self):
        assert list(date_range("2026-02-16", "2026-02-16")) == [pendulum.date(2026, 2, 16)]

    def test_date_range_reversed_is_empty(self):
        assert list(date_range("2026-02-17", "2026-02-16")) == []

    def test_week_start_is_monday(self):
        assert week_start("2026-02-19") == pendulum.date(2026, 2, 16)
        assert week_start("2026-02-22") == pendulum.date(2026, 2, 16)  # Sunday belongs to the same week

    def test_week_dates(self):
        dates = week_dates("2026-02-18")

        assert len(dates) == 7
        assert dates[0] == pendulum.date(2026, 2, 16)
        assert dates[-1] == pendulum.date(2026, 2, 22)

    def test_month_bounds(self):
        assert month_bounds(2026, 2) == (pendulum.date(2026, 2, 1), pendulum.date(2026, 2, 28))
        assert month_bounds(2028, 2)[1] == pendulum.date(2028, 2, 29)
        assert month_bounds(2026, 12)[1] == pendulum.date(2026, 12, 31)

    def test_month_grid_pads_to_full_weeks(self):
        """February 2026 starts on a Sunday."""
        grid = month_grid(2026, 2)

        assert len(grid) == 5
        assert all(len(week) == 7 for week in grid)
        assert grid[0] == [None] * 6 + [pendulum.date(2026, 2, 1)]
        assert grid[1][0] == pendulum.date(2026, 2, 2)
        assert grid[-1][-1] is None
        assert sum(1 for week in grid for cell in week if cell is not None) == 28
