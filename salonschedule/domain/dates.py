"""
Calendar-date and clock-time helpers.

Every date that enters the domain passes through ``to_calendar_date`` so
that timestamp-bearing strings from the store (``2026-02-16T00:00:00.000Z``)
never leak past the adapter boundary. Clock times are plain
``datetime.time`` values with minute resolution.
"""

import re
from datetime import date, datetime, time
from typing import Iterator, List, Optional, Union

import pendulum
from pendulum import Date

DateLike = Union[str, date, datetime]
TimeLike = Union[str, time]

_HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
DAY_NAMES_FULL = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


def to_calendar_date(value: DateLike) -> Date:
    """
    Reduce a date, datetime or date/timestamp string to a calendar date.

    Timestamp strings are truncated to their calendar-date portion; no
    timezone conversion takes place.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return pendulum.date(value.year, value.month, value.day)

    if isinstance(value, date):
        if isinstance(value, Date):
            return value
        return pendulum.date(value.year, value.month, value.day)

    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Could not parse date: {value!r}")

    parsed = pendulum.parse(value.strip())

    if isinstance(parsed, datetime):
        return pendulum.date(parsed.year, parsed.month, parsed.day)
    if isinstance(parsed, date):
        return pendulum.date(parsed.year, parsed.month, parsed.day)

    raise ValueError(f"Could not parse date: {value!r}")


def parse_clock_time(value: TimeLike) -> time:
    """
    Parse an ``HH:MM`` string (seconds suffix tolerated) into a time.

    Raises:
        ValueError: If the value is not a valid clock time
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    if not isinstance(value, str):
        raise ValueError(f"Time must be HH:MM, got {value!r}")

    match = _HHMM_PATTERN.match(value.strip()[:5])
    if not match:
        raise ValueError(f"Time must be HH:MM, got {value!r}")

    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def optional_clock_time(value: Optional[TimeLike]) -> Optional[time]:
    """Parse a nullable clock time; empty strings count as missing."""
    if value is None or value == "":
        return None
    return parse_clock_time(value)


def format_clock_time(value: time) -> str:
    """Format a time as ``HH:MM``."""
    return f"{value.hour:02d}:{value.minute:02d}"


def format_time(value: Optional[time]) -> str:
    """Format a nullable time for display (``-`` when missing)."""
    if value is None:
        return "-"
    return format_clock_time(value)


def minutes_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


def hour_decimal(value: time) -> float:
    """Return hours as a decimal, e.g. 11:30 -> 11.5."""
    return value.hour + value.minute / 60


def day_of_week(value: date) -> int:
    """Return the weekday index with 0=Sunday .. 6=Saturday."""
    return value.isoweekday() % 7


def day_name(value: date, full: bool = False) -> str:
    names = DAY_NAMES_FULL if full else DAY_NAMES
    return names[day_of_week(value)]


def format_date(value: date) -> str:
    """Format a calendar date as ``YYYY-MM-DD`` (the store's wire format)."""
    return to_calendar_date(value).to_date_string()


def date_range(from_date: DateLike, to_date: DateLike) -> Iterator[Date]:
    """Yield every calendar date in the inclusive range, ascending."""
    current = to_calendar_date(from_date)
    end = to_calendar_date(to_date)

    while current <= end:
        yield current
        current = current.add(days=1)


def week_start(value: DateLike) -> Date:
    """Return the Monday of the week containing ``value``."""
    current = to_calendar_date(value)
    return current.subtract(days=current.weekday())


def week_dates(value: DateLike) -> List[Date]:
    """Return the seven dates (Monday..Sunday) of the week containing ``value``."""
    start = week_start(value)
    return [start.add(days=offset) for offset in range(7)]


def month_bounds(year: int, month: int) -> tuple[Date, Date]:
    """Return the first and last calendar date of a month."""
    first = pendulum.date(year, month, 1)
    last = first.add(months=1).subtract(days=1)
    return first, last


def month_grid(year: int, month: int) -> List[List[Optional[Date]]]:
    """
    Lay out a month as Monday-first weeks.

    Cells before the first and after the last day of the month are ``None``
    so that every week has exactly seven entries.
    """
    first, last = month_bounds(year, month)

    cells: List[Optional[Date]] = [None] * first.weekday()
    cells.extend(date_range(first, last))

    remainder = len(cells) % 7
    if remainder:
        cells.extend([None] * (7 - remainder))

    return [cells[index:index + 7] for index in range(0, len(cells), 7)]
