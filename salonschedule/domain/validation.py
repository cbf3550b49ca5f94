"""
Write-side validation. Everything here runs before any store call.
"""

from datetime import time
from typing import Iterable, List, Optional, Sequence

from pendulum import Date

from .dates import DateLike, format_clock_time, minutes_of_day, to_calendar_date
from .exceptions import ScheduleValidationError
from .models import BreakTemplate, DaySchedule, Rule, TimeTemplate

DEFAULT_TIME_STEP_MINUTES = 15


def validate_time_pair(
    start: Optional[time],
    end: Optional[time],
    step_minutes: int = DEFAULT_TIME_STEP_MINUTES,
    label: str = "Working hours",
) -> None:
    """
    Ensure a start/end pair is present, aligned to the step and ordered.

    Raises:
        ScheduleValidationError: If the pair is incomplete or invalid
    """
    if start is None or end is None:
        raise ScheduleValidationError(f"{label}: start_time and end_time are required")

    for value in (start, end):
        if minutes_of_day(value) % step_minutes != 0:
            raise ScheduleValidationError(
                f"{label}: {format_clock_time(value)} is not a multiple of {step_minutes} minutes"
            )

    if minutes_of_day(end) <= minutes_of_day(start):
        raise ScheduleValidationError(
            f"{label}: end time {format_clock_time(end)} must be later than "
            f"start time {format_clock_time(start)}"
        )


def validate_template(
    template: TimeTemplate,
    breaks: Sequence[BreakTemplate],
    step_minutes: int = DEFAULT_TIME_STEP_MINUTES,
) -> None:
    """
    Validate a batch template and its breaks.

    Breaks must each be valid, lie inside the template hours and not
    overlap one another (touching is fine).
    """
    validate_time_pair(template.start_time, template.end_time, step_minutes, "Template")

    for index, item in enumerate(breaks, 1):
        validate_time_pair(item.start_time, item.end_time, step_minutes, f"Break {index}")

        if (
            minutes_of_day(item.start_time) < minutes_of_day(template.start_time)
            or minutes_of_day(item.end_time) > minutes_of_day(template.end_time)
        ):
            raise ScheduleValidationError(
                f"Break {index} ({format_clock_time(item.start_time)}-"
                f"{format_clock_time(item.end_time)}) lies outside working hours "
                f"{format_clock_time(template.start_time)}-{format_clock_time(template.end_time)}"
            )

    ordered = sorted(breaks, key=lambda item: minutes_of_day(item.start_time))
    for previous, current in zip(ordered, ordered[1:]):
        if minutes_of_day(current.start_time) < minutes_of_day(previous.end_time):
            raise ScheduleValidationError(
                f"Breaks {format_clock_time(previous.start_time)}-{format_clock_time(previous.end_time)} "
                f"and {format_clock_time(current.start_time)}-{format_clock_time(current.end_time)} overlap"
            )


def validate_day_schedule(
    day: DaySchedule,
    step_minutes: int = DEFAULT_TIME_STEP_MINUTES,
) -> DaySchedule:
    """
    Validate a single-day edit; days off are normalized to null times.
    """
    if not day.is_working_day:
        return DaySchedule(is_working_day=False)

    validate_time_pair(day.start_time, day.end_time, step_minutes)
    return day


def validate_dates(dates: Iterable[DateLike]) -> List[Date]:
    """
    Normalize a date selection, keeping first-seen order and dropping
    duplicates.

    Raises:
        ScheduleValidationError: If the selection is empty or unparseable
    """
    normalized: List[Date] = []
    seen: set[Date] = set()

    for value in dates:
        try:
            day = to_calendar_date(value)
        except ValueError as exc:
            raise ScheduleValidationError(str(exc)) from exc

        if day not in seen:
            normalized.append(day)
            seen.add(day)

    if not normalized:
        raise ScheduleValidationError("Select at least one date")

    return normalized


def validate_weekly_rules(
    employee_id: str,
    rules: Iterable[Rule],
    step_minutes: int = DEFAULT_TIME_STEP_MINUTES,
) -> List[Rule]:
    """
    Validate a weekly template and expand it to all seven weekdays.

    Weekdays without a rule become days off, so the result always holds
    exactly one rule per weekday ordered 0..6.
    """
    by_day: dict[int, Rule] = {}

    for rule in rules:
        if not 0 <= rule.day_of_week <= 6:
            raise ScheduleValidationError(
                f"day_of_week must be between 0 and 6, got {rule.day_of_week}"
            )
        if rule.day_of_week in by_day:
            raise ScheduleValidationError(f"Duplicate rule for day_of_week {rule.day_of_week}")

        if rule.is_working_day:
            validate_time_pair(
                rule.start_time,
                rule.end_time,
                step_minutes,
                f"Rule for day {rule.day_of_week}",
            )
        by_day[rule.day_of_week] = rule

    full: List[Rule] = []
    for weekday in range(7):
        rule = by_day.get(weekday)
        if rule is None or not rule.is_working_day:
            full.append(Rule(employee_id=employee_id, day_of_week=weekday, is_working_day=False))
        else:
            full.append(
                Rule(
                    employee_id=employee_id,
                    day_of_week=weekday,
                    is_working_day=True,
                    start_time=rule.start_time,
                    end_time=rule.end_time,
                )
            )

    return full
