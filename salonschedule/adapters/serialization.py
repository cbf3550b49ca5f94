"""
Conversion between the salon API's JSON records and domain models.

This is the normalization boundary: dates are reduced to calendar dates and
time strings to ``HH:MM`` clock times before any domain object exists.
"""

from typing import Any, Dict

from ..domain.dates import format_clock_time, format_date, optional_clock_time, parse_clock_time, to_calendar_date
from ..domain.models import Block, Rule, ScheduleException


def rule_from_payload(employee_id: str, item: Dict[str, Any]) -> Rule:
    """
    Raises:
        KeyError: If a required field is missing
        ValueError: If a field cannot be parsed
    """
    return Rule(
        employee_id=item.get("employeeId", employee_id),
        day_of_week=int(item["dayOfWeek"]),
        is_working_day=bool(item["isWorkingDay"]),
        start_time=optional_clock_time(item.get("startTime")),
        end_time=optional_clock_time(item.get("endTime")),
        id=item.get("id"),
    )


def rule_to_payload(rule: Rule) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "dayOfWeek": rule.day_of_week,
        "isWorkingDay": rule.is_working_day,
        "startTime": format_clock_time(rule.start_time) if rule.is_working_day and rule.start_time else None,
        "endTime": format_clock_time(rule.end_time) if rule.is_working_day and rule.end_time else None,
    }
    if rule.id is not None:
        payload["id"] = rule.id
    return payload


def exception_from_payload(employee_id: str, item: Dict[str, Any]) -> ScheduleException:
    return ScheduleException(
        employee_id=item.get("employeeId", employee_id),
        date=to_calendar_date(item["date"]),
        is_working_day=bool(item["isWorkingDay"]),
        start_time=optional_clock_time(item.get("startTime")),
        end_time=optional_clock_time(item.get("endTime")),
        id=item.get("id"),
    )


def exception_to_payload(exception: ScheduleException) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "employeeId": exception.employee_id,
        "date": format_date(exception.date),
        "isWorkingDay": exception.is_working_day,
    }
    if exception.id is not None:
        payload["id"] = exception.id
    if exception.is_working_day:
        payload["startTime"] = format_clock_time(exception.start_time) if exception.start_time else None
        payload["endTime"] = format_clock_time(exception.end_time) if exception.end_time else None
    return payload


def block_from_payload(employee_id: str, item: Dict[str, Any]) -> Block:
    return Block(
        id=str(item["id"]),
        employee_id=item.get("employeeId", employee_id),
        date=to_calendar_date(item["date"]),
        start_time=parse_clock_time(item["startTime"]),
        end_time=parse_clock_time(item["endTime"]),
        reason=item.get("reason"),
    )


def block_to_payload(block: Block) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": block.id,
        "employeeId": block.employee_id,
        "date": format_date(block.date),
        "startTime": format_clock_time(block.start_time),
        "endTime": format_clock_time(block.end_time),
    }
    if block.reason is not None:
        payload["reason"] = block.reason
    return payload
