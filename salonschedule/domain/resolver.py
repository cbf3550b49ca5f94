"""
Schedule resolution: merging weekly rules, date exceptions and blocks.

Pure domain logic without any external dependencies (no API calls, no I/O).
"""

from typing import Dict, Iterable, List, Optional

from pendulum import Date

from .dates import DateLike, date_range, day_of_week, to_calendar_date
from .models import Block, ResolvedDay, Rule, ScheduleException


class ScheduleResolver:
    """
    Resolves an employee's effective schedule for single dates or ranges.

    Precedence:
    1. An exception for the exact date replaces everything the rule says
    2. Otherwise the rule for the date's weekday applies
    3. Otherwise the day is off

    Blocks for the date are attached verbatim, whether or not the day is a
    working day. Inputs are never mutated.
    """

    def resolve(
        self,
        employee_id: str,
        day: DateLike,
        rules: Iterable[Rule],
        exceptions: Iterable[ScheduleException],
        blocks: Iterable[Block],
    ) -> ResolvedDay:
        """
        Resolve one date.

        Args:
            employee_id: Employee whose records are considered
            day: Calendar date to resolve
            rules: Weekly rules (records of other employees are ignored)
            exceptions: Date exceptions
            blocks: Time blocks

        Returns:
            ResolvedDay for the date
        """
        target = to_calendar_date(day)

        rule_by_weekday = self._index_rules(employee_id, rules)
        exception_by_date = self._index_exceptions(employee_id, exceptions)
        blocks_by_date = self._group_blocks(employee_id, blocks)

        return self._resolve_indexed(
            target,
            rule_by_weekday,
            exception_by_date,
            blocks_by_date,
        )

    def resolve_range(
        self,
        employee_id: str,
        from_date: DateLike,
        to_date: DateLike,
        rules: Iterable[Rule],
        exceptions: Iterable[ScheduleException],
        blocks: Iterable[Block],
    ) -> List[ResolvedDay]:
        """
        Resolve every calendar date in the inclusive range, ascending.

        Always yields one entry per date, even without any records.
        """
        rule_by_weekday = self._index_rules(employee_id, rules)
        exception_by_date = self._index_exceptions(employee_id, exceptions)
        blocks_by_date = self._group_blocks(employee_id, blocks)

        return [
            self._resolve_indexed(target, rule_by_weekday, exception_by_date, blocks_by_date)
            for target in date_range(from_date, to_date)
        ]

    def _resolve_indexed(
        self,
        target: Date,
        rule_by_weekday: Dict[int, Rule],
        exception_by_date: Dict[Date, ScheduleException],
        blocks_by_date: Dict[Date, List[Block]],
    ) -> ResolvedDay:
        day_blocks = tuple(blocks_by_date.get(target, []))

        exception = exception_by_date.get(target)
        if exception is not None:
            return ResolvedDay(
                date=target,
                is_working_day=exception.is_working_day,
                start_time=exception.start_time,
                end_time=exception.end_time,
                blocks=day_blocks,
                source_is_exception=True,
            )

        rule: Optional[Rule] = rule_by_weekday.get(day_of_week(target))
        if rule is not None and rule.is_working_day:
            return ResolvedDay(
                date=target,
                is_working_day=True,
                start_time=rule.start_time,
                end_time=rule.end_time,
                blocks=day_blocks,
            )

        return ResolvedDay(date=target, is_working_day=False, blocks=day_blocks)

    @staticmethod
    def _index_rules(employee_id: str, rules: Iterable[Rule]) -> Dict[int, Rule]:
        """Map weekday -> rule; the first rule for a weekday wins."""
        indexed: Dict[int, Rule] = {}
        for rule in rules:
            if rule.employee_id != employee_id:
                continue
            indexed.setdefault(rule.day_of_week, rule)
        return indexed

    @staticmethod
    def _index_exceptions(
        employee_id: str,
        exceptions: Iterable[ScheduleException],
    ) -> Dict[Date, ScheduleException]:
        """Map date -> exception; the first exception for a date wins."""
        indexed: Dict[Date, ScheduleException] = {}
        for exception in exceptions:
            if exception.employee_id != employee_id:
                continue
            indexed.setdefault(to_calendar_date(exception.date), exception)
        return indexed

    @staticmethod
    def _group_blocks(employee_id: str, blocks: Iterable[Block]) -> Dict[Date, List[Block]]:
        grouped: Dict[Date, List[Block]] = {}
        for block in blocks:
            if block.employee_id != employee_id:
                continue
            grouped.setdefault(to_calendar_date(block.date), []).append(block)
        return grouped
