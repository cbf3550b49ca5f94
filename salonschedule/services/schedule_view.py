"""
Read-side service: load records for a window and resolve them.

The service only coordinates the store and the resolver; it holds no cache,
so a fresh call after a write always reflects the store.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from ..domain.dates import DateLike, format_date, month_bounds, to_calendar_date, week_dates
from ..domain.models import BreakTemplate, ResolvedDay, TimeTemplate
from ..domain.resolver import ScheduleResolver
from .schedule_store import ScheduleStoreProtocol

logger = logging.getLogger(__name__)


class ScheduleViewService:
    """Loads rules, exceptions and blocks and turns them into resolved days."""

    def __init__(
        self,
        store: ScheduleStoreProtocol,
        resolver: ScheduleResolver | None = None,
    ) -> None:
        self._store = store
        self._resolver = resolver or ScheduleResolver()

    def load_range(self, employee_id: str, from_date: DateLike, to_date: DateLike) -> List[ResolvedDay]:
        """Resolve every date of the inclusive range."""
        start = to_calendar_date(from_date)
        end = to_calendar_date(to_date)

        logger.debug(
            "Loading schedule for %s from %s to %s",
            employee_id,
            format_date(start),
            format_date(end),
        )

        rules = self._store.get_rules(employee_id)
        exceptions = self._store.get_exceptions(employee_id, start, end)
        blocks = self._store.get_blocks(employee_id, start, end)

        return self._resolver.resolve_range(employee_id, start, end, rules, exceptions, blocks)

    def load_week(self, employee_id: str, any_day: DateLike) -> List[ResolvedDay]:
        """Resolve Monday..Sunday of the week containing ``any_day``."""
        dates = week_dates(any_day)
        return self.load_range(employee_id, dates[0], dates[-1])

    def load_month(self, employee_id: str, year: int, month: int) -> List[ResolvedDay]:
        first, last = month_bounds(year, month)
        return self.load_range(employee_id, first, last)

    @staticmethod
    def selection_template(
        resolved_days: Sequence[ResolvedDay],
        day: DateLike,
    ) -> Tuple[TimeTemplate, List[BreakTemplate]] | None:
        """
        Template seeded from an existing working day, used when the first
        date of a new selection is already scheduled.

        Returns None when the date is not a working day in ``resolved_days``.
        """
        target = to_calendar_date(day)

        for resolved in resolved_days:
            if resolved.date != target:
                continue
            if not resolved.is_working_day or resolved.start_time is None or resolved.end_time is None:
                return None

            template = TimeTemplate(start_time=resolved.start_time, end_time=resolved.end_time)
            breaks = [
                BreakTemplate(start_time=block.start_time, end_time=block.end_time, reason=block.reason)
                for block in resolved.blocks
            ]
            return template, breaks

        return None
