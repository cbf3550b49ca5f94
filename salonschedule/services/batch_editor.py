"""
Schedule write workflows: batch template application, day-off reverts and
single-cell edits.

Every write path is gated by the access policy and validated before the
first store call. Batches are processed date by date; a failing date never
stops the remaining ones, and the result reports exactly which dates
succeeded. The service keeps no state between calls, so callers re-resolve
after each operation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from pendulum import Date

from ..domain.dates import DateLike, format_date, to_calendar_date
from ..domain.dates import day_of_week as weekday_of
from ..domain.exceptions import StoreError, StoreNotFoundError
from ..domain.models import (
    Actor,
    BatchResult,
    Block,
    BreakTemplate,
    DaySchedule,
    Rule,
    ScheduleException,
    TimeTemplate,
)
from ..domain.policy import AccessPolicy
from ..domain.validation import (
    DEFAULT_TIME_STEP_MINUTES,
    validate_dates,
    validate_day_schedule,
    validate_template,
    validate_weekly_rules,
)
from .schedule_store import ScheduleStoreProtocol

logger = logging.getLogger(__name__)

DEFAULT_BREAK_REASON = "Break"


@dataclass
class _DateWrite:
    """Bookkeeping for one date so a failed write can be compensated."""
    day: Date
    prior_exception: Optional[ScheduleException]
    prior_blocks: List[Block]
    exception_written: bool = False
    deleted_blocks: List[Block] = field(default_factory=list)
    created_blocks: List[Block] = field(default_factory=list)


class BatchEditService:
    """
    Orchestrates schedule writes through a store.

    Compensation policy for every batch: each date snapshots its exception
    and blocks before writing. When a later step fails, blocks created so far
    are deleted, deleted prior blocks are re-created and the prior exception
    is restored (or the new one removed). ``DateFailure.rolled_back`` tells
    whether the date ended up in its prior state.
    """

    def __init__(
        self,
        store: ScheduleStoreProtocol,
        policy: AccessPolicy | None = None,
        step_minutes: int = DEFAULT_TIME_STEP_MINUTES,
        default_break_reason: str = DEFAULT_BREAK_REASON,
    ) -> None:
        self._store = store
        self._policy = policy or AccessPolicy()
        self._step_minutes = step_minutes
        self._default_break_reason = default_break_reason

    def apply_template(
        self,
        *,
        actor: Actor,
        employee_id: str,
        dates: Iterable[DateLike],
        template: TimeTemplate,
        breaks: Sequence[BreakTemplate] = (),
    ) -> BatchResult:
        """
        Make every selected date a working day with the template hours and
        replace its blocks with the given breaks.

        Raises:
            AuthorizationError: If the actor may not edit the employee
            ScheduleValidationError: If the template, breaks or selection are invalid
        """
        self._policy.ensure_can_edit(actor, employee_id)
        validate_template(template, breaks, self._step_minutes)
        days = validate_dates(dates)

        return self._run_batch(
            employee_id,
            days,
            lambda write: self._write_template(employee_id, write, template, breaks),
            "Applying template",
        )

    def make_days_off(
        self,
        *,
        actor: Actor,
        employee_id: str,
        dates: Iterable[DateLike],
    ) -> BatchResult:
        """
        Turn every selected date into a day off and drop its blocks.

        When the weekly rule for a date is a working one, a non-working
        exception is stored so the rule is overridden for that date only.
        Otherwise the exception is removed and the rule (or its absence)
        already yields a day off.
        """
        self._policy.ensure_can_edit(actor, employee_id)
        days = validate_dates(dates)

        rules: List[Rule] = []
        loaded = False

        def write_day_off(write: _DateWrite) -> None:
            nonlocal rules, loaded
            if not loaded:
                rules = self._store.get_rules(employee_id)
                loaded = True
            self._write_cleared_day(
                employee_id,
                write,
                keep_day_off=self._rule_is_working(rules, write.day),
            )

        return self._run_batch(employee_id, days, write_day_off, "Marking day off")

    def revert_to_rule(
        self,
        *,
        actor: Actor,
        employee_id: str,
        dates: Iterable[DateLike],
    ) -> BatchResult:
        """
        Remove the exception and every block of each selected date, so the
        date follows its weekly rule again (a day off when there is none).
        """
        self._policy.ensure_can_edit(actor, employee_id)
        days = validate_dates(dates)

        return self._run_batch(
            employee_id,
            days,
            lambda write: self._write_cleared_day(employee_id, write, keep_day_off=False),
            "Reverting to weekly rule",
        )

    def set_day(
        self,
        *,
        actor: Actor,
        employee_id: str,
        day: DateLike,
        schedule: DaySchedule,
        as_exception: bool,
    ) -> ScheduleException | List[Rule]:
        """
        Single-cell edit from the week/day grid.

        With ``as_exception`` the edit applies to this date only. Without it
        the weekly rule for the date's weekday is replaced for every week;
        see ``replace_weekly_rule``.
        """
        if as_exception:
            return self.set_exception(
                actor=actor,
                employee_id=employee_id,
                day=day,
                schedule=schedule,
            )

        return self.replace_weekly_rule(
            actor=actor,
            employee_id=employee_id,
            day_of_week=weekday_of(to_calendar_date(day)),
            schedule=schedule,
        )

    def set_exception(
        self,
        *,
        actor: Actor,
        employee_id: str,
        day: DateLike,
        schedule: DaySchedule,
    ) -> ScheduleException:
        """
        Create or replace the exception for one date.

        Raises:
            StoreError: Propagated unchanged from the store
        """
        self._policy.ensure_can_edit(actor, employee_id)
        schedule = validate_day_schedule(schedule, self._step_minutes)
        target = validate_dates([day])[0]

        logger.debug("Saving exception for %s on %s", employee_id, format_date(target))
        return self._store.save_exception(
            employee_id,
            target,
            schedule.is_working_day,
            schedule.start_time,
            schedule.end_time,
        )

    def replace_weekly_rule(
        self,
        *,
        actor: Actor,
        employee_id: str,
        day_of_week: int,
        schedule: DaySchedule,
    ) -> List[Rule]:
        """
        Replace the rule for one weekday across all weeks.

        This is a recurring change; the rest of the weekly template is kept
        and the whole template is saved again.
        """
        self._policy.ensure_can_edit(actor, employee_id)
        schedule = validate_day_schedule(schedule, self._step_minutes)

        current = [
            rule for rule in self._store.get_rules(employee_id)
            if rule.day_of_week != day_of_week
        ]
        current.append(
            Rule(
                employee_id=employee_id,
                day_of_week=day_of_week,
                is_working_day=schedule.is_working_day,
                start_time=schedule.start_time,
                end_time=schedule.end_time,
            )
        )

        full = validate_weekly_rules(employee_id, current, self._step_minutes)
        logger.info("Replacing weekly rule for weekday %d of employee %s", day_of_week, employee_id)
        return self._store.save_rules(employee_id, full)

    def save_weekly_rules(
        self,
        *,
        actor: Actor,
        employee_id: str,
        rules: Iterable[Rule],
    ) -> List[Rule]:
        """Replace the whole weekly template; missing weekdays become days off."""
        self._policy.ensure_can_edit(actor, employee_id)
        full = validate_weekly_rules(employee_id, rules, self._step_minutes)
        return self._store.save_rules(employee_id, full)

    def _run_batch(
        self,
        employee_id: str,
        days: Sequence[Date],
        write_day: Callable[[_DateWrite], None],
        action: str,
    ) -> BatchResult:
        """Snapshot, write and, on failure, compensate each date in turn."""
        result = BatchResult()

        for day in days:
            try:
                write = self._snapshot(employee_id, day)
            except StoreError as exc:
                logger.warning("Could not read schedule for %s: %s", format_date(day), exc)
                result.record_failure(day, str(exc), rolled_back=True)
                continue

            try:
                write_day(write)
            except StoreError as exc:
                logger.warning("%s failed for %s: %s", action, format_date(day), exc)
                rolled_back = self._compensate(employee_id, write)
                result.record_failure(day, str(exc), rolled_back=rolled_back)
                continue

            result.record_success(day)

        logger.info(
            "%s: %d/%d dates succeeded for employee %s",
            action,
            len(result.succeeded_dates),
            len(days),
            employee_id,
        )
        return result

    def _snapshot(self, employee_id: str, day: Date) -> _DateWrite:
        exceptions = self._store.get_exceptions(employee_id, day, day)
        blocks = self._store.get_blocks(employee_id, day, day)

        prior_exception = next((item for item in exceptions if item.date == day), None)
        prior_blocks = [block for block in blocks if block.date == day]

        return _DateWrite(day=day, prior_exception=prior_exception, prior_blocks=prior_blocks)

    def _write_template(
        self,
        employee_id: str,
        write: _DateWrite,
        template: TimeTemplate,
        breaks: Sequence[BreakTemplate],
    ) -> None:
        logger.debug("Writing template for %s", format_date(write.day))

        self._store.save_exception(
            employee_id,
            write.day,
            True,
            template.start_time,
            template.end_time,
        )
        write.exception_written = True

        for block in write.prior_blocks:
            self._store.delete_block(block.id)
            write.deleted_blocks.append(block)

        for item in breaks:
            created = self._store.create_block(
                employee_id,
                write.day,
                item.start_time,
                item.end_time,
                item.reason or self._default_break_reason,
            )
            write.created_blocks.append(created)

    def _write_cleared_day(self, employee_id: str, write: _DateWrite, keep_day_off: bool) -> None:
        """
        Settle the exception first, then drop the date's blocks, so a failed
        exception write never costs a working day its breaks.
        """
        logger.debug("Clearing %s", format_date(write.day))

        if keep_day_off:
            self._store.save_exception(employee_id, write.day, False)
            write.exception_written = True
        elif write.prior_exception is not None:
            self._delete_exception_if_present(employee_id, write.day)
            write.exception_written = True

        for block in write.prior_blocks:
            self._store.delete_block(block.id)
            write.deleted_blocks.append(block)

    def _compensate(self, employee_id: str, write: _DateWrite) -> bool:
        """Try to restore the date's prior state; return True when fully restored."""
        restored = True

        for block in write.created_blocks:
            try:
                self._store.delete_block(block.id)
            except StoreError as exc:
                logger.warning("Could not remove block %s during rollback: %s", block.id, exc)
                restored = False

        for block in write.deleted_blocks:
            try:
                self._store.create_block(
                    employee_id,
                    block.date,
                    block.start_time,
                    block.end_time,
                    block.reason,
                )
            except StoreError as exc:
                logger.warning("Could not restore block %s during rollback: %s", block.id, exc)
                restored = False

        if write.exception_written:
            prior = write.prior_exception
            try:
                if prior is not None:
                    self._store.save_exception(
                        employee_id,
                        write.day,
                        prior.is_working_day,
                        prior.start_time,
                        prior.end_time,
                    )
                else:
                    self._delete_exception_if_present(employee_id, write.day)
            except StoreError as exc:
                logger.warning(
                    "Could not restore exception for %s during rollback: %s",
                    format_date(write.day),
                    exc,
                )
                restored = False

        return restored

    def _delete_exception_if_present(self, employee_id: str, day: Date) -> None:
        try:
            self._store.delete_exception(employee_id, day)
        except StoreNotFoundError:
            logger.debug("No exception to delete for %s", format_date(day))

    @staticmethod
    def _rule_is_working(rules: Sequence[Rule], day: Date) -> bool:
        weekday = weekday_of(day)
        for rule in rules:
            if rule.day_of_week == weekday:
                return rule.is_working_day
        return False
