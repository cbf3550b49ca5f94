"""
In-memory schedule store for offline use and tests.
"""

import itertools
import json
import logging
import re
from datetime import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pendulum import Date

from ..domain.dates import to_calendar_date
from ..domain.exceptions import StoreError, StoreNotFoundError
from ..domain.models import Block, Rule, ScheduleException
from .serialization import (
    block_from_payload,
    block_to_payload,
    exception_from_payload,
    exception_to_payload,
    rule_from_payload,
    rule_to_payload,
)

logger = logging.getLogger(__name__)

_SEQUENTIAL_ID = re.compile(r"^[a-z]+-(\d+)$")


class InMemoryScheduleStore:
    """
    Store that keeps rules, exceptions and blocks in dictionaries.

    Behaves like the salon back end: rules are replaced wholesale, exceptions
    are upserted per (employee, date), and deleting a missing record raises
    ``StoreNotFoundError``. Optionally seeded from a JSON file using the API's
    field names::

        {"rules": [...], "exceptions": [...], "blocks": [...]}

    Every rule, exception and block entry needs an ``employeeId``.
    """

    def __init__(self, data_file: Optional[Path] = None):
        self.data_file = data_file
        self._rules: Dict[str, Dict[int, Rule]] = {}
        self._exceptions: Dict[Tuple[str, Date], ScheduleException] = {}
        self._blocks: Dict[str, Block] = {}
        self._ids = itertools.count(1)

        if data_file is not None:
            self._load(data_file)

    def _load(self, data_file: Path) -> None:
        """Load seed data from JSON file."""
        if not data_file.exists():
            logger.info("Mock data file %s not found, starting empty", data_file)
            return

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(f"Could not read mock data {data_file}: {e}") from e

        try:
            for item in data.get("rules", []):
                rule = rule_from_payload(item["employeeId"], item)
                self._rules.setdefault(rule.employee_id, {})[rule.day_of_week] = rule

            for item in data.get("exceptions", []):
                exception = exception_from_payload(item["employeeId"], item)
                self._exceptions[(exception.employee_id, exception.date)] = exception

            unnumbered = []
            for item in data.get("blocks", []):
                if item.get("id") is None:
                    unnumbered.append(item)
                    continue
                block = block_from_payload(item["employeeId"], item)
                self._blocks[block.id] = block

            self._skip_loaded_ids()

            for item in unnumbered:
                block = block_from_payload(item["employeeId"], {**item, "id": self._next_id("blk")})
                self._blocks[block.id] = block
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Invalid mock data in {data_file}: {e}") from e

    def _skip_loaded_ids(self) -> None:
        """Continue numbering after the highest ``prefix-N`` id already stored."""
        loaded_ids = [
            rule.id for rules in self._rules.values() for rule in rules.values()
        ]
        loaded_ids.extend(exception.id for exception in self._exceptions.values())
        loaded_ids.extend(self._blocks)

        highest = 0
        for record_id in loaded_ids:
            match = _SEQUENTIAL_ID.match(str(record_id or ""))
            if match:
                highest = max(highest, int(match.group(1)))

        self._ids = itertools.count(highest + 1)

    def save_to_file(self, data_file: Optional[Path] = None) -> None:
        """Write the current state back to JSON."""
        target = data_file or self.data_file
        if target is None:
            raise StoreError("No data file configured for the in-memory store")

        data: Dict[str, List[Dict[str, Any]]] = {
            "rules": [
                {"employeeId": rule.employee_id, **rule_to_payload(rule)}
                for rules in self._rules.values()
                for rule in sorted(rules.values(), key=lambda r: r.day_of_week)
            ],
            "exceptions": [
                exception_to_payload(exception)
                for exception in sorted(self._exceptions.values(), key=lambda e: (e.employee_id, e.date))
            ],
            "blocks": [
                block_to_payload(block)
                for block in sorted(self._blocks.values(), key=lambda b: (b.employee_id, b.date, b.start_time))
            ],
        }

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StoreError(f"Could not write mock data {target}: {e}") from e

    def get_rules(self, employee_id: str) -> List[Rule]:
        rules = self._rules.get(employee_id, {})
        return [rules[day] for day in sorted(rules)]

    def save_rules(self, employee_id: str, rules: Sequence[Rule]) -> List[Rule]:
        self._rules[employee_id] = {
            rule.day_of_week: Rule(
                employee_id=employee_id,
                day_of_week=rule.day_of_week,
                is_working_day=rule.is_working_day,
                start_time=rule.start_time if rule.is_working_day else None,
                end_time=rule.end_time if rule.is_working_day else None,
                id=self._next_id("rule"),
            )
            for rule in rules
        }
        return self.get_rules(employee_id)

    def get_exceptions(self, employee_id: str, from_date: Date, to_date: Date) -> List[ScheduleException]:
        start, end = to_calendar_date(from_date), to_calendar_date(to_date)
        return sorted(
            (
                exception for (owner, day), exception in self._exceptions.items()
                if owner == employee_id and start <= day <= end
            ),
            key=lambda exception: exception.date,
        )

    def save_exception(
        self,
        employee_id: str,
        date: Date,
        is_working_day: bool,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
    ) -> ScheduleException:
        day = to_calendar_date(date)
        key = (employee_id, day)
        existing = self._exceptions.get(key)

        exception = ScheduleException(
            employee_id=employee_id,
            date=day,
            is_working_day=is_working_day,
            start_time=start_time if is_working_day else None,
            end_time=end_time if is_working_day else None,
            id=existing.id if existing is not None and existing.id else self._next_id("exc"),
        )
        self._exceptions[key] = exception
        return exception

    def delete_exception(self, employee_id: str, date: Date) -> None:
        key = (employee_id, to_calendar_date(date))
        if key not in self._exceptions:
            raise StoreNotFoundError("Exception not found")
        del self._exceptions[key]

    def get_blocks(self, employee_id: str, from_date: Date, to_date: Date) -> List[Block]:
        start, end = to_calendar_date(from_date), to_calendar_date(to_date)
        return sorted(
            (
                block for block in self._blocks.values()
                if block.employee_id == employee_id and start <= block.date <= end
            ),
            key=lambda block: (block.date, block.start_time),
        )

    def create_block(
        self,
        employee_id: str,
        date: Date,
        start_time: time,
        end_time: time,
        reason: Optional[str] = None,
    ) -> Block:
        block = Block(
            id=self._next_id("blk"),
            employee_id=employee_id,
            date=to_calendar_date(date),
            start_time=start_time,
            end_time=end_time,
            reason=reason,
        )
        self._blocks[block.id] = block
        return block

    def delete_block(self, block_id: str) -> None:
        if block_id not in self._blocks:
            raise StoreNotFoundError("Block not found")
        del self._blocks[block_id]

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"
