"""
Protocol describing the schedule store consumed by the services.
"""

from __future__ import annotations

from datetime import time
from typing import List, Optional, Protocol, Sequence

from pendulum import Date

from ..domain.models import Block, Rule, ScheduleException


class ScheduleStoreProtocol(Protocol):
    """
    Persistence for rules, exceptions and blocks.

    Implementations return domain objects with calendar dates already
    normalized and raise ``StoreError`` (or ``StoreNotFoundError``) on failure.
    """

    def get_rules(self, employee_id: str) -> List[Rule]:
        """Return the employee's weekly rules (sparse, at most one per weekday)."""

    def save_rules(self, employee_id: str, rules: Sequence[Rule]) -> List[Rule]:
        """Replace the whole weekly template."""

    def get_exceptions(self, employee_id: str, from_date: Date, to_date: Date) -> List[ScheduleException]:
        """Return exceptions in the inclusive date range."""

    def save_exception(
        self,
        employee_id: str,
        date: Date,
        is_working_day: bool,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
    ) -> ScheduleException:
        """Create or replace the exception for a date."""

    def delete_exception(self, employee_id: str, date: Date) -> None:
        """Delete the exception for a date."""

    def get_blocks(self, employee_id: str, from_date: Date, to_date: Date) -> List[Block]:
        """Return blocks in the inclusive date range."""

    def create_block(
        self,
        employee_id: str,
        date: Date,
        start_time: time,
        end_time: time,
        reason: Optional[str] = None,
    ) -> Block:
        """Create a block and return it with its store-assigned id."""

    def delete_block(self, block_id: str) -> None:
        """Delete one block."""
