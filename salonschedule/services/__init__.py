"""
Service layer helpers that orchestrate the store and domain logic.
"""

from .batch_editor import BatchEditService
from .schedule_store import ScheduleStoreProtocol
from .schedule_view import ScheduleViewService

__all__ = ["BatchEditService", "ScheduleStoreProtocol", "ScheduleViewService"]
