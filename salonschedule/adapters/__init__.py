"""
Adapters layer - External integrations (salon REST API, offline store).
"""

from .api_client import ScheduleApiClient
from .authenticator import ApiAuthenticator
from .memory_store import InMemoryScheduleStore

__all__ = ["ScheduleApiClient", "ApiAuthenticator", "InMemoryScheduleStore"]
