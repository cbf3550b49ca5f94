"""
Salon REST API client for schedule rules, exceptions and blocks.
"""

import logging
from datetime import time
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import requests
from pendulum import Date

from ..domain.dates import format_clock_time, format_date
from ..domain.exceptions import StoreError, StoreNotFoundError
from ..domain.models import Block, Rule, ScheduleException
from .serialization import (
    block_from_payload,
    exception_from_payload,
    rule_from_payload,
    rule_to_payload,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScheduleApiClient:
    """
    Client for the salon back end's ``/schedule`` endpoints.

    Implements ``ScheduleStoreProtocol``. Every failure surfaces as a
    ``StoreError``; HTTP 404 becomes ``StoreNotFoundError``.
    """

    def __init__(self, base_url: str, access_token: str, timeout: float = 30):
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. https://salon.example.com/api
            access_token: Bearer token from ApiAuthenticator
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json"
        }

    def get_rules(self, employee_id: str) -> List[Rule]:
        data = self._request("GET", "/schedule/rules", params={"employeeId": employee_id})
        return self._parse_items(data, "days", lambda item: rule_from_payload(employee_id, item))

    def save_rules(self, employee_id: str, rules: Sequence[Rule]) -> List[Rule]:
        payload = {
            "employeeId": employee_id,
            "days": [rule_to_payload(rule) for rule in rules],
        }
        data = self._request("POST", "/schedule/rules", json=payload)
        return self._parse_items(data, "days", lambda item: rule_from_payload(employee_id, item))

    def get_exceptions(self, employee_id: str, from_date: Date, to_date: Date) -> List[ScheduleException]:
        params = {
            "employeeId": employee_id,
            "from": format_date(from_date),
            "to": format_date(to_date),
        }
        data = self._request("GET", "/schedule/exceptions", params=params)
        return self._parse_items(data, "items", lambda item: exception_from_payload(employee_id, item))

    def save_exception(
        self,
        employee_id: str,
        date: Date,
        is_working_day: bool,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
    ) -> ScheduleException:
        payload: Dict[str, Any] = {
            "employeeId": employee_id,
            "date": format_date(date),
            "isWorkingDay": is_working_day,
        }
        if is_working_day and start_time and end_time:
            payload["startTime"] = format_clock_time(start_time)
            payload["endTime"] = format_clock_time(end_time)

        data = self._request("POST", "/schedule/exceptions", json=payload)
        return self._parse_one(data, lambda item: exception_from_payload(employee_id, item))

    def delete_exception(self, employee_id: str, date: Date) -> None:
        params = {"employeeId": employee_id, "date": format_date(date)}
        self._request("DELETE", "/schedule/exceptions", params=params)

    def get_blocks(self, employee_id: str, from_date: Date, to_date: Date) -> List[Block]:
        params = {
            "employeeId": employee_id,
            "from": format_date(from_date),
            "to": format_date(to_date),
        }
        data = self._request("GET", "/schedule/blocks", params=params)
        return self._parse_items(data, "blocks", lambda item: block_from_payload(employee_id, item))

    def create_block(
        self,
        employee_id: str,
        date: Date,
        start_time: time,
        end_time: time,
        reason: Optional[str] = None,
    ) -> Block:
        payload: Dict[str, Any] = {
            "employeeId": employee_id,
            "date": format_date(date),
            "startTime": format_clock_time(start_time),
            "endTime": format_clock_time(end_time),
        }
        if reason is not None:
            payload["reason"] = reason

        data = self._request("POST", "/schedule/blocks", json=payload)
        return self._parse_one(data, lambda item: block_from_payload(employee_id, item))

    def delete_block(self, block_id: str) -> None:
        self._request("DELETE", f"/schedule/blocks/{block_id}")

    def test_connection(self) -> Dict[str, Any]:
        """
        Test the connection and authentication by fetching the current user.

        Returns:
            User info ({userId, companyId})
        """
        return self._request("GET", "/auth/me") or {}

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, url, params)

        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=json,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise StoreError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise StoreNotFoundError(f"{method} {path}: {self._error_message(response)}")

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise StoreError(
                f"{method} {path} returned {response.status_code}: {self._error_message(response)}"
            ) from e

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"{method} {path} returned invalid JSON: {e}") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Extract the back end's error message, falling back to the reason phrase."""
        try:
            body = response.json()
        except ValueError:
            return response.reason or "unknown error"

        if isinstance(body, dict):
            message = body.get("message")
            if isinstance(message, list):
                return "; ".join(str(part) for part in message)
            if message:
                return str(message)
        return response.reason or "unknown error"

    @staticmethod
    def _parse_items(data: Any, key: str, parse: Callable[[Dict[str, Any]], T]) -> List[T]:
        """
        Parse a list response wrapped in ``{key: [...]}``.

        Unparseable records are skipped with a warning, as the rest of the
        window is still usable.
        """
        if not isinstance(data, dict):
            raise StoreError(f"Unexpected response shape: expected an object with '{key}'")

        parsed: List[T] = []
        for item in data.get(key) or []:
            try:
                parsed.append(parse(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Could not parse schedule record %s: %s", item, e)
                continue
        return parsed

    @staticmethod
    def _parse_one(data: Any, parse: Callable[[Dict[str, Any]], T]) -> T:
        try:
            return parse(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Could not parse store response {data!r}: {e}") from e
