"""
Tests for the salon REST API client.
"""

import json
from datetime import time
from typing import Any, Dict, List

import pendulum
import pytest
import requests

from salonschedule.adapters.api_client import ScheduleApiClient
from salonschedule.domain.exceptions import StoreError, StoreNotFoundError
from salonschedule.domain.models import Rule

MONDAY = pendulum.date(2026, 2, 16)


class FakeResponse:
    """Just enough of requests.Response for the client."""

    def __init__(self, status_code: int = 200, body: Any = None, reason: str = "OK"):
        self.status_code = status_code
        self.reason = reason
        self._body = body
        self.content = b"" if body is None else json.dumps(body).encode("utf-8")

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} {self.reason}")


@pytest.fixture
def recorder(monkeypatch):
    """Patch requests.request and record each call; queue responses in order."""
    calls: List[Dict[str, Any]] = []
    responses: List[Any] = []

    def fake_request(method, url, headers=None, params=None, json=None, timeout=None):
        calls.append({"method": method, "url": url, "headers": headers, "params": params, "json": json, "timeout": timeout})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(requests, "request", fake_request)
    return calls, responses


def _client() -> ScheduleApiClient:
    return ScheduleApiClient("https://salon.example.com/api/", "token-123", timeout=5)


class TestScheduleApiClient:
    """Tests for ScheduleApiClient."""

    def test_get_rules(self, recorder):
        calls, responses = recorder
        responses.append(FakeResponse(body={
            "employeeId": "emp-1",
            "days": [
                {"id": "r1", "dayOfWeek": 1, "isWorkingDay": True, "startTime": "10:00", "endTime": "20:00"},
                {"id": "r2", "dayOfWeek": 0, "isWorkingDay": False, "startTime": None, "endTime": None},
            ],
        }))

        rules = _client().get_rules("emp-1")

        assert calls[0]["method"] == "GET"
        assert calls[0]["url"] == "https://salon.example.com/api/schedule/rules"
        assert calls[0]["params"] == {"employeeId": "emp-1"}
        assert calls[0]["headers"]["Authorization"] == "Bearer token-123"
        assert calls[0]["timeout"] == 5
        assert [(rule.day_of_week, rule.start_time) for rule in rules] == [(1, time(10, 0)), (0, None)]

    def test_bad_records_are_skipped(self, recorder):
        _, responses = recorder
        responses.append(FakeResponse(body={"items": [
            {"date": "2026-02-16T00:00:00.000Z", "isWorkingDay": False},
            {"date": "garbage", "isWorkingDay": True},
        ]}))

        exceptions = _client().get_exceptions("emp-1", MONDAY, MONDAY.add(days=6))

        assert len(exceptions) == 1
        assert exceptions[0].date == MONDAY

    def test_get_exceptions_sends_date_window(self, recorder):
        calls, responses = recorder
        responses.append(FakeResponse(body={"items": []}))

        _client().get_exceptions("emp-1", MONDAY, MONDAY.add(days=6))

        assert calls[0]["params"] == {"employeeId": "emp-1", "from": "2026-02-16", "to": "2026-02-22"}

    def test_save_rules_payload(self, recorder):
        calls, responses = recorder
        responses.append(FakeResponse(body={"days": []}))
        rule = Rule(employee_id="emp-1", day_of_week=3, is_working_day=True, start_time=time(9, 0), end_time=time(17, 30))

        _client().save_rules("emp-1", [rule])

        assert calls[0]["json"] == {
            "employeeId": "emp-1",
            "days": [{"dayOfWeek": 3, "isWorkingDay": True, "startTime": "09:00", "endTime": "17:30"}],
        }

    def test_save_exception_day_off_omits_times(self, recorder):
        calls, responses = recorder
        responses.append(FakeResponse(body={"id": "e1", "date": "2026-02-16", "isWorkingDay": False}))

        exception = _client().save_exception("emp-1", MONDAY, False, time(10, 0), time(12, 0))

        assert calls[0]["json"] == {"employeeId": "emp-1", "date": "2026-02-16", "isWorkingDay": False}
        assert exception.id == "e1"
        assert not exception.is_working_day

    def test_create_block(self, recorder):
        calls, responses = recorder
        responses.append(FakeResponse(status_code=201, body={
            "id": "b1", "date": "2026-02-16T00:00:00.000Z", "startTime": "13:00", "endTime": "14:00", "reason": "Break",
        }))

        block = _client().create_block("emp-1", MONDAY, time(13, 0), time(14, 0), "Break")

        assert calls[0]["json"]["reason"] == "Break"
        assert block.id == "b1"
        assert block.date == MONDAY

    def test_delete_block_path(self, recorder):
        calls, responses = recorder
        responses.append(FakeResponse(body={"success": True}))

        _client().delete_block("b1")

        assert calls[0]["method"] == "DELETE"
        assert calls[0]["url"].endswith("/schedule/blocks/b1")

    def test_delete_exception_with_empty_body(self, recorder):
        calls, responses = recorder
        responses.append(FakeResponse(status_code=204))

        _client().delete_exception("emp-1", MONDAY)

        assert calls[0]["params"] == {"employeeId": "emp-1", "date": "2026-02-16"}

    def test_not_found(self, recorder):
        _, responses = recorder
        responses.append(FakeResponse(status_code=404, body={"message": "Exception not found"}, reason="Not Found"))

        with pytest.raises(StoreNotFoundError, match="Exception not found"):
            _client().delete_exception("emp-1", MONDAY)

    def test_http_error_uses_back_end_message(self, recorder):
        _, responses = recorder
        responses.append(FakeResponse(
            status_code=400,
            body={"message": ["startTime must be HH:MM", "endTime must be HH:MM"]},
            reason="Bad Request",
        ))

        with pytest.raises(StoreError, match="startTime must be HH:MM; endTime must be HH:MM"):
            _client().create_block("emp-1", MONDAY, time(13, 0), time(14, 0))

    def test_network_error(self, recorder):
        _, responses = recorder
        responses.append(requests.exceptions.ConnectionError("connection refused"))

        with pytest.raises(StoreError, match="connection refused"):
            _client().get_rules("emp-1")

    def test_unexpected_shape(self, recorder):
        _, responses = recorder
        responses.append(FakeResponse(body=[1, 2, 3]))

        with pytest.raises(StoreError, match="Unexpected response shape"):
            _client().get_blocks("emp-1", MONDAY, MONDAY)
