"""
Tests for the CLI commands, run offline against the JSON mock store.
"""

import json

import pytest
from typer.testing import CliRunner

from salonschedule import __version__
from salonschedule.adapters.memory_store import InMemoryScheduleStore
from salonschedule.cli.app import app

runner = CliRunner()

SEED = {
    "rules": [
        {"employeeId": "emp-1", "dayOfWeek": 1, "isWorkingDay": True, "startTime": "10:00", "endTime": "20:00"},
        {"employeeId": "emp-1", "dayOfWeek": 2, "isWorkingDay": True, "startTime": "10:00", "endTime": "20:00"},
    ],
    "exceptions": [],
    "blocks": [],
}


@pytest.fixture
def workspace(tmp_path):
    """Config plus seed data for --mock runs; returns (config_path, data_path)."""
    data_path = tmp_path / "schedule.json"
    data_path.write_text(json.dumps(SEED), encoding="utf-8")

    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "identity:\n"
        "  user_id: owner-1\n"
        "  role: owner\n"
        "mock_data_file: schedule.json\n",
        encoding="utf-8",
    )
    return config_path, data_path


def _run(config_path, *args):
    return runner.invoke(app, [*args, "--mock", "--config", str(config_path)])


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_week_shows_resolved_days(workspace):
    config_path, _ = workspace

    result = _run(config_path, "week", "emp-1", "--date", "2026-02-18")

    assert result.exit_code == 0, result.output
    assert "2026-02-16" in result.output
    assert "2026-02-22" in result.output
    assert "day off" in result.output


def test_month_renders(workspace):
    config_path, _ = workspace

    result = _run(config_path, "month", "emp-1", "--month", "2026-02")

    assert result.exit_code == 0, result.output
    assert "February 2026" in result.output


def test_apply_template_persists(workspace):
    config_path, data_path = workspace

    result = _run(
        config_path,
        "apply-template", "emp-1", "2026-02-18..2026-02-19",
        "--start", "11:00", "--end", "19:00",
        "-b", "13:00-14:00",
    )

    assert result.exit_code == 0, result.output
    store = InMemoryScheduleStore(data_file=data_path)
    exceptions = store.get_exceptions("emp-1", "2026-02-18", "2026-02-19")
    assert len(exceptions) == 2
    assert len(store.get_blocks("emp-1", "2026-02-18", "2026-02-19")) == 2


def test_apply_template_rejects_overlapping_breaks(workspace):
    config_path, data_path = workspace

    result = _run(
        config_path,
        "apply-template", "emp-1", "2026-02-18",
        "-b", "13:00-14:00", "-b", "13:30-14:30",
    )

    assert result.exit_code == 1
    assert "overlap" in result.output
    assert json.loads(data_path.read_text(encoding="utf-8")) == SEED


def test_days_off_overrides_weekly_rule(workspace):
    config_path, data_path = workspace

    result = _run(config_path, "days-off", "emp-1", "2026-02-17")

    assert result.exit_code == 0, result.output
    store = InMemoryScheduleStore(data_file=data_path)
    exceptions = store.get_exceptions("emp-1", "2026-02-17", "2026-02-17")
    assert [exception.is_working_day for exception in exceptions] == [False]


def test_revert_drops_override(workspace):
    config_path, data_path = workspace
    _run(config_path, "days-off", "emp-1", "2026-02-17")

    result = _run(config_path, "revert", "emp-1", "2026-02-17")

    assert result.exit_code == 0, result.output
    store = InMemoryScheduleStore(data_file=data_path)
    assert store.get_exceptions("emp-1", "2026-02-17", "2026-02-17") == []


def test_set_day_recurring_needs_confirmation(workspace):
    config_path, _ = workspace

    result = runner.invoke(
        app,
        ["set-day", "emp-1", "2026-02-18", "--start", "10:00", "--end", "18:00", "--recurring", "--mock", "--config", str(config_path)],
        input="n\n",
    )

    assert result.exit_code == 1
    assert "every Wednesday" in result.output


def test_set_day_recurring_confirmed(workspace):
    config_path, data_path = workspace

    result = _run(config_path, "set-day", "emp-1", "2026-02-18", "--start", "10:00", "--end", "18:00", "--recurring", "--yes")

    assert result.exit_code == 0, result.output
    rules = InMemoryScheduleStore(data_file=data_path).get_rules("emp-1")
    assert [rule.day_of_week for rule in rules if rule.is_working_day] == [1, 2, 3]


def test_unauthorized_identity(tmp_path, workspace):
    _, data_path = workspace
    config_path = tmp_path / "master.yaml"
    config_path.write_text(
        "identity:\n"
        "  user_id: u-2\n"
        "  role: master\n"
        "  employee_id: emp-2\n"
        f"mock_data_file: {data_path.name}\n",
        encoding="utf-8",
    )

    result = _run(config_path, "days-off", "emp-1", "2026-02-17")

    assert result.exit_code == 1
    assert "may not edit" in result.output


def test_missing_config_without_mock(tmp_path):
    result = runner.invoke(app, ["week", "emp-1", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.output
