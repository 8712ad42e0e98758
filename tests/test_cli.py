"""End-to-end tests for the click command line interface."""

from __future__ import annotations

import json
import re

import pytest
from click.testing import CliRunner

from habitvault.cli import cli
from habitvault.config import BaseConfig
from habitvault.domain.habit import HabitStatus
from habitvault.infra.database import bootstrap_database
from habitvault.infra.repositories import SQLModelHabitRepository


@pytest.fixture
def runner(cli_env):
    return CliRunner()


@pytest.fixture
def invoke(runner):
    def _invoke(*args):
        return runner.invoke(cli, list(args), catch_exceptions=False)

    return _invoke


def _created_id(output: str) -> str:
    match = re.search(r"Created (habit-[0-9a-f]+)", output)
    assert match, output
    return match.group(1)


def _repo() -> SQLModelHabitRepository:
    _, session_factory = bootstrap_database(BaseConfig())
    return SQLModelHabitRepository(session_factory)


def test_add_and_list(invoke):
    result = invoke("add", "Gym", "--days", "custom", "--on", "1", "--on", "3", "--start", "2024-05-01")
    assert result.exit_code == 0
    habit_id = _created_id(result.output)
    assert "Mon, Wed" in result.output

    listed = invoke("list", "--today", "2024-05-15")

    assert listed.exit_code == 0
    assert habit_id in listed.output
    assert "current=0 longest=0" in listed.output


def test_list_without_habits(invoke):
    result = invoke("list")
    assert "No habits yet" in result.output


def test_add_custom_without_days_fails(runner):
    result = runner.invoke(cli, ["add", "Gym", "--days", "custom"])

    assert result.exit_code != 0
    assert "Please select at least one day" in result.output
    assert _repo().list_habits(user_id=1) == []


def test_mark_toggles_and_persists(invoke):
    habit_id = _created_id(invoke("add", "Read", "--start", "2024-05-01").output)

    first = invoke("mark", habit_id, "--date", "2024-05-15")
    assert f"{habit_id} completed on 2024-05-15" in first.output
    assert _repo().get_log(user_id=1) == {habit_id: {"2024-05-15": HabitStatus.COMPLETED}}

    second = invoke("mark", habit_id, "--date", "2024-05-15")
    assert f"Cleared {habit_id} on 2024-05-15" in second.output
    assert _repo().get_log(user_id=1) == {}


def test_miss_overwrites_completed(invoke):
    habit_id = _created_id(invoke("add", "Read", "--start", "2024-05-01").output)

    invoke("mark", habit_id, "--date", "2024-05-15")
    invoke("miss", habit_id, "--date", "2024-05-15")

    assert _repo().get_log(user_id=1) == {habit_id: {"2024-05-15": HabitStatus.MISSED}}


def test_mark_unknown_habit(runner):
    result = runner.invoke(cli, ["mark", "habit-missing", "--date", "2024-05-15"])

    assert result.exit_code != 0
    assert "Habit not found: habit-missing" in result.output


def test_streaks_and_analytics(invoke):
    habit_id = _created_id(invoke("add", "Read", "--start", "2024-05-01").output)
    for day in ("2024-05-13", "2024-05-14", "2024-05-15"):
        invoke("mark", habit_id, "--date", day)
    invoke("miss", habit_id, "--date", "2024-05-12")

    listed = invoke("list", "--today", "2024-05-15")
    assert "current=3 longest=3" in listed.output

    result = invoke("analytics", "--window", "week", "--today", "2024-05-15")

    assert result.exit_code == 0
    assert "Window: 2024-05-12 .. 2024-05-18" in result.output
    assert "Completion rate: 75% (3 of 4 check-ins)" in result.output
    assert "Best habit: Read (longest streak 3 days)" in result.output
    assert "Read: 3 completed, 1 missed, 75%" in result.output


def test_analytics_without_habits(invoke):
    result = invoke("analytics", "--window", "all", "--today", "2024-05-15")

    assert "Window: 2024-02-15 .. 2024-05-15" in result.output
    assert "Completion rate: 0% (0 of 0 check-ins)" in result.output
    assert "Best habit: none" in result.output


def test_edit_and_remove(invoke):
    habit_id = _created_id(invoke("add", "Read", "--start", "2024-05-01").output)
    invoke("mark", habit_id, "--date", "2024-05-15")

    edited = invoke("edit", habit_id, "--name", "Read more", "--days", "weekdays")
    assert "Updated" in edited.output
    assert _repo().get_by_id(habit_id, user_id=1).name == "Read more"

    removed = invoke("remove", habit_id)
    assert f"Removed {habit_id}" in removed.output
    assert _repo().load_state(user_id=1).habits == ()
    assert _repo().get_log(user_id=1) == {}


def test_heatmap(invoke):
    habit_id = _created_id(invoke("add", "Read", "--start", "2024-05-01").output)
    invoke("mark", habit_id, "--date", "2024-05-01")
    invoke("miss", habit_id, "--date", "2024-05-02")

    result = invoke("heatmap", habit_id, "--month", "2024-05")

    lines = result.output.splitlines()
    assert "Read: May 2024" in lines
    header = lines.index("Read: May 2024") + 1
    assert lines[header].split() == ["Su", "Mo", "Tu", "We", "Th", "Fr", "Sa"]
    # May 2024 starts on a Wednesday
    assert lines[header + 1].split() == ["#", "x", ".", "."]


def test_export_import_round_trip(invoke, cli_env):
    habit_id = _created_id(invoke("add", "Read", "--start", "2024-05-01").output)
    invoke("mark", habit_id, "--date", "2024-05-15")
    export_path = cli_env / "backup.json"

    exported = invoke("export", str(export_path))
    assert "Export written" in exported.output
    assert json.loads(export_path.read_text(encoding="utf-8"))["habits"][0]["id"] == habit_id

    invoke("remove", habit_id)
    imported = invoke("import", str(export_path))

    assert "Imported 1 habits" in imported.output
    assert _repo().get_log(user_id=1) == {habit_id: {"2024-05-15": HabitStatus.COMPLETED}}


def test_import_rejects_bad_file(runner, cli_env):
    bad = cli_env / "bad.json"
    bad.write_text('{"habits": "nope"}', encoding="utf-8")

    result = runner.invoke(cli, ["import", str(bad)])

    assert result.exit_code != 0
    assert "habits" in result.output


def test_export_csv(invoke, cli_env):
    habit_id = _created_id(invoke("add", "Read", "--start", "2024-05-01").output)
    invoke("mark", habit_id, "--date", "2024-05-15")
    output = cli_env / "log.csv"

    invoke("export", str(output), "--format", "csv")

    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "habit_id,habit_name,date,status"
    assert lines[1] == f"{habit_id},Read,2024-05-15,completed"


def test_chart(invoke, cli_env):
    invoke("add", "Read", "--start", "2024-05-01")
    output = cli_env / "chart.png"

    result = invoke("chart", str(output), "--window", "month", "--today", "2024-05-15")

    assert "Chart written" in result.output
    assert output.read_bytes()[:4] == b"\x89PNG"


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"habits": ["Read"], "log": {}}, "expected an object"),
        (
            {
                "habits": [{"id": "h1", "name": "Read", "startDate": "2024-05-01"}],
                "log": {"h1": {"not-a-date": "completed"}},
            },
            "Invalid log date",
        ),
        ({"habits": [{"id": "h1", "name": "", "startDate": "2024-05-01"}], "log": {}}, "habit name"),
        (
            {"habits": [{"id": "h1", "name": "Gym", "targetDays": "custom", "startDate": "2024-05-01"}]},
            "at least one day",
        ),
    ],
)
def test_import_reports_invalid_payload_without_traceback(runner, cli_env, payload, message):
    bad = cli_env / "bad.json"
    bad.write_text(json.dumps(payload), encoding="utf-8")

    result = runner.invoke(cli, ["import", str(bad)])

    assert result.exit_code == 1
    assert not isinstance(result.exception, (AttributeError, ValueError))
    assert message in result.output
    assert _repo().list_habits(user_id=1) == []


def test_runs_outside_dev_mode(runner, monkeypatch):
    monkeypatch.setenv("HABITVAULT_DEV_MODE", "false")

    result = runner.invoke(cli, ["list"])

    assert result.exit_code == 0
    assert "No habits yet" in result.output
