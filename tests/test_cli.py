"""End-to-end tests for the click command-line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from habitnexus.cli import main

TODAY = "2024-03-15"


@pytest.fixture
def cli():
    runner = CliRunner()

    def invoke(*args: str, today: str = TODAY):
        return runner.invoke(main, ["--today", today, *args], catch_exceptions=False)

    return invoke


@pytest.fixture
def with_habit(cli):
    result = cli("add", "Read", "--start", "2024-03-01")
    assert result.exit_code == 0, result.output
    return cli


class TestHabitLifecycle:
    def test_add_and_list(self, cli):
        result = cli("add", "Read", "--start", "2024-03-01")

        assert result.exit_code == 0
        assert result.output.startswith("Created Read (")

        listing = cli("habits")
        assert "Read  [DAILY]" in listing.output

    def test_add_weekday_habit(self, cli):
        cli("add", "Gym", "--frequency", "WEEKDAYS", "--weekdays", "1,3,5")

        assert "[WEEKDAYS 1,3,5]" in cli("habits").output

    def test_add_rejects_blank_name(self, cli):
        result = cli("add", "   ")

        assert result.exit_code == 1
        assert "Habit name must not be empty" in result.output

    def test_add_rejects_bad_reminder_time(self, cli):
        result = cli("add", "Read", "--remind-at", "25:00")

        assert result.exit_code == 2
        assert "expected HH:MM" in result.output

    def test_today_before_and_after_logging(self, with_habit):
        cli = with_habit

        before = cli("today")
        assert "[ ] Read  0/1  streak 0d" in before.output
        assert "0/1 done (0%)" in before.output

        logged = cli("log", "read")
        assert logged.output.strip() == "Read: 1/1, streak 1d"

        after = cli("today")
        assert "[x] Read  1/1  streak 1d" in after.output
        assert "1/1 done (100%)" in after.output

    def test_streak_carries_across_days(self, with_habit):
        cli = with_habit
        cli("log", "Read", today="2024-03-13")
        cli("log", "Read", today="2024-03-14")

        result = cli("streaks")

        assert result.output.strip() == "Read: 2d current, 2d best (pending)"

    def test_skip_toggles(self, with_habit):
        cli = with_habit

        assert cli("skip", "Read").output.strip() == "Read: skipped for 2024-03-15"
        assert "[~] Read" in cli("today").output
        assert cli("skip", "Read").output.strip() == "Read: unskipped for 2024-03-15"

    def test_pause_and_archive(self, with_habit):
        cli = with_habit

        assert cli("pause", "Read").output.strip() == "Read: paused"
        assert cli("today").output.strip() == "No habits due today"
        assert "(paused)" in cli("habits").output
        cli("pause", "Read", "--resume")

        assert cli("archive", "Read").output.strip() == "Read: archived"
        assert cli("habits").output == ""
        assert "(archived)" in cli("habits", "--all").output
        cli("archive", "Read", "--restore")
        assert "Read" in cli("habits").output

    def test_delete_requires_confirmation(self, with_habit):
        cli = with_habit

        aborted = cli("delete", "Read")
        assert aborted.exit_code == 1
        assert "Read" in cli("habits").output

        assert cli("delete", "Read", "--yes").output.strip() == "Deleted Read"
        assert cli("habits").output == ""

    def test_unknown_habit(self, cli):
        result = cli("log", "Nothing")

        assert result.exit_code == 1
        assert "No habit matches 'Nothing'" in result.output


class TestReports:
    def test_stats(self, with_habit):
        cli = with_habit
        cli("log", "Read")

        output = cli("stats").output

        assert "Active streak:     1d" in output
        assert "Active habits:     1" in output
        assert "Total completions: 1" in output

    def test_calendar(self, with_habit):
        cli = with_habit
        cli("log", "Read")
        cli("skip", "Read", today="2024-03-14")

        output = cli("calendar", "--month", "2024-03").output.splitlines()

        assert output[0] == "March 2024"
        assert output[1] == " Su Mo Tu We Th Fr Sa"
        assert output[2].endswith(" 1. 2.")
        assert "15#" in output[4]

    def test_calendar_rejects_bad_month(self, cli):
        result = cli("calendar", "--month", "2024-13")

        assert result.exit_code == 2

    def test_heatmap(self, with_habit, tmp_path):
        cli = with_habit
        cli("log", "Read")
        output = tmp_path / "heat.png"

        result = cli("heatmap", "--output", str(output), "--habit", "Read")

        assert result.output.strip() == f"Heatmap written: {output}"
        assert output.exists()

    def test_remind_once_without_matches(self, cli):
        result = cli("remind", "--once")

        assert result.output.strip() == "No reminders due"


class TestBackupCommands:
    def test_export_and_restore(self, with_habit, tmp_path):
        cli = with_habit
        cli("log", "Read")

        exported = cli("export", "--dir", str(tmp_path / "out"))
        path = tmp_path / "out" / "habitnexus_backup_2024-03-15.json"
        assert exported.output.strip() == f"Backup written: {path}"
        assert json.loads(path.read_text(encoding="utf-8"))["habits"][0]["name"] == "Read"

        cli("delete", "Read", "--yes")
        restored = cli("restore", str(path), "--yes")

        assert restored.output.strip() == "Restored 1 habits and 1 records"
        assert "[x] Read" in cli("today").output

    def test_restore_invalid_file(self, cli, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("nope", encoding="utf-8")

        result = cli("restore", str(bad), "--yes")

        assert result.exit_code == 1
        assert "Cannot read backup" in result.output
