"""Tests for the GUI command layer and the invoke dispatcher."""

from unittest.mock import patch

import pytest

from aui_backend import commands
from aui_backend.errors import InvalidArgument
from aui_backend.scheduler.platform_unix import CrontabBackend
from aui_backend.scheduler.platform_win import SchtasksBackend
from tests.fakes import FakeCrontab, FakeSchtasks


@pytest.fixture
def crontab():
    fake = FakeCrontab()
    with patch(
        "aui_backend.commands.get_backend",
        return_value=CrontabBackend(runner=fake),
    ):
        yield fake


class TestSchedulerCommands:
    def test_create_then_list(self, crontab):
        message = commands.create_scheduled_task(
            "Backup", "/scripts/b.sh", "14:30", "", "weekly"
        )
        assert message == "Created cron job: AUI:Backup"
        assert (
            commands.list_scheduled_tasks()
            == "30 14 * * 1 /bin/bash '/scripts/b.sh' # AUI:Backup"
        )

    def test_list_joins_entries_with_newlines(self, crontab):
        commands.create_scheduled_task("A", "/a.sh", "01:00")
        commands.create_scheduled_task("B", "/b.sh", "02:00")
        assert len(commands.list_scheduled_tasks().split("\n")) == 2

    def test_list_empty(self, crontab):
        assert commands.list_scheduled_tasks() == ""

    def test_unknown_repeat_is_once(self, crontab):
        commands.create_scheduled_task("X", "/x.sh", "10:00", "", "fortnightly")
        assert crontab.lines[0].startswith("00 10 * * * ")

    def test_invalid_name_is_rejected_before_scheduler(self, crontab):
        with pytest.raises(InvalidArgument) as exc:
            commands.create_scheduled_task("bad\nname", "/x.sh", "10:00")
        assert str(exc.value).startswith("Invalid task:")
        assert crontab.calls == []

    def test_delete(self, crontab):
        commands.create_scheduled_task("Backup", "/b.sh", "10:00")
        assert commands.delete_scheduled_task(" Backup ") == "Deleted cron job: AUI:Backup"
        assert crontab.lines == []

    def test_delete_empty_name(self, crontab):
        with pytest.raises(InvalidArgument):
            commands.delete_scheduled_task("   ")
        assert crontab.calls == []

    def test_delete_name_outside_namespace_is_rejected(self):
        schtasks = FakeSchtasks()
        with patch(
            "aui_backend.commands.get_backend",
            return_value=SchtasksBackend(runner=schtasks),
        ):
            with pytest.raises(InvalidArgument, match="path separators"):
                commands.delete_scheduled_task("..\\Microsoft\\Defrag")
        assert schtasks.calls == []


class TestInvoke:
    def test_camel_case_arguments(self, crontab):
        result = commands.invoke(
            "create_scheduled_task",
            {
                "taskName": "Backup",
                "scriptPath": "/b.sh",
                "startTime": "09:00",
                "repeat": "daily",
            },
        )
        assert result.ok
        assert result.value == "Created cron job: AUI:Backup"
        assert result.error is None

    def test_unknown_command(self):
        result = commands.invoke("format_disk", {})
        assert not result.ok
        assert result.error == "Unknown command: format_disk"

    def test_missing_arguments(self, crontab):
        result = commands.invoke("create_scheduled_task", {"taskName": "X"})
        assert not result.ok
        assert result.error.startswith("Invalid arguments for create_scheduled_task")
        assert crontab.calls == []

    def test_command_failure_becomes_error_result(self, crontab):
        crontab.reject_writes = True
        result = commands.invoke(
            "create_scheduled_task",
            {"taskName": "X", "scriptPath": "/x.sh", "startTime": "09:00"},
        )
        assert not result.ok
        assert "Failed to write crontab" in result.error

    def test_open_terminal_returns_no_value(self):
        with patch("aui_backend.terminal.open_terminal") as mock_open:
            result = commands.invoke("open_terminal", {"scriptPath": "/x.sh"})
        mock_open.assert_called_once_with("/x.sh")
        assert result.ok
        assert result.value is None

    def test_fetch_url_dispatch(self):
        with patch("aui_backend.fetch.fetch_url", return_value="body"):
            result = commands.invoke("fetch_url", {"url": "https://example.com"})
        assert result.value == "body"

    def test_result_serializes(self):
        result = commands.invoke("nope")
        assert '"ok":false' in result.model_dump_json()
