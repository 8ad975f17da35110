"""Tests for the aui-backend command line."""

import json
from unittest.mock import patch

import pytest

from aui_backend.cli import build_parser, main
from aui_backend.scheduler.platform_unix import CrontabBackend
from aui_backend.scheduler.records import load_schedules
from tests.fakes import FakeCrontab


@pytest.fixture
def crontab():
    fake = FakeCrontab()
    backend = CrontabBackend(runner=fake)
    with patch("aui_backend.commands.get_backend", return_value=backend), patch(
        "aui_backend.scheduler.platform.get_backend", return_value=backend
    ):
        yield fake


class TestParser:
    def test_create_defaults(self):
        args = build_parser().parse_args(["create", "Backup", "/b.sh"])
        assert args.start_time == "09:00"
        assert args.start_date == ""
        assert args.repeat == "once"

    def test_schedules_project_option(self):
        args = build_parser().parse_args(["schedules", "--project", "/p", "list"])
        assert args.project == "/p"
        assert args.schedules_command == "list"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestTaskCommands:
    def test_create_list_delete(self, crontab, captured_console):
        assert main(["create", "Backup", "/b.sh", "--start-time", "14:30", "--repeat", "weekly"]) == 0
        assert "Created cron job: AUI:Backup" in captured_console.getvalue()

        assert main(["list"]) == 0
        out = captured_console.getvalue()
        assert "Backup" in out
        assert "30 14 * * 1" in out

        assert main(["delete", "Backup"]) == 0
        assert crontab.lines == []

    def test_list_empty(self, crontab, captured_console):
        assert main(["list"]) == 0
        assert "No scheduled tasks registered." in captured_console.getvalue()

    def test_create_failure_exit_code(self, crontab, captured_console):
        crontab.reject_writes = True
        assert main(["create", "Backup", "/b.sh"]) == 1
        assert "Failed to write crontab" in captured_console.getvalue()

    def test_fetch_prints_body(self, captured_console):
        with patch("aui_backend.commands.fetch_url", return_value="<html>[b]</html>"):
            assert main(["fetch", "https://example.com"]) == 0
        assert "<html>[b]</html>" in captured_console.getvalue()

    def test_open_terminal_invalid_path(self, captured_console):
        assert main(["open-terminal", ""]) == 1
        assert "Script path must not be empty" in captured_console.getvalue()


class TestInvoke:
    def test_invoke_prints_json(self, crontab, captured_console):
        args = json.dumps({"taskName": "A", "scriptPath": "/a.sh", "startTime": "08:00"})
        assert main(["invoke", "create_scheduled_task", args]) == 0
        result = json.loads(captured_console.getvalue().strip())
        assert result == {"ok": True, "value": "Created cron job: AUI:A", "error": None}

    def test_invoke_bad_json(self, captured_console):
        assert main(["invoke", "list_scheduled_tasks", "{oops"]) == 1
        assert "not valid JSON" in captured_console.getvalue()

    def test_invoke_non_object(self, captured_console):
        assert main(["invoke", "list_scheduled_tasks", "[1]"]) == 1
        assert "must be a JSON object" in captured_console.getvalue()


class TestSchedules:
    def test_create_toggle_delete(self, crontab, captured_console, tmp_path):
        primer = tmp_path / "primer.md"
        primer.write_text("# Do the thing", encoding="utf-8")
        project = str(tmp_path)

        with patch("aui_backend.scheduler.records.sys.platform", "linux"):
            assert (
                main(
                    [
                        "schedules",
                        "--project",
                        project,
                        "create",
                        "Ops",
                        "0 9 * * *",
                        "--primer-file",
                        str(primer),
                    ]
                )
                == 0
            )
            records = load_schedules(project)
            assert len(records) == 1
            schedule_id = records[0].id
            assert len(crontab.lines) == 1

            assert main(["schedules", "--project", project, "toggle", schedule_id]) == 0
            assert "disabled" in captured_console.getvalue()
            assert crontab.lines == []

            assert main(["schedules", "--project", project, "list"]) == 0
            assert schedule_id in captured_console.getvalue()

            assert main(["schedules", "--project", project, "delete", schedule_id]) == 0
            assert load_schedules(project) == []

    def test_unknown_schedule(self, crontab, captured_console, tmp_path):
        assert main(["schedules", "--project", str(tmp_path), "toggle", "nope"]) == 1
        assert "Schedule not found: nope" in captured_console.getvalue()

    def test_missing_primer_file(self, captured_console, tmp_path):
        code = main(
            [
                "schedules",
                "--project",
                str(tmp_path),
                "create",
                "Ops",
                "0 9 * * *",
                "--primer-file",
                str(tmp_path / "missing.md"),
            ]
        )
        assert code == 1
        assert "Cannot read primer" in captured_console.getvalue()
