"""Command-line interface for the AUI backend.

Handles operations like registering, listing and deleting scheduled tasks,
opening a terminal, fetching a URL, and managing per-project schedules.
Each ``handle_*`` function returns True on success.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from aui_backend import __version__
from aui_backend.errors import AuiError
from aui_backend.logging_setup import setup_logging
from aui_backend.messaging import (
    emit_error,
    emit_info,
    emit_success,
    emit_table,
    emit_warning,
    get_console,
)


def handle_create(
    name: str, script: str, start_time: str, start_date: str, repeat: str
) -> bool:
    """Register a script with the OS scheduler."""
    from aui_backend.commands import create_scheduled_task

    try:
        message = create_scheduled_task(name, script, start_time, start_date, repeat)
    except AuiError as e:
        emit_error(str(e))
        return False
    emit_success(message)
    return True


def handle_list() -> bool:
    """List every task this application owns."""
    from aui_backend.scheduler.platform import get_backend

    try:
        entries = get_backend().list_tasks()
    except AuiError as e:
        emit_error(str(e))
        return False

    if not entries:
        emit_info("No scheduled tasks registered.")
        return True

    emit_table(
        f"Scheduled tasks ({len(entries)})",
        ["Name", "Schedule", "Entry"],
        [(e.name, e.schedule, e.raw) for e in entries],
    )
    return True


def handle_delete(name: str) -> bool:
    """Delete a task by name."""
    from aui_backend.commands import delete_scheduled_task

    try:
        message = delete_scheduled_task(name)
    except AuiError as e:
        emit_error(str(e))
        return False
    emit_success(message)
    return True


def handle_open_terminal(script: str) -> bool:
    from aui_backend.commands import open_terminal

    try:
        open_terminal(script)
    except AuiError as e:
        emit_error(str(e))
        return False
    return True


def handle_fetch(url: str) -> bool:
    from aui_backend.commands import fetch_url

    try:
        body = fetch_url(url)
    except AuiError as e:
        emit_error(str(e))
        return False
    get_console().out(body, highlight=False)
    return True


def handle_invoke(command: str, raw_args: str) -> bool:
    """Run a GUI command by name and print its JSON result."""
    from aui_backend.commands import invoke

    try:
        args = json.loads(raw_args) if raw_args else {}
    except json.JSONDecodeError as e:
        emit_error(f"Arguments are not valid JSON: {e}")
        return False
    if not isinstance(args, dict):
        emit_error("Arguments must be a JSON object")
        return False

    result = invoke(command, args)
    get_console().out(result.model_dump_json(), highlight=False)
    return result.ok


def handle_schedules_list(project: str) -> bool:
    """List the project's schedule records."""
    from aui_backend.scheduler.records import load_schedules

    records = load_schedules(project)
    if not records:
        emit_info("No schedules configured for this project.")
        return True

    emit_table(
        f"Schedules ({len(records)})",
        ["ID", "Team", "Cron", "Repeat", "Status"],
        [
            (
                r.id,
                r.team_name,
                r.cron,
                r.repeat,
                "enabled" if r.enabled else "disabled",
            )
            for r in records
        ],
    )
    return True


def handle_schedules_create(
    project: str,
    team_id: str,
    team_name: str,
    cron: str,
    repeat: str,
    primer_file: Optional[str],
    prompt: str,
    deploy_script: Optional[str],
) -> bool:
    from aui_backend.scheduler.records import create_schedule

    primer_content = ""
    if primer_file:
        try:
            with open(primer_file, "r", encoding="utf-8") as f:
                primer_content = f.read()
        except OSError as e:
            emit_error(f"Cannot read primer: {e}")
            return False

    try:
        record = create_schedule(
            project,
            team_id,
            team_name,
            cron,
            repeat,
            primer_content,
            prompt,
            deploy_script_path=deploy_script,
        )
    except AuiError as e:
        emit_error(str(e))
        return False
    emit_success(f"Created schedule {record.id}")
    return True


def handle_schedules_delete(project: str, schedule_id: str) -> bool:
    from aui_backend.scheduler.records import delete_schedule

    if delete_schedule(project, schedule_id):
        emit_success(f"Deleted schedule {schedule_id}")
        return True
    emit_warning(f"Schedule not found: {schedule_id}")
    return False


def handle_schedules_toggle(project: str, schedule_id: str) -> bool:
    from aui_backend.scheduler.records import toggle_schedule

    try:
        enabled = toggle_schedule(project, schedule_id)
    except AuiError as e:
        emit_error(str(e))
        return False
    if enabled is None:
        emit_warning(f"Schedule not found: {schedule_id}")
        return False
    emit_success(f"Schedule {schedule_id} {'enabled' if enabled else 'disabled'}")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aui-backend", description="AUI operating-system integration backend"
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress to stderr"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Register a script with the OS scheduler")
    create.add_argument("name")
    create.add_argument("script")
    create.add_argument("--start-time", default="09:00", help="HH:MM, 24-hour")
    create.add_argument("--start-date", default="", help="Start date (schtasks only)")
    create.add_argument(
        "--repeat",
        default="once",
        help="once, hourly, daily, weekly or monthly",
    )

    sub.add_parser("list", help="List tasks owned by this application")

    delete = sub.add_parser("delete", help="Delete a task by name")
    delete.add_argument("name")

    term = sub.add_parser("open-terminal", help="Run a script in a visible terminal")
    term.add_argument("script")

    fetch = sub.add_parser("fetch", help="Fetch a URL and print the body")
    fetch.add_argument("url")

    inv = sub.add_parser("invoke", help="Run a GUI command, print a JSON result")
    inv.add_argument("gui_command")
    inv.add_argument("args", nargs="?", default="", help="JSON object of arguments")

    schedules = sub.add_parser("schedules", help="Manage per-project schedules")
    schedules.add_argument("--project", default=".", help="Project directory")
    ssub = schedules.add_subparsers(dest="schedules_command", required=True)
    ssub.add_parser("list", help="List schedule records")
    screate = ssub.add_parser("create", help="Create a scheduled deployment")
    screate.add_argument("team_name")
    screate.add_argument("cron", help="Cron expression, e.g. '0 9 * * 1'")
    screate.add_argument("--team-id", default="")
    screate.add_argument("--repeat", default="daily")
    screate.add_argument("--primer-file")
    screate.add_argument("--prompt", default="")
    screate.add_argument("--deploy-script")
    sdelete = ssub.add_parser("delete", help="Delete a schedule")
    sdelete.add_argument("schedule_id")
    stoggle = ssub.add_parser("toggle", help="Enable or disable a schedule")
    stoggle.add_argument("schedule_id")

    return parser


def run(args: argparse.Namespace) -> bool:
    if args.command == "create":
        return handle_create(
            args.name, args.script, args.start_time, args.start_date, args.repeat
        )
    if args.command == "list":
        return handle_list()
    if args.command == "delete":
        return handle_delete(args.name)
    if args.command == "open-terminal":
        return handle_open_terminal(args.script)
    if args.command == "fetch":
        return handle_fetch(args.url)
    if args.command == "invoke":
        return handle_invoke(args.gui_command, args.args)

    if args.schedules_command == "list":
        return handle_schedules_list(args.project)
    if args.schedules_command == "create":
        return handle_schedules_create(
            args.project,
            args.team_id,
            args.team_name,
            args.cron,
            args.repeat,
            args.primer_file,
            args.prompt,
            args.deploy_script,
        )
    if args.schedules_command == "delete":
        return handle_schedules_delete(args.project, args.schedule_id)
    return handle_schedules_toggle(args.project, args.schedule_id)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(console_level=logging.INFO if args.verbose else logging.WARNING)
    return 0 if run(args) else 1


def main_entry() -> None:
    sys.exit(main())
