"""Per-project schedule records and deploy scripts.

A schedule is a deploy script under ``<project>/.aui/schedules/`` plus a
native scheduler task that runs it. Records live in
``<project>/.aui/schedules.json`` in the camelCase layout the GUI reads.
"""

import json
import logging
import os
import re
import sys
import time
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from aui_backend.config import get_agent_command
from aui_backend.errors import AuiError
from aui_backend.scheduler.base import TaskBackend
from aui_backend.scheduler.models import Recurrence, TaskSpec

logger = logging.getLogger(__name__)

AUI_DIR_NAME = ".aui"
SCHEDULES_FILE_NAME = "schedules.json"
SCHEDULES_DIR_NAME = "schedules"

_CAMEL_KEYS = {
    "team_id": "teamId",
    "team_name": "teamName",
    "task_name": "taskName",
    "script_path": "scriptPath",
    "primer_path": "primerPath",
    "created_at": "createdAt",
}
_SNAKE_KEYS = {v: k for k, v in _CAMEL_KEYS.items()}


@dataclass
class ScheduleRecord:
    """A scheduled deployment of a team or pipeline."""

    id: str = ""
    team_id: str = ""
    team_name: str = ""
    task_name: str = ""
    cron: str = ""
    repeat: str = Recurrence.DAILY.value
    prompt: str = ""
    script_path: str = ""
    primer_path: str = ""
    enabled: bool = True
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self) -> dict:
        return {_CAMEL_KEYS.get(k, k): v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduleRecord":
        normalized = {_SNAKE_KEYS.get(k, k): v for k, v in data.items()}
        return cls(
            **{k: v for k, v in normalized.items() if k in cls.__dataclass_fields__}
        )


def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def generate_task_name(team_name: str, now_ms: Optional[int] = None) -> str:
    """Slug of ``team_name`` plus a base-36 millisecond timestamp."""
    slug = re.sub(r"[^a-z0-9]+", "-", team_name.lower()).strip("-")
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{slug}-{_to_base36(now_ms)}"


def parse_cron_for_os(cron: str) -> Tuple[str, str]:
    """Reduce a cron expression to ``(start_time, repeat)`` for the OS scheduler.

    Expressions with fewer than five fields give ``("09:00", "once")``.
    """
    parts = cron.strip().split()
    if len(parts) < 5:
        return "09:00", Recurrence.ONCE.value

    minute, hour, day_of_month, _, day_of_week = parts[:5]

    repeat = Recurrence.DAILY
    if hour == "*":
        repeat = Recurrence.HOURLY
    elif day_of_week not in ("*", "?"):
        repeat = Recurrence.WEEKLY
    elif day_of_month not in ("*", "?"):
        repeat = Recurrence.MONTHLY

    h = "0" if hour == "*" else hour.replace("*/", "", 1)
    m = "0" if minute == "*" else minute.replace("*/", "", 1)
    return f"{h.zfill(2)}:{m.zfill(2)}", repeat.value


def today_date(today: Optional[date] = None) -> str:
    """Today's date as MM/DD/YYYY, the format schtasks /SD expects."""
    return (today or date.today()).strftime("%m/%d/%Y")


def _aui_dir(project_path: str) -> str:
    return os.path.join(project_path, AUI_DIR_NAME)


def schedules_file(project_path: str) -> str:
    return os.path.join(_aui_dir(project_path), SCHEDULES_FILE_NAME)


def schedules_dir(project_path: str) -> str:
    return os.path.join(_aui_dir(project_path), SCHEDULES_DIR_NAME)


def load_schedules(project_path: str) -> List[ScheduleRecord]:
    """Load all schedule records; a missing or unreadable file is empty."""
    path = schedules_file(project_path)
    if not os.path.exists(path):
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return []

    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        logger.warning("Ignoring %s: expected a list of schedule objects", path)
        return []
    try:
        return [ScheduleRecord.from_dict(r) for r in data]
    except TypeError as e:
        logger.warning("Ignoring malformed %s: %s", path, e)
        return []


def save_schedules(project_path: str, records: List[ScheduleRecord]) -> None:
    """Save all schedule records."""
    os.makedirs(_aui_dir(project_path), exist_ok=True)
    with open(schedules_file(project_path), "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in records], f, indent=2)


def _sh_quote_inner(value: str) -> str:
    return value.replace("'", "'\\''")


def _dq_inner(value: str) -> str:
    return re.sub(r"([\\$`\"])", r"\\\1", value)


def _ps_quote_inner(value: str) -> str:
    return value.replace("'", "''")


def build_powershell_script(
    team_name: str, primer_path: str, deploy_script_path: Optional[str] = None
) -> str:
    """Deploy script for Windows with CRLF line endings.

    The caller writes it with a UTF-8 BOM.
    """
    escaped_name = _ps_quote_inner(team_name)
    if deploy_script_path:
        win_deploy_path = _ps_quote_inner(deploy_script_path.replace("/", "\\"))
        lines = [
            "Remove-Item Env:CLAUDECODE -ErrorAction SilentlyContinue",
            f"Write-Host 'Scheduled pipeline deployment: {escaped_name}' -ForegroundColor Cyan",
            "Write-Host 'Running deploy script...' -ForegroundColor Green",
            f"& '{win_deploy_path}'",
        ]
    else:
        escaped_primer = _ps_quote_inner(primer_path.replace("/", "\\"))
        lines = [
            "Remove-Item Env:CLAUDECODE -ErrorAction SilentlyContinue",
            f"Write-Host 'Scheduled deployment: {escaped_name}' -ForegroundColor Cyan",
            f"Write-Host 'Primer: {escaped_primer}' -ForegroundColor Yellow",
            "Write-Host 'Starting agent...' -ForegroundColor Green",
            "try {",
            f"  {get_agent_command()} \"Read the deployment primer at '{escaped_primer}' "
            "using the Read tool and follow ALL instructions in it exactly. "
            'Start immediately."',
            "} catch {",
            '  Write-Host "Error: $_" -ForegroundColor Red',
            "}",
        ]
    return "\r\n".join(lines)


def build_shell_script(
    team_name: str, primer_path: str, deploy_script_path: Optional[str] = None
) -> str:
    """Deploy script for macOS/Linux."""
    escaped_name = _sh_quote_inner(team_name)
    if deploy_script_path:
        lines = [
            "#!/bin/bash",
            "unset CLAUDECODE",
            f"echo 'Scheduled pipeline deployment: {escaped_name}'",
            f"bash '{_sh_quote_inner(deploy_script_path)}'",
        ]
    else:
        lines = [
            "#!/bin/bash",
            "unset CLAUDECODE",
            f"echo 'Scheduled deployment: {escaped_name}'",
            f"{get_agent_command()} \"Read the deployment primer at "
            f"'{_dq_inner(primer_path)}' using the Read tool and follow ALL "
            'instructions in it exactly. Start immediately."',
        ]
    return "\n".join(lines)


def _os_script_path(script_path: str, windows: bool) -> str:
    return script_path.replace("/", "\\") if windows else script_path


def _get_backend(backend: Optional[TaskBackend]) -> TaskBackend:
    if backend is not None:
        return backend
    from aui_backend.scheduler.platform import get_backend

    return get_backend()


def create_schedule(
    project_path: str,
    team_id: str,
    team_name: str,
    cron: str,
    repeat: str,
    primer_content: str,
    prompt: str,
    deploy_script_path: Optional[str] = None,
    backend: Optional[TaskBackend] = None,
    windows: Optional[bool] = None,
) -> ScheduleRecord:
    """Write a deploy script, register it with the OS scheduler, save the record.

    Raises:
        AuiError: Registration with the OS scheduler failed. Nothing is
            recorded in that case, though the script files stay on disk.
    """
    if windows is None:
        windows = sys.platform == "win32"

    target_dir = schedules_dir(project_path)
    os.makedirs(target_dir, exist_ok=True)

    task_name = generate_task_name(team_name)
    start_time, _ = parse_cron_for_os(cron)

    primer_path = os.path.join(target_dir, f"{task_name}-primer.md")
    with open(primer_path, "w", encoding="utf-8") as f:
        f.write(primer_content)

    if windows:
        script_path = os.path.join(target_dir, f"{task_name}.ps1")
        content = build_powershell_script(team_name, primer_path, deploy_script_path)
        # PowerShell 5 reads BOM-less scripts in the ANSI code page
        with open(script_path, "w", encoding="utf-8-sig", newline="") as f:
            f.write(content)
    else:
        script_path = os.path.join(target_dir, f"{task_name}.sh")
        content = build_shell_script(team_name, primer_path, deploy_script_path)
        with open(script_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.chmod(script_path, 0o755)

    spec = TaskSpec(
        name=task_name,
        script_reference=_os_script_path(script_path, windows),
        start_time=start_time,
        start_date=today_date(),
        recurrence=Recurrence.parse(repeat),
    )
    _get_backend(backend).register(spec)

    record = ScheduleRecord(
        id=task_name,
        team_id=team_id,
        team_name=team_name,
        task_name=task_name,
        cron=cron,
        repeat=repeat,
        prompt=prompt,
        script_path=script_path,
        primer_path=primer_path,
    )
    records = load_schedules(project_path)
    records.append(record)
    save_schedules(project_path, records)
    logger.info("Created schedule %s for %s", task_name, team_name)
    return record


def get_schedule(project_path: str, schedule_id: str) -> Optional[ScheduleRecord]:
    """Get a record by ID."""
    for record in load_schedules(project_path):
        if record.id == schedule_id:
            return record
    return None


def delete_schedule(
    project_path: str, schedule_id: str, backend: Optional[TaskBackend] = None
) -> bool:
    """Remove the OS task and the record. Returns True if the record existed."""
    records = load_schedules(project_path)
    record = next((r for r in records if r.id == schedule_id), None)
    if record is None:
        return False

    try:
        _get_backend(backend).delete(record.task_name)
    except AuiError as e:
        # The OS task may already be gone; the record still goes
        logger.warning("Could not delete OS task %s: %s", record.task_name, e)

    save_schedules(project_path, [r for r in records if r.id != schedule_id])
    return True


def toggle_schedule(
    project_path: str,
    schedule_id: str,
    backend: Optional[TaskBackend] = None,
    windows: Optional[bool] = None,
) -> Optional[bool]:
    """Flip a record's enabled state. Returns the new state or None if not found.

    Disabling deletes the OS task but keeps the record; enabling registers
    the task again from the record.
    """
    records = load_schedules(project_path)
    idx = next((i for i, r in enumerate(records) if r.id == schedule_id), None)
    if idx is None:
        return None

    if windows is None:
        windows = sys.platform == "win32"
    record = records[idx]
    task_backend = _get_backend(backend)

    if record.enabled:
        try:
            task_backend.delete(record.task_name)
        except AuiError as e:
            logger.warning("Could not delete OS task %s: %s", record.task_name, e)
    else:
        start_time, _ = parse_cron_for_os(record.cron)
        task_backend.register(
            TaskSpec(
                name=record.task_name,
                script_reference=_os_script_path(record.script_path, windows),
                start_time=start_time,
                start_date=today_date(),
                recurrence=Recurrence.parse(record.repeat),
            )
        )

    record.enabled = not record.enabled
    save_schedules(project_path, records)
    return record.enabled
