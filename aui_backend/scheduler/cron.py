"""Crontab line grammar for tasks owned by this application.

cron has no recurrence field, so each Recurrence is encoded as a five-field
schedule expression (minute hour day-of-month month day-of-week):

    hourly   0 * * * *      start_time is ignored
    daily    M H * * *
    weekly   M H * * 1      Mondays
    monthly  M H 1 * *      first of the month
    once     M H * * *      same as daily; cron has no one-shot trigger

Owned lines end with the comment ``# <marker>:<name>``.

cron turns an unescaped ``%`` in the command field into a newline, so every
``%`` after the schedule expression is written as ``\\%`` and read back as
``%``.
"""

import re
from typing import Optional, Tuple

from aui_backend.scheduler.models import OwnedTaskEntry, Recurrence, TaskSpec

DEFAULT_HOUR = "9"
DEFAULT_MINUTE = "0"

_LINE_RE = re.compile(r"^\s*(?P<expr>(?:\S+\s+){4}\S+)\s+(?P<command>.*?)\s*$")


def split_start_time(start_time: str) -> Tuple[str, str]:
    """Split ``HH:MM`` into ``(hour, minute)``.

    Missing or empty parts default to hour 9 and minute 0. Values are passed
    through otherwise, so ``"14:30"`` gives ``("14", "30")``.
    """
    parts = (start_time or "").split(":")
    hour = parts[0].strip() if parts and parts[0].strip() else DEFAULT_HOUR
    minute = parts[1].strip() if len(parts) > 1 and parts[1].strip() else DEFAULT_MINUTE
    return hour, minute


def build_schedule_expression(recurrence: Recurrence, start_time: str) -> str:
    """Encode a recurrence and start time as a cron schedule expression."""
    if recurrence == Recurrence.HOURLY:
        return "0 * * * *"

    hour, minute = split_start_time(start_time)
    if recurrence == Recurrence.WEEKLY:
        return f"{minute} {hour} * * 1"
    if recurrence == Recurrence.MONTHLY:
        return f"{minute} {hour} 1 * *"
    # DAILY, and ONCE approximated as daily
    return f"{minute} {hour} * * *"


def escape_percent(value: str) -> str:
    return value.replace("%", "\\%")


def unescape_percent(value: str) -> str:
    return value.replace("\\%", "%")


def marker_token(marker: str) -> str:
    """The comment prefix every owned line carries, e.g. ``# AUI:``."""
    return f"# {escape_percent(marker)}:"


def shell_quote(value: str) -> str:
    """Wrap ``value`` in single quotes for /bin/sh."""
    return "'" + value.replace("'", "'\\''") + "'"


def build_cron_line(spec: TaskSpec, marker: str, shell: str = "/bin/bash") -> str:
    """Build the full crontab line (without trailing newline) for ``spec``."""
    expr = build_schedule_expression(spec.recurrence, spec.start_time)
    command = escape_percent(f"{shell} {shell_quote(spec.script_reference)}")
    return f"{expr} {command} {marker_token(marker)}{escape_percent(spec.name)}"


def owner_name(line: str, marker: str) -> Optional[str]:
    """Return the task name a line is marked with, or None if not owned."""
    token = marker_token(marker)
    if token not in line:
        return None
    return unescape_percent(line.rpartition(token)[2].strip())


def is_owned(line: str, marker: str) -> bool:
    return marker_token(marker) in line


def parse_cron_line(line: str, marker: str) -> Optional[OwnedTaskEntry]:
    """Decode an owned crontab line into an OwnedTaskEntry.

    Returns None for lines that do not carry the marker. A marked line that
    does not look like a schedule line is still returned, with an empty
    schedule, so listing never hides an owned entry.
    """
    name = owner_name(line, marker)
    if name is None:
        return None

    body = line.rpartition(marker_token(marker))[0]
    match = _LINE_RE.match(body)
    if not match:
        return OwnedTaskEntry(name=name, raw=line)
    expr = " ".join(match.group("expr").split())
    return OwnedTaskEntry(
        name=name,
        raw=line,
        schedule=expr,
        command=unescape_percent(match.group("command")),
    )
