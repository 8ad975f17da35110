"""Commands the GUI front end invokes.

Each command takes primitive arguments and either returns a result or raises
an AuiError whose message is shown to the user. ``invoke`` is the dispatcher
a GUI bridge calls by command name; it never raises for a command failure and
reports it in the returned CommandResult instead.
"""

import inspect
import logging
import re
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from aui_backend import fetch, terminal
from aui_backend.errors import AuiError, InvalidArgument
from aui_backend.scheduler.models import Recurrence, TaskSpec, require_task_name
from aui_backend.scheduler.platform import get_backend

logger = logging.getLogger(__name__)


def _spec_from_args(
    task_name: str,
    script_path: str,
    start_time: str,
    start_date: str,
    repeat: str,
) -> TaskSpec:
    try:
        return TaskSpec(
            name=task_name,
            script_reference=script_path,
            start_time=start_time or "",
            start_date=start_date or "",
            recurrence=Recurrence.parse(repeat),
        )
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidArgument(f"Invalid task: {problems}") from e


def create_scheduled_task(
    task_name: str,
    script_path: str,
    start_time: str,
    start_date: str = "",
    repeat: str = "once",
) -> str:
    """Register ``script_path`` with the OS scheduler under ``task_name``."""
    spec = _spec_from_args(task_name, script_path, start_time, start_date, repeat)
    return get_backend().register(spec)


def list_scheduled_tasks() -> str:
    """Newline-delimited raw entries of every task this application owns."""
    return "\n".join(entry.raw for entry in get_backend().list_tasks())


def delete_scheduled_task(task_name: str) -> str:
    return get_backend().delete(require_task_name(task_name))


def open_terminal(script_path: str) -> None:
    terminal.open_terminal(script_path)


def fetch_url(url: str) -> str:
    return fetch.fetch_url(url)


COMMANDS: Dict[str, Callable[..., Any]] = {
    "create_scheduled_task": create_scheduled_task,
    "list_scheduled_tasks": list_scheduled_tasks,
    "delete_scheduled_task": delete_scheduled_task,
    "open_terminal": open_terminal,
    "fetch_url": fetch_url,
}


class CommandResult(BaseModel):
    """Outcome of one invoked command."""

    ok: bool = Field(description="Whether the command succeeded")
    value: Optional[str] = Field(default=None, description="Result on success")
    error: Optional[str] = Field(default=None, description="Message on failure")


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def invoke(command: str, args: Optional[Dict[str, Any]] = None) -> CommandResult:
    """Run ``command`` with ``args`` and wrap the outcome.

    Argument names may be camelCase (as the front end sends them) or
    snake_case.
    """
    handler = COMMANDS.get(command)
    if handler is None:
        return CommandResult(ok=False, error=f"Unknown command: {command}")

    kwargs = {_snake_case(k): v for k, v in (args or {}).items()}
    try:
        inspect.signature(handler).bind(**kwargs)
    except TypeError as e:
        return CommandResult(ok=False, error=f"Invalid arguments for {command}: {e}")

    try:
        value = handler(**kwargs)
    except AuiError as e:
        logger.warning("Command %s failed: %s", command, e)
        return CommandResult(ok=False, error=str(e))

    return CommandResult(ok=True, value=value)
