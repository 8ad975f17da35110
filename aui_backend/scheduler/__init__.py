"""AUI Scheduler - register scripts with the operating system's scheduler.

Components:
    - models: TaskSpec, Recurrence and OwnedTaskEntry
    - base: the TaskBackend capability interface
    - platform_win / platform_unix: schtasks.exe and crontab backends
    - platform: backend selection for the running host
    - cron: crontab line encoding and decoding
    - records: per-project schedule records and deploy scripts
"""

from aui_backend.scheduler.base import TaskBackend
from aui_backend.scheduler.models import OwnedTaskEntry, Recurrence, TaskSpec
from aui_backend.scheduler.platform import create_backend, get_backend, reset_backend

__all__ = [
    "TaskBackend",
    "TaskSpec",
    "Recurrence",
    "OwnedTaskEntry",
    "create_backend",
    "get_backend",
    "reset_backend",
]
