"""Platform abstraction for the native scheduler.

Picks the backend for the host once per process: Task Scheduler on Windows,
crontab everywhere else.
"""

import sys
from functools import lru_cache

from aui_backend.scheduler.base import TaskBackend


def create_backend(platform: str = sys.platform) -> TaskBackend:
    """Build a fresh backend for ``platform`` (a ``sys.platform`` value)."""
    if platform == "win32":
        from aui_backend.scheduler.platform_win import SchtasksBackend

        return SchtasksBackend()

    from aui_backend.scheduler.platform_unix import CrontabBackend

    return CrontabBackend()


@lru_cache(maxsize=1)
def get_backend() -> TaskBackend:
    """Get the cached backend for the running platform."""
    return create_backend()


def reset_backend() -> None:
    """Forget the cached backend (after a config change, or in tests)."""
    get_backend.cache_clear()


__all__ = ["create_backend", "get_backend", "reset_backend"]
