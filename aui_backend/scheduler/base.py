"""Capability interface implemented by each native scheduler backend."""

from abc import ABC, abstractmethod
from typing import List, Optional

from aui_backend.process import ProcessRunner, run_process
from aui_backend.scheduler.models import OwnedTaskEntry, TaskSpec


class TaskBackend(ABC):
    """Register, list and delete the tasks this application owns.

    Implementations translate a TaskSpec into one native scheduler and read
    that scheduler's entries back, never touching entries without the
    application's marker.
    """

    #: Short human-readable name of the native mechanism
    mechanism: str = ""

    def __init__(self, runner: Optional[ProcessRunner] = None):
        self._run = runner or run_process

    @abstractmethod
    def register(self, spec: TaskSpec) -> str:
        """Create or overwrite the task named ``spec.name``.

        Returns a confirmation message.
        """

    @abstractmethod
    def list_tasks(self) -> List[OwnedTaskEntry]:
        """Return every owned entry. An empty store is an empty list."""

    @abstractmethod
    def delete(self, name: str) -> str:
        """Remove the task named ``name``. Returns a confirmation message."""

    def has_task(self, name: str) -> bool:
        return any(entry.name == name for entry in self.list_tasks())
