"""Windows scheduler backend over schtasks.exe."""

import csv
import io
import logging
from typing import List, Optional

from aui_backend.config import get_task_namespace, get_windows_interpreter
from aui_backend.errors import RegistrationRejected
from aui_backend.process import ProcessRunner, console_encoding
from aui_backend.scheduler.base import TaskBackend
from aui_backend.scheduler.models import (
    OwnedTaskEntry,
    Recurrence,
    TaskSpec,
    require_task_name,
)
from aui_backend.settings import get_settings

logger = logging.getLogger(__name__)

SCHEDULE_TYPES = {
    Recurrence.ONCE: "ONCE",
    Recurrence.HOURLY: "HOURLY",
    Recurrence.DAILY: "DAILY",
    Recurrence.WEEKLY: "WEEKLY",
    Recurrence.MONTHLY: "MONTHLY",
}


def schedule_type(recurrence: Recurrence) -> str:
    """Map a recurrence to the schtasks /SC token (ONCE when unknown)."""
    return SCHEDULE_TYPES.get(recurrence, "ONCE")


class SchtasksBackend(TaskBackend):
    """Structured backend: tasks live in the ``\\<namespace>\\`` folder."""

    mechanism = "schtasks"

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        schtasks_command: Optional[str] = None,
        namespace: Optional[str] = None,
        interpreter: Optional[str] = None,
        encoding: Optional[str] = None,
    ):
        super().__init__(runner)
        self.schtasks_command = (
            schtasks_command or get_settings().scheduler.schtasks_command
        )
        self.namespace = namespace or get_task_namespace()
        self.interpreter = interpreter or get_windows_interpreter()
        self.encoding = encoding or console_encoding()

    def task_id(self, name: str) -> str:
        return f"{self.namespace}\\{name}"

    def task_command(self, script_reference: str) -> str:
        return f'{self.interpreter} -ExecutionPolicy Bypass -File "{script_reference}"'

    def build_create_args(self, spec: TaskSpec) -> List[str]:
        """Arguments for ``schtasks /Create``; /F overwrites an existing task."""
        sc = schedule_type(spec.recurrence)
        args = [
            "/Create",
            "/TN",
            self.task_id(spec.name),
            "/TR",
            self.task_command(spec.script_reference),
            "/SC",
            sc,
            "/ST",
            spec.start_time,
            "/F",
        ]
        # schtasks refuses /SD on an hourly schedule
        if sc != "HOURLY" and spec.start_date:
            args.extend(["/SD", spec.start_date])
        return args

    def register(self, spec: TaskSpec) -> str:
        tn = self.task_id(spec.name)
        result = self._run(self.schtasks_command, self.build_create_args(spec))
        if not result.ok:
            stderr = result.decode_stderr(self.encoding)
            logger.error("schtasks /Create failed for %s: %s", tn, stderr.strip())
            raise RegistrationRejected(f"schtasks failed: {stderr}", diagnostic=stderr)

        logger.info("Registered scheduled task %s", tn)
        return f"Created scheduled task: {tn}"

    def list_tasks(self) -> List[OwnedTaskEntry]:
        result = self._run(
            self.schtasks_command,
            ["/Query", "/FO", "CSV", "/NH", "/TN", f"{self.namespace}\\*"],
        )
        # schtasks exits non-zero when the folder is empty or missing
        if not result.ok:
            logger.debug(
                "schtasks /Query exited %s, treating as no tasks: %s",
                result.returncode,
                result.decode_stderr(self.encoding).strip(),
            )
            return []
        return self.parse_query_output(result.decode_stdout(encoding=self.encoding))

    def parse_query_output(self, output: str) -> List[OwnedTaskEntry]:
        """Parse ``/FO CSV /NH`` rows, keeping only tasks in our folder.

        Order is whatever schtasks printed.
        """
        prefix = f"\\{self.namespace}\\".lower()
        entries = []
        for raw in output.splitlines():
            if not raw.strip():
                continue
            row = next(csv.reader(io.StringIO(raw)), [])
            if not row:
                continue
            path = row[0].strip()
            if not path.lower().startswith(prefix):
                continue
            entries.append(
                OwnedTaskEntry(
                    name=path[len(prefix) :],
                    raw=raw,
                    schedule=row[1].strip() if len(row) > 1 else "",
                )
            )
        return entries

    def delete(self, name: str) -> str:
        tn = self.task_id(require_task_name(name))
        result = self._run(self.schtasks_command, ["/Delete", "/TN", tn, "/F"])
        if not result.ok:
            stderr = result.decode_stderr(self.encoding)
            logger.error("schtasks /Delete failed for %s: %s", tn, stderr.strip())
            raise RegistrationRejected(
                f"schtasks delete failed: {stderr}", diagnostic=stderr
            )

        logger.info("Deleted scheduled task %s", tn)
        return f"Deleted scheduled task: {tn}"
