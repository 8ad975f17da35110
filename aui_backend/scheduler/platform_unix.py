"""Unix/macOS scheduler backend over the user's crontab.

crontab only offers "print the whole table" (``crontab -l``) and "replace the
whole table" (``crontab -``), so every mutation is a read-modify-write. The
mutations are serialized by a process-wide lock. Another process editing the
crontab at the same moment (``crontab -e``, a second app instance) can still
lose an update; the crontab mechanism exposes no cross-process lock.
"""

import logging
import threading
from typing import List, Optional

from aui_backend.config import get_cron_marker, get_unix_shell
from aui_backend.errors import RegistrationRejected
from aui_backend.process import ProcessRunner
from aui_backend.scheduler import cron
from aui_backend.scheduler.base import TaskBackend
from aui_backend.scheduler.models import OwnedTaskEntry, TaskSpec, require_task_name
from aui_backend.settings import get_settings

logger = logging.getLogger(__name__)

_CRONTAB_LOCK = threading.Lock()


class CrontabBackend(TaskBackend):
    """Text backend: one marked line per task in the user's crontab."""

    mechanism = "crontab"

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        crontab_command: Optional[str] = None,
        marker: Optional[str] = None,
        shell: Optional[str] = None,
    ):
        super().__init__(runner)
        self.crontab_command = crontab_command or get_settings().scheduler.crontab_command
        self.marker = marker or get_cron_marker()
        self.shell = shell or get_unix_shell()

    # -- table access ---------------------------------------------------------

    def read_table(self) -> str:
        """Return the current crontab text.

        Any failure to read it (no crontab yet, crontab refusing) counts as an
        empty table. Output that is not valid UTF-8 raises EncodingError so
        foreign lines are never rewritten lossily.
        """
        result = self._run(self.crontab_command, ["-l"])
        if not result.ok:
            logger.debug(
                "crontab -l exited %s, treating as empty: %s",
                result.returncode,
                result.decode_stderr().strip(),
            )
            return ""
        return result.decode_stdout(strict=True)

    def write_table(self, content: str) -> None:
        """Replace the whole crontab with ``content``."""
        result = self._run(self.crontab_command, ["-"], input_text=content)
        if not result.ok:
            stderr = result.decode_stderr()
            logger.error("crontab rejected the new table: %s", stderr.strip())
            raise RegistrationRejected(
                f"Failed to write crontab: {stderr}", diagnostic=stderr
            )

    def _is_entry_for(self, line: str, name: str) -> bool:
        return cron.owner_name(line, self.marker) == name

    # -- capability set -------------------------------------------------------

    def register(self, spec: TaskSpec) -> str:
        entry = cron.build_cron_line(spec, self.marker, self.shell)
        with _CRONTAB_LOCK:
            existing = self.read_table()
            # Drop any earlier line for this name so registration overwrites
            kept = [
                line
                for line in existing.splitlines()
                if not self._is_entry_for(line, spec.name)
            ]
            kept.append(entry)
            self.write_table("\n".join(kept) + "\n")

        logger.info("Registered cron job %s: %s", spec.name, entry)
        return f"Created cron job: {self.marker}:{spec.name}"

    def list_tasks(self) -> List[OwnedTaskEntry]:
        entries = []
        for line in self.read_table().splitlines():
            entry = cron.parse_cron_line(line, self.marker)
            if entry is not None:
                entries.append(entry)
        return entries

    def delete(self, name: str) -> str:
        name = require_task_name(name)
        with _CRONTAB_LOCK:
            existing = self.read_table()
            lines = existing.splitlines()
            kept = [line for line in lines if not self._is_entry_for(line, name)]
            removed = len(lines) - len(kept)
            if removed:
                self.write_table("\n".join(kept) + "\n")

        if removed:
            logger.info("Deleted %d cron line(s) for %s", removed, name)
        else:
            logger.debug("No cron line for %s, nothing to delete", name)
        return f"Deleted cron job: {self.marker}:{name}"
