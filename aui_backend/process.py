"""Process-execution facility.

Spawns external programs with an argument list, captures their output and
exit status, and hides console windows on Windows. Launch failures become
ExecutionError; what a program *reports* is left to the caller to judge.
"""

import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from aui_backend.errors import EncodingError, ExecutionError

logger = logging.getLogger(__name__)

# subprocess.CREATE_NO_WINDOW only exists on Windows builds of Python
CREATE_NO_WINDOW = getattr(subprocess, "CREATE_NO_WINDOW", 0x08000000)


@dataclass
class ProcessResult:
    """Exit status and raw output of a finished process."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def decode_stdout(self, strict: bool = False, encoding: str = "utf-8") -> str:
        """Decode stdout, UTF-8 unless the program writes another code page.

        With ``strict=True`` undecodable bytes raise EncodingError instead of
        being replaced.
        """
        if strict:
            try:
                return self.stdout.decode(encoding)
            except UnicodeDecodeError as e:
                raise EncodingError(f"Invalid {encoding} in output: {e}") from e
        return self.stdout.decode(encoding, errors="replace")

    def decode_stderr(self, encoding: str = "utf-8") -> str:
        return self.stderr.decode(encoding, errors="replace")


def console_encoding() -> str:
    """Encoding Windows console programs use for redirected output.

    Tools such as schtasks.exe write in the OEM code page, not UTF-8.
    Elsewhere this is UTF-8.
    """
    if sys.platform == "win32":
        return "oem"
    return "utf-8"


def _creationflags(hide_window: bool) -> int:
    if sys.platform == "win32" and hide_window:
        return CREATE_NO_WINDOW
    return 0


def run_process(
    program: str,
    args: Sequence[str] = (),
    input_text: Optional[str] = None,
    hide_window: bool = True,
) -> ProcessResult:
    """Run ``program`` with ``args`` and wait for it to exit.

    Args:
        program: Executable name or path.
        args: Arguments, passed without shell interpretation.
        input_text: Written to the process's stdin (UTF-8) when given.
        hide_window: Suppress the console window on Windows.

    Returns:
        ProcessResult with the exit status and captured output.

    Raises:
        ExecutionError: The program could not be started.
    """
    cmd = [program, *args]
    logger.debug("Running %s", cmd)
    try:
        completed = subprocess.run(
            cmd,
            input=input_text.encode("utf-8") if input_text is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=None if input_text is not None else subprocess.DEVNULL,
            creationflags=_creationflags(hide_window),
            check=False,
        )
    except OSError as e:
        logger.error("Failed to run %s: %s", program, e)
        raise ExecutionError(f"Failed to run {program}: {e}") from e

    return ProcessResult(
        returncode=completed.returncode,
        stdout=completed.stdout or b"",
        stderr=completed.stderr or b"",
    )


def spawn_detached(program: str, args: Sequence[str] = ()) -> subprocess.Popen:
    """Start ``program`` without waiting for it, detached from our session.

    Raises:
        ExecutionError: The program could not be started.
    """
    cmd = [program, *args]
    logger.debug("Spawning %s", cmd)
    try:
        if sys.platform == "win32":
            return subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        return subprocess.Popen(
            cmd,
            start_new_session=True,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        raise ExecutionError(f"Failed to start {program}: {e}") from e


def spawn_raw(program: str, command_line: str) -> subprocess.Popen:
    """Start ``program`` with a verbatim, unescaped Windows command line.

    Popen hands a string argument straight to CreateProcess, so nothing in
    ``command_line`` is re-quoted. Only the program's own window is hidden.
    Callers must validate anything they interpolate into ``command_line``.

    Raises:
        ExecutionError: The program could not be started.
    """
    full_line = f'"{program}" {command_line}'
    logger.debug("Spawning raw command line %s", full_line)
    try:
        return subprocess.Popen(
            full_line,
            creationflags=_creationflags(True),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        raise ExecutionError(f"Failed to start {program}: {e}") from e


# Signature of run_process, injected into the scheduler backends
ProcessRunner = Callable[..., ProcessResult]
