"""Open a visible terminal window running a script.

The spawned terminal is detached; nothing waits for it to finish.
"""

import logging
import sys
from typing import List, Optional, Sequence, Tuple

from aui_backend.config import get_windows_interpreter
from aui_backend.errors import ExecutionError, InvalidArgument
from aui_backend.process import spawn_detached, spawn_raw
from aui_backend.settings import get_settings

logger = logging.getLogger(__name__)

# Characters that would break out of the quoted -File argument
_FORBIDDEN = '"\r\n\0'
# cmd.exe still interprets these inside the raw `start` line
_FORBIDDEN_CMD = "%&|<>^"


def validate_script_reference(script_path: str, platform: str = sys.platform) -> str:
    """Reject script paths that are unsafe to splice into a command line.

    Raises:
        InvalidArgument: The path is empty or contains forbidden characters.
    """
    if not script_path or not script_path.strip():
        raise InvalidArgument("Script path must not be empty")
    forbidden = _FORBIDDEN + (_FORBIDDEN_CMD if platform == "win32" else "")
    bad = sorted({c for c in script_path if c in forbidden})
    if bad:
        raise InvalidArgument(
            f"Script path contains forbidden characters: {''.join(bad)!r}"
        )
    return script_path


def windows_start_line(script_path: str, title: Optional[str] = None) -> str:
    """The raw ``cmd.exe`` argument line that launches a detached PowerShell.

    ``start`` hands the window to ShellExecuteEx, so it outlives this process.
    """
    title = title or get_settings().terminal.window_title
    return (
        f'/c start "{title}" {get_windows_interpreter()} -NoExit '
        f'-ExecutionPolicy Bypass -File "{script_path}"'
    )


def apple_script(script_path: str) -> str:
    """AppleScript that runs ``script_path`` in a new Terminal.app window."""
    escaped = script_path.replace("'", "'\\''")
    return (
        'tell application "Terminal"\n'
        "    activate\n"
        f"    do script \"bash '{escaped}'\"\n"
        "end tell"
    )


def linux_candidates(
    script_path: str, terminals: Optional[Sequence[str]] = None
) -> List[Tuple[str, List[str]]]:
    """Emulators to try, in order, with the arguments each needs."""
    terminals = terminals or get_settings().terminal.linux_terminals
    candidates = []
    for term in terminals:
        if term == "gnome-terminal":
            candidates.append((term, ["--", script_path]))
        else:
            candidates.append((term, ["-e", script_path]))
    return candidates


def open_terminal(script_path: str, platform: str = sys.platform) -> None:
    """Open a visible terminal running ``script_path``.

    Raises:
        InvalidArgument: The script path failed validation.
        ExecutionError: No terminal could be started.
    """
    validate_script_reference(script_path, platform)

    if platform == "win32":
        spawn_raw("cmd.exe", windows_start_line(script_path))
    elif platform == "darwin":
        spawn_detached("osascript", ["-e", apple_script(script_path)])
    else:
        for term, args in linux_candidates(script_path):
            try:
                spawn_detached(term, args)
            except ExecutionError as e:
                logger.debug("Terminal %s unavailable: %s", term, e)
                continue
            break
        else:
            raise ExecutionError("No terminal emulator found")

    logger.info("Opened terminal for %s", script_path)
