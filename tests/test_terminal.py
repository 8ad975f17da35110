"""Tests for opening a visible terminal."""

from unittest.mock import MagicMock, patch

import pytest

from aui_backend import terminal
from aui_backend.errors import ExecutionError, InvalidArgument


class TestValidateScriptReference:
    def test_plain_path_passes(self):
        assert terminal.validate_script_reference("/home/u/deploy.sh") == "/home/u/deploy.sh"

    @pytest.mark.parametrize("path", ["", "   ", 'a"b.ps1', "a\nb.sh", "a\0b"])
    def test_rejected_everywhere(self, path):
        with pytest.raises(InvalidArgument):
            terminal.validate_script_reference(path, platform="linux")

    def test_cmd_metacharacters_only_rejected_on_windows(self):
        path = "C:\\a&b\\run.ps1"
        assert terminal.validate_script_reference(path, platform="linux") == path
        with pytest.raises(InvalidArgument) as exc:
            terminal.validate_script_reference(path, platform="win32")
        assert "&" in str(exc.value)


class TestCommandBuilders:
    def test_windows_start_line(self):
        line = terminal.windows_start_line("C:\\p\\run.ps1")
        assert line == (
            '/c start "Deploy" powershell.exe -NoExit -ExecutionPolicy Bypass '
            '-File "C:\\p\\run.ps1"'
        )

    def test_apple_script_escapes_quotes(self):
        script = terminal.apple_script("/Users/me/it's.sh")
        assert "do script \"bash '/Users/me/it'\\''s.sh'\"" in script

    def test_linux_candidates(self):
        candidates = terminal.linux_candidates("/x.sh", ["gnome-terminal", "xterm"])
        assert candidates == [
            ("gnome-terminal", ["--", "/x.sh"]),
            ("xterm", ["-e", "/x.sh"]),
        ]


class TestOpenTerminal:
    def test_windows_uses_raw_start_line(self):
        with patch("aui_backend.terminal.spawn_raw") as mock_raw:
            terminal.open_terminal("C:\\p\\run.ps1", platform="win32")
        program, line = mock_raw.call_args[0]
        assert program == "cmd.exe"
        assert line.endswith('-File "C:\\p\\run.ps1"')

    def test_macos_uses_osascript(self):
        with patch("aui_backend.terminal.spawn_detached") as mock_spawn:
            terminal.open_terminal("/x.sh", platform="darwin")
        program, args = mock_spawn.call_args[0]
        assert program == "osascript"
        assert args[0] == "-e"

    def test_linux_falls_through_missing_emulators(self):
        attempts = []

        def fake_spawn(program, args=()):
            attempts.append(program)
            if program != "xterm":
                raise ExecutionError(f"Failed to start {program}")
            return MagicMock()

        with patch("aui_backend.terminal.spawn_detached", side_effect=fake_spawn):
            terminal.open_terminal("/x.sh", platform="linux")
        assert attempts == ["x-terminal-emulator", "gnome-terminal", "xterm"]

    def test_linux_without_any_emulator(self):
        with patch(
            "aui_backend.terminal.spawn_detached",
            side_effect=ExecutionError("not found"),
        ):
            with pytest.raises(ExecutionError, match="No terminal emulator found"):
                terminal.open_terminal("/x.sh", platform="linux")

    def test_invalid_path_spawns_nothing(self):
        with patch("aui_backend.terminal.spawn_raw") as mock_raw:
            with pytest.raises(InvalidArgument):
                terminal.open_terminal('C:\\x" & calc.exe', platform="win32")
        mock_raw.assert_not_called()
