"""Tests for the process-execution facility."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from aui_backend.errors import EncodingError, ExecutionError
from aui_backend.process import (
    ProcessResult,
    console_encoding,
    run_process,
    spawn_detached,
    spawn_raw,
)


class TestProcessResult:
    def test_ok(self):
        assert ProcessResult(0).ok
        assert not ProcessResult(2).ok

    def test_lenient_decode_replaces(self):
        assert ProcessResult(0, b"a\xffb").decode_stdout() == "a�b"

    def test_strict_decode_raises(self):
        with pytest.raises(EncodingError):
            ProcessResult(0, b"a\xffb").decode_stdout(strict=True)

    def test_decode_with_code_page(self):
        result = ProcessResult(1, "café".encode("cp850"), "é".encode("cp850"))
        assert result.decode_stdout(encoding="cp850") == "café"
        assert result.decode_stderr("cp850") == "é"


class TestConsoleEncoding:
    def test_windows_uses_oem_code_page(self):
        with patch("aui_backend.process.sys.platform", "win32"):
            assert console_encoding() == "oem"

    def test_elsewhere_utf8(self):
        with patch("aui_backend.process.sys.platform", "linux"):
            assert console_encoding() == "utf-8"


class TestRunProcess:
    def test_captures_output_and_status(self):
        completed = subprocess.CompletedProcess(["x"], 3, b"out", b"err")
        with patch("subprocess.run", return_value=completed) as mock_run:
            result = run_process("crontab", ["-l"])
        assert result == ProcessResult(3, b"out", b"err")
        assert mock_run.call_args[0][0] == ["crontab", "-l"]
        assert mock_run.call_args[1]["stdin"] == subprocess.DEVNULL

    def test_input_text_is_utf8(self):
        completed = subprocess.CompletedProcess(["x"], 0, b"", b"")
        with patch("subprocess.run", return_value=completed) as mock_run:
            run_process("crontab", ["-"], input_text="é\n")
        assert mock_run.call_args[1]["input"] == "é\n".encode("utf-8")

    def test_missing_program(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("nope")):
            with pytest.raises(ExecutionError, match="Failed to run crontab"):
                run_process("crontab", ["-l"])


class TestSpawn:
    def test_spawn_detached_new_session(self):
        with patch("aui_backend.process.sys.platform", "linux"), patch(
            "subprocess.Popen", return_value=MagicMock()
        ) as mock_popen:
            spawn_detached("xterm", ["-e", "/x.sh"])
        assert mock_popen.call_args[0][0] == ["xterm", "-e", "/x.sh"]
        assert mock_popen.call_args[1]["start_new_session"] is True

    def test_spawn_detached_failure(self):
        with patch("subprocess.Popen", side_effect=FileNotFoundError("nope")):
            with pytest.raises(ExecutionError):
                spawn_detached("xterm")

    def test_spawn_raw_passes_line_verbatim(self):
        with patch("subprocess.Popen", return_value=MagicMock()) as mock_popen:
            spawn_raw("cmd.exe", '/c start "T" x')
        assert mock_popen.call_args[0][0] == '"cmd.exe" /c start "T" x'
