"""Pytest configuration and fixtures for aui-backend tests.

Every test gets its own config file, a fresh settings cache and backend
cache, and a captured console, so nothing reads or writes the user's real
~/.aui directory or prints to the terminal.
"""

import io
import os

import pytest
from rich.console import Console

from aui_backend import config as aui_config
from aui_backend import messaging
from aui_backend.scheduler.platform import reset_backend
from aui_backend.settings import clear_settings_cache


@pytest.fixture(autouse=True)
def isolate_config_between_tests(tmp_path_factory, monkeypatch):
    """Redirect the config file and drop AUI_* environment overrides."""
    config_dir = tmp_path_factory.mktemp("aui_config")
    monkeypatch.setattr(aui_config, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(aui_config, "CONFIG_FILE", str(config_dir / "aui.cfg"))
    monkeypatch.setattr(aui_config, "LOG_FILE", str(config_dir / "aui.log"))
    for key in list(os.environ):
        if key.startswith("AUI_"):
            monkeypatch.delenv(key)

    clear_settings_cache()
    reset_backend()
    yield
    clear_settings_cache()
    reset_backend()


@pytest.fixture(autouse=True)
def captured_console():
    """Capture Rich output; tests read it via ``captured_console.getvalue()``."""
    buffer = io.StringIO()
    messaging.set_console(Console(file=buffer, width=200, color_system=None))
    yield buffer
    messaging.set_console(None)
