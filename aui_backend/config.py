import configparser
import logging
import os
from typing import Optional

from aui_backend.settings import get_settings, validate_owner_token

logger = logging.getLogger(__name__)


def _get_xdg_dir(env_var: str) -> str:
    """
    Get directory for aui files, defaulting to ~/.aui.

    XDG paths are only used when the corresponding environment variable
    is explicitly set by the user.
    """
    xdg_base = os.getenv(env_var)
    if xdg_base:
        return os.path.join(xdg_base, "aui")
    return os.path.join(os.path.expanduser("~"), ".aui")


# XDG Base Directory paths
CONFIG_DIR = _get_xdg_dir("XDG_CONFIG_HOME")
STATE_DIR = _get_xdg_dir("XDG_STATE_HOME")

# Configuration files (XDG_CONFIG_HOME)
CONFIG_FILE = os.path.join(CONFIG_DIR, "aui.cfg")

# State files (XDG_STATE_HOME)
LOG_FILE = os.path.join(STATE_DIR, "aui.log")

DEFAULT_SECTION = "aui"


def get_value(key: str) -> Optional[str]:
    """Get a user override from the config file, or None if unset."""
    config = configparser.ConfigParser()
    config.read(CONFIG_FILE)
    return config.get(DEFAULT_SECTION, key, fallback=None)


def set_config_value(key: str, value: str) -> None:
    """
    Sets a config value in the persistent config file.
    """
    os.makedirs(os.path.dirname(CONFIG_FILE), mode=0o700, exist_ok=True)
    config = configparser.ConfigParser()
    config.read(CONFIG_FILE)
    if DEFAULT_SECTION not in config:
        config[DEFAULT_SECTION] = {}
    config[DEFAULT_SECTION][key] = value
    with open(CONFIG_FILE, "w") as f:
        config.write(f)


def reset_value(key: str) -> None:
    """Remove a key from the config file, resetting it to default."""
    config = configparser.ConfigParser()
    config.read(CONFIG_FILE)
    if DEFAULT_SECTION in config and key in config[DEFAULT_SECTION]:
        del config[DEFAULT_SECTION][key]
        with open(CONFIG_FILE, "w") as f:
            config.write(f)


def _get_owner_token(key: str, default: str) -> str:
    cfg_val = get_value(key)
    if cfg_val is None:
        return default
    try:
        return validate_owner_token(cfg_val)
    except ValueError as e:
        logger.warning("Ignoring %s=%r in %s: %s", key, cfg_val, CONFIG_FILE, e)
        return default


def get_task_namespace() -> str:
    """Task Scheduler folder owned by this application (default "AUI")."""
    return _get_owner_token("task_namespace", get_settings().scheduler.namespace)


def get_cron_marker() -> str:
    """Token used in the `# <marker>:<name>` crontab comment (default "AUI")."""
    return _get_owner_token("cron_marker", get_settings().scheduler.marker)


def get_unix_shell() -> str:
    return get_value("unix_shell") or get_settings().scheduler.unix_shell


def get_windows_interpreter() -> str:
    return (
        get_value("windows_interpreter") or get_settings().scheduler.windows_interpreter
    )


def get_agent_command() -> str:
    return get_value("agent_command") or get_settings().scheduler.agent_command


def get_fetch_timeout() -> float:
    """Return the fetch timeout in seconds (default 15).

    Invalid or non-positive values in the config file fall back to the
    typed settings value.
    """
    cfg_val = get_value("fetch_timeout")
    if cfg_val is not None:
        try:
            timeout = float(cfg_val)
            if timeout > 0:
                return timeout
        except ValueError:
            pass
    return get_settings().fetch.timeout
