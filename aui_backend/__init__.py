import importlib.metadata

try:
    _detected_version = importlib.metadata.version("aui-backend")
    __version__ = _detected_version if _detected_version else "0.0.0-dev"
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

from aui_backend.errors import (
    AuiError,
    EncodingError,
    ExecutionError,
    FetchError,
    InvalidArgument,
    RegistrationRejected,
)
from aui_backend.settings import Settings, clear_settings_cache, get_settings

__all__ = [
    "__version__",
    "AuiError",
    "ExecutionError",
    "RegistrationRejected",
    "EncodingError",
    "InvalidArgument",
    "FetchError",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
