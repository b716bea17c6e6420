"""pdfsight package."""

from pdfsight.async_runner import run_async
from pdfsight.exceptions import (
    AsyncExecutionError,
    DependencyError,
    FetchError,
    InvalidURLError,
    PackageError,
    ParseError,
    RenderError,
    SettingsError,
    VisionError,
)
from pdfsight.logging import configure_logging, get_logger
from pdfsight.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("pdfsight")

__all__ = [
    "AsyncExecutionError",
    "DependencyError",
    "FetchError",
    "InvalidURLError",
    "PackageError",
    "ParseError",
    "RenderError",
    "Settings",
    "SettingsError",
    "VisionError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
    "run_async",
]
