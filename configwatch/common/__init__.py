"""
Common Utilities

Shared modules used across all services:
- settings.py - YAML + environment settings
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
- scheduler.py - Fixed-interval async loop
"""

from .exceptions import (
    ConfigWatchError,
    ConfigError,
    FetchError,
    ParameterTypeError,
    StartupError,
    ServiceError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    set_service_log_level,
    log_refresh,
)
from .scheduler import ScheduledLoop
from .settings import Settings, load_settings

__all__ = [
    # Exceptions
    "ConfigWatchError",
    "ConfigError",
    "FetchError",
    "ParameterTypeError",
    "StartupError",
    "ServiceError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "set_service_log_level",
    "log_refresh",
    # Scheduler
    "ScheduledLoop",
    # Settings
    "Settings",
    "load_settings",
]
