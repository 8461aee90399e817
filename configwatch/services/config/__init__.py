"""
Config Service - AI Configuration Polling

Responsibilities:
- Fetch the AI configuration from the flag provider (every 5 seconds)
- Hold the latest snapshot for concurrent readers
- Keep the last good snapshot when a fetch fails
"""

from .cache import ConfigCache
from .provider import ConfigProvider, FetchResult, LaunchDarklyProvider, StaticConfigProvider
from .refresher import RefreshTask
from .snapshot import (
    DEFAULT_SNAPSHOT,
    ConfigSnapshot,
    Message,
    ParamKind,
    ParamValue,
    parse_snapshot,
)

__all__ = [
    "ConfigCache",
    "ConfigProvider",
    "FetchResult",
    "LaunchDarklyProvider",
    "StaticConfigProvider",
    "RefreshTask",
    "DEFAULT_SNAPSHOT",
    "ConfigSnapshot",
    "Message",
    "ParamKind",
    "ParamValue",
    "parse_snapshot",
]
