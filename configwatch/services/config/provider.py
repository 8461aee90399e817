"""
Configuration Providers

Fetch the AI configuration from an external flag service.

- LaunchDarklyProvider - evaluates flags over HTTP (client-side evalx endpoint)
- StaticConfigProvider - fixed snapshot, for offline runs and tests
"""

import base64
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from configwatch import __version__
from configwatch.common.exceptions import ConfigError, FetchError
from configwatch.common.logging_setup import get_service_logger

from .snapshot import DEFAULT_SNAPSHOT, ConfigSnapshot, parse_snapshot

logger = get_service_logger("config.provider")


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one successful provider fetch"""
    snapshot: ConfigSnapshot
    log_level: str | None = None


class ConfigProvider(ABC):
    """Source of configuration snapshots"""

    @abstractmethod
    async def fetch(self) -> FetchResult:
        """
        Fetch the current configuration.

        Raises:
            FetchError: If no snapshot could be obtained
        """

    async def close(self) -> None:
        """Release any held resources"""


class LaunchDarklyProvider(ConfigProvider):
    """
    Evaluates the AI config flag for a single context.

    One GET per fetch returns every flag for the context; the AI config and
    the optional log-level flag are both read from that response.
    """

    def __init__(
        self,
        client_side_id: str,
        config_key: str,
        context_key: str = "user-key",
        base_url: str = "https://clientsdk.launchdarkly.com",
        log_level_flag: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_side_id = client_side_id
        self.config_key = config_key
        self.context_key = context_key
        self.base_url = base_url.rstrip("/")
        self.log_level_flag = log_level_flag
        self.timeout = timeout
        self._transport = transport
        # Reusable HTTP client - avoids connection overhead per request
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def _context_segment(self) -> str:
        """base64url-encoded evaluation context"""
        context = {"kind": "user", "key": self.context_key}
        raw = json.dumps(context, separators=(",", ":")).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii")

    def evaluation_url(self) -> str:
        return (
            f"{self.base_url}/sdk/evalx/{self.client_side_id}"
            f"/contexts/{self._context_segment()}"
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": f"configwatch/{__version__}",
        }

    async def _fetch_flags(self) -> dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.get(self.evaluation_url(), headers=self._headers())
            response.raise_for_status()
            flags = response.json()
        except httpx.TimeoutException as e:
            raise FetchError(f"provider timed out: {e}", self.config_key) from e
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"provider returned HTTP {e.response.status_code}", self.config_key
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"HTTP error: {e}", self.config_key) from e
        except ValueError as e:
            raise FetchError(f"invalid JSON from provider: {e}", self.config_key) from e

        if not isinstance(flags, dict):
            raise FetchError("provider response is not an object", self.config_key)

        return flags

    @staticmethod
    def _flag_value(flags: dict[str, Any], key: str) -> Any:
        """Unwrap {"value": ...} evaluation details; plain values pass through"""
        entry = flags.get(key)
        if isinstance(entry, dict) and "value" in entry:
            return entry["value"]
        return entry

    async def fetch(self) -> FetchResult:
        flags = await self._fetch_flags()

        payload = self._flag_value(flags, self.config_key)
        if payload is None:
            raise FetchError(f"flag '{self.config_key}' not found", self.config_key)

        try:
            snapshot = parse_snapshot(payload)
        except ConfigError as e:
            raise FetchError(e.message, self.config_key) from e

        log_level = None
        if self.log_level_flag:
            value = self._flag_value(flags, self.log_level_flag)
            if isinstance(value, str) and value:
                log_level = value
            elif value is not None:
                logger.warning(
                    f"Ignoring non-string '{self.log_level_flag}' flag value: {value!r}",
                    extra={"flag_key": self.log_level_flag},
                )

        return FetchResult(snapshot=snapshot, log_level=log_level)


class StaticConfigProvider(ConfigProvider):
    """Returns a fixed snapshot, or raises a fixed error"""

    def __init__(
        self,
        snapshot: ConfigSnapshot = DEFAULT_SNAPSHOT,
        error: Exception | None = None,
        log_level: str | None = None,
    ):
        self.snapshot = snapshot
        self.error = error
        self.log_level = log_level
        self.calls = 0

    async def fetch(self) -> FetchResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return FetchResult(snapshot=self.snapshot, log_level=self.log_level)
