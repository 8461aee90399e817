"""
Configuration Refresh Task

Periodically fetches a snapshot from the provider and pushes it into the
cache. A failed fetch is logged and the previous snapshot stays in place;
the next tick tries again.
"""

import asyncio
from datetime import datetime, timezone

from configwatch.common.exceptions import ConfigWatchError
from configwatch.common.logging_setup import (
    get_service_logger,
    log_refresh,
    set_service_log_level,
)
from configwatch.common.scheduler import ScheduledLoop

from .cache import ConfigCache
from .provider import ConfigProvider

logger = get_service_logger("config.refresh")


class RefreshTask:
    """
    Managed background refresh of a ConfigCache.

    The cache and provider are injected; the task owns only its loop.
    """

    def __init__(
        self,
        cache: ConfigCache,
        provider: ConfigProvider,
        interval_seconds: float = 5.0,
        fetch_timeout_seconds: float = 10.0,
        config_key: str = "",
    ):
        self.cache = cache
        self.provider = provider
        self.fetch_timeout = fetch_timeout_seconds
        self.config_key = config_key or "config"

        self._loop = ScheduledLoop(interval_seconds, self.refresh_once, name="config-refresh")
        self._log_level: str | None = None
        # Serializes fetch+update so ticks and forced syncs apply in order
        self._refresh_lock = asyncio.Lock()

        # Observability
        self.success_count = 0
        self.failure_count = 0
        self.last_error: str | None = None
        self.last_success_at: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self._loop.is_running

    def start(self) -> None:
        """Start periodic refresh"""
        self._loop.start()
        logger.info(
            f"Refresh task started (every {self._loop.interval}s)",
            extra={"interval_s": self._loop.interval, "config_key": self.config_key},
        )

    async def stop(self) -> None:
        """Stop periodic refresh and wait for the loop to exit"""
        await self._loop.stop()
        logger.info("Refresh task stopped")

    async def refresh_once(self) -> bool:
        """
        Fetch once and update the cache.

        A call made while another refresh is in flight waits for it, then
        fetches again, so the cache always ends on the latest fetch.

        Returns:
            True if the cache was updated, False if the fetch failed
        """
        async with self._refresh_lock:
            return await self._refresh_locked()

    async def _refresh_locked(self) -> bool:
        try:
            result = await asyncio.wait_for(self.provider.fetch(), timeout=self.fetch_timeout)
        except asyncio.TimeoutError:
            return self._record_failure(f"fetch timed out after {self.fetch_timeout}s")
        except ConfigWatchError as e:
            return self._record_failure(e.message)
        except Exception as e:
            logger.error(f"Unexpected provider error: {e}", exc_info=True)
            return self._record_failure(f"{e.__class__.__name__}: {e}")

        previous = self.cache.read() if self.cache.has_snapshot else None
        changed = result.snapshot != previous
        self.cache.update(result.snapshot)

        self.success_count += 1
        self.last_error = None
        self.last_success_at = datetime.now(timezone.utc)
        log_refresh(logger, self.config_key, True, result.snapshot.model_name, changed=changed)

        if result.log_level:
            self._apply_log_level(result.log_level)

        return True

    def _record_failure(self, reason: str) -> bool:
        self.failure_count += 1
        self.last_error = reason
        log_refresh(logger, self.config_key, False, reason)
        return False

    def _apply_log_level(self, level: str) -> None:
        level = level.strip().upper()
        if level == self._log_level:
            return

        if set_service_log_level(level):
            self._log_level = level
            logger.info(f"Log level set to {level} by flag", extra={"log_level": level})
        else:
            logger.warning(f"Ignoring unknown log level from flag: {level}")

    def get_stats(self) -> dict:
        return {
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "last_error": self.last_error,
            "last_success_at": self.last_success_at.isoformat() if self.last_success_at else None,
            "scheduler": self._loop.get_stats(),
        }
