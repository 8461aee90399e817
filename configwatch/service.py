"""
configwatch Service

Wires the cache, provider, refresh task and display server together and
owns their lifecycle:

    provider --(every N s)--> RefreshTask --> ConfigCache <-- DisplayServer
"""

import asyncio
import signal
from datetime import datetime, timezone

from configwatch.common.exceptions import StartupError
from configwatch.common.logging_setup import get_service_logger
from configwatch.common.settings import Settings
from configwatch.services.config import (
    ConfigCache,
    ConfigProvider,
    LaunchDarklyProvider,
    RefreshTask,
)
from configwatch.services.display import DisplayServer

logger = get_service_logger("service")


def build_provider(settings: Settings) -> ConfigProvider:
    """
    Create the HTTP provider from settings.

    Raises:
        StartupError: If no client-side ID is configured
    """
    if not settings.client_side_id:
        raise StartupError(
            "provider credentials not configured. "
            "Set CONFIGWATCH_CLIENT_SIDE_ID or provider.client_side_id in config.yaml."
        )
    if not settings.config_key:
        raise StartupError("no AI config key configured")

    return LaunchDarklyProvider(
        client_side_id=settings.client_side_id,
        config_key=settings.config_key,
        context_key=settings.context_key,
        base_url=settings.base_url,
        log_level_flag=settings.log_level_flag,
        timeout=settings.fetch_timeout_s,
    )


class ConfigWatchService:
    """
    Polling config cache with an HTTP front end.

    Every collaborator is constructed here and injected; nothing is held in
    module-level state.
    """

    def __init__(self, settings: Settings, provider: ConfigProvider | None = None):
        self.settings = settings
        self.provider = provider if provider is not None else build_provider(settings)

        self.cache = ConfigCache()
        self.refresher = RefreshTask(
            cache=self.cache,
            provider=self.provider,
            interval_seconds=settings.refresh_interval_s,
            fetch_timeout_seconds=settings.fetch_timeout_s,
            config_key=settings.config_key,
        )
        self.display = DisplayServer(
            cache=self.cache,
            refresher=self.refresher,
            host=settings.host,
            port=settings.port,
            config_key=settings.config_key,
            admin_port=settings.admin_port,
        )

        self._start_time: datetime | None = None
        self._running = False
        self._shutdown_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Initial fetch, then start the refresh loop and the HTTP server"""
        logger.info(
            f"Starting configwatch (config: {self.settings.config_key})",
            extra={"config_key": self.settings.config_key},
        )
        self._start_time = datetime.now(timezone.utc)
        self._running = True

        # First fetch before serving so readers rarely see the default
        if not await self.refresher.refresh_once():
            logger.warning("Initial fetch failed; serving default config until next refresh")

        self.refresher.start()
        try:
            await self.display.start()
        except Exception:
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop the refresh loop, the HTTP server and the provider client"""
        if not self._running:
            return

        logger.info("Stopping configwatch")
        self._running = False

        await self.refresher.stop()
        await self.display.stop()
        await self.provider.close()

        logger.info("configwatch stopped")

    async def serve(self) -> None:
        """Start, then block until a shutdown signal arrives"""
        await self.start()
        self._setup_signal_handlers()
        try:
            await self._shutdown_event.wait()
        finally:
            await self.stop()

    def request_shutdown(self) -> None:
        """Ask serve() to return"""
        logger.info("Received shutdown signal")
        self._shutdown_event.set()

    def _setup_signal_handlers(self) -> None:
        """Setup graceful shutdown signal handlers"""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except NotImplementedError:
                # Windows doesn't support add_signal_handler
                signal.signal(sig, lambda s, f: self.request_shutdown())
