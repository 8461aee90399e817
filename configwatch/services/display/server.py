"""
Display Server

Public aiohttp listener exposing the current configuration:
- GET /        JSON (Accept prefers application/json) or auto-refreshing HTML page

Admin listener, bound to 127.0.0.1 only:
- GET /health  service and refresh status
- POST /sync   refresh immediately
"""

from datetime import datetime, timezone

from aiohttp import web

from configwatch.common.exceptions import ServiceError
from configwatch.common.logging_setup import get_service_logger
from configwatch.services.config.cache import ConfigCache
from configwatch.services.config.refresher import RefreshTask

from .views import ConfigView, render_config_page

logger = get_service_logger("display")

ADMIN_HOST = "127.0.0.1"


def _accept_qualities(accept: str) -> dict[str, float]:
    """Map each media type in an Accept header to its q value (default 1)"""
    qualities: dict[str, float] = {}
    for part in accept.split(","):
        media_type, *params = (p.strip() for p in part.split(";"))
        media_type = media_type.lower()
        if not media_type:
            continue

        q = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        qualities[media_type] = max(q, qualities.get(media_type, 0.0))
    return qualities


def wants_json(accept: str | None) -> bool:
    """
    True if the client prefers application/json over text/html.

    application/json must be listed with q > 0 and ranked strictly above
    text/html; ties, wildcards and a missing header get HTML.
    """
    if not accept:
        return False

    qualities = _accept_qualities(accept)
    json_q = qualities.get("application/json", 0.0)
    return json_q > 0 and json_q > qualities.get("text/html", 0.0)


class DisplayServer:
    """HTTP front end reading from an injected ConfigCache"""

    def __init__(
        self,
        cache: ConfigCache,
        refresher: RefreshTask | None = None,
        host: str = "0.0.0.0",
        port: int = 8080,
        config_key: str = "",
        admin_port: int = 8082,
    ):
        self.cache = cache
        self.refresher = refresher
        self.host = host
        self.port = port
        self.admin_port = admin_port
        self.config_key = config_key

        self._start_time = datetime.now(timezone.utc)
        self._runner: web.AppRunner | None = None
        self._admin_runner: web.AppRunner | None = None

    def build_app(self) -> web.Application:
        """Create the public application"""
        app = web.Application()
        app.router.add_get("/", self._config_handler)
        return app

    def build_admin_app(self) -> web.Application:
        """Create the loopback-only application for health and forced sync"""
        app = web.Application()
        app.router.add_get("/health", self._health_handler)
        app.router.add_post("/sync", self._sync_handler)
        return app

    async def start(self) -> None:
        """Start the public listener on host:port and the admin listener on loopback"""
        self._runner = await self._start_site(self.build_app(), self.host, self.port)
        try:
            self._admin_runner = await self._start_site(
                self.build_admin_app(), ADMIN_HOST, self.admin_port
            )
        except ServiceError:
            await self.stop()
            raise

        logger.info(
            f"Display server started on http://{self.host}:{self.port} "
            f"(admin on http://{ADMIN_HOST}:{self.admin_port})",
            extra={"host": self.host, "port": self.port, "admin_port": self.admin_port},
        )

    async def _start_site(self, app: web.Application, host: str, port: int) -> web.AppRunner:
        runner = web.AppRunner(app)
        await runner.setup()

        site = web.TCPSite(runner, host, port)
        try:
            await site.start()
        except OSError as e:
            await runner.cleanup()
            raise ServiceError(f"cannot listen on {host}:{port}: {e}", "display") from e
        return runner

    async def stop(self) -> None:
        """Stop both HTTP listeners"""
        stopped = False
        for runner in (self._admin_runner, self._runner):
            if runner:
                await runner.cleanup()
                stopped = True
        self._runner = None
        self._admin_runner = None
        if stopped:
            logger.info("Display server stopped")

    async def _config_handler(self, request: web.Request) -> web.Response:
        """Serve the current snapshot"""
        snapshot = self.cache.read()

        if wants_json(request.headers.get("Accept")):
            return web.json_response(snapshot.to_dict())

        view = ConfigView.from_snapshot(snapshot)
        return web.Response(text=render_config_page(view), content_type="text/html")

    async def _health_handler(self, request: web.Request) -> web.Response:
        """Handle health check requests"""
        now = datetime.now(timezone.utc)
        uptime = (now - self._start_time).total_seconds()
        updated_at = self.cache.updated_at

        body = {
            "status": "healthy" if self.cache.has_snapshot else "degraded",
            "service": "configwatch",
            "uptime": int(uptime),
            "timestamp": now.isoformat(),
            "config_key": self.config_key,
            "config_version": self.cache.version,
            "config_updated_at": updated_at.isoformat() if updated_at else None,
        }
        if self.refresher is not None:
            body["refresh"] = self.refresher.get_stats()

        return web.json_response(body)

    async def _sync_handler(self, request: web.Request) -> web.Response:
        """Handle force sync requests"""
        if self.refresher is None:
            return web.json_response(
                {"success": False, "error": "refresh not configured"},
                status=503,
            )

        success = await self.refresher.refresh_once()
        return web.json_response({
            "success": success,
            "config_version": self.cache.version,
        })
