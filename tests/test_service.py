"""Tests for service wiring, lifecycle and the CLI entry point."""

import asyncio

import httpx
import pytest
from aiohttp import test_utils

from configwatch.common.exceptions import FetchError, StartupError
from configwatch.common.settings import Settings
from configwatch.main import main
from configwatch.service import ConfigWatchService, build_provider
from configwatch.services.config import LaunchDarklyProvider, StaticConfigProvider


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return Settings(
        host="127.0.0.1",
        port=test_utils.unused_port(),
        admin_port=test_utils.unused_port(),
        refresh_interval_s=0.05,
        fetch_timeout_s=1.0,
    )


def test_build_provider_requires_client_side_id(settings):
    with pytest.raises(StartupError) as exc_info:
        build_provider(settings)

    assert exc_info.value.recoverable is False


def test_build_provider(settings):
    configured = settings.model_copy(update={"client_side_id": "abc", "log_level_flag": "log-level"})
    provider = build_provider(configured)

    assert isinstance(provider, LaunchDarklyProvider)
    assert provider.client_side_id == "abc"
    assert provider.log_level_flag == "log-level"
    assert provider.timeout == 1.0


def test_service_without_credentials_fails_at_construction(settings):
    with pytest.raises(StartupError):
        ConfigWatchService(settings)


async def test_start_serve_and_stop(settings, gpt_x):
    provider = StaticConfigProvider(gpt_x)
    service = ConfigWatchService(settings, provider=provider)

    await service.start()
    try:
        assert service.is_running
        assert service.cache.read() is gpt_x
        assert service.refresher.is_running

        async with httpx.AsyncClient() as client:
            resp = await client.get(
                f"http://127.0.0.1:{settings.port}/",
                headers={"Accept": "application/json"},
            )
        assert resp.status_code == 200
        assert resp.json()["model_name"] == "gpt-x"

        await asyncio.sleep(0.15)
        assert provider.calls >= 2
    finally:
        await service.stop()

    assert not service.is_running
    assert not service.refresher.is_running


async def test_sync_is_only_on_loopback_admin_port(settings, gpt_x):
    provider = StaticConfigProvider(gpt_x)
    service = ConfigWatchService(settings, provider=provider)

    await service.start()
    try:
        async with httpx.AsyncClient() as client:
            public = await client.post(f"http://127.0.0.1:{settings.port}/sync")
            admin = await client.post(f"http://127.0.0.1:{settings.admin_port}/sync")
            health = await client.get(f"http://127.0.0.1:{settings.admin_port}/health")
    finally:
        await service.stop()

    assert public.status_code == 404
    assert admin.status_code == 200
    assert admin.json()["success"] is True
    assert health.json()["status"] == "healthy"


async def test_start_with_failing_provider_serves_default(settings):
    service = ConfigWatchService(settings, provider=StaticConfigProvider(error=FetchError("down")))

    await service.start()
    try:
        assert service.cache.read().model_name == "default-model"
        assert service.refresher.failure_count >= 1
    finally:
        await service.stop()


async def test_serve_returns_after_shutdown_request(settings):
    service = ConfigWatchService(settings, provider=StaticConfigProvider())

    serving = asyncio.create_task(service.serve())
    for _ in range(50):
        if service.is_running:
            break
        await asyncio.sleep(0.01)

    service.request_shutdown()
    await asyncio.wait_for(serving, timeout=2)

    assert not service.is_running


async def test_stop_is_idempotent(settings):
    service = ConfigWatchService(settings, provider=StaticConfigProvider())
    await service.stop()
    await service.start()
    await service.stop()
    await service.stop()


def test_main_dry_run(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    assert main(["--dry-run"]) == 0
    assert "Dry run mode" in capsys.readouterr().out


def test_main_exits_without_credentials(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert main([]) == 1


def test_main_rejects_bad_settings(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "config.yaml"
    path.write_text("refresh:\n  interval_s: 0\n")

    assert main(["--config", str(path)]) == 1
