"""Tests for the fixed-interval scheduler."""

import asyncio
import time

import pytest

from configwatch.common.scheduler import ScheduledLoop


async def test_runs_callback_repeatedly_until_stopped():
    calls = []

    async def tick():
        calls.append(1)

    loop = ScheduledLoop(0.02, tick, name="test")
    loop.start()
    await asyncio.sleep(0.12)
    await loop.stop()

    assert len(calls) >= 2
    assert loop.execution_count == len(calls)
    assert not loop.is_running


async def test_callback_errors_do_not_stop_the_loop():
    calls = []

    async def flaky():
        calls.append(1)
        raise RuntimeError("boom")

    loop = ScheduledLoop(0.02, flaky)
    loop.start()
    await asyncio.sleep(0.12)
    await loop.stop()

    assert len(calls) >= 2
    assert loop.execution_count == 0


async def test_wall_clock_step_back_does_not_stall(monkeypatch):
    real_time = time.time
    monkeypatch.setattr(time, "time", lambda: real_time() - 3600)

    calls = []

    async def tick():
        calls.append(1)

    loop = ScheduledLoop(0.02, tick, name="clock")
    loop.start()
    await asyncio.sleep(0.3)
    await loop.stop()

    assert len(calls) >= 5


async def test_start_twice_is_a_no_op():
    async def tick():
        pass

    loop = ScheduledLoop(0.05, tick)
    loop.start()
    task = loop._task
    loop.start()

    assert loop._task is task
    await loop.stop()


def test_interval_must_be_positive():
    async def tick():
        pass

    with pytest.raises(ValueError):
        ScheduledLoop(-1, tick)


def test_stats():
    async def tick():
        pass

    stats = ScheduledLoop(1.5, tick, name="stats").get_stats()

    assert stats["name"] == "stats"
    assert stats["interval_s"] == 1.5
    assert stats["execution_count"] == 0
