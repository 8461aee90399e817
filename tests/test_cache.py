"""Tests for ConfigCache read/update semantics."""

import threading
from concurrent.futures import ThreadPoolExecutor

from configwatch.services.config import DEFAULT_SNAPSHOT, ConfigCache, ConfigSnapshot


def _triple(snapshot):
    return (
        snapshot.model_name,
        snapshot.param("temperature").as_float(),
        snapshot.param("maxTokens").as_int(),
    )


def test_read_before_update_returns_default(cache):
    assert cache.read() is DEFAULT_SNAPSHOT
    assert _triple(cache.read()) == ("default-model", 0.7, 1000)
    assert cache.version == 0
    assert cache.updated_at is None
    assert not cache.has_snapshot


def test_update_then_read(cache):
    snapshot = ConfigSnapshot.create("gpt-x", {"temperature": 0.2, "maxTokens": 500})

    cache.update(snapshot)

    assert cache.read() is snapshot
    assert _triple(cache.read()) == ("gpt-x", 0.2, 500)
    assert cache.version == 1
    assert cache.updated_at is not None
    assert cache.has_snapshot


def test_back_to_back_updates_keep_last(cache):
    a = ConfigSnapshot.create("model-a", {"temperature": 0.1, "maxTokens": 100})
    b = ConfigSnapshot.create("model-b", {"temperature": 0.9, "maxTokens": 900})

    cache.update(a)
    cache.update(b)

    assert cache.read() is b
    assert cache.version == 2


def test_reader_keeps_snapshot_across_update(cache, gpt_x):
    cache.update(gpt_x)
    held = cache.read()

    cache.update(ConfigSnapshot.create("next"))

    assert held is gpt_x
    assert held.model_name == "gpt-x"


def test_custom_default():
    fallback = ConfigSnapshot.create("fallback")
    assert ConfigCache(default=fallback).read() is fallback


def test_concurrent_reads_never_mix_snapshots(cache):
    snapshots = [
        ConfigSnapshot.create(f"model-{i}", {"temperature": i / 10, "maxTokens": i * 100})
        for i in range(1, 6)
    ]
    valid = {_triple(s) for s in snapshots} | {_triple(DEFAULT_SNAPSHOT)}
    stop = threading.Event()

    def writer():
        i = 0
        while not stop.is_set():
            cache.update(snapshots[i % len(snapshots)])
            i += 1

    def reader():
        seen = []
        for _ in range(2000):
            seen.append(_triple(cache.read()))
        return seen

    writer_thread = threading.Thread(target=writer)
    writer_thread.start()
    try:
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = [f.result() for f in [pool.submit(reader) for _ in range(8)]]
    finally:
        stop.set()
        writer_thread.join()

    for seen in results:
        assert set(seen) <= valid
