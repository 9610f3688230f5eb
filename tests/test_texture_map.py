import threading
import time

import numpy as np
import pytest

from dotglobe.common import REFERENCE_IMAGE_SIZE, DotEntry, ImageSize
from dotglobe.errors import InvalidArgument
from dotglobe.texture_map import TextureMap, TextureMapCache, build_texture_map


class CountingBuilder:
    def __init__(self, fail_times=0, delay=0.0):
        self.calls = 0
        self.fail_times = fail_times
        self.delay = delay
        self.started = threading.Event()
        self._lock = threading.Lock()

    def __call__(self, dot_count, radius, size):
        with self._lock:
            self.calls += 1
            attempt = self.calls
        self.started.set()
        if self.delay:
            time.sleep(self.delay)
        if attempt <= self.fail_times:
            raise RuntimeError("simulated build failure")
        return build_texture_map(dot_count, radius, size)


def test_map_entries_follow_sampling_order(map_1000):
    assert len(map_1000) == 1000
    entries = list(map_1000)
    assert [e.index for e in entries] == list(range(1000))
    assert isinstance(entries[0], DotEntry)
    assert entries[0].position.y == pytest.approx(1.0)
    assert entries[-1].position.y == pytest.approx(-1.0)
    assert map_1000[-1] == entries[-1]


def test_map_pixels_stay_inside_the_image(map_1000):
    pixels = map_1000.pixels
    assert pixels.shape == (1000, 2)
    assert np.all(pixels[:, 0] >= 0) and np.all(pixels[:, 0] < REFERENCE_IMAGE_SIZE.width)
    assert np.all(pixels[:, 1] >= 0) and np.all(pixels[:, 1] < REFERENCE_IMAGE_SIZE.height)


def test_map_arrays_are_read_only(map_1000):
    with pytest.raises(ValueError):
        map_1000.positions[0, 0] = 5.0
    with pytest.raises(ValueError):
        map_1000.pixels[0, 0] = 5


def test_map_index_out_of_range(map_1000):
    with pytest.raises(IndexError):
        map_1000[1000]
    with pytest.raises(IndexError):
        map_1000[-1001]


def test_map_rejects_mismatched_arrays():
    with pytest.raises(ValueError):
        TextureMap(
            dot_count=2,
            radius=1.0,
            size=REFERENCE_IMAGE_SIZE,
            unit_points=np.zeros((2, 3)),
            positions=np.zeros((2, 3)),
            pixels=np.zeros((1, 2), dtype=np.int64),
        )


def test_build_is_reproducible():
    a = build_texture_map(3000, 2.0)
    b = build_texture_map(3000, 2.0)
    assert a.positions.tobytes() == b.positions.tobytes()
    assert a.pixels.tobytes() == b.pixels.tobytes()
    assert np.allclose(np.linalg.norm(a.positions, axis=1), 2.0, rtol=1e-6)


def test_build_or_get_returns_cached_instance():
    cache = TextureMapCache()
    first = cache.build_or_get(5000, 1.0)
    assert cache.build_or_get(5000, 1.0) is first
    assert cache.build_or_get(5000, 1) is first
    other = cache.build_or_get(5000, 2.0)
    assert other is not first
    assert other.radius == 2.0
    assert len(cache) == 2
    assert (5000, 1.0) in cache


def test_build_or_get_builds_once_per_configuration():
    builder = CountingBuilder()
    cache = TextureMapCache(builder=builder)
    cache.build_or_get(100, 1.0)
    cache.build_or_get(100, 1.0)
    cache.build_or_get(200, 1.0)
    assert builder.calls == 2


def test_concurrent_requests_share_one_build():
    builder = CountingBuilder(delay=0.2)
    cache = TextureMapCache(builder=builder)
    results = []
    errors = []

    def worker():
        try:
            results.append(cache.build_or_get(2000, 1.0))
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert not errors
    assert builder.calls == 1
    assert len(results) == 8
    assert all(result is results[0] for result in results)


def test_failed_build_is_not_cached_and_retries():
    builder = CountingBuilder(fail_times=1)
    cache = TextureMapCache(builder=builder)

    with pytest.raises(RuntimeError):
        cache.build_or_get(100, 1.0)
    assert len(cache) == 0
    assert cache.get(100, 1.0) is None

    texture_map = cache.build_or_get(100, 1.0)
    assert len(texture_map) == 100
    assert builder.calls == 2


def test_waiters_see_the_failure_of_the_shared_build():
    builder = CountingBuilder(fail_times=1, delay=0.2)
    cache = TextureMapCache(builder=builder)
    outcomes = []

    def worker():
        try:
            cache.build_or_get(100, 1.0)
            outcomes.append("ok")
        except RuntimeError:
            outcomes.append("failed")

    owner = threading.Thread(target=worker)
    owner.start()
    builder.started.wait(timeout=5)
    waiter = threading.Thread(target=worker)
    waiter.start()
    owner.join(timeout=10)
    waiter.join(timeout=10)

    assert outcomes == ["failed", "failed"]
    assert builder.calls == 1
    assert len(cache) == 0


def test_invalid_configuration_is_rejected_before_building():
    builder = CountingBuilder()
    cache = TextureMapCache(builder=builder)
    with pytest.raises(InvalidArgument):
        cache.build_or_get(1, 1.0)
    with pytest.raises(InvalidArgument):
        cache.build_or_get(100, 0.0)
    assert builder.calls == 0


def test_least_recently_used_entry_is_evicted():
    cache = TextureMapCache(max_entries=2)
    a = cache.build_or_get(10, 1.0)
    cache.build_or_get(20, 1.0)
    assert cache.build_or_get(10, 1.0) is a
    cache.build_or_get(30, 1.0)

    assert (10, 1.0) in cache
    assert (20, 1.0) not in cache
    assert (30, 1.0) in cache


def test_invalidate_by_field_and_clear():
    cache = TextureMapCache()
    cache.build_or_get(10, 1.0)
    cache.build_or_get(10, 2.0)
    cache.build_or_get(20, 2.0)

    assert cache.invalidate(radius=2.0) == 2
    assert (10, 1.0) in cache
    assert cache.invalidate(dot_count=99) == 0

    first = cache.get(10, 1.0)
    cache.clear()
    assert len(cache) == 0
    assert cache.build_or_get(10, 1.0) is not first


def test_build_async_delivers_the_cached_map():
    cache = TextureMapCache()
    try:
        future = cache.build_async(500, 1.0)
        texture_map = future.result(timeout=10)
        assert cache.build_or_get(500, 1.0) is texture_map
        failing = cache.build_async(1, 1.0)
        with pytest.raises(InvalidArgument):
            failing.result(timeout=10)
    finally:
        cache.shutdown()


def test_cache_uses_its_image_size():
    cache = TextureMapCache(size=ImageSize(360, 180))
    texture_map = cache.build_or_get(50, 1.0)
    assert texture_map.size == ImageSize(360, 180)
    assert texture_map.pixels[:, 0].max() < 360


def test_cache_needs_at_least_one_slot():
    with pytest.raises(ValueError):
        TextureMapCache(max_entries=0)
