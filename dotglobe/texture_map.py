"""Sampled dots paired with their world-map pixels, plus the build-once cache."""
from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Iterator, Optional, Tuple

import numpy as np

from .common import REFERENCE_IMAGE_SIZE, DotEntry, ImageSize, PixelCoordinate, SurfacePosition
from .projection import project_points
from .sampling import SphereSampler, validate_sampling

LOGGER = logging.getLogger(__name__)

DEFAULT_CACHE_ENTRIES = 4

CacheKey = Tuple[int, float]


def _frozen(array: np.ndarray) -> np.ndarray:
    array = np.ascontiguousarray(array)
    array.setflags(write=False)
    return array


class TextureMap:
    """Ordered, read-only sequence of :class:`DotEntry`.

    Entry ``i`` is the ``i``-th step of the golden-angle spiral. The arrays
    behind the map are immutable, so a map can be shared between threads.
    """

    def __init__(
        self,
        *,
        dot_count: int,
        radius: float,
        size: ImageSize,
        unit_points: np.ndarray,
        positions: np.ndarray,
        pixels: np.ndarray,
    ) -> None:
        if not (len(unit_points) == len(positions) == len(pixels) == dot_count):
            raise ValueError("Texture map arrays must all hold one row per dot")
        self.dot_count = dot_count
        self.radius = radius
        self.size = size
        self._unit_points = _frozen(unit_points)
        self._positions = _frozen(positions)
        self._pixels = _frozen(pixels)

    @property
    def key(self) -> CacheKey:
        return (self.dot_count, self.radius)

    @property
    def unit_points(self) -> np.ndarray:
        return self._unit_points

    @property
    def positions(self) -> np.ndarray:
        return self._positions

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    def __len__(self) -> int:
        return self.dot_count

    def __getitem__(self, index: int) -> DotEntry:
        if index < 0:
            index += self.dot_count
        if index < 0 or index >= self.dot_count:
            raise IndexError(f"Dot index {index} out of range for {self.dot_count} dots")
        x, y, z = self._positions[index]
        u, v = self._pixels[index]
        return DotEntry(
            index=index,
            position=SurfacePosition(float(x), float(y), float(z)),
            pixel=PixelCoordinate(int(u), int(v)),
        )

    def __iter__(self) -> Iterator[DotEntry]:
        for index in range(self.dot_count):
            yield self[index]

    def __repr__(self) -> str:
        return (
            f"TextureMap(dot_count={self.dot_count}, radius={self.radius}, "
            f"size={self.size.width}x{self.size.height})"
        )


def build_texture_map(
    dot_count: int,
    radius: float,
    size: ImageSize = REFERENCE_IMAGE_SIZE,
    *,
    sampler: Optional[SphereSampler] = None,
) -> TextureMap:
    sampler = sampler or SphereSampler()
    started = time.perf_counter()
    unit, positions = sampler.sample(dot_count, radius)
    pixels = project_points(unit, size)
    texture_map = TextureMap(
        dot_count=int(dot_count),
        radius=float(radius),
        size=size,
        unit_points=unit,
        positions=positions,
        pixels=pixels,
    )
    LOGGER.debug(
        "Built texture map of %d dots (radius %.4f) in %.1f ms",
        dot_count,
        radius,
        (time.perf_counter() - started) * 1000.0,
    )
    return texture_map


Builder = Callable[[int, float, ImageSize], TextureMap]


class TextureMapCache:
    """Builds each (dot count, radius) map once and hands out the shared result.

    Concurrent callers asking for a configuration that is still being built
    wait on the same future instead of starting a second build. A failed build
    is reported to everyone waiting on it and leaves nothing behind, so the
    next call starts over.
    """

    def __init__(
        self,
        *,
        size: ImageSize = REFERENCE_IMAGE_SIZE,
        max_entries: int = DEFAULT_CACHE_ENTRIES,
        builder: Optional[Builder] = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("Texture map cache needs room for at least one entry")
        self.size = size
        self.max_entries = max_entries
        self._builder: Builder = builder or build_texture_map
        self._lock = threading.Lock()
        self._entries: "OrderedDict[CacheKey, TextureMap]" = OrderedDict()
        self._building: Dict[CacheKey, Future] = {}
        self._executor: Optional[ThreadPoolExecutor] = None

    @staticmethod
    def _key(dot_count: int, radius: float) -> CacheKey:
        validate_sampling(dot_count, radius)
        return (int(dot_count), float(radius))

    def build_or_get(self, dot_count: int, radius: float) -> TextureMap:
        key = self._key(dot_count, radius)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                LOGGER.debug("Texture map cache hit for %s", key)
                return cached
            pending = self._building.get(key)
            if pending is None:
                future: Future = Future()
                self._building[key] = future
        if pending is not None:
            LOGGER.debug("Waiting for in-flight texture map build %s", key)
            return pending.result()
        return self._build(key, future)

    def _build(self, key: CacheKey, future: Future) -> TextureMap:
        try:
            texture_map = self._builder(key[0], key[1], self.size)
        except BaseException as exc:
            with self._lock:
                self._building.pop(key, None)
            LOGGER.warning("Texture map build %s failed: %s", key, exc)
            future.set_exception(exc)
            raise
        with self._lock:
            self._building.pop(key, None)
            self._entries[key] = texture_map
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                LOGGER.debug("Evicted texture map %s", evicted)
        future.set_result(texture_map)
        return texture_map

    def build_async(self, dot_count: int, radius: float) -> "Future[TextureMap]":
        """Run :meth:`build_or_get` on the background worker."""
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="texture-map")
            executor = self._executor
        return executor.submit(self.build_or_get, dot_count, radius)

    def get(self, dot_count: int, radius: float) -> Optional[TextureMap]:
        with self._lock:
            return self._entries.get((int(dot_count), float(radius)))

    def __contains__(self, key: CacheKey) -> bool:
        dot_count, radius = key
        return self.get(dot_count, radius) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def invalidate(self, *, dot_count: Optional[int] = None, radius: Optional[float] = None) -> int:
        """Drop cached maps matching the given fields; returns how many were dropped."""
        with self._lock:
            doomed = [
                key
                for key in self._entries
                if (dot_count is None or key[0] == dot_count)
                and (radius is None or key[1] == float(radius))
            ]
            for key in doomed:
                del self._entries[key]
        if doomed:
            LOGGER.debug("Invalidated texture maps %s", doomed)
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def shutdown(self) -> None:
        with self._lock:
            executor = self._executor
            self._executor = None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
