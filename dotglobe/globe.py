"""Turning taps on the globe into geographic coordinates and hex cells."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Protocol, Tuple

from .common import GeoCoordinate, SurfacePosition
from .errors import InvalidArgument
from .projection import geo_to_sphere, surface_to_geo

LOGGER = logging.getLogger(__name__)

DEFAULT_CELL_RESOLUTION = 1
DEFAULT_RING_LEVEL = 1


class GlobeCoordinateConverter:
    """Maps local-space points on a globe of ``radius`` to latitude/longitude and back."""

    def __init__(self, radius: float = 1.0) -> None:
        if not math.isfinite(radius) or radius <= 0.0:
            raise InvalidArgument(f"Sphere radius must be a positive finite number, got {radius!r}")
        self.radius = radius

    def to_geo(self, point: SurfacePosition) -> GeoCoordinate:
        return surface_to_geo(point.x, point.y, point.z, self.radius)

    def to_surface(self, coord: GeoCoordinate) -> SurfacePosition:
        return geo_to_sphere(coord).scaled(self.radius)


class HexCellIndexer(Protocol):
    """External hexagonal cell index (H3-style)."""

    def cell_index(self, coord: GeoCoordinate, resolution: int) -> int:
        ...

    def neighbors(self, coord: GeoCoordinate, resolution: int, ring: int) -> Iterable[int]:
        ...


def format_cell(cell: int) -> str:
    return format(cell, "X")


@dataclass(frozen=True)
class TapSelection:
    coordinate: GeoCoordinate
    cell: str
    neighbors: Tuple[str, ...]


class TapResolver:
    """Resolves a tap hit point to its cell and neighbouring cells."""

    def __init__(
        self,
        indexer: HexCellIndexer,
        converter: GlobeCoordinateConverter,
        *,
        resolution: int = DEFAULT_CELL_RESOLUTION,
        ring: int = DEFAULT_RING_LEVEL,
    ) -> None:
        if resolution < 0 or ring < 0:
            raise InvalidArgument("Cell resolution and ring level must not be negative")
        self._indexer = indexer
        self._converter = converter
        self.resolution = resolution
        self.ring = ring

    def resolve(self, hit_point: SurfacePosition) -> TapSelection:
        coord = self._converter.to_geo(hit_point)
        cell = self._indexer.cell_index(coord, self.resolution)
        neighbors = tuple(
            format_cell(item) for item in self._indexer.neighbors(coord, self.resolution, self.ring)
        )
        LOGGER.debug(
            "Tap at (%.4f, %.4f) -> cell %s with %d neighbours",
            coord.latitude,
            coord.longitude,
            format_cell(cell),
            len(neighbors),
        )
        return TapSelection(coordinate=coord, cell=format_cell(cell), neighbors=neighbors)
