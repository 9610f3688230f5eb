from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from .common import DotEntry, GeoCoordinate, SurfacePosition
from .errors import InvalidState
from .projection import project_coordinate, surface_to_geo
from .texture_map import TextureMap

LOGGER = logging.getLogger(__name__)


def query_pixel(query: GeoCoordinate, texture_map: TextureMap) -> Tuple[int, int]:
    """Project ``query`` into the map's pixel space, truncated to whole pixels."""
    x, y = project_coordinate(query, texture_map.size)
    return int(x), int(y)


def pixel_distance(x1: int, y1: int, x2: int, y2: int) -> float:
    dx = float(x2 - x1)
    dy = float(y2 - y1)
    return (dx * dx + dy * dy) ** 0.5


def find_nearest_index(query: GeoCoordinate, texture_map: TextureMap) -> int:
    """Index of the dot closest to ``query`` in pixel space.

    Linear scan over the whole map, so keep it out of per-frame code. Ties go
    to the earliest dot in map order.
    """
    if len(texture_map) == 0:
        raise InvalidState("Cannot locate a dot in an empty texture map")
    qx, qy = query_pixel(query, texture_map)
    pixels = texture_map.pixels
    dx = pixels[:, 0] - qx
    dy = pixels[:, 1] - qy
    # squared integer distances order exactly like the Euclidean ones
    index = int(np.argmin(dx * dx + dy * dy))
    LOGGER.debug(
        "Nearest dot to (%.4f, %.4f) is #%d at pixel %s",
        query.latitude,
        query.longitude,
        index,
        tuple(int(p) for p in pixels[index]),
    )
    return index


def find_nearest(query: GeoCoordinate, texture_map: TextureMap) -> DotEntry:
    return texture_map[find_nearest_index(query, texture_map)]


def find_nearest_to_surface(point: SurfacePosition, texture_map: TextureMap) -> DotEntry:
    """Nearest dot to a local-space hit point on the globe surface."""
    coord = surface_to_geo(point.x, point.y, point.z, texture_map.radius)
    return find_nearest(coord, texture_map)


class NearestDotLocator:
    """Answers nearest-dot queries against one texture map."""

    def __init__(self, texture_map: TextureMap) -> None:
        self.texture_map = texture_map

    def find_nearest(self, query: GeoCoordinate) -> DotEntry:
        return find_nearest(query, self.texture_map)

    def find_nearest_to_surface(self, point: SurfacePosition) -> DotEntry:
        return find_nearest_to_surface(point, self.texture_map)
