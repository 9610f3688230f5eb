"""Equirectangular mapping between the globe and world-map pixels.

Two forward mappings exist side by side:

* ``project_point`` works from a unit-sphere point with ``asin``/``atan2`` and
  produces whole, clamped pixels. It is used when the texture map is built.
* ``project_coordinate`` works from latitude/longitude with the linear layout
  of a standard equirectangular image and keeps sub-pixel precision.

Both agree on the reference points (equator/prime meridian and the poles), so
a geographic query can be compared against sampled dots in the same pixel
space.
"""
from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .common import (
    REFERENCE_IMAGE_SIZE,
    GeoCoordinate,
    ImageSize,
    PixelCoordinate,
    SpherePoint,
    wrap_longitude,
)
from .errors import InvalidArgument


def project_points(points: np.ndarray, size: ImageSize = REFERENCE_IMAGE_SIZE) -> np.ndarray:
    """Project an (N, 3) array of unit-sphere points to an (N, 2) int array of (u, v)."""
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 3:
        raise InvalidArgument(f"Expected an (N, 3) array of points, got shape {points.shape}")
    if points.shape[0] == 0:
        return np.empty((0, 2), dtype=np.int64)
    theta = np.arcsin(np.clip(points[:, 1], -1.0, 1.0))
    phi = np.arctan2(points[:, 0], points[:, 2])
    u = size.width / (2.0 * math.pi) * (phi + math.pi)
    v = size.height / math.pi * (math.pi / 2.0 - theta)
    # truncation, then clamp the seam (phi == pi) and the south pole into the raster
    u_px = np.clip(u.astype(np.int64), 0, size.width - 1)
    v_px = np.clip(v.astype(np.int64), 0, size.height - 1)
    return np.column_stack((u_px, v_px))


def project_point(point: SpherePoint, size: ImageSize = REFERENCE_IMAGE_SIZE) -> PixelCoordinate:
    u, v = project_points(np.array([[point.x, point.y, point.z]]), size)[0]
    return PixelCoordinate(int(u), int(v))


def project_coordinate(coord: GeoCoordinate, size: ImageSize = REFERENCE_IMAGE_SIZE) -> Tuple[float, float]:
    """Return the (x, y) image position of a coordinate; latitude grows upwards, y downwards."""
    normalized_lon = coord.longitude + 180.0
    x = (normalized_lon / 360.0) * size.width
    y = (-(coord.latitude - 90.0) / 180.0) * size.height
    return x, y


def unproject_coordinate(x: float, y: float, size: ImageSize = REFERENCE_IMAGE_SIZE) -> GeoCoordinate:
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidArgument("Image position must be finite")
    if y < 0.0 or y > size.height:
        raise InvalidArgument(f"Image row {y} lies outside [0, {size.height}]")
    longitude = (x / size.width) * 360.0 - 180.0
    latitude = 90.0 - (y / size.height) * 180.0
    return GeoCoordinate.wrapped(latitude, longitude)


def surface_to_geo(x: float, y: float, z: float, radius: float = 1.0) -> GeoCoordinate:
    """Convert a local-space point on a sphere of ``radius`` to latitude/longitude."""
    if not math.isfinite(radius) or radius <= 0.0:
        raise InvalidArgument(f"Sphere radius must be a positive finite number, got {radius!r}")
    theta = math.atan2(x, z)
    phi = math.acos(max(-1.0, min(1.0, y / radius)))
    latitude = max(-90.0, min(90.0, 90.0 - phi * (180.0 / math.pi)))
    longitude = math.fmod(theta * (180.0 / math.pi), 360.0)
    return GeoCoordinate(latitude=latitude, longitude=wrap_longitude(longitude))


def geo_to_sphere(coord: GeoCoordinate) -> SpherePoint:
    lat, lon = coord.radians()
    cos_lat = math.cos(lat)
    return SpherePoint(
        x=cos_lat * math.sin(lon),
        y=math.sin(lat),
        z=cos_lat * math.cos(lon),
    )


class EquirectangularProjector:
    """Projection bound to one raster size."""

    def __init__(self, size: ImageSize = REFERENCE_IMAGE_SIZE) -> None:
        self.size = size

    def project(self, point: SpherePoint) -> PixelCoordinate:
        return project_point(point, self.size)

    def project_many(self, points: np.ndarray) -> np.ndarray:
        return project_points(points, self.size)

    def project_coordinate(self, coord: GeoCoordinate) -> Tuple[float, float]:
        return project_coordinate(coord, self.size)

    def unproject(self, x: float, y: float) -> GeoCoordinate:
        return unproject_coordinate(x, y, self.size)
