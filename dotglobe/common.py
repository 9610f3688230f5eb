from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidArgument


def wrap_longitude(lon: float) -> float:
    """Fold any finite longitude into [-180, 180)."""
    wrapped = ((lon + 180.0) % 360.0) - 180.0
    # float modulo returns the divisor itself for tiny negative inputs
    if wrapped >= 180.0:
        wrapped -= 360.0
    return wrapped


@dataclass(frozen=True)
class GeoCoordinate:
    """Geographic coordinate expressed in degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise InvalidArgument("Coordinates must be finite numbers")
        if self.latitude < -90.0 or self.latitude > 90.0:
            raise InvalidArgument(f"Latitude {self.latitude} must lie within [-90, 90]")
        if self.longitude < -180.0 or self.longitude >= 180.0:
            raise InvalidArgument(f"Longitude {self.longitude} must lie within [-180, 180)")

    @classmethod
    def wrapped(cls, latitude: float, longitude: float) -> "GeoCoordinate":
        if not math.isfinite(longitude):
            raise InvalidArgument("Coordinates must be finite numbers")
        return cls(latitude=latitude, longitude=wrap_longitude(longitude))

    def radians(self) -> Tuple[float, float]:
        return math.radians(self.latitude), math.radians(self.longitude)


@dataclass(frozen=True)
class SpherePoint:
    """Point on the unit sphere; y points to the north pole."""

    x: float
    y: float
    z: float

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def scaled(self, radius: float) -> "SurfacePosition":
        return SurfacePosition(self.x * radius, self.y * radius, self.z * radius)


@dataclass(frozen=True)
class SurfacePosition:
    """Point on the globe surface in the renderer's local space."""

    x: float
    y: float
    z: float

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "SurfacePosition":
        length = self.length()
        if length == 0.0:
            raise InvalidArgument("Cannot normalize a zero-length position")
        return SurfacePosition(self.x / length, self.y / length, self.z / length)

    def scaled(self, length: float) -> "SurfacePosition":
        """Scale componentwise, e.g. ``normalized().scaled(5.0)`` for a camera eye point."""
        return SurfacePosition(self.x * length, self.y * length, self.z * length)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class PixelCoordinate:
    u: int
    v: int


@dataclass(frozen=True)
class ImageSize:
    """Dimensions of an equirectangular raster in pixels."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidArgument("Raster dimensions must be positive")

    def contains(self, pixel: PixelCoordinate) -> bool:
        return 0 <= pixel.u < self.width and 0 <= pixel.v < self.height


REFERENCE_IMAGE_SIZE = ImageSize(width=2048, height=1024)


@dataclass(frozen=True)
class DotEntry:
    """One sampled dot: where it sits on the globe and where it lands on the map."""

    index: int
    position: SurfacePosition
    pixel: PixelCoordinate


@dataclass(frozen=True)
class HighlightMarker:
    """Dot picked out for the current location; never stored in the map."""

    entry: DotEntry
    location: GeoCoordinate
    euler_angles: Tuple[float, float, float]
