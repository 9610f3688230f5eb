from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Tuple

from .common import REFERENCE_IMAGE_SIZE, ImageSize
from .errors import InvalidArgument
from .landmask import LAND_THRESHOLD
from .texture_map import DEFAULT_CACHE_ENTRIES, CacheKey


def hex_to_rgb(value: str) -> Tuple[float, float, float]:
    value = value.lstrip('#')
    if len(value) != 6:
        raise InvalidArgument(f"Expected hex color RRGGBB, got {value!r}")
    try:
        r = int(value[0:2], 16) / 255.0
        g = int(value[2:4], 16) / 255.0
        b = int(value[4:6], 16) / 255.0
    except ValueError as exc:
        raise InvalidArgument(f"Expected hex color RRGGBB, got {value!r}") from exc
    return (r, g, b)


THEME_EARTH = '#3a228a'
THEME_GLOW = '#220038'
THEME_REFLECTION = '#3a228a'
THEME_DOT = '#ffffff'
THEME_HIGHLIGHT = '#00ff00'

DEFAULT_DOT_COUNT = 80000
DEFAULT_RADIUS = 1.0
DEFAULT_DOT_SIZE = 0.005
CAMERA_DISTANCE = 5.0


@dataclass(frozen=True)
class GlobeMaterial:
    """Surface colours; each one drives exactly one material channel."""

    earth_color: str = THEME_EARTH
    glow_color: str = THEME_GLOW
    reflection_color: str = THEME_REFLECTION
    glow_shininess: float = 1.0
    emission_intensity: float = 0.1

    def channels(self) -> dict[str, Tuple[float, float, float]]:
        return {
            "diffuse": hex_to_rgb(self.earth_color),
            "emission": hex_to_rgb(self.glow_color),
            "reflective": hex_to_rgb(self.reflection_color),
        }


@dataclass(frozen=True)
class GlobeConfig:
    radius: float = DEFAULT_RADIUS
    dot_count: int = DEFAULT_DOT_COUNT
    dot_size: float = DEFAULT_DOT_SIZE
    image_size: ImageSize = REFERENCE_IMAGE_SIZE
    land_threshold: float = LAND_THRESHOLD
    cache_entries: int = DEFAULT_CACHE_ENTRIES
    material: GlobeMaterial = field(default_factory=GlobeMaterial)

    def validate(self) -> None:
        if not math.isfinite(self.radius) or self.radius <= 0.0:
            raise InvalidArgument("radius must be a positive finite number")
        if self.dot_count < 0 or self.dot_count == 1:
            raise InvalidArgument("dot_count must be 0 or at least 2")
        if not math.isfinite(self.dot_size) or self.dot_size < 0.0:
            raise InvalidArgument("dot_size must not be negative")
        if not 0.0 < self.land_threshold <= 1.0:
            raise InvalidArgument("land_threshold must lie within (0, 1]")
        if self.cache_entries < 1:
            raise InvalidArgument("cache_entries must be at least 1")
        self.material.channels()

    @property
    def dot_radius(self) -> float:
        """Rendered radius of a single dot."""
        if self.dot_size > 0:
            return self.dot_size
        return 0.01 * self.radius

    @property
    def map_key(self) -> CacheKey:
        return (self.dot_count, float(self.radius))

    def requires_rebuild(self, other: "GlobeConfig") -> bool:
        """True when switching to ``other`` needs a different texture map."""
        return self.map_key != other.map_key

    def with_changes(self, **changes) -> "GlobeConfig":
        updated = replace(self, **changes)
        updated.validate()
        return updated
