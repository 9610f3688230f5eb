"""Which dots end up on the globe.

Only dots over land are placed. The dot closest to the current location, if
one is known, is always placed and carries a highlight marker oriented to lie
flat on the surface at that location.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .common import DotEntry, GeoCoordinate, HighlightMarker
from .landmask import LandClassifier
from .locator import find_nearest_index
from .texture_map import TextureMap

LOGGER = logging.getLogger(__name__)


def marker_euler_angles(location: GeoCoordinate) -> Tuple[float, float, float]:
    lat, lon = location.radians()
    return (-lat - math.pi / 2.0, lon, 0.0)


@dataclass(frozen=True)
class DotLayout:
    texture_map: TextureMap
    land_indices: np.ndarray
    highlight: Optional[HighlightMarker] = None

    def __len__(self) -> int:
        return len(self.land_indices) + (1 if self.highlight is not None else 0)

    @property
    def dots(self) -> List[DotEntry]:
        return [self.texture_map[int(i)] for i in self.land_indices]

    def positions(self) -> np.ndarray:
        """(N, 3) positions of every placed dot, highlight last."""
        rows = self.texture_map.positions[self.land_indices]
        if self.highlight is not None:
            rows = np.vstack((rows, self.texture_map.positions[self.highlight.entry.index]))
        return rows


def _pixels_for(texture_map: TextureMap, classifier: LandClassifier) -> np.ndarray:
    pixels = texture_map.pixels
    if classifier.size == texture_map.size:
        return pixels
    scale = np.array(
        [
            classifier.size.width / texture_map.size.width,
            classifier.size.height / texture_map.size.height,
        ]
    )
    scaled = (pixels * scale).astype(np.int64)
    limits = np.array([classifier.size.width - 1, classifier.size.height - 1])
    return np.clip(scaled, 0, limits)


def build_dot_layout(
    texture_map: TextureMap,
    classifier: LandClassifier,
    current_location: Optional[GeoCoordinate] = None,
) -> DotLayout:
    highlight: Optional[HighlightMarker] = None
    if current_location is not None and len(texture_map):
        index = find_nearest_index(current_location, texture_map)
        highlight = HighlightMarker(
            entry=texture_map[index],
            location=current_location,
            euler_angles=marker_euler_angles(current_location),
        )
    mask = classifier.land_mask(_pixels_for(texture_map, classifier))
    if highlight is not None:
        mask[highlight.entry.index] = False
    land_indices = np.flatnonzero(mask)
    land_indices.setflags(write=False)
    LOGGER.debug(
        "Placed %d of %d dots on land%s",
        len(land_indices),
        len(texture_map),
        " plus highlight" if highlight is not None else "",
    )
    return DotLayout(texture_map=texture_map, land_indices=land_indices, highlight=highlight)
