"""Fibonacci sphere sampling.

Points are laid out along a golden-angle spiral running from the north pole
(y = +1) to the south pole (y = -1). Index ``i`` of the output always
corresponds to the ``i``-th spiral step, so identical arguments produce
identical sequences.
"""
from __future__ import annotations

import logging
import math
import numbers
from typing import List, Tuple

import numpy as np

from .common import SpherePoint, SurfacePosition
from .errors import InvalidArgument

LOGGER = logging.getLogger(__name__)

# pi * (sqrt(5) - 1) radians, kept in turns so it can be reduced exactly
GOLDEN_ANGLE = math.pi * (math.sqrt(5.0) - 1.0)
GOLDEN_TURN = (math.sqrt(5.0) - 1.0) / 2.0


def validate_sampling(count: int, radius: float) -> None:
    if isinstance(count, bool) or not isinstance(count, numbers.Integral):
        raise InvalidArgument(f"Dot count must be an integer, got {count!r}")
    if count < 0:
        raise InvalidArgument(f"Dot count must not be negative, got {count}")
    if count == 1:
        raise InvalidArgument("Dot count of 1 is undefined for the spiral (needs 0 or at least 2)")
    if not isinstance(radius, numbers.Real) or not math.isfinite(radius) or radius <= 0.0:
        raise InvalidArgument(f"Sphere radius must be a positive finite number, got {radius!r}")


def golden_angles(count: int) -> np.ndarray:
    """Return the spiral angle of each index, reduced to [0, 2*pi)."""
    indices = np.arange(count, dtype=np.float64)
    turns = np.mod(indices * GOLDEN_TURN, 1.0)
    return turns * (2.0 * math.pi)


def fibonacci_sphere(count: int) -> np.ndarray:
    """Unit-sphere points as an (N, 3) float64 array."""
    if count == 0:
        return np.empty((0, 3), dtype=np.float64)
    indices = np.arange(count, dtype=np.float64)
    y = 1.0 - (indices / (count - 1)) * 2.0
    radius_at_y = np.sqrt(np.clip(1.0 - y * y, 0.0, 1.0))
    theta = golden_angles(count)
    x = np.cos(theta) * radius_at_y
    z = np.sin(theta) * radius_at_y
    return np.column_stack((x, y, z))


class SphereSampler:
    """Generates the dot positions of the globe."""

    def sample(self, count: int, radius: float) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(unit_points, surface_positions)`` as (N, 3) arrays."""
        validate_sampling(count, radius)
        unit = fibonacci_sphere(count)
        LOGGER.debug("Sampled %d spiral points at radius %.4f", count, radius)
        return unit, unit * float(radius)

    def generate(self, count: int, radius: float) -> List[Tuple[SurfacePosition, SpherePoint]]:
        unit, scaled = self.sample(count, radius)
        return [
            (SurfacePosition(*map(float, pos)), SpherePoint(*map(float, pt)))
            for pos, pt in zip(scaled, unit)
        ]
