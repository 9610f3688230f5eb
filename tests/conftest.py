"""
Shared fixtures for the dot globe test suite.
Provides small texture maps, synthetic RGBA world images and a fake hex-cell indexer.
"""
import numpy as np
import pytest
from PIL import Image

from dotglobe.common import GeoCoordinate
from dotglobe.texture_map import build_texture_map


def make_half_land_rgba(width, height):
    """Western half near-black (land), eastern half white (ocean)."""
    rgba = np.full((height, width, 4), 255, dtype=np.uint8)
    rgba[:, : width // 2, :3] = 0
    return rgba


class FakeHexIndexer:
    """Deterministic stand-in for the external hex-cell index."""

    def __init__(self):
        self.calls = []

    def cell_index(self, coord, resolution):
        self.calls.append(("cell", coord, resolution))
        return 0x81283FFFFFFFFFF + resolution

    def neighbors(self, coord, resolution, ring):
        self.calls.append(("neighbors", coord, resolution, ring))
        return [0x8128BFFFFFFFFFF, 0x8129BFFFFFFFFFF]


@pytest.fixture(scope="session")
def map_1000():
    return build_texture_map(1000, 1.0)


@pytest.fixture
def rgba_factory():
    return make_half_land_rgba


@pytest.fixture
def half_land_rgba():
    return make_half_land_rgba(64, 32)


@pytest.fixture
def half_land_image(half_land_rgba):
    return Image.fromarray(half_land_rgba, mode="RGBA")


@pytest.fixture
def fake_indexer():
    return FakeHexIndexer()


@pytest.fixture
def new_york():
    return GeoCoordinate(40.7128, -74.0060)
