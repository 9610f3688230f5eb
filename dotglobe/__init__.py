from .common import (
    REFERENCE_IMAGE_SIZE,
    DotEntry,
    GeoCoordinate,
    HighlightMarker,
    ImageSize,
    PixelCoordinate,
    SpherePoint,
    SurfacePosition,
)
from .config import GlobeConfig, GlobeMaterial
from .errors import DotGlobeError, InvalidArgument, InvalidState, OutOfBounds
from .globe import GlobeCoordinateConverter, HexCellIndexer, TapResolver, TapSelection
from .landmask import LAND_THRESHOLD, LandClassifier, PixelColor, classify
from .layout import DotLayout, build_dot_layout
from .locator import NearestDotLocator, find_nearest, find_nearest_to_surface
from .projection import (
    EquirectangularProjector,
    geo_to_sphere,
    project_coordinate,
    project_point,
    surface_to_geo,
    unproject_coordinate,
)
from .sampling import SphereSampler
from .texture_map import TextureMap, TextureMapCache, build_texture_map

__all__ = [
    'REFERENCE_IMAGE_SIZE',
    'DotEntry',
    'GeoCoordinate',
    'HighlightMarker',
    'ImageSize',
    'PixelCoordinate',
    'SpherePoint',
    'SurfacePosition',
    'GlobeConfig',
    'GlobeMaterial',
    'DotGlobeError',
    'InvalidArgument',
    'InvalidState',
    'OutOfBounds',
    'GlobeCoordinateConverter',
    'HexCellIndexer',
    'TapResolver',
    'TapSelection',
    'LAND_THRESHOLD',
    'LandClassifier',
    'PixelColor',
    'classify',
    'DotLayout',
    'build_dot_layout',
    'NearestDotLocator',
    'find_nearest',
    'find_nearest_to_surface',
    'EquirectangularProjector',
    'geo_to_sphere',
    'project_coordinate',
    'project_point',
    'surface_to_geo',
    'unproject_coordinate',
    'SphereSampler',
    'TextureMap',
    'TextureMapCache',
    'build_texture_map',
]
