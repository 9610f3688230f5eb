"""Command-line access to the dot globe engine.

Run with:
    python -m dotglobe --image earth-dark.png --lat 40.7128 --lon -74.0060
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PIL import Image, UnidentifiedImageError

from .common import GeoCoordinate
from .config import DEFAULT_DOT_COUNT, DEFAULT_RADIUS, GlobeConfig
from .errors import DotGlobeError
from .export import export_layout_json, render_preview
from .landmask import LandClassifier
from .layout import build_dot_layout
from .locator import find_nearest
from .texture_map import TextureMapCache

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dotglobe",
        description="Sample globe dots, classify them against a world map and locate places.",
    )
    parser.add_argument("--dots", type=int, default=DEFAULT_DOT_COUNT, help="number of spiral dots")
    parser.add_argument("--radius", type=float, default=DEFAULT_RADIUS, help="globe radius")
    parser.add_argument("--image", type=Path, help="reference world map (near-black = land)")
    parser.add_argument("--lat", type=float, help="latitude of the place to locate")
    parser.add_argument("--lon", type=float, help="longitude of the place to locate")
    parser.add_argument("--json", type=Path, help="write the dot layout as JSON")
    parser.add_argument("--preview", type=Path, help="write an equirectangular preview PNG")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def _load_classifier(path: Path, threshold: float) -> LandClassifier:
    try:
        with Image.open(path) as img:
            return LandClassifier.from_image(img, threshold=threshold)
    except (UnidentifiedImageError, OSError) as exc:
        raise DotGlobeError(f"Could not read reference image {path}: {exc}") from exc


def run(args: argparse.Namespace) -> int:
    config = GlobeConfig(radius=args.radius, dot_count=args.dots)
    config.validate()
    cache = TextureMapCache(size=config.image_size, max_entries=config.cache_entries)
    texture_map = cache.build_or_get(config.dot_count, config.radius)
    LOGGER.info("Texture map ready: %d dots at radius %.3f", len(texture_map), texture_map.radius)

    location: Optional[GeoCoordinate] = None
    if (args.lat is None) != (args.lon is None):
        raise DotGlobeError("--lat and --lon must be given together")
    if args.lat is not None:
        location = GeoCoordinate(latitude=args.lat, longitude=args.lon)
        entry = find_nearest(location, texture_map)
        pos = entry.position
        print(
            f"Nearest dot #{entry.index} at pixel ({entry.pixel.u}, {entry.pixel.v}) "
            f"position ({pos.x:.6f}, {pos.y:.6f}, {pos.z:.6f})"
        )

    if args.image is None:
        if args.json or args.preview:
            raise DotGlobeError("--json and --preview need a reference --image")
        return 0

    classifier = _load_classifier(args.image, config.land_threshold)
    layout = build_dot_layout(texture_map, classifier, location)
    print(f"Land dots: {len(layout.land_indices)}/{len(texture_map)}")
    if args.json:
        export_layout_json(layout, args.json)
    if args.preview:
        args.preview.parent.mkdir(parents=True, exist_ok=True)
        render_preview(layout).save(args.preview)
        LOGGER.info("Wrote preview to %s", args.preview)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args)
    except DotGlobeError as exc:
        LOGGER.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
