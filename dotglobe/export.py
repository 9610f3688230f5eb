"""Export helpers for dot layouts (JSON and equirectangular preview images)."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw

from .common import ImageSize
from .config import THEME_DOT, THEME_HIGHLIGHT, hex_to_rgb
from .layout import DotLayout

LOGGER = logging.getLogger(__name__)

PREVIEW_BACKGROUND = (0, 0, 0, 255)


def _unit_to_latlon(unit: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    lat = np.degrees(np.arcsin(np.clip(unit[:, 1], -1.0, 1.0)))
    lon = np.degrees(np.arctan2(unit[:, 0], unit[:, 2]))
    return lat, lon


def _rgba(value: str) -> Tuple[int, int, int, int]:
    r, g, b = hex_to_rgb(value)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)), 255)


def layout_to_dict(layout: DotLayout) -> Dict:
    texture_map = layout.texture_map
    unit = texture_map.unit_points[layout.land_indices]
    lat, lon = _unit_to_latlon(unit)
    positions = texture_map.positions[layout.land_indices]
    dots = [
        {
            "index": int(index),
            "lat": round(float(la), 6),
            "lon": round(float(lo), 6),
            "position": [round(float(c), 6) for c in pos],
        }
        for index, la, lo, pos in zip(layout.land_indices, lat, lon, positions)
    ]
    highlight = None
    if layout.highlight is not None:
        entry = layout.highlight.entry
        highlight = {
            "index": entry.index,
            "location": {
                "lat": layout.highlight.location.latitude,
                "lon": layout.highlight.location.longitude,
            },
            "position": [round(c, 6) for c in entry.position.as_tuple()],
            "pixel": [entry.pixel.u, entry.pixel.v],
            "euler_angles": [round(a, 6) for a in layout.highlight.euler_angles],
        }
    return {
        "dot_count": texture_map.dot_count,
        "radius": texture_map.radius,
        "image": {"width": texture_map.size.width, "height": texture_map.size.height},
        "land_dots": len(dots),
        "dots": dots,
        "highlight": highlight,
    }


def export_layout_json(layout: DotLayout, output_path: Union[str, Path]) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(layout_to_dict(layout), indent=2), encoding="utf-8")
    LOGGER.info("Wrote %d dots to %s", len(layout), path)
    return path


def render_preview(
    layout: DotLayout,
    size: Optional[ImageSize] = None,
    *,
    dot_px: int = 1,
) -> Image.Image:
    """Draw the placed dots onto a flat equirectangular canvas."""
    texture_map = layout.texture_map
    size = size or texture_map.size
    image = Image.new("RGBA", (size.width, size.height), PREVIEW_BACKGROUND)
    draw = ImageDraw.Draw(image)
    scale_u = size.width / texture_map.size.width
    scale_v = size.height / texture_map.size.height

    def _dot(u: int, v: int, color: Tuple[int, int, int, int], radius: int) -> None:
        cx = int(u * scale_u)
        cy = int(v * scale_v)
        if radius <= 0:
            draw.point((cx, cy), fill=color)
        else:
            draw.ellipse((cx - radius, cy - radius, cx + radius, cy + radius), fill=color)

    dot_color = _rgba(THEME_DOT)
    for u, v in texture_map.pixels[layout.land_indices]:
        _dot(int(u), int(v), dot_color, dot_px - 1)
    if layout.highlight is not None:
        pixel = layout.highlight.entry.pixel
        _dot(pixel.u, pixel.v, _rgba(THEME_HIGHLIGHT), max(2, dot_px * 3))
    return image
