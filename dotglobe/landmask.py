from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

import numpy as np
from PIL import Image

from .common import ImageSize, PixelCoordinate
from .errors import InvalidArgument, OutOfBounds

LOGGER = logging.getLogger(__name__)

# Near-black pixels mark landmass in the dark world-map asset
LAND_THRESHOLD = 0.03
CHANNELS = 4

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]


@dataclass(frozen=True)
class PixelColor:
    red: float
    green: float
    blue: float
    alpha: float

    def is_land(self, threshold: float = LAND_THRESHOLD) -> bool:
        return self.red < threshold and self.green < threshold and self.blue < threshold


def _as_bytes(buffer: BufferLike) -> np.ndarray:
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            raise InvalidArgument(f"Pixel buffer must hold uint8 values, got {buffer.dtype}")
        return buffer.reshape(-1)
    return np.frombuffer(buffer, dtype=np.uint8)


def _image_size(data: np.ndarray, width: int) -> ImageSize:
    if width <= 0:
        raise InvalidArgument("Image width must be positive")
    row_bytes = width * CHANNELS
    if data.size == 0 or data.size % row_bytes:
        raise InvalidArgument(
            f"Pixel buffer of {data.size} bytes is not a whole number of {width}px RGBA rows"
        )
    return ImageSize(width=width, height=data.size // row_bytes)


def _read(data: np.ndarray, size: ImageSize, pixel: PixelCoordinate) -> PixelColor:
    if not size.contains(pixel):
        raise OutOfBounds(
            f"Pixel ({pixel.u}, {pixel.v}) lies outside {size.width}x{size.height} image"
        )
    offset = ((size.width * pixel.v) + pixel.u) * CHANNELS
    r, g, b, a = (int(value) for value in data[offset:offset + CHANNELS])
    return PixelColor(red=r / 255.0, green=g / 255.0, blue=b / 255.0, alpha=a / 255.0)


def classify(pixel: PixelCoordinate, buffer: BufferLike, width: int) -> PixelColor:
    """Read the normalized RGBA colour of ``pixel`` from an interleaved RGBA buffer."""
    data = _as_bytes(buffer)
    return _read(data, _image_size(data, width), pixel)


class LandClassifier:
    """Land/ocean lookup over a reference world image already held in memory."""

    def __init__(self, buffer: BufferLike, width: int, *, threshold: float = LAND_THRESHOLD) -> None:
        self._data = _as_bytes(buffer)
        self.size = _image_size(self._data, width)
        self.threshold = threshold

    @classmethod
    def from_image(cls, image: Image.Image, *, threshold: float = LAND_THRESHOLD) -> "LandClassifier":
        rgba = np.array(image.convert("RGBA"), dtype=np.uint8)
        LOGGER.debug("Land classifier built from %dx%d image", rgba.shape[1], rgba.shape[0])
        return cls(rgba, rgba.shape[1], threshold=threshold)

    def classify(self, pixel: PixelCoordinate) -> PixelColor:
        return _read(self._data, self.size, pixel)

    def is_land(self, pixel: PixelCoordinate) -> bool:
        return self.classify(pixel).is_land(self.threshold)

    def land_mask(self, pixels: np.ndarray) -> np.ndarray:
        """Vectorised ``is_land`` for an (N, 2) array of (u, v) pixels."""
        pixels = np.asarray(pixels, dtype=np.int64).reshape(-1, 2)
        if pixels.shape[0] == 0:
            return np.zeros(0, dtype=bool)
        u = pixels[:, 0]
        v = pixels[:, 1]
        outside = (u < 0) | (u >= self.size.width) | (v < 0) | (v >= self.size.height)
        if np.any(outside):
            first = int(np.argmax(outside))
            raise OutOfBounds(
                f"Pixel ({int(u[first])}, {int(v[first])}) lies outside "
                f"{self.size.width}x{self.size.height} image"
            )
        rgba = self._data.reshape(self.size.height, self.size.width, CHANNELS)[v, u]
        # same normalisation as PixelColor so both paths agree at the threshold
        rgb = rgba[:, :3].astype(np.float64) / 255.0
        return np.all(rgb < self.threshold, axis=1)
