"""A Pillow-backed 2-D raster surface with canvas-like draw operations."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

if TYPE_CHECKING:
    from tile_mosaic.color_utils import CropRect
    from tile_mosaic.picture import DecodedImage

Rect = tuple[float, float, float, float]


def _edge(value: float) -> int:
    """Round a float coordinate half-up to a pixel edge."""
    return int(math.floor(value + 0.5))


class RasterSurface:
    """An RGBA pixel buffer that can be resized, drawn onto and read back.

    Resizing clears the surface to transparent black, like an HTML canvas.
    A surface with zero width or height is legal and holds no pixels.
    """

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self._width = 0
        self._height = 0
        self._image: Image.Image | None = None
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def resize(self, width: int, height: int) -> None:
        self._width = max(0, int(width))
        self._height = max(0, int(height))
        self.clear()

    def clear(self) -> None:
        if self._width > 0 and self._height > 0:
            self._image = Image.new("RGBA", (self._width, self._height), (0, 0, 0, 0))
        else:
            self._image = None

    # -- drawing -------------------------------------------------------

    def draw_scaled(self, source: RasterSurface, rect: Rect) -> None:
        """Scale the whole of *source* into ``rect = (x, y, w, h)``."""
        layer = source.to_image()
        if layer is None:
            return
        x0, y0, w, h = self._pixel_rect(rect)
        if w <= 0 or h <= 0:
            return
        if layer.size != (w, h):
            layer = layer.resize((w, h), Image.BILINEAR)
        self._composite(layer, x0, y0)

    def draw_region(self, image: DecodedImage, crop: CropRect) -> None:
        """Draw the source rectangle of *image* into the destination rectangle.

        Source pixels are only read through ``image.read_pixels``; the
        fractional source box is resampled straight into the destination.
        """
        left = max(0, int(math.floor(crop.sx)))
        top = max(0, int(math.floor(crop.sy)))
        right = min(image.natural_width, int(math.ceil(crop.sx + crop.sw)))
        bottom = min(image.natural_height, int(math.ceil(crop.sy + crop.sh)))
        if right <= left or bottom <= top:
            return

        x0, y0, w, h = self._pixel_rect(crop.destination)
        if w <= 0 or h <= 0:
            return

        pixels = np.asarray(
            image.read_pixels(left, top, right - left, bottom - top), dtype=np.uint8,
        ).reshape(bottom - top, right - left, 4)
        region = Image.fromarray(pixels)

        box = (
            crop.sx - left,
            crop.sy - top,
            crop.sx - left + crop.sw,
            crop.sy - top + crop.sh,
        )
        self._composite(region.resize((w, h), Image.BILINEAR, box=box), x0, y0)

    def fill_rect(self, rect: Rect, rgba: tuple[int, int, int, float]) -> None:
        """Composite a flat colour over ``rect``; alpha is a float in [0, 1]."""
        x0, y0, w, h = self._pixel_rect(rect)
        if w <= 0 or h <= 0:
            return
        red, green, blue, alpha = rgba
        a = max(0, min(255, _edge(alpha * 255)))
        layer = Image.new("RGBA", (w, h), (int(red), int(green), int(blue), a))
        self._composite(layer, x0, y0)

    # -- reading -------------------------------------------------------

    def read_pixels(self, rect: Rect | None = None) -> np.ndarray:
        """Return ``(h, w, 4)`` uint8 RGBA pixels of *rect* (default: everything)."""
        if rect is None:
            rect = (0, 0, self._width, self._height)
        x, y, w, h = (int(v) for v in rect)
        if self._image is None or w <= 0 or h <= 0:
            return np.zeros((max(0, h), max(0, w), 4), dtype=np.uint8)
        return np.array(self._image.crop((x, y, x + w, y + h)), dtype=np.uint8)

    def to_image(self) -> Image.Image | None:
        return None if self._image is None else self._image.copy()

    # -- helpers -------------------------------------------------------

    @staticmethod
    def _pixel_rect(rect: Rect) -> tuple[int, int, int, int]:
        x, y, w, h = rect
        x0, y0 = _edge(x), _edge(y)
        return x0, y0, _edge(x + w) - x0, _edge(y + h) - y0

    def _composite(self, layer: Image.Image, x0: int, y0: int) -> None:
        """Alpha-composite *layer* at ``(x0, y0)``, clipped to the surface."""
        if self._image is None:
            return
        left, top = max(0, x0), max(0, y0)
        right = min(self._width, x0 + layer.width)
        bottom = min(self._height, y0 + layer.height)
        if right <= left or bottom <= top:
            return
        if (left, top, right, bottom) != (x0, y0, x0 + layer.width, y0 + layer.height):
            layer = layer.crop((left - x0, top - y0, right - x0, bottom - y0))
        self._image.alpha_composite(layer.convert("RGBA"), dest=(left, top))
