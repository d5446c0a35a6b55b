"""A single picture rendered at cell size and keyed by its average colour."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import numpy as np

from tile_mosaic.color_utils import (
    as_dimension,
    compute_average_color,
    compute_crop_rect,
)
from tile_mosaic.errors import InvalidDimensions
from tile_mosaic.surface import RasterSurface

logger = logging.getLogger(__name__)


@runtime_checkable
class DecodedImage(Protocol):
    """What the core needs from a decoded image."""

    @property
    def natural_width(self) -> int: ...

    @property
    def natural_height(self) -> int: ...

    def read_pixels(self, x: int, y: int, width: int, height: int) -> np.ndarray: ...


class TilePicture:
    """Wraps one source image and its cropped render at a fixed size.

    The render and the average colour are recomputed eagerly whenever the
    size or the image changes. Until a positive size and an image are both
    present the picture is "empty": it has no render and no average colour.

    Args:
        image:        Optional decoded image.
        width:        Raster width in pixels.
        height:       Raster height in pixels.
        aspect_ratio: Pixel aspect ratio applied to the destination when
                      choosing the crop.
    """

    def __init__(
        self,
        image: DecodedImage | None = None,
        width: float = 10,
        height: float = 10,
        aspect_ratio: float = 1.0,
    ) -> None:
        self._aspect_ratio = 1.0
        self._average_color: int | None = None
        self._width = 0
        self._height = 0
        self._image: DecodedImage | None = None
        self._raster = RasterSurface()

        self.set_size(width, height, aspect_ratio)

        if image is not None:
            self.set_image(image)

    # -- properties ----------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def aspect_ratio(self) -> float:
        return self._aspect_ratio

    @property
    def image(self) -> DecodedImage | None:
        return self._image

    @property
    def raster(self) -> RasterSurface:
        return self._raster

    @property
    def average_color(self) -> int | None:
        """Packed RGB average of the render, ``None`` while empty."""
        return self._average_color

    @property
    def is_rendered(self) -> bool:
        return self._average_color is not None

    @property
    def pixel_count(self) -> int:
        return self._width * self._height

    # -- public --------------------------------------------------------

    def set_size(self, width: float, height: float, aspect_ratio: float = 1.0) -> None:
        """Resize the render and redraw it. Negative sizes clamp to zero."""
        w = max(0.0, as_dimension(width, "width"))
        h = max(0.0, as_dimension(height, "height"))
        ratio = as_dimension(aspect_ratio, "aspect ratio")
        if ratio <= 0:
            raise InvalidDimensions(f"aspect ratio must be positive, got {aspect_ratio!r}")

        self._aspect_ratio = ratio
        self._width, self._height = int(w), int(h)
        self._raster.resize(self._width, self._height)

        self._render()

    def set_image(self, image: DecodedImage) -> None:
        self._image = image
        self._render()

    def get_image_data(self) -> np.ndarray:
        """The render as ``(height, width, 4)`` uint8 RGBA."""
        return self._raster.read_pixels()

    # -- private -------------------------------------------------------

    def _render(self) -> None:
        self._average_color = None
        if not (self._width > 0 and self._height > 0 and self._image is not None):
            return

        crop = compute_crop_rect(
            self._image.natural_width,
            self._image.natural_height,
            self._width,
            self._height,
            self._aspect_ratio,
        )
        self._raster.clear()
        self._raster.draw_region(self._image, crop)
        self._average_color = compute_average_color(self.get_image_data())
        logger.debug(
            "Rendered %dx%d tile, average colour #%06X",
            self._width, self._height, self._average_color,
        )

    def __repr__(self) -> str:
        color = "empty" if self._average_color is None else f"#{self._average_color:06X}"
        return f"<TilePicture {self._width}x{self._height} {color}>"
