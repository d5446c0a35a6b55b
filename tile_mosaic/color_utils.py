"""Colour packing, crop geometry and average-colour sampling."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from tile_mosaic.errors import InvalidDimensions


def pack_rgb(red: int, green: int, blue: int) -> int:
    """Pack three 0-255 channels into a 24-bit colour."""
    return (int(red) & 0xFF) << 16 | (int(green) & 0xFF) << 8 | (int(blue) & 0xFF)


def unpack_rgb(color: int) -> tuple[int, int, int]:
    """Split a 24-bit colour into ``(red, green, blue)``."""
    return color >> 16 & 0xFF, color >> 8 & 0xFF, color & 0xFF


def to_hex(color: int) -> str:
    return f"#{color & 0xFFFFFF:06X}"


def color_distance(a: int, b: int) -> float:
    """Euclidean distance between two packed colours in RGB space."""
    ar, ag, ab = unpack_rgb(a)
    br, bg, bb = unpack_rgb(b)
    dr, dg, db = ar - br, ag - bg, ab - bb
    return math.sqrt(dr * dr + dg * dg + db * db)


def as_dimension(value: object, name: str = "dimension") -> float:
    """Coerce *value* to a finite float or raise :class:`InvalidDimensions`.

    Numeric strings are accepted (``"10"`` -> ``10.0``).
    """
    if isinstance(value, bool):
        raise InvalidDimensions(f"{name} must be numeric, got {value!r}")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidDimensions(f"{name} must be numeric, got {value!r}") from exc
    if not math.isfinite(number):
        raise InvalidDimensions(f"{name} must be finite, got {value!r}")
    return number


@dataclass(frozen=True)
class CropRect:
    """Source and destination rectangles of a crop-and-scale draw."""

    sx: float
    sy: float
    sw: float
    sh: float
    dx: float
    dy: float
    dw: float
    dh: float

    @property
    def source(self) -> tuple[float, float, float, float]:
        return self.sx, self.sy, self.sw, self.sh

    @property
    def destination(self) -> tuple[float, float, float, float]:
        return self.dx, self.dy, self.dw, self.dh


def compute_crop_rect(
    source_width: float,
    source_height: float,
    dest_width: float,
    dest_height: float,
    aspect_ratio: float = 1.0,
) -> CropRect:
    """Centre-crop the source so it fills the destination without letterboxing.

    The desired ratio is ``dest_width * aspect_ratio / dest_height``. When the
    source is relatively wider its width is cropped, otherwise its height.
    The destination is always the full ``(0, 0, dest_width, dest_height)``.

    Raises:
        InvalidDimensions: if any size or the aspect ratio is not positive.
    """
    names = (
        "source width", "source height",
        "destination width", "destination height", "aspect ratio",
    )
    values = (source_width, source_height, dest_width, dest_height, aspect_ratio)
    src_w, src_h, dst_w, dst_h, ratio = (
        as_dimension(v, n) for v, n in zip(values, names, strict=True)
    )
    for name, value in zip(names, (src_w, src_h, dst_w, dst_h, ratio), strict=True):
        if value <= 0:
            raise InvalidDimensions(f"{name} must be positive, got {value!r}")

    sx = sy = 0.0
    sw, sh = src_w, src_h

    source_ratio = sw / sh
    dest_ratio = (dst_w * ratio) / dst_h

    if source_ratio > dest_ratio:
        sw = sh * dest_ratio
        sx = src_w * 0.5 - sw * 0.5
    else:
        sh = sw / dest_ratio
        sy = src_h * 0.5 - sh * 0.5

    return CropRect(sx, sy, sw, sh, 0.0, 0.0, dst_w, dst_h)


def compute_average_color(pixels: np.ndarray | bytes | bytearray) -> int:
    """Mean RGB of an RGBA buffer, packed as a 24-bit colour.

    Channel sums are accumulated first and divided once by the pixel
    count; each mean is truncated toward zero. Alpha is ignored.

    Args:
        pixels: RGBA bytes, or any uint8 array whose size is a multiple of 4.

    Raises:
        InvalidDimensions: if the buffer holds no pixels.
    """
    arr = np.frombuffer(pixels, dtype=np.uint8) if isinstance(
        pixels, (bytes, bytearray, memoryview)
    ) else np.asarray(pixels, dtype=np.uint8)
    if arr.size % 4:
        raise InvalidDimensions(f"RGBA buffer length {arr.size} is not a multiple of 4")
    rgba = arr.reshape(-1, 4)
    count = len(rgba)
    if count == 0:
        raise InvalidDimensions("Cannot average an empty pixel buffer")

    sums = rgba[:, :3].sum(axis=0, dtype=np.int64)
    red, green, blue = (int(float(s) / count) for s in sums)
    return pack_rgb(red, green, blue)
