"""Image decoding, saving, and comparison-grid generation."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

import numpy as np
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from tile_mosaic.errors import LoadError
from tile_mosaic.surface import RasterSurface


class PilImage:
    """A decoded image backed by Pillow, always held as RGBA."""

    def __init__(self, image: Image.Image, name: str = "") -> None:
        self._image = image if image.mode == "RGBA" else image.convert("RGBA")
        self.name = name

    @classmethod
    def from_array(cls, array: np.ndarray, name: str = "") -> PilImage:
        """Wrap an ``(H, W, 3)`` or ``(H, W, 4)`` uint8 array."""
        return cls(Image.fromarray(np.asarray(array, dtype=np.uint8)), name)

    @property
    def natural_width(self) -> int:
        return self._image.width

    @property
    def natural_height(self) -> int:
        return self._image.height

    def read_pixels(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        """RGBA pixels of a region as an ``(height, width, 4)`` uint8 array."""
        return np.asarray(
            self._image.crop((x, y, x + width, y + height)), dtype=np.uint8,
        )

    def to_image(self) -> Image.Image:
        return self._image.copy()

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<PilImage{label} {self.natural_width}x{self.natural_height}>"


def open_image(source: str | Path | BinaryIO) -> PilImage:
    """Decode an image file into a :class:`PilImage`.

    Raises:
        LoadError: if the file is missing or not a decodable image.
    """
    name = str(source) if isinstance(source, (str, Path)) else getattr(source, "name", "")
    try:
        with Image.open(source) as img:
            img.load()
            return PilImage(img.convert("RGBA"), name)
    except (OSError, UnidentifiedImageError) as exc:
        raise LoadError(f"Error loading {name or source!r}: {exc}") from exc


def save_image(surface: RasterSurface, path: str | Path) -> None:
    """Save a surface; formats without alpha get an RGB copy."""
    img = surface.to_image()
    if img is None:
        raise ValueError("Cannot save an empty surface")
    path = Path(path)
    if path.suffix.lower() in {".jpg", ".jpeg", ".jfif", ".bmp"}:
        img = img.convert("RGB")
    img.save(path)


def make_comparison_grid(
    original: PilImage,
    mosaic: RasterSurface,
    output_path: str | Path,
) -> None:
    """Create a 2-panel comparison: Original | Mosaic.

    The original is scaled to the mosaic's size so both panels line up.
    """
    mosaic_img = mosaic.to_image()
    if mosaic_img is None:
        raise ValueError("Cannot compare an empty mosaic")
    panel_w, panel_h = mosaic_img.size
    label_height = 36

    original_img = original.to_image().resize((panel_w, panel_h), Image.LANCZOS)

    panels = [original_img, mosaic_img]
    labels = ["Original", "Mosaic"]

    gap = 8
    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels, strict=True)):
        x = i * (panel_w + gap)
        canvas.paste(panel.convert("RGB"), (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel_w - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    canvas.save(output_path)
