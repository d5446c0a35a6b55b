"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for a mosaic run.

    Attributes:
        width:          Output width in pixels.
        height:         Output height in pixels.
        columns:        Number of grid columns.
        rows:           Number of grid rows.
        color_blending: 0 = pure tile mosaic, 1 = pure flat-colour mosaic.
        max_workers:    Threads used to decode images in parallel.
        output_format:  Image format for saved files.
        save_comparison: Generate a side-by-side comparison image.
        tiles_dir:      Folder to scan for tile images.
        output_dir:     Folder for results.
    """

    # Canvas
    width: int = 300
    height: int = 300

    # Grid
    columns: int = 10
    rows: int = 10

    # Rendering
    color_blending: float = 0.2

    # Loading
    max_workers: int = 4

    # Output
    output_format: str = "png"
    save_comparison: bool = False

    # Paths
    tiles_dir: Path = field(default_factory=lambda: Path("tiles"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif", ".gif"}
    )
