"""
Tile Mosaic
===========

Rebuild a target image as a grid of cells. Each cell is filled with the
tile picture whose average colour is closest to the matching target
pixel, with a flat colour swatch, or with a blend of both.

- **TilePicture** renders a centre-cropped copy of an image at cell size.
- **TilePool** matches colours against its tiles and composes the grid.
- **Mosaic** ties sizing, loading and drawing together.
"""

__version__ = "1.0.0"

from tile_mosaic.color_utils import (
    CropRect,
    color_distance,
    compute_average_color,
    compute_crop_rect,
    pack_rgb,
    unpack_rgb,
)
from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import (
    EmptyPool,
    GridMismatch,
    InvalidBlending,
    InvalidDimensions,
    LoadError,
    MissingTarget,
    MosaicError,
    UnrenderedTile,
)
from tile_mosaic.grid import TilePool
from tile_mosaic.image_io import PilImage, make_comparison_grid, open_image, save_image
from tile_mosaic.loader import ImageLoader, LoadResult, LoadTracker
from tile_mosaic.mosaic import Mosaic
from tile_mosaic.picture import DecodedImage, TilePicture
from tile_mosaic.surface import RasterSurface

__all__ = [
    "CropRect",
    "DecodedImage",
    "EmptyPool",
    "GridMismatch",
    "ImageLoader",
    "InvalidBlending",
    "InvalidDimensions",
    "LoadError",
    "LoadResult",
    "LoadTracker",
    "MissingTarget",
    "Mosaic",
    "MosaicConfig",
    "MosaicError",
    "PilImage",
    "RasterSurface",
    "TilePicture",
    "TilePool",
    "UnrenderedTile",
    "color_distance",
    "compute_average_color",
    "compute_crop_rect",
    "make_comparison_grid",
    "open_image",
    "pack_rgb",
    "save_image",
    "unpack_rgb",
]
