"""Tile pool: nearest-colour lookup and the composition pass."""

from __future__ import annotations

import logging
import math
import time

from tile_mosaic.color_utils import as_dimension, color_distance, pack_rgb
from tile_mosaic.errors import (
    EmptyPool,
    GridMismatch,
    InvalidBlending,
    InvalidDimensions,
    MissingTarget,
    UnrenderedTile,
)
from tile_mosaic.picture import TilePicture
from tile_mosaic.surface import RasterSurface

logger = logging.getLogger(__name__)


def _positive_int(value: object, name: str) -> int:
    number = as_dimension(value, name)
    if number < 1:
        raise InvalidDimensions(f"{name} must be at least 1, got {value!r}")
    return int(number)


class TilePool:
    """A pool of tiles keyed by average colour, composed onto a surface.

    Colours are kept twice: a mapping colour -> tile for lookup, and a
    sequence of unique colours in first-insertion order for the
    nearest-colour scan. Both always hold the same set of colours.

    Args:
        color_blending: 0 draws only tiles, 1 draws only flat colours.
        surface:        Output surface; a fresh one is created if omitted.
    """

    def __init__(
        self,
        color_blending: float = 0.2,
        surface: RasterSurface | None = None,
    ) -> None:
        self._color_blending = 0.2
        self._width = 0
        self._height = 0
        self._columns = 0
        self._rows = 0
        self._colors: list[int] = []
        self._pictures: dict[int, TilePicture] = {}
        self._target: TilePicture | None = None
        self._surface = surface if surface is not None else RasterSurface()

        self.set_color_blending(color_blending)

    # -- read-only state -----------------------------------------------

    @property
    def pool_size(self) -> int:
        return len(self._colors)

    @property
    def size(self) -> int:
        """Number of cells in the grid."""
        return self._columns * self._rows

    @property
    def colors(self) -> tuple[int, ...]:
        return tuple(self._colors)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cell_size(self) -> tuple[int, int]:
        """Integer tile raster size, ``floor(width/columns) x floor(height/rows)``."""
        if not self._columns or not self._rows:
            return 0, 0
        return self._width // self._columns, self._height // self._rows

    @property
    def target(self) -> TilePicture | None:
        return self._target

    @property
    def surface(self) -> RasterSurface:
        return self._surface

    def get_picture(self, color: int) -> TilePicture:
        return self._pictures[color]

    # -- settings ------------------------------------------------------

    def get_color_blending(self) -> float:
        return self._color_blending

    def set_color_blending(self, value: float) -> None:
        if isinstance(value, bool):
            raise InvalidBlending(f"color blending must be numeric, got {value!r}")
        try:
            blending = float(value)
        except (TypeError, ValueError) as exc:
            raise InvalidBlending(f"color blending must be numeric, got {value!r}") from exc
        if not 0.0 <= blending <= 1.0:
            raise InvalidBlending(f"color blending must be within [0, 1], got {value!r}")
        self._color_blending = blending

    def set_size(self, width: int, height: int, columns: int, rows: int) -> None:
        """Set output size and grid resolution, re-rendering every tile at cell size.

        Raises:
            InvalidDimensions: if any value is not a positive number.
            GridMismatch: if a target is set and its pixel count no longer
                matches ``columns * rows``.
        """
        w = _positive_int(width, "width")
        h = _positive_int(height, "height")
        cols = _positive_int(columns, "columns")
        rows = _positive_int(rows, "rows")
        if w < cols or h < rows:
            raise InvalidDimensions(f"{w}x{h} px is too small for {cols}x{rows} cells")
        if self._target is not None:
            self._check_target(self._target, cols, rows)

        self._width, self._height = w, h
        self._columns, self._rows = cols, rows

        self._surface.resize(self._width, self._height)

        cell_w, cell_h = self.cell_size
        for picture in self._pictures.values():
            picture.set_size(cell_w, cell_h)
        self._rekey()

    # -- pool ----------------------------------------------------------

    def add_picture(self, picture: TilePicture) -> TilePicture | None:
        """Add a rendered tile, keyed by its average colour.

        A tile whose colour is already pooled replaces the existing entry,
        which keeps its original position in the scan order.

        Returns:
            The replaced tile, or ``None`` when the colour was new.

        Raises:
            UnrenderedTile: if the tile has no average colour yet.
        """
        color = picture.average_color
        if color is None:
            raise UnrenderedTile(f"{picture!r} has no average colour; set its image first")

        previous = self._pictures.get(color)
        self._pictures[color] = picture
        if previous is None:
            self._colors.append(color)
        elif previous is not picture:
            logger.debug("Tile %r replaces %r at colour #%06X", picture, previous, color)
        return previous

    def get_closest_color(self, color: int) -> int:
        """Return the pooled colour nearest to *color* in RGB space.

        Ties go to the colour inserted first; an exact match returns at once.

        Raises:
            EmptyPool: if the pool has no tiles.
        """
        if not self._colors:
            raise EmptyPool("Cannot match a colour against an empty pool")

        best = self._colors[0]
        current = math.inf

        for c in self._colors:
            distance = color_distance(c, color)

            if distance == 0:
                return c
            if distance < current:
                current = distance
                best = c

        return best

    # -- composition ---------------------------------------------------

    def set_target(self, picture: TilePicture) -> None:
        """Use *picture* as the colour source and compose immediately."""
        self._check_target(picture)
        self._target = picture
        self.draw_grid()

    def clear_target(self) -> None:
        """Forget the target; the surface keeps the last composition."""
        self._target = None

    def draw_grid(self) -> None:
        """Render every cell from the target's pixels.

        Each target pixel, in row-major order, is one cell. Below full
        blending the nearest tile is drawn; above zero blending a flat
        rectangle of the pixel's colour with alpha ``color_blending`` is
        drawn over it. All preconditions are checked before drawing.

        Raises:
            MissingTarget: if no target is set.
            GridMismatch: if the target pixel count differs from the cell count.
            EmptyPool: if tiles are needed and the pool is empty.
        """
        if self._target is None:
            raise MissingTarget("No target picture set")
        self._check_target(self._target)

        blending = self._color_blending
        if blending < 1 and not self._colors:
            raise EmptyPool("Cannot draw tiles from an empty pool")

        t0 = time.perf_counter()
        pixels = self._target.get_image_data().reshape(-1, 4)

        cols = self._columns
        w = self._width / self._columns
        h = self._height / self._rows
        surface = self._surface
        nearest_cache: dict[int, int] = {}

        surface.clear()

        for i, (red, green, blue, _) in enumerate(pixels.tolist()):
            x = (i % cols) * w
            y = (i // cols) * h

            if blending < 1:
                color = pack_rgb(red, green, blue)
                nearest = nearest_cache.get(color)
                if nearest is None:
                    nearest = nearest_cache[color] = self.get_closest_color(color)
                surface.draw_scaled(self._pictures[nearest].raster, (x, y, w, h))

            if blending > 0:
                surface.fill_rect((x, y, w, h), (red, green, blue, blending))

        logger.info(
            "Composed %dx%d grid from %d tiles (blending=%.2f)  (%.2f s)",
            cols, self._rows, self.pool_size, blending, time.perf_counter() - t0,
        )

    # -- private -------------------------------------------------------

    def _check_target(
        self, picture: TilePicture, columns: int | None = None, rows: int | None = None,
    ) -> None:
        """Require *picture* to hold one pixel per cell of a ``columns x rows`` grid.

        Defaults to the current grid resolution.
        """
        cols = self._columns if columns is None else columns
        rows = self._rows if rows is None else rows
        if not cols or not rows:
            raise InvalidDimensions("Grid size must be set before composing")
        if picture.pixel_count != cols * rows:
            raise GridMismatch(
                f"Target raster has {picture.pixel_count} pixels "
                f"({picture.width}x{picture.height}) but the grid has "
                f"{cols * rows} cells ({cols}x{rows})"
            )

    def _rekey(self) -> None:
        """Re-index tiles after re-rendering changed their average colours.

        Scan order follows the previous order; if two tiles now share a
        colour the later one wins the mapping, as in :meth:`add_picture`.
        """
        pictures = [self._pictures[c] for c in self._colors]
        self._colors = []
        self._pictures = {}
        for picture in pictures:
            self.add_picture(picture)
