"""The public mosaic object: sizing, loading and drawing in one place."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from PIL import Image

from tile_mosaic.color_utils import as_dimension
from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import InvalidDimensions
from tile_mosaic.grid import TilePool
from tile_mosaic.image_io import save_image
from tile_mosaic.loader import ImageLoader, LoadTracker, Source
from tile_mosaic.picture import DecodedImage, TilePicture
from tile_mosaic.surface import RasterSurface

logger = logging.getLogger(__name__)


class Mosaic:
    """Builds a photomosaic of a source image out of a pool of tile images.

    Tiles and the source may be handed over as decoded images or loaded
    from paths. The mosaic is composed once every pending load has
    finished and a source is present, and recomposed whenever the size
    changes. The result lives on :attr:`surface`.

    Example::

        mosaic = Mosaic(MosaicConfig(columns=40, rows=30))
        mosaic.add_to_grid_from_paths(sorted(Path("tiles").glob("*.jpg")))
        mosaic.set_source_from_path("target.jpg")
        mosaic.save("mosaic.png")

    Args:
        config: Initial size, grid and blending (defaults to ``MosaicConfig()``).
        loader: Image loader used by the ``*_from_path*`` methods.
    """

    def __init__(
        self,
        config: MosaicConfig | None = None,
        loader: ImageLoader | None = None,
    ) -> None:
        cfg = config or MosaicConfig()

        self._width = 0
        self._height = 0
        self._columns = 0
        self._rows = 0
        self._source: TilePicture | None = None
        self._pool = TilePool(cfg.color_blending)
        self._loader = loader or ImageLoader(cfg.max_workers)
        self._tracker = LoadTracker()
        self._surface = RasterSurface()

        self.set_size(cfg.width, cfg.height, cfg.columns, cfg.rows)

    # -- read-only state -----------------------------------------------

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
    def pixel_aspect_ratio(self) -> float:
        """Width / height of one cell, e.g. 16/9 for wide cells."""
        return (self._width / self._columns) / (self._height / self._rows)

    @property
    def load_progress(self) -> float:
        """Share of requested loads that finished, 1 when none are pending."""
        return self._tracker.progress

    @property
    def pool_size(self) -> int:
        return self._pool.pool_size

    @property
    def pool(self) -> TilePool:
        return self._pool

    @property
    def source(self) -> TilePicture | None:
        return self._source

    @property
    def surface(self) -> RasterSurface:
        return self._surface

    # -- settings ------------------------------------------------------

    def get_color_blending(self) -> float:
        return self._pool.get_color_blending()

    def set_color_blending(self, value: float) -> None:
        """Set blending in [0, 1]; takes effect on the next composition."""
        self._pool.set_color_blending(value)

    def set_size(
        self,
        width: float = 0,
        height: float = 0,
        columns: float = 0,
        rows: float = 0,
    ) -> None:
        """Resize canvas and/or grid. Falsy values keep the current setting.

        Every tile is re-rendered at the new cell size and the mosaic is
        recomposed, so avoid calling this in tight loops.
        """
        requested = {
            "width": width or self._width,
            "height": height or self._height,
            "columns": columns or self._columns,
            "rows": rows or self._rows,
        }
        for name, value in requested.items():
            if as_dimension(value, name) < 1:
                raise InvalidDimensions(f"{name} must be at least 1, got {value!r}")
        width, height, columns, rows = (int(as_dimension(v)) for v in requested.values())
        if width < columns or height < rows:
            raise InvalidDimensions(f"{width}x{height} px is too small for {columns}x{rows} cells")

        if self._source is not None:
            self._source.set_size(columns, rows, (width / columns) / (height / rows))

        self._pool.set_size(width, height, columns, rows)

        self._width, self._height = self._pool.width, self._pool.height
        self._columns, self._rows = self._pool.columns, self._pool.rows
        self._surface.resize(self._width, self._height)

        if self._pool.target is not None and self._can_compose():
            self._pool.draw_grid()
            self.draw()

    # -- source --------------------------------------------------------

    def set_source_image(self, image: DecodedImage) -> None:
        """Use *image* as the picture the mosaic reproduces."""
        self._source = TilePicture(image, self._columns, self._rows, self.pixel_aspect_ratio)
        self._pool.clear_target()
        self._on_load_status_change()

    def set_source_from_path(self, path: Source) -> bool:
        """Load and set the source image. Returns ``False`` if loading failed."""
        self._tracker.begin()
        result = self._loader.load(path)
        self._tracker.complete()

        if not result.ok:
            logger.warning("%s", result.error)
            self._on_load_status_change()
            return False

        self.set_source_image(result.image)
        return True

    # -- tiles ---------------------------------------------------------

    def add_to_grid(self, image: DecodedImage) -> TilePicture:
        """Add a fully decoded image to the tile pool.

        The mosaic is recomposed straight away when a source is set and no
        loads are pending.
        """
        picture = self._add_tile(image)
        self._on_load_status_change()
        return picture

    def add_to_grid_from_paths(self, paths: Iterable[Source]) -> int:
        """Load tile images and add each one that decodes.

        Failures are logged and skipped. The mosaic is composed once the
        last load finishes if a source is already set.

        Returns:
            Number of tiles added.
        """
        paths = list(paths)
        for _ in paths:
            self._tracker.begin()

        added = 0
        pending = len(paths)
        try:
            for result in self._loader.load_many(paths):
                pending -= 1
                try:
                    if result.ok:
                        self._add_tile(result.image)
                        added += 1
                    else:
                        logger.warning("%s", result.error)
                finally:
                    self._tracker.complete()

                if self._tracker.progress == 1:
                    logger.info("All grid images loaded (%d/%d)", added, len(paths))
                    self._on_load_status_change()
                else:
                    logger.debug("Loading %d%%", round(self._tracker.progress * 100))
        finally:
            # loads abandoned by an error still count as finished
            for _ in range(pending):
                self._tracker.complete()
        return added

    # -- output --------------------------------------------------------

    def draw(self) -> None:
        """Copy the composed grid onto :attr:`surface`; forces a refresh."""
        self._surface.clear()
        self._surface.draw_scaled(
            self._pool.surface, (0, 0, self._width, self._height),
        )

    def to_image(self) -> Image.Image | None:
        return self._surface.to_image()

    def save(self, path: str | Path) -> None:
        save_image(self._surface, path)

    # -- private -------------------------------------------------------

    def _add_tile(self, image: DecodedImage) -> TilePicture:
        picture = TilePicture(
            image,
            self._width // self._columns,
            self._height // self._rows,
        )
        self._pool.add_picture(picture)
        return picture

    def _can_compose(self) -> bool:
        return self._pool.pool_size > 0 or self._pool.get_color_blending() >= 1

    def _on_load_status_change(self) -> None:
        if self._tracker.progress != 1 or self._source is None:
            return
        if not self._can_compose():
            logger.debug("Source ready, waiting for tiles")
            self._pool.clear_target()
            return
        self._pool.set_target(self._source)
        self.draw()
