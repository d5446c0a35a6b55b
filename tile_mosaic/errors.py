"""Exception hierarchy.

Every error derives from :class:`MosaicError` and from the builtin that
best describes it, so callers may catch either.
"""

from __future__ import annotations


class MosaicError(Exception):
    """Base class for all mosaic errors."""


class InvalidDimensions(MosaicError, ValueError):
    """A size, grid resolution or aspect ratio is unusable."""


class InvalidBlending(MosaicError, ValueError):
    """Colour blending is not a number in [0, 1]."""


class EmptyPool(MosaicError, LookupError):
    """Nearest-colour lookup against a pool with no tiles."""


class MissingTarget(MosaicError, RuntimeError):
    """Composition requested before a target picture was set."""


class GridMismatch(MosaicError, ValueError):
    """``columns * rows`` differs from the target raster's pixel count."""


class UnrenderedTile(MosaicError, ValueError):
    """A tile without an average colour was added to the pool."""


class LoadError(MosaicError, OSError):
    """An image source could not be opened or decoded."""
