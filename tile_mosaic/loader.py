"""Image loading with explicit success/failure results and progress tracking."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

from tile_mosaic.errors import LoadError
from tile_mosaic.image_io import PilImage, open_image

logger = logging.getLogger(__name__)

Source = Union[str, Path, BinaryIO]


class LoadTracker:
    """Counts requested and completed loads.

    Both counters reset to zero the moment the last outstanding load
    completes, so progress reads 1 whenever nothing is pending.
    """

    def __init__(self) -> None:
        self._requested = 0
        self._completed = 0

    @property
    def requested(self) -> int:
        return self._requested

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def progress(self) -> float:
        if self._requested == 0:
            return 1.0
        return self._completed / self._requested

    def begin(self) -> None:
        self._requested += 1

    def complete(self) -> None:
        if self._completed >= self._requested:
            raise RuntimeError("complete() called with no outstanding loads")
        self._completed += 1
        if self._completed == self._requested:
            self._completed = 0
            self._requested = 0


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one load: either ``image`` or ``error`` is set."""

    source: Source
    image: PilImage | None = None
    error: LoadError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ImageLoader:
    """Decodes images, optionally several at once on a thread pool.

    Only decoding runs on worker threads; results are handed back on the
    caller's thread, so pools and pictures are never touched concurrently.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self.max_workers = max(1, int(max_workers))

    def load(self, source: Source) -> LoadResult:
        try:
            return LoadResult(source, image=open_image(source))
        except LoadError as exc:
            return LoadResult(source, error=exc)

    def load_many(self, sources: Iterable[Source]) -> Iterator[LoadResult]:
        """Yield a result per source in completion order."""
        sources = list(sources)
        if not sources:
            return
        workers = min(self.max_workers, len(sources))
        logger.debug("Loading %d images on %d threads", len(sources), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self.load, s) for s in sources]
            for future in as_completed(futures):
                yield future.result()
