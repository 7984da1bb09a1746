from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, List

import numpy as np

from coloring.base import ColoringStrategy
from fractals.base import Fractal, RasterDimensions, RenderSettings, Viewport
from rendering.band import render_band
from rendering.errors import PreconditionError, RenderCancelled, RenderError
from utils.coords import pixel_to_point

logger = logging.getLogger(__name__)


class CancelToken:
    """Checked once before each band starts; a running band always finishes."""
    def __init__(self) -> None:
        self._flag = threading.Event()
    def cancel(self) -> None:
        self._flag.set()
    def is_cancelled(self) -> bool:
        return self._flag.is_set()


@dataclass(frozen=True)
class Band:
    """Rows [start, stop) of the raster and the plane rectangle they cover."""
    index: int
    start: int
    stop: int
    width: int
    upper_left: complex
    lower_right: complex

    @property
    def dimensions(self) -> RasterDimensions:
        return RasterDimensions(self.width, self.stop - self.start)


def partition_rows(dims: RasterDimensions, viewport: Viewport, parts: int) -> List[Band]:
    """
    Splits the raster into contiguous bands of ceil(height / parts) rows,
    the last one possibly shorter. Band corners come from the global
    mapping at the band's top row and one past its last row.
    """
    if parts <= 0:
        raise PreconditionError(f"Worker count must be positive, got {parts}.")
    rows_per_band = -(-dims.height // parts)
    bands: List[Band] = []
    for start in range(0, dims.height, rows_per_band):
        stop = min(start + rows_per_band, dims.height)
        ul = pixel_to_point(dims, (0, start), viewport.upper_left, viewport.lower_right)
        lr = pixel_to_point(dims, (dims.width, stop), viewport.upper_left, viewport.lower_right)
        bands.append(Band(len(bands), start, stop, dims.width, ul, lr))
    return bands


def check_partition(bands: List[Band], height: int) -> None:
    """Raises RenderError unless the bands are disjoint and cover [0, height)."""
    expected_start = 0
    for band in sorted(bands, key=lambda b: b.start):
        if band.start != expected_start or band.stop <= band.start:
            raise RenderError(
                f"Band partition is not disjoint and contiguous: band {band.index} "
                f"covers rows {band.start}-{band.stop}, expected start {expected_start}.")
        expected_start = band.stop
    if expected_start != height:
        raise RenderError(f"Band partition covers {expected_start} rows, raster has {height}.")


class RenderExecutor:
    """
    Fork-join band scheduler.

    Each band gets its own row slice of the caller's buffer and runs on a
    thread pool; kernels release the GIL, so bands compute in parallel.
    Bands map pixels through the raster corners at their absolute row, so
    the image is the same for any number of bands.
    The call returns only once every band has finished.
    """

    def __init__(self, workers: Optional[int] = None) -> None:
        if workers is not None and int(workers) <= 0:
            raise PreconditionError(f"Worker count must be positive, got {workers}.")
        self.workers = workers

    def _worker_count(self, settings: RenderSettings) -> int:
        if self.workers is not None:
            return int(self.workers)
        return settings.resolved_workers()

    def render(
        self,
        fractal: Fractal,
        coloring: ColoringStrategy,
        settings: RenderSettings,
        dims: RasterDimensions,
        viewport: Viewport,
        cancel: Optional[CancelToken] = None,
    ) -> np.ndarray:
        dims.validate()
        buffer = np.zeros(dims.shape(coloring.channels), dtype=np.uint8)
        return self.render_into(buffer, fractal, coloring, settings, dims, viewport, cancel)

    def render_into(
        self,
        buffer: np.ndarray,
        fractal: Fractal,
        coloring: ColoringStrategy,
        settings: RenderSettings,
        dims: RasterDimensions,
        viewport: Viewport,
        cancel: Optional[CancelToken] = None,
    ) -> np.ndarray:
        dims.validate()
        viewport.validate()
        settings.validate()
        expected = dims.shape(coloring.channels)
        if buffer.shape != expected or buffer.dtype != np.uint8:
            raise PreconditionError(
                f"Pixel buffer is {buffer.dtype}{buffer.shape}, expected uint8{expected}.")
        if not buffer.flags.c_contiguous:
            raise PreconditionError("Pixel buffer must be C-contiguous.")
        buffer[...] = 0

        bands = partition_rows(dims, viewport, self._worker_count(settings))
        check_partition(bands, dims.height)
        logger.debug("Rendering %s %s as %d band(s) of up to %d rows",
                     fractal.name, dims, len(bands), bands[0].stop - bands[0].start)

        def run(band: Band) -> float:
            if cancel is not None and cancel.is_cancelled():
                raise RenderCancelled(f"Render cancelled before band {band.index}")
            t0 = time.perf_counter()
            render_band(buffer[band.start:band.stop], band.dimensions,
                        viewport.upper_left, viewport.lower_right,
                        fractal, coloring, settings,
                        row_offset=band.start, full_height=dims.height)
            return (time.perf_counter() - t0) * 1000.0

        t0 = time.perf_counter()
        with ThreadPoolExecutor(max_workers=len(bands), thread_name_prefix="band") as ex:
            futs = {ex.submit(run, band): band for band in bands}
            try:
                for fut in as_completed(futs):
                    band = futs[fut]
                    try:
                        elapsed = fut.result()
                    except RenderCancelled:
                        raise
                    except Exception as e:
                        logger.exception("Band %d (rows %d-%d) failed", band.index, band.start, band.stop)
                        raise RenderError(
                            f"Band {band.index} (rows {band.start}-{band.stop}) failed: {e}") from e
                    logger.debug("Band %d (rows %d-%d, %s to %s) done in %.2f ms",
                                 band.index, band.start, band.stop,
                                 band.upper_left, band.lower_right, elapsed)
            except RenderError:
                for f in futs:
                    f.cancel()
                raise

        elapsed = (time.perf_counter() - t0) * 1000.0
        logger.info("Rendered %s %s across %d band(s) in %.2f ms",
                    fractal.name, dims, len(bands), elapsed)
        return buffer


def parallel_render(buffer: np.ndarray, dims: RasterDimensions, viewport: Viewport,
                    fractal: Fractal, coloring: ColoringStrategy,
                    settings: RenderSettings, workers: int) -> np.ndarray:
    """Renders into `buffer` with exactly `workers` band tasks at most."""
    return RenderExecutor(workers=workers).render_into(
        buffer, fractal, coloring, settings, dims, viewport)
