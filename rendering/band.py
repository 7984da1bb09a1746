from __future__ import annotations

from typing import Optional

import numpy as np

from coloring.base import ColoringStrategy
from fractals.base import Fractal, RasterDimensions, RenderSettings
from rendering.errors import PreconditionError


def render_band(output: np.ndarray, band: RasterDimensions,
                upper_left: complex, lower_right: complex,
                fractal: Fractal, coloring: ColoringStrategy,
                settings: RenderSettings,
                row_offset: int = 0, full_height: Optional[int] = None) -> None:
    """
    Renders one horizontal slice into `output`, which must hold exactly
    band.width * band.height pixels of coloring.channels samples.

    By default the band is a raster of its own with corners upper_left and
    lower_right. Inside a larger raster, pass that raster's corners along
    with the band's first row (row_offset) and the raster height
    (full_height); pixels are then mapped exactly as a single-band render
    would map them. Nothing outside `output` is read or written.
    """
    expected = band.shape(coloring.channels)
    if output.shape != expected:
        raise PreconditionError(
            f"Band buffer has shape {output.shape}, expected {expected} "
            f"for a {band} band with {coloring.channels} channel(s).")
    if full_height is not None and not 0 <= row_offset <= full_height - band.height:
        raise PreconditionError(
            f"Band rows {row_offset}-{row_offset + band.height} fall outside a "
            f"raster of {full_height} rows.")
    classification = fractal.classify(band, upper_left, lower_right, settings,
                                      row_offset, full_height)
    output[...] = coloring.apply(classification.counts, classification.discriminants)
