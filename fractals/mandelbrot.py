from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from fractals.base import Fractal, RasterDimensions, RenderSettings, Classification
from coloring.grayscale import GrayscaleEscapeColoring
from kernel_sources import load_kernel, get_op_descriptor


@dataclass
class MandelbrotFractal(Fractal):
    """Escape-time classification of z <- z*z + c, one grayscale channel."""
    name: str = "mandelbrot"
    channels: int = 1

    def build_arg_values(self, band: RasterDimensions, upper_left: complex,
                         lower_right: complex, settings: RenderSettings,
                         row_offset: int = 0, full_height: Optional[int] = None) -> Dict[str, Any]:
        load_kernel(self.name, "escape")
        params = get_op_descriptor(self.name, "escape")["default_params"]
        return {
            "width": int(band.width),
            "height": int(band.height),
            "row_offset": int(row_offset),
            "full_height": int(band.height if full_height is None else full_height),
            "upper_left": complex(upper_left),
            "lower_right": complex(lower_right),
            "max_iter": int(settings.max_iter),
            "bailout": float(params["bailout"]),
            "counts": np.full(band.shape(), -1, dtype=np.int32),
        }

    def classify(self, band: RasterDimensions, upper_left: complex,
                 lower_right: complex, settings: RenderSettings,
                 row_offset: int = 0, full_height: Optional[int] = None) -> Classification:
        args = self.build_arg_values(band, upper_left, lower_right, settings,
                                     row_offset, full_height)
        self.run_kernel("escape", args)
        return Classification(counts=args["counts"])

    def default_coloring(self):
        return GrayscaleEscapeColoring()
