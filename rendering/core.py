from __future__ import annotations
import numpy as np
from typing import Optional

from coloring.base import ColoringStrategy
from fractals.base import Fractal, RasterDimensions, RenderSettings, Viewport
from rendering.executor import CancelToken, RenderExecutor


class Renderer:

    """
    Facade that binds together:
      - the fractal + render settings,
      - the coloring strategy,
      - the band executor
    """

    def __init__(
        self,
        fractal: Fractal,
        settings: Optional[RenderSettings] = None,
        *,
        coloring: Optional[ColoringStrategy] = None,
        executor: Optional[RenderExecutor] = None,
    ):
        self.fractal = fractal
        self.settings = settings or RenderSettings()
        self.coloring = coloring or fractal.default_coloring()
        self.executor = executor or RenderExecutor()

    # ----------------------------
    # Render entry point
    # ----------------------------

    def render(self, dims: RasterDimensions, viewport: Viewport,
               cancel: Optional[CancelToken] = None) -> np.ndarray:
        """
        Returns a freshly allocated uint8 buffer, (H, W) or (H, W, 3).
        """
        return self.executor.render(self.fractal, self.coloring, self.settings,
                                    dims, viewport, cancel)
