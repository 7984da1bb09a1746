from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from coloring.base import ColoringStrategy
from coloring.gradient import GradientEscapeColoring
from fractals.base import Fractal, RasterDimensions, RenderSettings, Viewport
from fractals.mandelbrot import MandelbrotFractal
from fractals.newton import NewtonFractal
from rendering.core import Renderer
from rendering.executor import CancelToken, RenderExecutor
from utils.enums import DiscriminantPolicy, FractalKind
from utils.image_helpers import ImageSink


NEWTON_PRESETS = {
    "octic": NewtonFractal.octic,
    "cubic-plus-one": NewtonFractal.cubic_plus_one,
}


@dataclass(frozen=True)
class RenderJob:
    """Everything one render needs; immutable once built."""
    fractal: Fractal
    coloring: ColoringStrategy
    settings: RenderSettings
    dims: RasterDimensions
    viewport: Viewport


class RenderConfigBuilder:
    """
    Builder for configuring a render job.
    """
    def __init__(self):
        self._kind: FractalKind = FractalKind.MANDELBROT
        self._order: int = 3
        self._offset: float = -1.0
        self._policy: DiscriminantPolicy = DiscriminantPolicy.NEAREST_ROOT
        self._size: Optional[tuple[int, int]] = None
        self._upper_left: complex = complex(-2.0, 1.25)
        self._lower_right: complex = complex(0.5, -1.25)
        self._max_iter: int = 255
        self._epsilon: float = 1e-7
        self._workers: Optional[int] = None
        self._coloring: Optional[ColoringStrategy] = None
        self._palette: Optional[str] = None

    def mandelbrot(self) -> 'RenderConfigBuilder':
        self._kind = FractalKind.MANDELBROT
        return self

    def newton(self, order: int = 3, offset: float = -1.0,
               policy: DiscriminantPolicy = DiscriminantPolicy.NEAREST_ROOT) -> 'RenderConfigBuilder':
        self._kind = FractalKind.NEWTON
        self._order = order
        self._offset = offset
        self._policy = policy
        return self

    def newton_preset(self, name: str) -> 'RenderConfigBuilder':
        """Selects one of NEWTON_PRESETS (e.g. "octic" for z**8 - 1 by octant)."""
        if name not in NEWTON_PRESETS:
            raise ValueError(f"Unknown Newton preset '{name}'; choose from {', '.join(NEWTON_PRESETS)}")
        fractal = NEWTON_PRESETS[name]()
        return self.newton(order=fractal.order, offset=fractal.offset, policy=fractal.policy)

    def size(self, width: int, height: int) -> 'RenderConfigBuilder':
        self._size = (int(width), int(height))
        return self

    def resolution(self, preset: str) -> 'RenderConfigBuilder':
        self._size = self._compute_size(preset)
        return self

    def viewport(self, upper_left: complex, lower_right: complex) -> 'RenderConfigBuilder':
        self._upper_left = complex(upper_left)
        self._lower_right = complex(lower_right)
        return self

    def max_iter(self, value: int) -> 'RenderConfigBuilder':
        self._max_iter = value
        return self

    def epsilon(self, value: float) -> 'RenderConfigBuilder':
        self._epsilon = value
        return self

    def workers(self, value: Optional[int]) -> 'RenderConfigBuilder':
        self._workers = value
        return self

    def coloring(self, strategy: ColoringStrategy) -> 'RenderConfigBuilder':
        self._coloring = strategy
        return self

    def palette(self, name: Optional[str]) -> 'RenderConfigBuilder':
        self._palette = name
        return self

    def build(self) -> RenderJob:
        if self._kind == FractalKind.NEWTON:
            fractal: Fractal = NewtonFractal(order=self._order, offset=self._offset,
                                             policy=self._policy)
        else:
            fractal = MandelbrotFractal()

        coloring = self._coloring
        if coloring is None and self._palette is not None:
            if self._kind != FractalKind.MANDELBROT:
                raise ValueError("Gradient palettes apply to escape-time fractals only.")
            coloring = GradientEscapeColoring(self._palette)
        if coloring is None:
            coloring = fractal.default_coloring()

        width, height = self._size or (800, 800)
        job = RenderJob(
            fractal=fractal,
            coloring=coloring,
            settings=RenderSettings(max_iter=self._max_iter, epsilon=self._epsilon,
                                    workers=self._workers),
            dims=RasterDimensions(width, height),
            viewport=Viewport(self._upper_left, self._lower_right),
        )
        job.dims.validate()
        job.viewport.validate()
        job.settings.validate()
        return job

    @staticmethod
    def _compute_size(preset: str) -> tuple[int, int]:
        mapping = {
            "2160p": 3840,
            "1440p": 2560,
            "1080p": 1920,
            "720p": 1280,
            "480p": 854,
            "360p": 640,
        }
        if preset not in mapping:
            raise ValueError(f"Unknown resolution preset '{preset}'; choose from {', '.join(mapping)}")
        h = int(preset.replace("p", ""))
        return mapping[preset], h


class RenderAPI:
    """
    Facade for building jobs, rendering them and handing the result to a sink.
    """
    def __init__(self, executor: Optional[RenderExecutor] = None):
        self.executor = executor or RenderExecutor()

    def configure(self) -> RenderConfigBuilder:
        """
        Configures a render with a fluent builder pattern.

        Returns:
            RenderConfigBuilder: A builder object for the job settings.
        """
        return RenderConfigBuilder()

    def render(self, job: RenderJob, cancel: Optional[CancelToken] = None) -> np.ndarray:
        """
        Renders the job into a new buffer. Raises RenderError if any band
        fails, in which case no buffer is returned.
        """
        renderer = Renderer(job.fractal, job.settings,
                            coloring=job.coloring, executor=self.executor)
        return renderer.render(job.dims, job.viewport, cancel)

    def render_to(self, job: RenderJob, sink: ImageSink,
                  cancel: Optional[CancelToken] = None) -> np.ndarray:
        """
        Renders the job and writes it to sink. A failing sink raises
        SinkError; to retry the same pixels with another sink, call render()
        and sink.write() separately.
        """
        buffer = self.render(job, cancel)
        sink.write(buffer, job.dims)
        return buffer
