from __future__ import annotations

import math
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from kernel_sources import load_kernel
from rendering.errors import PreconditionError

DEFAULT_WORKERS = 8


@dataclass(frozen=True)
class RasterDimensions:
    """
    Size of the output raster in pixels.
    Width * height equals the number of pixels in the buffer.
    """
    width: int
    height: int

    def validate(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise PreconditionError(
                f"Raster dimensions must be positive, got {self.width}x{self.height}.")

    @property
    def pixels(self) -> int:
        return self.width * self.height

    def shape(self, channels: int = 1) -> Tuple[int, ...]:
        if channels == 1:
            return self.height, self.width
        return self.height, self.width, channels

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class Viewport:
    """
    Axis-aligned rectangle of the complex plane mapped onto the raster.
    Upper_left holds the smallest real part and the largest imaginary part.
    """
    upper_left: complex
    lower_right: complex

    def validate(self) -> None:
        ul, lr = complex(self.upper_left), complex(self.lower_right)
        for value in (ul.real, ul.imag, lr.real, lr.imag):
            if not math.isfinite(value):
                raise PreconditionError(f"Viewport corners must be finite, got {ul} / {lr}.")
        if not ul.real < lr.real:
            raise PreconditionError(
                f"Viewport is degenerate: upper-left real {ul.real} must be "
                f"smaller than lower-right real {lr.real}.")
        if not ul.imag > lr.imag:
            raise PreconditionError(
                f"Viewport is degenerate: upper-left imaginary {ul.imag} must be "
                f"larger than lower-right imaginary {lr.imag}.")


@dataclass
class RenderSettings:
    """
    Holds the rendering settings for a fractal.
    Max_iter is the iteration budget per point.
    Epsilon is the Newton convergence threshold on |f(z)/f'(z)|.
    Workers is the number of row bands rendered concurrently; None means
    one per detected core.
    """
    max_iter: int = 255
    epsilon: float = 1e-7
    workers: Optional[int] = None

    def resolved_workers(self) -> int:
        if self.workers is None:
            return os.cpu_count() or DEFAULT_WORKERS
        return int(self.workers)

    def validate(self) -> None:
        if int(self.max_iter) <= 0:
            raise PreconditionError(f"max_iter must be positive, got {self.max_iter}.")
        if not self.epsilon > 0:
            raise PreconditionError(f"epsilon must be positive, got {self.epsilon}.")
        if self.workers is not None and int(self.workers) <= 0:
            raise PreconditionError(f"workers must be positive, got {self.workers}.")


@dataclass(frozen=True)
class Classification:
    """
    Per-pixel classification of one band.
    counts: int32 (H, W), iterations taken, -1 where the point did not
        escape / converge within the budget.
    discriminants: int8 (H, W) root or octant index, -1 where not
        convergent; None for fractals without attractors.
    """
    counts: np.ndarray
    discriminants: Optional[np.ndarray] = None


class Fractal(ABC):
    """
    An abstract base class for fractal types.
    """
    name: str
    channels: int

    @abstractmethod
    def classify(self, band: RasterDimensions, upper_left: complex,
                 lower_right: complex, settings: RenderSettings,
                 row_offset: int = 0, full_height: Optional[int] = None) -> Classification:
        """
        Classifies rows [row_offset, row_offset + band.height) of a
        band.width x full_height raster whose corners are upper_left and
        lower_right.
        With the defaults the band is the whole raster.
        """
        ...

    @abstractmethod
    def default_coloring(self):
        ...

    def run_kernel(self, op_name: str, args: Dict[str, Any]) -> None:
        """
        Look up the compiled kernel for this fractal and call it with args
        ordered by the kernel's registered arg_order. Output buffers in args
        are filled in place.
        """
        kernel = load_kernel(self.name, op_name)
        missing = [name for name in kernel["arg_order"] if name not in args]
        if missing:
            raise KeyError(
                f"Missing values {missing} for kernel '{self.name}.{op_name}' - "
                f"ensure build_arg_values() provides them.")
        kernel["func"](*[args[name] for name in kernel["arg_order"]])
