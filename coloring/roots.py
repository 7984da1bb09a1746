from typing import Optional, Sequence, Tuple

import numpy as np

from coloring.base import ColoringStrategy, MAX_SAMPLE
from utils.enums import Octant

# Channel weights (r, g, b) per bucket, scaled by the convergence intensity.
ROOT_WEIGHTS: Tuple[Tuple[float, float, float], ...] = (
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
    (1.0, 1.0, 0.0),
    (0.0, 1.0, 1.0),
    (1.0, 0.0, 1.0),
    (1.0, 0.5, 0.0),
    (0.5, 0.0, 1.0),
)

OCTANT_WEIGHTS: Tuple[Tuple[float, float, float], ...] = tuple(
    weights for _, weights in sorted({
        Octant.NORTH_EAST: (1.0, 0.0, 0.0),          # red
        Octant.EAST: (1.0, 0.5, 0.0),
        Octant.SOUTH_EAST: (1.0, 1.0, 0.0),          # yellow
        Octant.SOUTH: (0.0, 1.0, 0.0),               # green
        Octant.SOUTH_WEST: (0.0, 1.0, 2.0 / 3.0),
        Octant.WEST: (0.0, 2.0 / 3.0, 1.0),
        Octant.NORTH_WEST: (0.25, 0.25, 1.0),        # blue
        Octant.NORTH: (1.0, 0.0, 1.0),
        Octant.ORIGIN: (0.0, 0.0, 0.0),              # black
    }.items())
)


def convergence_intensity(steps):
    """
    Brightness for a convergent pixel that took `steps` Newton steps.
    Steps clamp to [0, 255]; the result stays in [1, 255] so that 0 is
    left for non-convergent pixels. A bucket whose weights are all zero
    (Octant.ORIGIN in OCTANT_WEIGHTS) still renders black.
    """
    steps = np.clip(steps, 0, MAX_SAMPLE)
    return np.clip(MAX_SAMPLE - steps, 1, MAX_SAMPLE)


class RootColoring(ColoringStrategy):
    """
    One hue per discriminant bucket (root index or Octant), brightness by
    how quickly the point converged. Non-convergent pixels are black, and
    so are convergent pixels in a bucket weighted (0, 0, 0).
    Buckets beyond the weight table wrap around.
    """
    channels = 3

    def __init__(self, weights: Sequence[Sequence[float]] = ROOT_WEIGHTS):
        self.weights = np.array(weights, dtype=np.float64)
        if self.weights.ndim != 2 or self.weights.shape[1] != 3:
            raise ValueError(f"weights must be a sequence of (r, g, b), got shape {self.weights.shape}.")
        self.weights.flags.writeable = False

    @classmethod
    def for_octants(cls) -> "RootColoring":
        return cls(OCTANT_WEIGHTS)

    def colorize(self, count: Optional[int],
                 discriminant: Optional[int] = None) -> Tuple[int, int, int]:
        if count is None or count < 0 or discriminant is None or discriminant < 0:
            return 0, 0, 0
        w = self.weights[int(discriminant) % len(self.weights)]
        rgb = np.floor(w * float(convergence_intensity(int(count))))
        return int(rgb[0]), int(rgb[1]), int(rgb[2])

    def apply(self, counts: np.ndarray,
              discriminants: Optional[np.ndarray] = None) -> np.ndarray:
        if discriminants is None:
            raise ValueError("RootColoring needs a discriminant per pixel.")
        out = np.zeros(counts.shape + (3,), dtype=np.uint8)
        converged = (counts >= 0) & (discriminants >= 0)
        w = self.weights[discriminants[converged].astype(np.int64) % len(self.weights)]
        intensity = convergence_intensity(counts[converged]).astype(np.float64)
        out[converged] = np.floor(w * intensity[:, None]).astype(np.uint8)
        return out
