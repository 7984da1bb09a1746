from typing import Optional

import numpy as np

from coloring.base import ColoringStrategy, MAX_SAMPLE


class GrayscaleEscapeColoring(ColoringStrategy):
    """
    Fast escapes are bright, slow escapes dim, the interior black.
    Counts saturate at MAX_SAMPLE - 1 so an escaped pixel never reads 0.
    """
    channels = 1

    def colorize(self, count: Optional[int], discriminant: Optional[int] = None) -> int:
        if count is None or count < 0:
            return 0
        return MAX_SAMPLE - min(int(count), MAX_SAMPLE - 1)

    def apply(self, counts: np.ndarray,
              discriminants: Optional[np.ndarray] = None) -> np.ndarray:
        out = np.zeros(counts.shape, dtype=np.uint8)
        escaped = counts >= 0
        out[escaped] = MAX_SAMPLE - np.minimum(counts[escaped], MAX_SAMPLE - 1)
        return out
