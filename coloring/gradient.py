from typing import Optional, Tuple

import numpy as np

from coloring.base import ColoringStrategy
from coloring.palettes import get_palette


class GradientEscapeColoring(ColoringStrategy):
    """
    Escape-time coloring through a named RGB gradient. The escape count
    cycles through the gradient; interior points take interior_color.
    """
    channels = 3

    def __init__(self, palette: str = "Classic",
                 interior_color: Tuple[int, int, int] = (0, 0, 0)):
        self.palette_name = palette
        self.palette = get_palette(palette)
        self.interior_color = np.array(interior_color, dtype=np.uint8)

    def colorize(self, count: Optional[int],
                 discriminant: Optional[int] = None) -> Tuple[int, int, int]:
        color = self.interior_color
        if count is not None and count >= 0:
            color = self.palette[int(count) % len(self.palette)]
        return int(color[0]), int(color[1]), int(color[2])

    def apply(self, counts: np.ndarray,
              discriminants: Optional[np.ndarray] = None) -> np.ndarray:
        out = np.empty(counts.shape + (3,), dtype=np.uint8)
        out[...] = self.interior_color
        escaped = counts >= 0
        out[escaped] = self.palette[counts[escaped] % len(self.palette)]
        return out
