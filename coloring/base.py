from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

MAX_SAMPLE = 255


class ColoringStrategy(ABC):
    """
    Maps classifications to output samples.

    Implementations must be pure: the same (count, discriminant) always
    yields the same sample, so any band split produces the same image.
    A count of None (or -1 in arrays) means the point did not escape or
    converge within the budget.
    """
    channels: int = 1

    @abstractmethod
    def colorize(self, count: Optional[int], discriminant: Optional[int] = None):
        ...

    @abstractmethod
    def apply(self, counts: np.ndarray,
              discriminants: Optional[np.ndarray] = None) -> np.ndarray:
        """Vectorized colorize over a band; returns uint8 (H, W[, 3])."""
        ...
