from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from fractals.base import Fractal, RasterDimensions, RenderSettings, Classification
from coloring.roots import RootColoring
from kernel_sources import load_kernel
from kernel_sources.cpu.newton.converge import POLICY_NEAREST_ROOT, POLICY_OCTANT, roots_of
from utils.enums import DiscriminantPolicy


@dataclass
class NewtonFractal(Fractal):
    """
    Newton's method on f(z) = z**order + offset, three RGB channels.

    Each convergent pixel is labelled with a discriminant. With
    NEAREST_ROOT it is the index of the closest member of `roots`; with
    OCTANT it is the Octant of the sign pattern of the final z. Both
    agree away from basin boundaries and can disagree close to them.
    """
    order: int = 3
    offset: float = -1.0
    policy: DiscriminantPolicy = DiscriminantPolicy.NEAREST_ROOT
    name: str = "newton"
    channels: int = 3
    roots: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.roots = roots_of(int(self.order), float(self.offset))

    @classmethod
    def octic(cls) -> "NewtonFractal":
        """z**8 - 1 bucketed by octant; each root sits in its own octant."""
        return cls(order=8, offset=-1.0, policy=DiscriminantPolicy.OCTANT)

    @classmethod
    def cubic_plus_one(cls) -> "NewtonFractal":
        return cls(order=3, offset=1.0, policy=DiscriminantPolicy.NEAREST_ROOT)

    def build_arg_values(self, band: RasterDimensions, upper_left: complex,
                         lower_right: complex, settings: RenderSettings,
                         row_offset: int = 0, full_height: Optional[int] = None) -> Dict[str, Any]:
        load_kernel(self.name, "converge")
        policy = POLICY_OCTANT if self.policy == DiscriminantPolicy.OCTANT else POLICY_NEAREST_ROOT
        return {
            "width": int(band.width),
            "height": int(band.height),
            "row_offset": int(row_offset),
            "full_height": int(band.height if full_height is None else full_height),
            "upper_left": complex(upper_left),
            "lower_right": complex(lower_right),
            "order": int(self.order),
            "offset": float(self.offset),
            "max_iter": int(settings.max_iter),
            "epsilon": float(settings.epsilon),
            "policy": policy,
            "roots": self.roots,
            "counts": np.full(band.shape(), -1, dtype=np.int32),
            "buckets": np.full(band.shape(), -1, dtype=np.int8),
        }

    def classify(self, band: RasterDimensions, upper_left: complex,
                 lower_right: complex, settings: RenderSettings,
                 row_offset: int = 0, full_height: Optional[int] = None) -> Classification:
        args = self.build_arg_values(band, upper_left, lower_right, settings,
                                     row_offset, full_height)
        self.run_kernel("converge", args)
        return Classification(counts=args["counts"], discriminants=args["buckets"])

    def default_coloring(self):
        if self.policy == DiscriminantPolicy.OCTANT:
            return RootColoring.for_octants()
        return RootColoring()
