from enum import Enum, IntEnum, auto

class FractalKind(Enum):
    MANDELBROT = auto()
    NEWTON = auto()

class DiscriminantPolicy(Enum):
    NEAREST_ROOT = auto()
    OCTANT = auto()

class Octant(IntEnum):
    """
    Sign pattern of (Re z, Im z), each component thresholded against epsilon.
    Values are stored in int8 discriminant buffers, -1 meaning no convergence.
    """
    NORTH_EAST = 0
    EAST = 1
    SOUTH_EAST = 2
    SOUTH = 3
    SOUTH_WEST = 4
    WEST = 5
    NORTH_WEST = 6
    NORTH = 7
    ORIGIN = 8
