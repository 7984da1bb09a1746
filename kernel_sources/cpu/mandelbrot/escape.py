from typing import Optional

from numba import njit

from kernel_sources.registry import register_kernel
from utils.coords import pixel_to_point_jit


ARG_SCALARS = [
    "width", "height", "row_offset", "full_height",
    "upper_left", "lower_right", "max_iter", "bailout",
]
ARG_BUFFERS_IN = []
ARG_BUFFERS_OUT = ["counts"]

ARG_ORDER = ARG_SCALARS + ARG_BUFFERS_IN + ARG_BUFFERS_OUT


@njit(cache=True, nogil=True)
def escape_time_jit(c, limit, bailout):
    # |z|^2 against the squared radius, no square root per step
    z = 0j
    for i in range(limit):
        if z.real * z.real + z.imag * z.imag > bailout:
            return i
        z = z * z + c
    return -1


def escape_time(c: complex, iteration_budget: int,
                bailout: float = 4.0) -> Optional[int]:
    """
    Iterates z <- z*z + c from z = 0 and returns the iteration at which
    |z| first exceeds 2, or None if it never does within the budget.
    """
    n = escape_time_jit(complex(c), int(iteration_budget), float(bailout))
    return None if n < 0 else int(n)


@njit(cache=True, nogil=True)
def _escape_band(width, height, row_offset, full_height,
                 upper_left, lower_right, max_iter, bailout,
                 counts):
    # upper_left/lower_right are the full raster corners; row_offset + row is the raster row.
    for row in range(height):
        for column in range(width):
            c = pixel_to_point_jit(width, full_height, column, row_offset + row,
                                   upper_left, lower_right)
            counts[row, column] = escape_time_jit(c, max_iter, bailout)


register_kernel(
    fractal="mandelbrot",
    op_name="escape",
    func=_escape_band,
    arg_order=ARG_ORDER,
    scalars=ARG_SCALARS,
    produces=ARG_BUFFERS_OUT,
    consumes=ARG_BUFFERS_IN,
)
