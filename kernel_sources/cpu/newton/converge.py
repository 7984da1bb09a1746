import cmath
import math
from typing import Tuple

import numpy as np
from numba import njit

from kernel_sources.registry import register_kernel
from utils.coords import pixel_to_point_jit
from utils.enums import Octant


ARG_SCALARS = [
    "width", "height", "row_offset", "full_height", "upper_left", "lower_right",
    "order", "offset", "max_iter", "epsilon", "policy",
]
ARG_BUFFERS_IN = ["roots"]
ARG_BUFFERS_OUT = ["counts", "buckets"]

ARG_ORDER = ARG_SCALARS + ARG_BUFFERS_IN + ARG_BUFFERS_OUT

POLICY_NEAREST_ROOT = 0
POLICY_OCTANT = 1

# Indexed by (sign(re) + 1) * 3 + (sign(im) + 1).
_OCTANT_TABLE = np.array([
    Octant.SOUTH_WEST, Octant.WEST, Octant.NORTH_WEST,
    Octant.SOUTH, Octant.ORIGIN, Octant.NORTH,
    Octant.SOUTH_EAST, Octant.EAST, Octant.NORTH_EAST,
], dtype=np.int8)


@njit(cache=True, nogil=True)
def _ipow(z, n):
    out = 1.0 + 0j
    for _ in range(n):
        out = out * z
    return out


@njit(cache=True, nogil=True)
def newton_iterate_jit(c, order, limit, epsilon, offset):
    z = c
    remaining = limit
    while remaining > 0:
        dz = order * _ipow(z, order - 1)
        if dz.real == 0.0 and dz.imag == 0.0:
            return 0, z
        delta = (_ipow(z, order) + offset) / dz
        if not (math.isfinite(delta.real) and math.isfinite(delta.imag)):
            return 0, z
        if abs(delta) < epsilon:
            break
        z = z - delta
        remaining -= 1
    return remaining, z


def newton_iterate(c: complex, order: int, iteration_budget: int,
                   epsilon: float = 1e-7, offset: float = -1.0) -> Tuple[int, complex]:
    """
    Newton's method on f(z) = z**order + offset starting from z = c.

    Returns (remaining, z). remaining == 0 means the budget ran out before
    the step size dropped below epsilon (basin boundary, or a degenerate
    derivative); otherwise iteration_budget - remaining steps were taken.
    """
    remaining, z = newton_iterate_jit(complex(c), int(order), int(iteration_budget),
                                      float(epsilon), float(offset))
    return int(remaining), complex(z)


@njit(cache=True, nogil=True)
def nearest_root_jit(z, roots):
    best = -1
    best_dist = math.inf
    for k in range(roots.shape[0]):
        dist = abs(z - roots[k])
        if dist < best_dist:
            best_dist = dist
            best = k
    return best


@njit(cache=True, nogil=True)
def _sign(x, epsilon):
    if x > epsilon:
        return 1
    if x < -epsilon:
        return -1
    return 0


@njit(cache=True, nogil=True)
def octant_jit(z, epsilon):
    return _OCTANT_TABLE[(_sign(z.real, epsilon) + 1) * 3 + _sign(z.imag, epsilon) + 1]


def nearest_root(z: complex, roots: np.ndarray) -> int:
    """Index of the member of roots closest to z (-1 if z is not finite)."""
    return int(nearest_root_jit(complex(z), np.asarray(roots, dtype=np.complex128)))


def octant_of(z: complex, epsilon: float = 1e-7) -> Octant:
    return Octant(int(octant_jit(complex(z), float(epsilon))))


def roots_of(order: int, offset: float = -1.0) -> np.ndarray:
    """
    Roots of z**order + offset, ordered by increasing angle from the
    principal one. The returned array is read-only.
    """
    if order < 1:
        raise ValueError(f"Polynomial order must be at least 1, got {order}.")
    target = complex(-offset)
    radius = abs(target) ** (1.0 / order)
    base = cmath.phase(target)
    roots = np.array([cmath.rect(radius, (base + 2.0 * math.pi * k) / order)
                      for k in range(order)], dtype=np.complex128)
    roots.flags.writeable = False
    return roots


@njit(cache=True, nogil=True)
def _newton_band(width, height, row_offset, full_height, upper_left, lower_right,
                 order, offset, max_iter, epsilon, policy,
                 roots,
                 counts, buckets):
    for row in range(height):
        for column in range(width):
            c = pixel_to_point_jit(width, full_height, column, row_offset + row,
                                   upper_left, lower_right)
            remaining, z = newton_iterate_jit(c, order, max_iter, epsilon, offset)
            if remaining == 0:
                counts[row, column] = -1
                buckets[row, column] = -1
                continue
            counts[row, column] = max_iter - remaining
            if policy == POLICY_OCTANT:
                buckets[row, column] = octant_jit(z, epsilon)
            else:
                buckets[row, column] = nearest_root_jit(z, roots)


register_kernel(
    fractal="newton",
    op_name="converge",
    func=_newton_band,
    arg_order=ARG_ORDER,
    scalars=ARG_SCALARS,
    produces=ARG_BUFFERS_OUT,
    consumes=ARG_BUFFERS_IN,
)
