import math

from numba import njit


@njit(cache=True, nogil=True)
def pixel_to_point_jit(width, height, column, row, upper_left, lower_right):
    width_span = lower_right.real - upper_left.real
    height_span = upper_left.imag - lower_right.imag
    re = upper_left.real + column * width_span / width
    im = upper_left.imag - row * height_span / height
    return complex(re, im)


def pixel_to_point(dimensions, pixel, upper_left: complex,
                   lower_right: complex) -> complex:
    """
    Maps a (column, row) pixel to the complex plane.

    Rows grow downwards while the imaginary axis grows upwards, so the
    imaginary part decreases with the row index. The one-past-the-end
    pixel (width, height) maps exactly onto lower_right.
    """
    column, row = pixel
    return pixel_to_point_jit(int(dimensions.width), int(dimensions.height),
                              int(column), int(row),
                              complex(upper_left), complex(lower_right))


def point_to_pixel(dimensions, point: complex, upper_left: complex,
                   lower_right: complex) -> tuple[int, int]:
    """Inverse of pixel_to_point, truncated to the containing pixel."""
    point = complex(point)
    width_span = lower_right.real - upper_left.real
    height_span = upper_left.imag - lower_right.imag
    column = (point.real - upper_left.real) * dimensions.width / width_span
    row = (upper_left.imag - point.imag) * dimensions.height / height_span
    return math.floor(column), math.floor(row)
