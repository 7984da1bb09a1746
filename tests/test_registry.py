import unittest

import numpy as np

from fractals.base import RasterDimensions, RenderSettings
from fractals.mandelbrot import MandelbrotFractal
from kernel_sources import (get_op_descriptor, iter_registry, list_kernels, load_kernel,
                            register_kernel)


def _fill(width, height, value, out):
    out[:height, :width] = value


class TestKernelRegistry(unittest.TestCase):

    def test_builtin_kernels_load(self):
        escape = load_kernel("mandelbrot", "escape")
        converge = load_kernel("newton", "converge")
        self.assertTrue(callable(escape["func"]))
        self.assertEqual(escape["arg_order"][-1], "counts")
        self.assertIn("row_offset", converge["arg_order"])
        self.assertEqual(converge["produces"], ["counts", "buckets"])
        self.assertIn("escape", list_kernels("mandelbrot"))
        self.assertIn("newton", iter_registry())

    def test_escape_descriptor(self):
        load_kernel("mandelbrot", "escape")
        self.assertEqual(get_op_descriptor("mandelbrot", "escape")["default_params"]["bailout"], 4.0)

    def test_unknown_kernel(self):
        with self.assertRaises(KeyError):
            load_kernel("mandelbrot", "smooth")
        with self.assertRaises(KeyError):
            load_kernel("julia", "escape")
        with self.assertRaises(KeyError):
            get_op_descriptor("julia", "escape")
        self.assertEqual(list_kernels("julia"), [])

    def test_custom_registration(self):
        register_kernel("test-fractal", "fill", func=_fill,
                        arg_order=["width", "height", "value", "out"])
        meta = load_kernel("test-fractal", "fill")
        self.assertEqual(meta["scalars"], [])
        out = np.zeros((2, 3), dtype=np.int32)
        meta["func"](3, 2, 7, out)
        self.assertTrue((out == 7).all())

    def test_registration_needs_arg_order(self):
        register_kernel("test-fractal", "broken", func=_fill)
        with self.assertRaises(KeyError):
            load_kernel("test-fractal", "broken")

    def test_run_kernel_reports_missing_args(self):
        fractal = MandelbrotFractal()
        args = fractal.build_arg_values(RasterDimensions(4, 4), complex(-2, 1),
                                        complex(1, -1), RenderSettings())
        del args["bailout"]
        with self.assertRaises(KeyError):
            fractal.run_kernel("escape", args)


if __name__ == "__main__":
    unittest.main()
