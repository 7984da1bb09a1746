import unittest

import numpy as np

from coloring.grayscale import GrayscaleEscapeColoring
from coloring.roots import convergence_intensity
from fractals.base import RasterDimensions, RenderSettings, Viewport
from fractals.mandelbrot import MandelbrotFractal
from fractals.newton import NewtonFractal
from kernel_sources.cpu.mandelbrot.escape import escape_time
from kernel_sources.cpu.newton.converge import newton_iterate
from rendering.errors import PreconditionError, RenderCancelled, RenderError
from rendering.executor import (Band, CancelToken, RenderExecutor, check_partition,
                                parallel_render, partition_rows)
from utils.coords import pixel_to_point
from utils.enums import DiscriminantPolicy


class ExplodingFractal(MandelbrotFractal):
    """Fails on every band starting in the lower half of the raster."""

    def classify(self, band, upper_left, lower_right, settings,
                 row_offset=0, full_height=None):
        if full_height is not None and 2 * row_offset >= full_height:
            raise ArithmeticError("boom")
        return super().classify(band, upper_left, lower_right, settings,
                                row_offset, full_height)


class TestPartition(unittest.TestCase):

    def setUp(self):
        self.viewport = Viewport(complex(-2.0, 1.5), complex(1.0, -1.5))

    def test_ceil_sized_bands(self):
        bands = partition_rows(RasterDimensions(8, 10), self.viewport, 3)
        self.assertEqual([(b.start, b.stop) for b in bands], [(0, 4), (4, 8), (8, 10)])
        check_partition(bands, 10)

    def test_more_workers_than_rows(self):
        bands = partition_rows(RasterDimensions(8, 3), self.viewport, 8)
        self.assertEqual([(b.start, b.stop) for b in bands], [(0, 1), (1, 2), (2, 3)])

    def test_band_corners_follow_global_mapping(self):
        dims = RasterDimensions(64, 48)
        bands = partition_rows(dims, self.viewport, 4)
        self.assertEqual(bands[0].upper_left, self.viewport.upper_left)
        self.assertEqual(bands[-1].lower_right, self.viewport.lower_right)
        for above, below in zip(bands, bands[1:]):
            self.assertEqual(above.lower_right.imag, below.upper_left.imag)
        self.assertEqual(bands[1].upper_left, complex(-2.0, 0.75))

    def test_rejects_non_positive_parts(self):
        with self.assertRaises(PreconditionError):
            partition_rows(RasterDimensions(8, 8), self.viewport, 0)

    def test_check_partition_catches_gaps_and_overlaps(self):
        def band(i, start, stop):
            return Band(i, start, stop, 8, 0j, 0j)
        with self.assertRaises(RenderError):
            check_partition([band(0, 0, 4), band(1, 5, 10)], 10)
        with self.assertRaises(RenderError):
            check_partition([band(0, 0, 6), band(1, 4, 10)], 10)
        with self.assertRaises(RenderError):
            check_partition([band(0, 0, 4), band(1, 4, 8)], 10)
        check_partition([band(1, 4, 10), band(0, 0, 4)], 10)


class TestRenderExecutor(unittest.TestCase):

    def setUp(self):
        self.dims = RasterDimensions(64, 48)
        self.viewport = Viewport(complex(-2.0, 1.5), complex(1.0, -1.5))
        self.settings = RenderSettings(max_iter=128)

    def render(self, fractal, workers, dims=None, viewport=None):
        coloring = fractal.default_coloring()
        return RenderExecutor(workers=workers).render(
            fractal, coloring, self.settings, dims or self.dims, viewport or self.viewport)

    def test_band_count_does_not_change_output(self):
        fractal = MandelbrotFractal()
        reference = self.render(fractal, 1)
        self.assertEqual(reference.shape, (48, 64))
        self.assertTrue(reference.any())
        for workers in (2, 3, 5, 8, 48, 64):
            np.testing.assert_array_equal(self.render(fractal, workers), reference,
                                          err_msg=f"workers={workers}")

    def test_newton_band_count_does_not_change_output(self):
        dims = RasterDimensions(48, 32)
        viewport = Viewport(complex(-1.5, 1.0), complex(1.5, -1.0))
        for fractal in (NewtonFractal(order=3),
                        NewtonFractal(order=8, policy=DiscriminantPolicy.OCTANT)):
            reference = self.render(fractal, 1, dims, viewport)
            self.assertEqual(reference.shape, (32, 48, 3))
            for workers in (4, 7):
                np.testing.assert_array_equal(
                    self.render(fractal, workers, dims, viewport), reference)

    def test_inexact_viewport_is_independent_of_band_count(self):
        dims = RasterDimensions(250, 150)
        viewport = Viewport(complex(-1.20, 0.35), complex(-1.0, 0.20))
        fractal = MandelbrotFractal()
        reference = self.render(fractal, 1, dims, viewport)
        self.assertTrue(reference.any())
        for workers in (3, 7, 11, 150):
            np.testing.assert_array_equal(self.render(fractal, workers, dims, viewport),
                                          reference, err_msg=f"workers={workers}")

        dims = RasterDimensions(120, 90)
        viewport = Viewport(complex(-1.3, 0.9), complex(1.3, -0.9))
        fractal = NewtonFractal(order=3)
        reference = self.render(fractal, 1, dims, viewport)
        for workers in (7, 13):
            np.testing.assert_array_equal(self.render(fractal, workers, dims, viewport),
                                          reference, err_msg=f"workers={workers}")

    def test_bands_use_global_pixel_mapping(self):
        dims = RasterDimensions(40, 30)
        viewport = Viewport(complex(-1.3, 0.9), complex(0.7, -0.9))
        out = self.render(MandelbrotFractal(), 7, dims, viewport)
        coloring = GrayscaleEscapeColoring()
        for row in range(dims.height):
            for column in range(0, dims.width, 3):
                c = pixel_to_point(dims, (column, row), viewport.upper_left, viewport.lower_right)
                self.assertEqual(out[row, column], coloring.colorize(escape_time(c, 128)),
                                 (column, row))

    def test_workers_from_settings(self):
        settings = RenderSettings(max_iter=32, workers=3)
        out = RenderExecutor().render(MandelbrotFractal(), GrayscaleEscapeColoring(),
                                      settings, self.dims, self.viewport)
        self.assertEqual(out.shape, (48, 64))

    def test_render_into_rezeroes_buffer(self):
        fractal = MandelbrotFractal()
        coloring = GrayscaleEscapeColoring()
        buffer = np.full(self.dims.shape(), 200, dtype=np.uint8)
        RenderExecutor(workers=4).render_into(buffer, fractal, coloring, self.settings,
                                              self.dims, self.viewport)
        np.testing.assert_array_equal(buffer, self.render(fractal, 1))

    def test_parallel_render(self):
        fractal = MandelbrotFractal()
        buffer = np.zeros(self.dims.shape(), dtype=np.uint8)
        out = parallel_render(buffer, self.dims, self.viewport, fractal,
                              GrayscaleEscapeColoring(), self.settings, 6)
        self.assertIs(out, buffer)
        np.testing.assert_array_equal(buffer, self.render(fractal, 1))

    def test_band_failure_propagates(self):
        with self.assertRaises(RenderError) as ctx:
            self.render(ExplodingFractal(), 4)
        self.assertIsInstance(ctx.exception.__cause__, ArithmeticError)

    def test_cancelled_render_raises(self):
        token = CancelToken()
        token.cancel()
        with self.assertRaises(RenderCancelled):
            RenderExecutor(workers=2).render(MandelbrotFractal(), GrayscaleEscapeColoring(),
                                             self.settings, self.dims, self.viewport, token)

    def test_precondition_violations(self):
        fractal = MandelbrotFractal()
        coloring = GrayscaleEscapeColoring()
        executor = RenderExecutor(workers=2)
        with self.assertRaises(PreconditionError):
            executor.render_into(np.zeros((10, 10), dtype=np.uint8), fractal, coloring,
                                 self.settings, self.dims, self.viewport)
        with self.assertRaises(PreconditionError):
            executor.render_into(np.zeros(self.dims.shape(), dtype=np.float32), fractal,
                                 coloring, self.settings, self.dims, self.viewport)
        with self.assertRaises(PreconditionError):
            executor.render(fractal, coloring, self.settings, self.dims,
                            Viewport(complex(1.0, 1.0), complex(-1.0, -1.0)))
        with self.assertRaises(PreconditionError):
            executor.render(fractal, coloring, self.settings, self.dims,
                            Viewport(complex(-1.0, -1.0), complex(1.0, 1.0)))
        with self.assertRaises(PreconditionError):
            executor.render(fractal, coloring, self.settings, RasterDimensions(0, 10),
                            self.viewport)
        with self.assertRaises(PreconditionError):
            executor.render(fractal, coloring, RenderSettings(max_iter=0), self.dims,
                            self.viewport)
        with self.assertRaises(PreconditionError):
            RenderExecutor(workers=0)



class TestOcticPreset(unittest.TestCase):

    def setUp(self):
        self.dims = RasterDimensions(60, 60)
        self.viewport = Viewport(complex(-1.5, 1.5), complex(1.5, -1.5))
        self.settings = RenderSettings(max_iter=255)
        self.fractal = NewtonFractal.octic()
        self.out = RenderExecutor(workers=7).render(
            self.fractal, self.fractal.default_coloring(), self.settings,
            self.dims, self.viewport)

    def pixel(self, column, row):
        return tuple(int(v) for v in self.out[row, column])

    def steps_to_converge(self, column, row):
        c = pixel_to_point(self.dims, (column, row),
                           self.viewport.upper_left, self.viewport.lower_right)
        remaining, _ = newton_iterate(c, 8, 255, self.settings.epsilon)
        self.assertGreater(remaining, 0)
        return 255 - remaining

    def test_preset(self):
        self.assertEqual((self.fractal.order, self.fractal.offset), (8, -1.0))
        self.assertEqual(self.fractal.policy, DiscriminantPolicy.OCTANT)
        self.assertEqual(self.out.shape, (60, 60, 3))

    def test_first_quadrant_root_is_red(self):
        # 0.7+0.7i converges to e^(i pi/4)
        i = int(convergence_intensity(self.steps_to_converge(44, 16)))
        self.assertEqual(self.pixel(44, 16), (i, 0, 0))

    def test_roots_on_the_axes(self):
        # pixels (50, 30), (30, 50) and (30, 10) sit exactly on 1, -i and i
        self.assertEqual(self.pixel(50, 30), (255, 127, 0))
        self.assertEqual(self.pixel(30, 50), (0, 255, 0))
        self.assertEqual(self.pixel(30, 10), (255, 0, 255))

    def test_origin_does_not_converge(self):
        self.assertEqual(self.pixel(30, 30), (0, 0, 0))

if __name__ == "__main__":
    unittest.main()
