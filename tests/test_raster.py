"""
Tests for the raster data model.
"""
import unittest
import numpy as np

from rasterlab.raster import RasterBuffer, histogram


class TestRasterBuffer(unittest.TestCase):

    def setUp(self):
        rng = np.random.default_rng(7)
        self.pixels = rng.integers(0, 256, size=(6, 9), dtype=np.uint8)
        self.buffer = RasterBuffer(self.pixels)

    def test_dimensions(self):
        """Width is the column count, height the row count."""
        self.assertEqual(self.buffer.width, 9)
        self.assertEqual(self.buffer.height, 6)
        self.assertEqual(self.buffer.shape, (6, 9))
        self.assertEqual(self.buffer.size, 54)

    def test_at_uses_x_y_order(self):
        self.assertEqual(self.buffer.at(4, 2), int(self.pixels[2, 4]))

    def test_rejects_non_uint8(self):
        with self.assertRaises(ValueError):
            RasterBuffer(np.zeros((3, 3), dtype=np.float32))

    def test_rejects_colour_array(self):
        with self.assertRaises(ValueError):
            RasterBuffer(np.zeros((3, 3, 3), dtype=np.uint8))

    def test_blank_and_like_are_zeroed(self):
        blank = RasterBuffer.blank(width=5, height=2)
        self.assertEqual(blank.shape, (2, 5))
        self.assertEqual(int(blank.pixels.sum()), 0)

        like = RasterBuffer.like(self.buffer)
        self.assertTrue(like.same_shape(self.buffer))
        self.assertEqual(int(like.pixels.sum()), 0)

    def test_empty_raster_is_legal(self):
        empty = RasterBuffer.blank(0, 0)
        self.assertEqual(empty.size, 0)
        self.assertEqual(int(histogram(empty).sum()), 0)


class TestHistogram(unittest.TestCase):

    def test_counts_sum_to_pixel_total(self):
        """Histogram has 256 bins summing to width * height."""
        rng = np.random.default_rng(3)
        buffer = RasterBuffer(rng.integers(0, 256, size=(17, 23), dtype=np.uint8))
        counts = histogram(buffer)
        self.assertEqual(counts.shape, (256,))
        self.assertEqual(int(counts.sum()), 17 * 23)

    def test_counts_per_intensity(self):
        buffer = RasterBuffer(np.array([[0, 0, 255], [7, 7, 7]], dtype=np.uint8))
        counts = histogram(buffer)
        self.assertEqual(counts[0], 2)
        self.assertEqual(counts[7], 3)
        self.assertEqual(counts[255], 1)


if __name__ == '__main__':
    unittest.main()
