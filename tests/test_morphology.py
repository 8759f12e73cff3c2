"""
Tests for binary erosion, dilation, opening and closing.
"""
import unittest
import numpy as np

from rasterlab.raster import RasterBuffer
from rasterlab.morphology import MorphologyConfig, MorphologyEngine, StructuringElement


class TestErodeDilate(unittest.TestCase):

    def setUp(self):
        self.engine = MorphologyEngine()
        # 20x20 dark square (rows/cols 5..24) on a bright 30x30 raster
        square = np.full((30, 30), 255, dtype=np.uint8)
        square[5:25, 5:25] = 0
        self.square = RasterBuffer(square)

        dot = np.full((30, 30), 255, dtype=np.uint8)
        dot[15, 15] = 0
        self.dot = RasterBuffer(dot)

    def test_erosion_shrinks_by_element_offset(self):
        """A pixel stays foreground only if its whole 7x7 window is 0."""
        eroded = self.engine.erode(self.square)
        self.assertEqual(eroded.at(15, 15), 0)
        self.assertEqual(eroded.at(8, 8), 0)
        self.assertEqual(eroded.at(21, 21), 0)
        self.assertEqual(eroded.at(7, 7), 255)
        self.assertEqual(eroded.at(22, 22), 255)
        self.assertEqual(eroded.at(15, 6), 255)

    def test_dilation_grows_by_element_offset(self):
        dilated = self.engine.dilate(self.dot)
        self.assertEqual(dilated.at(12, 12), 0)
        self.assertEqual(dilated.at(18, 18), 0)
        self.assertEqual(dilated.at(15, 11), 255)
        self.assertEqual(dilated.at(19, 15), 255)

    def test_border_is_zero_by_default(self):
        for result in (self.engine.erode(self.square), self.engine.dilate(self.dot)):
            self.assertEqual(result.at(0, 0), 0)
            self.assertEqual(result.at(2, 15), 0)
            self.assertEqual(result.at(15, 27), 0)
            self.assertEqual(result.at(3, 3), 255)

    def test_configurable_border_value(self):
        engine = MorphologyEngine(MorphologyConfig(border_value=255))
        result = engine.dilate(self.dot)
        self.assertEqual(result.at(0, 0), 255)
        self.assertEqual(result.at(15, 15), 0)

    def test_raster_smaller_than_element_is_all_border(self):
        tiny = RasterBuffer(np.full((5, 5), 255, dtype=np.uint8))
        self.assertEqual(int(self.engine.erode(tiny).pixels.max()), 0)
        self.assertEqual(int(self.engine.dilate(tiny).pixels.max()), 0)

    def test_output_is_binary_and_source_untouched(self):
        before = self.square.pixels.copy()
        result = self.engine.erode(self.square)
        self.assertTrue(set(np.unique(result.pixels).tolist()) <= {0, 255})
        self.assertTrue(np.array_equal(before, self.square.pixels))


class TestComposition(unittest.TestCase):

    def setUp(self):
        self.engine = MorphologyEngine(MorphologyConfig(border_value=255))
        raster = np.full((60, 60), 255, dtype=np.uint8)
        raster[10:40, 12:45] = 0
        raster[48:52, 5:9] = 0
        self.raster = RasterBuffer(raster)

    def test_open_is_two_erosions_then_three_dilations(self):
        e = self.engine
        expected = e.dilate(e.dilate(e.dilate(e.erode(e.erode(self.raster)))))
        self.assertTrue(np.array_equal(e.open(self.raster).pixels, expected.pixels))

    def test_close_is_three_dilations_then_three_erosions(self):
        e = self.engine
        expected = e.erode(e.erode(e.erode(e.dilate(e.dilate(e.dilate(self.raster))))))
        self.assertTrue(np.array_equal(e.close(self.raster).pixels, expected.pixels))

    def test_clean_is_close_of_open(self):
        e = self.engine
        expected = e.close(e.open(self.raster))
        self.assertTrue(np.array_equal(e.clean(self.raster).pixels, expected.pixels))

    def test_opening_removes_small_blob(self):
        opened = self.engine.open(self.raster)
        self.assertEqual(opened.at(6, 49), 255)
        self.assertEqual(opened.at(28, 25), 0)


class TestStructuringElement(unittest.TestCase):

    def test_default_is_seven_by_seven(self):
        element = StructuringElement()
        self.assertEqual(element.offset, 3)
        self.assertEqual(element.footprint.shape, (7, 7))
        self.assertTrue(element.footprint.all())

    def test_even_size_rejected(self):
        with self.assertRaises(ValueError):
            StructuringElement(size=4)


if __name__ == '__main__':
    unittest.main()
