"""
Tests for the analysis pipeline, image I/O and the command-line driver.
"""
import json
import tempfile
import unittest
from pathlib import Path

import numpy as np
from PIL import Image

from rasterlab.cli import main
from rasterlab.io import RasterIO
from rasterlab.pipeline import AnalysisPipeline, PipelineConfig, OUTPUT_NAMES, box_output_name
from rasterlab.raster import RasterBuffer


def dark_square_image() -> np.ndarray:
    """64x64 bright (220) raster with a 20x20 dark (30) square at rows/cols 22..41."""
    pixels = np.full((64, 64), 220, dtype=np.uint8)
    pixels[22:42, 22:42] = 30
    return pixels


class TestAnalysisPipeline(unittest.TestCase):

    def setUp(self):
        self.pixels = dark_square_image()
        self.gray = RasterBuffer(self.pixels.copy())
        self.samples = np.dstack([self.pixels] * 3)

    def test_every_output_has_source_dimensions(self):
        result = AnalysisPipeline().analyze(self.gray, self.samples)
        for name, raster in result.rasters().items():
            self.assertEqual(raster.shape, (64, 64), name)
        self.assertEqual(sorted(result.box), [2, 3, 5, 7])

    def test_stage_results(self):
        result = AnalysisPipeline().analyze(self.gray, self.samples)
        self.assertEqual(result.otsu.threshold, 30)
        self.assertEqual(result.percentile.threshold, 220)
        self.assertEqual(result.objects.count, 1)
        self.assertEqual(result.objects.areas, [24 * 24])
        self.assertEqual(result.chain.start, (22, 22))
        self.assertTrue(str(result.chain).isdigit())
        self.assertEqual(result.quantized.at(0, 0), 255)
        self.assertEqual(result.quantized.at(30, 30), 25)

    def test_source_is_never_modified(self):
        AnalysisPipeline(PipelineConfig(max_workers=3)).analyze(self.gray, self.samples)
        self.assertTrue(np.array_equal(self.gray.pixels, self.pixels))

    def test_threaded_run_matches_sequential(self):
        sequential = AnalysisPipeline().analyze(self.gray, self.samples)
        threaded = AnalysisPipeline(PipelineConfig(max_workers=4)).analyze(self.gray, self.samples)

        for name, raster in sequential.rasters().items():
            self.assertTrue(np.array_equal(raster.pixels, threaded.rasters()[name].pixels), name)
        self.assertEqual(sequential.objects.count, threaded.objects.count)
        self.assertEqual(str(sequential.chain), str(threaded.chain))
        self.assertIn('objects', threaded.timings)

    def test_samples_default_to_gray(self):
        result = AnalysisPipeline().analyze(self.gray)
        self.assertEqual(result.box[2].shape, (64, 64))

    def test_config_validation(self):
        with self.assertRaises(ValueError):
            PipelineConfig(background_fraction=1.5)
        with self.assertRaises(ValueError):
            PipelineConfig(box_sizes=(3, 0))
        with self.assertRaises(ValueError):
            PipelineConfig(box_sizes=(3, 5, 3))
        with self.assertRaises(ValueError):
            PipelineConfig(max_workers=0)
        self.assertIsInstance(PipelineConfig(output_dir="out").output_dir, Path)


class TestPipelineFiles(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.input_path = self.root / "input.png"
        Image.fromarray(dark_square_image()).save(self.input_path)
        self.out_dir = self.root / "out"

    def test_run_writes_every_output(self):
        pipeline = AnalysisPipeline(PipelineConfig(output_dir=self.out_dir))
        result = pipeline.run(self.input_path)

        expected = [
            OUTPUT_NAMES['gradient'], OUTPUT_NAMES['otsu'], OUTPUT_NAMES['laplacian'],
            OUTPUT_NAMES['percentile'], OUTPUT_NAMES['quantized'], OUTPUT_NAMES['chain'],
            "summary.json"
        ] + [box_output_name(size) for size in (2, 3, 5, 7)]
        for name in expected:
            self.assertTrue((self.out_dir / name).exists(), name)
        self.assertEqual(len(result.outputs), len(expected))

        chain_text = (self.out_dir / "freeman_chain.txt").read_text(encoding="utf-8")
        self.assertEqual(chain_text, str(result.chain))

        written = np.array(Image.open(self.out_dir / "otsu.png"))
        self.assertTrue(np.array_equal(written, result.otsu.binary.pixels))

        with open(self.out_dir / "summary.json") as f:
            summary = json.load(f)
        self.assertEqual(summary["object_count"], 1)
        self.assertEqual(summary["width"], 64)
        self.assertEqual(summary["otsu_threshold"], 30)
        self.assertEqual(summary["laplacian"], "laplacian_weak")

    def test_summary_can_be_disabled(self):
        config = PipelineConfig(output_dir=self.out_dir, write_summary=False)
        AnalysisPipeline(config).run(self.input_path)
        self.assertFalse((self.out_dir / "summary.json").exists())
        self.assertTrue((self.out_dir / "canny.png").exists())

    def test_missing_input_is_fatal(self):
        with self.assertRaises(FileNotFoundError):
            AnalysisPipeline(PipelineConfig(output_dir=self.out_dir)).run(self.root / "nope.png")

    def test_undecodable_input_is_fatal(self):
        bogus = self.root / "bogus.png"
        bogus.write_text("not an image")
        with self.assertRaises(OSError):
            RasterIO().load(bogus)

    def test_colour_input_keeps_rgb_samples(self):
        rgb = np.zeros((8, 8, 3), dtype=np.uint8)
        rgb[..., 0] = 120
        rgb[..., 2] = 250
        path = self.root / "colour.png"
        Image.fromarray(rgb).save(path)

        image = RasterIO().load(path)
        self.assertEqual(image.samples.shape, (8, 8, 3))
        self.assertEqual(image.gray.shape, (8, 8))
        self.assertEqual(image.gray.path, path)

        result = AnalysisPipeline().analyze(image.gray, image.samples)
        self.assertTrue(np.all(result.box[5].pixels == 120))

    def test_sixteen_bit_input_keeps_high_byte(self):
        """A 16-bit ramp must load as an 8-bit ramp, not a 0/255 image."""
        ramp = (np.arange(256, dtype=np.uint16) * 257).reshape(16, 16)
        path = self.root / "ramp16.png"
        Image.fromarray(ramp).save(path)

        image = RasterIO().load(path)
        expected = np.arange(256, dtype=np.uint8).reshape(16, 16)
        self.assertEqual(len(np.unique(image.gray.pixels)), 256)
        self.assertTrue(np.array_equal(image.gray.pixels, expected))
        for channel in range(3):
            self.assertTrue(np.array_equal(image.samples[..., channel], expected))

    def test_transparent_pixels_load_as_black(self):
        rgba = np.full((4, 6, 4), 255, dtype=np.uint8)
        rgba[:, :3, 3] = 0
        path = self.root / "alpha.png"
        Image.fromarray(rgba).save(path)

        image = RasterIO().load(path)
        self.assertTrue(np.all(image.gray.pixels[:, :3] == 0))
        self.assertTrue(np.all(image.gray.pixels[:, 3:] == 255))
        self.assertTrue(np.all(image.samples[:, :3] == 0))

    def test_unwritable_destination_names_the_path(self):
        blocker = self.root / "not_a_directory"
        blocker.write_text("occupied")
        pipeline = AnalysisPipeline(PipelineConfig(output_dir=blocker))

        with self.assertRaises(OSError) as ctx:
            pipeline.run(self.input_path)
        self.assertIn(str(blocker), str(ctx.exception))

    def test_failed_summary_write_is_not_listed(self):
        self.out_dir.mkdir()
        (self.out_dir / "summary.json").mkdir()
        pipeline = AnalysisPipeline(PipelineConfig(output_dir=self.out_dir))
        result = pipeline.analyze(pipeline.io.load(self.input_path).gray)

        with self.assertRaises(OSError):
            pipeline.save(result)
        self.assertNotIn(self.out_dir / "summary.json", result.outputs)
        self.assertEqual(len(result.outputs), 10)


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.input_path = self.root / "input.png"
        Image.fromarray(dark_square_image()).save(self.input_path)

    def test_successful_run(self):
        out = self.root / "cli_out"
        code = main([str(self.input_path), "--out", str(out), "--laplacian", "standard",
                     "--workers", "2"])
        self.assertEqual(code, 0)
        self.assertTrue((out / "marr_hildreth.png").exists())

    def test_missing_input_exits_with_error(self):
        self.assertEqual(main([str(self.root / "missing.png"), "--out", str(self.root)]), 1)

    def test_invalid_fraction_exits_with_error(self):
        code = main([str(self.input_path), "--out", str(self.root),
                     "--background-fraction", "1.5"])
        self.assertEqual(code, 1)


if __name__ == '__main__':
    unittest.main()
