"""
Analysis Pipeline

Runs every stage against one source image:

    gradient ("canny") -> Otsu -> Laplacian ("marr_hildreth") -> object count
    (on Otsu) -> percentile ("watershed") -> chain code (on Otsu) -> box
    filters -> intensity quantization

Stages only read their input and allocate fresh outputs, so all of them
except object counting and chain tracing (which wait for Otsu) may run on
a thread pool against the same source buffer.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
import logging
from pathlib import Path
import time
from typing import Any, Callable, Dict, List, Optional, Union
import numpy as np

from ..raster import RasterBuffer
from ..filters import BoxFilterEngine
from ..edges import EdgeConfig, EdgeMethod, EdgeResult, GradientEdgeDetector, LaplacianEdgeDetector
from ..threshold import ThresholdConfig, ThresholdResult, OtsuThresholder, PercentileThresholder
from ..segmentation import (
    ChainCode,
    ComponentConfig,
    ComponentResult,
    ConnectedComponentCounter,
    ContourTracer,
    IntensityQuantizer
)
from ..io import RasterIO
from .config import PipelineConfig

logger = logging.getLogger(__name__)

OUTPUT_NAMES = {
    'gradient': "canny.png",
    'otsu': "otsu.png",
    'laplacian': "marr_hildreth.png",
    'percentile': "watershed.png",
    'chain': "freeman_chain.txt",
    'quantized': "segmented.png",
}


def box_output_name(size: int) -> str:
    """File name of the box-filter output for window `size`."""
    return f"filtered_{size}x{size}.png"


# ============================================================================
# Results
# ============================================================================

@dataclass
class PipelineResult:
    """
    Everything produced from one source image.

    Attributes:
        gradient: Sobel magnitude map
        otsu: Otsu binarization (0 = object)
        laplacian: Laplacian response map
        percentile: Percentile ("watershed") binarization
        objects: Object count on the Otsu output
        chain: Freeman chain code of the first Otsu object
        box: Box-filtered rasters keyed by window size
        quantized: Five-bucket intensity map
        source: Path of the source image, if loaded from disk
        timings: Seconds spent per stage
        outputs: Files written by AnalysisPipeline.save()
    """
    gradient: EdgeResult
    otsu: ThresholdResult
    laplacian: EdgeResult
    percentile: ThresholdResult
    objects: ComponentResult
    chain: ChainCode
    box: Dict[int, RasterBuffer]
    quantized: RasterBuffer
    source: Optional[Path] = None
    timings: Dict[str, float] = field(default_factory=dict)
    outputs: List[Path] = field(default_factory=list)

    @property
    def width(self) -> int:
        return self.otsu.binary.width

    @property
    def height(self) -> int:
        return self.otsu.binary.height

    def rasters(self) -> Dict[str, RasterBuffer]:
        """Output file name -> raster, in write order."""
        rasters = {
            OUTPUT_NAMES['gradient']: self.gradient.edges,
            OUTPUT_NAMES['otsu']: self.otsu.binary,
            OUTPUT_NAMES['laplacian']: self.laplacian.edges,
            OUTPUT_NAMES['percentile']: self.percentile.binary,
        }
        for size, buffer in self.box.items():
            rasters[box_output_name(size)] = buffer
        rasters[OUTPUT_NAMES['quantized']] = self.quantized
        return rasters

    def to_summary(self, config: PipelineConfig) -> Dict[str, Any]:
        """JSON-serializable description of the run."""
        return {
            "source": str(self.source) if self.source is not None else None,
            "width": self.width,
            "height": self.height,
            "otsu_threshold": self.otsu.threshold,
            "percentile_threshold": self.percentile.threshold,
            "background_fraction": config.background_fraction,
            "laplacian": self.laplacian.kernel_name,
            "object_count": self.objects.count,
            "object_areas": [int(a) for a in self.objects.areas],
            "discarded_objects": self.objects.discarded,
            "chain_code_length": len(self.chain),
            "chain_found": self.chain.found,
            "outputs": [str(p) for p in self.outputs],
            "timings": {name: round(t, 6) for name, t in self.timings.items()},
            "created": datetime.now().isoformat()
        }


# ============================================================================
# Pipeline
# ============================================================================

class AnalysisPipeline:
    """
    Batch analysis of a single raster.

    Example:
        >>> pipeline = AnalysisPipeline(PipelineConfig(output_dir="out", max_workers=4))
        >>> result = pipeline.run("photo.jpg")
        >>> print(result.objects.count, str(result.chain)[:20])
        >>> print(result.outputs)  # written files
    """

    def __init__(self, config: Optional[PipelineConfig] = None, io: Optional[RasterIO] = None):
        """
        Initialize pipeline.

        Args:
            config: Pipeline configuration. If None, uses defaults.
            io: Image/text persistence. If None, uses RasterIO().
        """
        self.config = config or PipelineConfig()
        self.io = io or RasterIO()

        self.gradient_detector = GradientEdgeDetector()
        self.laplacian_detector = LaplacianEdgeDetector(
            EdgeConfig(method=EdgeMethod.LAPLACIAN, laplacian=self.config.laplacian)
        )
        self.otsu = OtsuThresholder()
        self.percentile = PercentileThresholder(
            ThresholdConfig(background_fraction=self.config.background_fraction)
        )
        self.counter = ConnectedComponentCounter(
            ComponentConfig(min_area=self.config.min_object_area)
        )
        self.tracer = ContourTracer()
        self.box_filter = BoxFilterEngine()
        self.quantizer = IntensityQuantizer()

    def _timed(self, timings: Dict[str, float], name: str, fn: Callable, *args):
        start_time = time.time()
        value = fn(*args)
        timings[name] = time.time() - start_time
        return value

    def analyze(
        self,
        gray: RasterBuffer,
        samples: Union[np.ndarray, RasterBuffer, None] = None
    ) -> PipelineResult:
        """
        Run every stage in memory.

        Args:
            gray: Grayscale source raster (only read, never modified)
            samples: Colour samples for the box filter; defaults to `gray`

        Returns:
            result: PipelineResult with every stage output
        """
        if samples is None:
            samples = gray

        if self.config.max_workers > 1:
            return self._analyze_parallel(gray, samples)
        return self._analyze_sequential(gray, samples)

    def _analyze_sequential(self, gray, samples) -> PipelineResult:
        timings: Dict[str, float] = {}

        logger.info("Applying gradient (canny)...")
        gradient = self._timed(timings, 'gradient', self.gradient_detector.detect, gray)

        logger.info("Applying Otsu...")
        otsu = self._timed(timings, 'otsu', self.otsu.threshold, gray)

        logger.info("Applying Marr-Hildreth...")
        laplacian = self._timed(timings, 'laplacian', self.laplacian_detector.detect, gray)

        objects = self._timed(timings, 'objects', self.counter.count, otsu.binary)
        logger.info("Objects in image: %d", objects.count)

        logger.info("Applying watershed...")
        percentile = self._timed(timings, 'percentile', self.percentile.threshold, gray)

        chain = self._timed(timings, 'chain', self.tracer.trace, otsu.binary)

        box = {}
        for size in self.config.box_sizes:
            box[size] = self._timed(timings, f'box_{size}', self.box_filter.filter, samples, size)

        logger.info("Applying intensity segmentation...")
        quantized = self._timed(timings, 'quantized', self.quantizer.quantize, gray)

        return PipelineResult(
            gradient=gradient,
            otsu=otsu,
            laplacian=laplacian,
            percentile=percentile,
            objects=objects,
            chain=chain,
            box=box,
            quantized=quantized,
            source=gray.path,
            timings=timings
        )

    def _analyze_parallel(self, gray, samples) -> PipelineResult:
        timings: Dict[str, float] = {}
        logger.info("Running independent stages on %d threads...", self.config.max_workers)

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            submit = lambda name, fn, *args: executor.submit(self._timed, timings, name, fn, *args)

            gradient_f = submit('gradient', self.gradient_detector.detect, gray)
            otsu_f = submit('otsu', self.otsu.threshold, gray)
            laplacian_f = submit('laplacian', self.laplacian_detector.detect, gray)
            percentile_f = submit('percentile', self.percentile.threshold, gray)
            box_f = {
                size: submit(f'box_{size}', self.box_filter.filter, samples, size)
                for size in self.config.box_sizes
            }
            quantized_f = submit('quantized', self.quantizer.quantize, gray)

            otsu = otsu_f.result()
            objects_f = submit('objects', self.counter.count, otsu.binary)
            chain_f = submit('chain', self.tracer.trace, otsu.binary)

            result = PipelineResult(
                gradient=gradient_f.result(),
                otsu=otsu,
                laplacian=laplacian_f.result(),
                percentile=percentile_f.result(),
                objects=objects_f.result(),
                chain=chain_f.result(),
                box={size: future.result() for size, future in box_f.items()},
                quantized=quantized_f.result(),
                source=gray.path,
                timings=timings
            )

        logger.info("Objects in image: %d", result.objects.count)
        return result

    def save(self, result: PipelineResult) -> List[Path]:
        """
        Write every output into config.output_dir.

        Args:
            result: Output of analyze()

        Returns:
            written: Paths written, also stored in result.outputs

        Raises:
            OSError: On the first file that cannot be written
        """
        output_dir = self.config.output_dir
        written = []

        for name, buffer in result.rasters().items():
            written.append(self.io.save_raster(buffer, output_dir / name))

        written.append(self.io.save_text(str(result.chain), output_dir / OUTPUT_NAMES['chain']))
        logger.info("Chain code saved to %s", OUTPUT_NAMES['chain'])

        result.outputs = list(written)
        if self.config.write_summary:
            summary_path = output_dir / self.config.summary_name
            result.outputs.append(self.io.save_json(result.to_summary(self.config), summary_path))

        logger.info("Processing finished, %d files written to %s", len(result.outputs), output_dir)
        return result.outputs

    def run(self, path: Union[str, Path]) -> PipelineResult:
        """
        Load `path`, analyze it and save every output.

        Raises:
            FileNotFoundError: If the source image does not exist
            OSError: If decoding or any write fails
        """
        image = self.io.load(path)
        logger.info("Loaded %s", image.gray)
        result = self.analyze(image.gray, image.samples)
        self.save(result)
        return result
