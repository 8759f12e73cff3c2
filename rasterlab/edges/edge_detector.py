"""
Edge Detection for Grayscale Rasters.

Two detectors share the convolution machinery:
1. Gradient: Sobel gradient magnitude, clamped to 255. Written out as the
   "canny" map, but there is no non-maximum suppression and no hysteresis;
   the output is a magnitude map, not a binary edge map.
2. Laplacian: a single 3x3 second-derivative kernel (Marr-Hildreth map),
   with either the -1 or the -4 centre weight.

Both leave a 1-pixel border at 0.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import numpy as np

from ..raster import RasterBuffer
from ..filters import (
    ConvolutionEngine,
    Kernel,
    correlate_interior,
    clamp_to_uint8,
    SOBEL_X,
    SOBEL_Y,
    LAPLACIAN_WEAK,
    LAPLACIAN_STANDARD
)


# ============================================================================
# Enums
# ============================================================================

class EdgeMethod(Enum):
    """Available edge detectors."""
    GRADIENT = "gradient"
    LAPLACIAN = "laplacian"


class LaplacianVariant(Enum):
    """Centre weight of the Laplacian kernel."""
    WEAK = "weak"          # centre -1
    STANDARD = "standard"  # centre -4

    @property
    def kernel(self) -> Kernel:
        if self is LaplacianVariant.STANDARD:
            return LAPLACIAN_STANDARD
        return LAPLACIAN_WEAK


# ============================================================================
# Configuration
# ============================================================================

@dataclass
class EdgeConfig:
    """
    Configuration for edge detection.

    Attributes:
        method: Detector to build (default: GRADIENT)
        laplacian: Laplacian kernel variant (default: WEAK)
        laplacian_kernel: Explicit kernel; overrides `laplacian` when set
    """
    method: EdgeMethod = EdgeMethod.GRADIENT
    laplacian: LaplacianVariant = LaplacianVariant.WEAK
    laplacian_kernel: Optional[Kernel] = None

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.laplacian, str):
            self.laplacian = LaplacianVariant(self.laplacian)

    @property
    def resolved_laplacian(self) -> Kernel:
        """Kernel the Laplacian detector will run."""
        return self.laplacian_kernel or self.laplacian.kernel


# ============================================================================
# Results
# ============================================================================

@dataclass
class EdgeResult:
    """
    Results from edge detection.

    Attributes:
        edges: Edge strength raster, same dimensions as the input
        method: Detector that produced it
        kernel_name: Kernel used (Laplacian) or "sobel" (gradient)
    """
    edges: RasterBuffer
    method: EdgeMethod
    kernel_name: str = "sobel"

    def get_edge_pixel_count(self) -> int:
        """Get number of non-zero pixels."""
        return int((self.edges.pixels > 0).sum())

    def get_edge_ratio(self) -> float:
        """Get ratio of non-zero pixels to total pixels."""
        total = self.edges.size
        return self.get_edge_pixel_count() / total if total > 0 else 0.0

    def __str__(self) -> str:
        """String representation of results."""
        edge_pct = self.get_edge_ratio() * 100
        return (
            f"EdgeResult(method={self.method.value}, kernel={self.kernel_name}, "
            f"edges={self.get_edge_pixel_count()} pixels, {edge_pct:.2f}% of image)"
        )


# ============================================================================
# Abstract Base Class (Interface)
# ============================================================================

class BaseEdgeDetector(ABC):
    """Common interface for the gradient and Laplacian detectors."""

    def __init__(self, config: Optional[EdgeConfig] = None):
        """
        Initialize edge detector.

        Args:
            config: Configuration for edge detection. If None, uses defaults.
        """
        self.config = config or EdgeConfig()

    @abstractmethod
    def detect(self, buffer: RasterBuffer) -> EdgeResult:
        """
        Compute the edge map of `buffer`.

        Args:
            buffer: Grayscale source raster (not modified)

        Returns:
            result: EdgeResult with a new raster of identical dimensions
        """
        pass


# ============================================================================
# Detectors
# ============================================================================

class GradientEdgeDetector(BaseEdgeDetector):
    """
    Sobel gradient magnitude.

    For every interior pixel gx and gy are raw weighted sums (normalizer 1)
    and the output is min(255, sqrt(gx^2 + gy^2)) truncated to 8 bits.

    Example:
        >>> detector = GradientEdgeDetector()
        >>> result = detector.detect(buffer)
        >>> gradient = result.edges
    """

    def detect(self, buffer: RasterBuffer) -> EdgeResult:
        result = RasterBuffer.like(buffer)

        gx = correlate_interior(buffer.pixels, SOBEL_X.weights)
        gy = correlate_interior(buffer.pixels, SOBEL_Y.weights)
        if gx is not None:
            magnitude = np.sqrt(gx * gx + gy * gy)
            result.pixels[1:buffer.height - 1, 1:buffer.width - 1] = clamp_to_uint8(magnitude)

        return EdgeResult(edges=result, method=EdgeMethod.GRADIENT, kernel_name="sobel")


class LaplacianEdgeDetector(BaseEdgeDetector):
    """
    Laplacian (Marr-Hildreth) response through the convolution engine.

    Negative responses clamp to 0, so only one side of each zero crossing
    shows up in the output.

    Example:
        >>> config = EdgeConfig(method=EdgeMethod.LAPLACIAN,
        ...                     laplacian=LaplacianVariant.STANDARD)
        >>> result = LaplacianEdgeDetector(config).detect(buffer)
    """

    def __init__(self, config: Optional[EdgeConfig] = None):
        super().__init__(config)
        self._engine = ConvolutionEngine()

    def detect(self, buffer: RasterBuffer) -> EdgeResult:
        kernel = self.config.resolved_laplacian
        edges = self._engine.convolve(buffer, kernel, normalizer=1)
        return EdgeResult(edges=edges, method=EdgeMethod.LAPLACIAN, kernel_name=kernel.name)


# ============================================================================
# Factory Function
# ============================================================================

def create_edge_detector(config: EdgeConfig) -> BaseEdgeDetector:
    """
    Factory function to create an edge detector.

    Args:
        config: Edge detection configuration

    Returns:
        detector: GradientEdgeDetector or LaplacianEdgeDetector

    Raises:
        ValueError: If method is unknown

    Example:
        >>> detector = create_edge_detector(EdgeConfig(method=EdgeMethod.LAPLACIAN))
        >>> result = detector.detect(buffer)
    """
    if config.method == EdgeMethod.GRADIENT:
        return GradientEdgeDetector(config)
    elif config.method == EdgeMethod.LAPLACIAN:
        return LaplacianEdgeDetector(config)
    else:
        raise ValueError(f"Unknown edge method: {config.method}")
