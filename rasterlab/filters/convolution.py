"""
Convolution Engine

Square-kernel filtering over 8-bit rasters with the "unprocessed border"
policy: samples closer than kernel_side // 2 to any edge are left at the
zero value of the freshly allocated output, never copied from the source.

Kernel orientation: weights[i][j] multiplies the sample at column offset
i - r and row offset j - r (r = side // 2). The first kernel index runs
along x.
"""

from dataclasses import dataclass
from typing import Optional
import numpy as np

from ..raster import RasterBuffer


# ============================================================================
# Kernels
# ============================================================================

@dataclass
class Kernel:
    """
    Square weight matrix plus normalization divisor.

    Attributes:
        weights: Square 2D array of real weights, weights[i][j] applies to
                 column offset i, row offset j (relative to the centre)
        normalizer: Divisor applied to the weighted sum (default: 1.0)
        name: Label used in logs and results
    """
    weights: np.ndarray
    normalizer: float = 1.0
    name: str = "custom"

    def __post_init__(self):
        """Validate kernel shape and divisor."""
        weights = np.asarray(self.weights, dtype=np.float64)
        if weights.ndim != 2 or weights.shape[0] != weights.shape[1]:
            raise ValueError(f"Kernel must be a square 2D matrix, got shape {weights.shape}")
        if not np.all(np.isfinite(weights)):
            raise ValueError("Kernel weights must be finite")
        if self.normalizer == 0 or not np.isfinite(self.normalizer):
            raise ValueError(f"normalizer must be finite and non-zero, got {self.normalizer}")
        self.weights = weights

    @property
    def side(self) -> int:
        return int(self.weights.shape[0])

    @property
    def radius(self) -> int:
        """Offset from the centre to the kernel edge."""
        return self.side // 2


SOBEL_X = Kernel(
    weights=np.array([
        [-1, 0, 1],
        [-2, 0, 2],
        [-1, 0, 1],
    ]),
    name="sobel_x"
)

SOBEL_Y = Kernel(
    weights=np.array([
        [-1, -2, -1],
        [0, 0, 0],
        [1, 2, 1],
    ]),
    name="sobel_y"
)

# Centre weight -1: variant written to marr_hildreth.png by the batch driver.
LAPLACIAN_WEAK = Kernel(
    weights=np.array([
        [0, 1, 0],
        [1, -1, 1],
        [0, 1, 0],
    ]),
    name="laplacian_weak"
)

# Centre weight -4: the discrete 4-neighbour Laplacian.
LAPLACIAN_STANDARD = Kernel(
    weights=np.array([
        [0, 1, 0],
        [1, -4, 1],
        [0, 1, 0],
    ]),
    name="laplacian_standard"
)


# ============================================================================
# Helper Functions
# ============================================================================

def correlate_interior(pixels: np.ndarray, weights: np.ndarray) -> Optional[np.ndarray]:
    """
    Weighted sums over every sample whose full kernel window fits the image.

    Sums are accumulated in float64 starting at 0.0, x-offset outer and
    y-offset inner, so every pixel sees the same addition order.

    Args:
        pixels: Source samples, shape (H, W)
        weights: Square kernel, weights[i][j] at column offset i, row offset j

    Returns:
        sums: Array of shape (H - 2r, W - 2r), or None when the kernel side
              is even or does not fit inside the image
    """
    side = weights.shape[0]
    h, w = pixels.shape
    if side % 2 == 0 or side > h or side > w:
        return None

    out_h = h - side + 1
    out_w = w - side + 1
    samples = pixels.astype(np.float64)
    sums = np.zeros((out_h, out_w), dtype=np.float64)

    for i in range(side):
        for j in range(side):
            weight = weights[i, j]
            if weight == 0:
                continue
            sums += samples[j:j + out_h, i:i + out_w] * weight

    return sums


def clamp_to_uint8(values: np.ndarray) -> np.ndarray:
    """Clamp to [0, 255] and truncate toward zero."""
    return np.clip(values, 0, 255).astype(np.uint8)


# ============================================================================
# Convolution Engine
# ============================================================================

class ConvolutionEngine:
    """
    Apply an arbitrary square kernel to a raster.

    Example:
        >>> engine = ConvolutionEngine()
        >>> box = Kernel(np.ones((3, 3)), normalizer=9, name="mean3")
        >>> smoothed = engine.convolve(buffer, box)
        >>> smoothed.at(0, 0)  # border is never processed
        0
    """

    def convolve(
        self,
        buffer: RasterBuffer,
        kernel: Kernel,
        normalizer: Optional[float] = None
    ) -> RasterBuffer:
        """
        Convolve the interior of `buffer` with `kernel`.

        Args:
            buffer: Source raster (not modified)
            kernel: Square kernel
            normalizer: Overrides kernel.normalizer when given

        Returns:
            result: New raster, same dimensions; border of width
                    kernel.radius stays 0. Even or oversized kernels give an
                    all-zero raster.

        Raises:
            ValueError: If the normalizer override is zero
        """
        divisor = kernel.normalizer if normalizer is None else normalizer
        if divisor == 0:
            raise ValueError("normalizer must be non-zero")

        result = RasterBuffer.like(buffer)
        sums = correlate_interior(buffer.pixels, kernel.weights)
        if sums is None:
            return result

        r = kernel.radius
        result.pixels[r:buffer.height - r, r:buffer.width - r] = clamp_to_uint8(sums / divisor)
        return result
