"""
Intensity Quantization

Piecewise remap of 8-bit intensities into five buckets:

    0-50 -> 25, 51-100 -> 75, 101-150 -> 125, 151-200 -> 175, 201-255 -> 255
"""

from typing import Sequence, Tuple
import numpy as np
import cv2

from ..raster import RasterBuffer

DEFAULT_BUCKETS: Tuple[Tuple[int, int], ...] = (
    (50, 25),
    (100, 75),
    (150, 125),
    (200, 175),
)
DEFAULT_CEILING = 255


def build_table(
    buckets: Sequence[Tuple[int, int]] = DEFAULT_BUCKETS,
    ceiling: int = DEFAULT_CEILING
) -> np.ndarray:
    """
    256-entry lookup table for an ordered list of (upper bound, value) pairs.

    Intensities above the last upper bound map to `ceiling`.
    """
    table = np.full(256, ceiling, dtype=np.uint8)
    lower = 0
    for upper, value in buckets:
        if upper < lower - 1 or not 0 <= value <= 255:
            raise ValueError(f"Invalid bucket ({upper}, {value})")
        table[lower:upper + 1] = value
        lower = upper + 1
    return table


class IntensityQuantizer:
    """
    Stateless per-pixel bucket lookup.

    Example:
        >>> quantized = IntensityQuantizer().quantize(buffer)
    """

    def __init__(
        self,
        buckets: Sequence[Tuple[int, int]] = DEFAULT_BUCKETS,
        ceiling: int = DEFAULT_CEILING
    ):
        self.table = build_table(buckets, ceiling)

    def quantize(self, buffer: RasterBuffer) -> RasterBuffer:
        """Apply the lookup table to every sample of `buffer`."""
        if buffer.size == 0:
            return RasterBuffer.like(buffer)
        return RasterBuffer(cv2.LUT(np.ascontiguousarray(buffer.pixels), self.table))
