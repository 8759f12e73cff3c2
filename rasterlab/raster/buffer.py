"""
Raster Buffer

8-bit single-channel image container used as input and output of every
stage. Stages never write into the buffer they receive; they allocate a
new one with identical dimensions.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
import numpy as np

FOREGROUND = 0
BACKGROUND = 255


@dataclass
class RasterBuffer:
    """
    Width x height grid of unsigned 8-bit intensity samples.

    Attributes:
        pixels: Sample array of shape (H, W), dtype uint8. Sample (x, y)
                lives at pixels[y, x].
        path: Source of the raster, when it was loaded from disk.

    Example:
        >>> buffer = RasterBuffer.blank(width=4, height=3)
        >>> buffer.width, buffer.height
        (4, 3)
        >>> buffer.at(1, 2)
        0
    """
    pixels: np.ndarray
    path: Optional[Path] = None

    def __post_init__(self):
        """Validate sample array."""
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 2:
            raise ValueError(f"Raster must be 2D array (H, W), got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Raster samples must be uint8, got {pixels.dtype}")
        self.pixels = pixels

    @classmethod
    def blank(cls, width: int, height: int) -> 'RasterBuffer':
        """Zero-initialised raster of the given dimensions."""
        if width < 0 or height < 0:
            raise ValueError(f"Dimensions must be >= 0, got width={width}, height={height}")
        return cls(np.zeros((height, width), dtype=np.uint8))

    @classmethod
    def like(cls, other: 'RasterBuffer') -> 'RasterBuffer':
        """Zero-initialised raster with the dimensions of `other`."""
        return cls(np.zeros_like(other.pixels))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        """(H, W) dimensions, numpy order."""
        return self.height, self.width

    @property
    def size(self) -> int:
        """Total number of samples."""
        return int(self.pixels.size)

    def at(self, x: int, y: int) -> int:
        """Sample at column x, row y."""
        return int(self.pixels[y, x])

    def same_shape(self, other: 'RasterBuffer') -> bool:
        return self.shape == other.shape

    def __str__(self) -> str:
        source = f", path={self.path}" if self.path is not None else ""
        return f"RasterBuffer({self.width}x{self.height}{source})"


def histogram(buffer: RasterBuffer) -> np.ndarray:
    """
    Per-intensity sample counts.

    Args:
        buffer: Raster to count

    Returns:
        counts: Array of shape (256,), dtype int64, summing to width * height
    """
    return np.bincount(buffer.pixels.ravel(), minlength=256).astype(np.int64)
