"""
Binary Morphology on 0/255 Rasters

Foreground is 0 (dark), background is anything else. A flat square
structuring element (7x7 by default) is used for every erosion and
dilation. Pixels within the element offset of an edge are not processed
and take `border_value` (0 by default, like the convolution border).

Opening and closing are composed as the object counter expects:
    open  = erode x2, then dilate x3
    close = dilate x3, then erode x3
"""

from dataclasses import dataclass, field
from typing import Optional
import numpy as np
from scipy import ndimage

from ..raster import RasterBuffer, FOREGROUND, BACKGROUND


# ============================================================================
# Configuration
# ============================================================================

@dataclass
class StructuringElement:
    """
    Flat all-ones square neighbourhood.

    Attributes:
        size: Side length, must be odd (default: 7)
    """
    size: int = 7

    def __post_init__(self):
        """Validate element size."""
        if self.size < 1 or self.size % 2 == 0:
            raise ValueError(f"Structuring element size must be odd and >= 1, got {self.size}")

    @property
    def offset(self) -> int:
        return self.size // 2

    @property
    def footprint(self) -> np.ndarray:
        return np.ones((self.size, self.size), dtype=bool)


@dataclass
class MorphologyConfig:
    """
    Configuration for erosion/dilation sequences.

    Attributes:
        element: Structuring element (default: 7x7)
        border_value: Value written to the unprocessed border (default: 0)
        opening_erosions: Erosions at the start of `open` (default: 2)
        opening_dilations: Dilations at the end of `open` (default: 3)
        closing_dilations: Dilations at the start of `close` (default: 3)
        closing_erosions: Erosions at the end of `close` (default: 3)
    """
    element: StructuringElement = field(default_factory=StructuringElement)
    border_value: int = 0
    opening_erosions: int = 2
    opening_dilations: int = 3
    closing_dilations: int = 3
    closing_erosions: int = 3

    def __post_init__(self):
        """Validate configuration parameters."""
        if not 0 <= self.border_value <= 255:
            raise ValueError(f"border_value must be in [0, 255], got {self.border_value}")
        for name in ('opening_erosions', 'opening_dilations',
                     'closing_dilations', 'closing_erosions'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")


# ============================================================================
# Morphology Engine
# ============================================================================

class MorphologyEngine:
    """
    Erosion, dilation, opening and closing of 0-foreground rasters.

    Example:
        >>> engine = MorphologyEngine()
        >>> cleaned = engine.clean(binary)  # open, then close
    """

    def __init__(self, config: Optional[MorphologyConfig] = None):
        """
        Initialize morphology engine.

        Args:
            config: Morphology configuration. If None, uses defaults.
        """
        self.config = config or MorphologyConfig()

    def _apply(self, buffer: RasterBuffer, interior: np.ndarray) -> RasterBuffer:
        """Write `interior` (0/255 full-size map) into a new raster, border excluded."""
        r = self.config.element.offset
        h, w = buffer.shape
        result = RasterBuffer(np.full((h, w), self.config.border_value, dtype=np.uint8))
        if h > 2 * r and w > 2 * r:
            result.pixels[r:h - r, r:w - r] = interior[r:h - r, r:w - r]
        return result

    def erode(self, buffer: RasterBuffer) -> RasterBuffer:
        """
        Pixel becomes foreground (0) only if every covered sample is 0.

        Args:
            buffer: Source raster (not modified)

        Returns:
            result: New 0/255 raster with the configured border
        """
        if buffer.size == 0:
            return RasterBuffer.like(buffer)
        # max over the window is 0 exactly when every covered sample is 0
        window_max = ndimage.maximum_filter(
            buffer.pixels, footprint=self.config.element.footprint, mode='nearest'
        )
        interior = np.where(window_max == FOREGROUND, FOREGROUND, BACKGROUND).astype(np.uint8)
        return self._apply(buffer, interior)

    def dilate(self, buffer: RasterBuffer) -> RasterBuffer:
        """
        Pixel becomes foreground (0) if any covered sample is 0.

        Args:
            buffer: Source raster (not modified)

        Returns:
            result: New 0/255 raster with the configured border
        """
        if buffer.size == 0:
            return RasterBuffer.like(buffer)
        window_min = ndimage.minimum_filter(
            buffer.pixels, footprint=self.config.element.footprint, mode='nearest'
        )
        interior = np.where(window_min == FOREGROUND, FOREGROUND, BACKGROUND).astype(np.uint8)
        return self._apply(buffer, interior)

    def _repeat(self, buffer: RasterBuffer, operation, times: int) -> RasterBuffer:
        for _ in range(times):
            buffer = operation(buffer)
        return buffer

    def open(self, buffer: RasterBuffer) -> RasterBuffer:
        """Erode `opening_erosions` times, then dilate `opening_dilations` times."""
        eroded = self._repeat(buffer, self.erode, self.config.opening_erosions)
        return self._repeat(eroded, self.dilate, self.config.opening_dilations)

    def close(self, buffer: RasterBuffer) -> RasterBuffer:
        """Dilate `closing_dilations` times, then erode `closing_erosions` times."""
        dilated = self._repeat(buffer, self.dilate, self.config.closing_dilations)
        return self._repeat(dilated, self.erode, self.config.closing_erosions)

    def clean(self, buffer: RasterBuffer) -> RasterBuffer:
        """Opening followed by closing, the object-counting cleanup."""
        return self.close(self.open(buffer))
