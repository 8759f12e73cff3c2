"""
Global Histogram Thresholding

Two binarizers built on the 256-bin intensity histogram:

1. Otsu: maximizes between-class variance. Output 255 where the sample is
   strictly above the threshold (bright background), 0 otherwise (dark
   foreground). Downstream object counting and chain tracing rely on this
   0 = foreground convention.
2. Percentile ("pseudo-watershed"): cuts at the first intensity whose
   cumulative count reaches a background fraction of the pixels and
   inverts polarity (below the cut = 255). There is no marker seeding or
   flooding; it is a single global threshold.
"""

from dataclasses import dataclass
import logging
from typing import Optional
import numpy as np

from ..raster import RasterBuffer, histogram, FOREGROUND, BACKGROUND

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================

def validate_fraction(background_fraction: float) -> float:
    """Raise ValueError unless 0 <= background_fraction <= 1."""
    if not 0.0 <= background_fraction <= 1.0:
        raise ValueError(
            f"background_fraction must be in [0, 1], got {background_fraction}"
        )
    return float(background_fraction)


@dataclass
class ThresholdConfig:
    """
    Configuration for percentile thresholding.

    Attributes:
        background_fraction: Share of pixels (darkest first) that must be
                             covered by the cumulative histogram before the
                             cut is placed (default: 0.2)
    """
    background_fraction: float = 0.2

    def __post_init__(self):
        """Validate configuration parameters."""
        self.background_fraction = validate_fraction(self.background_fraction)


# ============================================================================
# Results
# ============================================================================

@dataclass
class ThresholdResult:
    """
    Results from a thresholding pass.

    Attributes:
        binary: Raster containing only 0 and 255
        threshold: Chosen cut, always in [0, 255]
        method: "otsu" or "percentile"
    """
    binary: RasterBuffer
    threshold: int
    method: str

    def get_foreground_pixels(self) -> int:
        """Number of 0-valued pixels."""
        return int((self.binary.pixels == FOREGROUND).sum())

    def __str__(self) -> str:
        """String representation of results."""
        return (
            f"ThresholdResult(method={self.method}, threshold={self.threshold}, "
            f"foreground={self.get_foreground_pixels()} pixels)"
        )


# ============================================================================
# Thresholders
# ============================================================================

class OtsuThresholder:
    """
    Otsu binarization.

    Example:
        >>> result = OtsuThresholder().threshold(buffer)
        >>> result.threshold
        87
        >>> mask = result.binary  # 255 above the threshold, 0 elsewhere
    """

    def compute_threshold(self, buffer: RasterBuffer) -> int:
        """
        Threshold maximizing wB * wF * (mB - mF)^2.

        The sweep skips empty background classes and stops as soon as the
        foreground class is empty. Ties keep the first maximum. Returns 0
        when no split has positive variance (uniform or empty raster).
        """
        counts = histogram(buffer).tolist()
        total = buffer.size

        weighted_total = 0.0
        for i in range(256):
            weighted_total += float(i * counts[i])

        sum_b = 0.0
        w_b = 0.0
        var_max = 0.0
        threshold = 0

        for t in range(256):
            w_b += float(counts[t])
            if w_b == 0:
                continue
            w_f = float(total) - w_b
            if w_f == 0:
                break

            sum_b += float(t * counts[t])
            m_b = sum_b / w_b
            m_f = (weighted_total - sum_b) / w_f

            var_between = w_b * w_f * (m_b - m_f) ** 2
            if var_between > var_max:
                var_max = var_between
                threshold = t

        return threshold

    def threshold(self, buffer: RasterBuffer) -> ThresholdResult:
        """
        Binarize `buffer` at its Otsu threshold.

        Args:
            buffer: Grayscale source raster (not modified)

        Returns:
            result: ThresholdResult with 255 where sample > threshold, else 0
        """
        t = self.compute_threshold(buffer)
        binary = np.where(buffer.pixels > t, BACKGROUND, FOREGROUND).astype(np.uint8)
        logger.debug("Otsu threshold: %d", t)
        return ThresholdResult(binary=RasterBuffer(binary), threshold=t, method="otsu")


class PercentileThresholder:
    """
    Cumulative-histogram percentile cut with inverted polarity.

    Example:
        >>> thresholder = PercentileThresholder(ThresholdConfig(background_fraction=0.2))
        >>> result = thresholder.threshold(buffer)
        >>> result.binary  # 0 where sample >= cut, 255 below it
    """

    def __init__(self, config: Optional[ThresholdConfig] = None):
        """
        Initialize percentile thresholder.

        Args:
            config: Threshold configuration. If None, uses defaults.
        """
        self.config = config or ThresholdConfig()

    def compute_threshold(
        self,
        buffer: RasterBuffer,
        background_fraction: Optional[float] = None
    ) -> int:
        """
        First intensity whose cumulative count reaches int(total * fraction).

        Args:
            buffer: Grayscale raster
            background_fraction: Overrides the configured fraction

        Returns:
            threshold: Cut in [0, 255]; 0 if the target is never reached

        Raises:
            ValueError: If the fraction is outside [0, 1]
        """
        if background_fraction is None:
            fraction = self.config.background_fraction
        else:
            fraction = validate_fraction(background_fraction)

        target = int(buffer.size * fraction)
        cumulative = np.cumsum(histogram(buffer))
        reached = np.flatnonzero(cumulative >= target)
        return int(reached[0]) if reached.size else 0

    def threshold(
        self,
        buffer: RasterBuffer,
        background_fraction: Optional[float] = None
    ) -> ThresholdResult:
        """
        Binarize `buffer` at its percentile cut.

        Args:
            buffer: Grayscale source raster (not modified)
            background_fraction: Overrides the configured fraction

        Returns:
            result: ThresholdResult with 0 where sample >= cut, 255 otherwise

        Raises:
            ValueError: If the fraction is outside [0, 1]
        """
        t = self.compute_threshold(buffer, background_fraction)
        binary = np.where(buffer.pixels >= t, FOREGROUND, BACKGROUND).astype(np.uint8)
        logger.debug("Percentile threshold: %d", t)
        return ThresholdResult(binary=RasterBuffer(binary), threshold=t, method="percentile")
