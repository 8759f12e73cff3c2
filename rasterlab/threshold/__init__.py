"""
Histogram thresholding: Otsu and percentile ("pseudo-watershed") cuts.
"""

from .thresholding import (
    ThresholdConfig,
    ThresholdResult,
    OtsuThresholder,
    PercentileThresholder,
    validate_fraction,
    FOREGROUND,
    BACKGROUND
)

__all__ = [
    'ThresholdConfig',
    'ThresholdResult',
    'OtsuThresholder',
    'PercentileThresholder',
    'validate_fraction',
    'FOREGROUND',
    'BACKGROUND'
]
