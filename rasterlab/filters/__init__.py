"""
Linear filtering: kernel convolution and clipped box averaging.
"""

from .convolution import (
    Kernel,
    ConvolutionEngine,
    correlate_interior,
    clamp_to_uint8,
    SOBEL_X,
    SOBEL_Y,
    LAPLACIAN_WEAK,
    LAPLACIAN_STANDARD
)

from .box_filter import (
    BoxFilterEngine,
    luminance,
    windowed_mean
)

__all__ = [
    # Convolution
    'Kernel',
    'ConvolutionEngine',
    'correlate_interior',
    'clamp_to_uint8',
    'SOBEL_X',
    'SOBEL_Y',
    'LAPLACIAN_WEAK',
    'LAPLACIAN_STANDARD',
    # Box filter
    'BoxFilterEngine',
    'luminance',
    'windowed_mean'
]
