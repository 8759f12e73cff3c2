"""
Box Filter

Variable-size averaging over raw colour samples. The window is clipped at
the image bounds and the divisor is the number of in-bounds samples, so
border pixels get partial-window averages instead of zero padding.
"""

from typing import Union
import numpy as np

from ..raster import RasterBuffer


def luminance(samples: Union[np.ndarray, RasterBuffer]) -> np.ndarray:
    """
    Per-sample luminance used by the box filter: (r + r + r) // 3.

    Only the red channel contributes; this is not a perceptual grayscale
    conversion. Grayscale input is treated as its own red channel.

    Args:
        samples: RasterBuffer, (H, W) grayscale or (H, W, C) colour uint8 array

    Returns:
        luma: int64 array of shape (H, W)

    Raises:
        ValueError: If samples are not uint8 or not 2D/3D
    """
    if isinstance(samples, RasterBuffer):
        samples = samples.pixels
    samples = np.asarray(samples)

    if samples.dtype != np.uint8:
        raise ValueError(f"Samples must be uint8, got {samples.dtype}")
    if samples.ndim == 2:
        red = samples
    elif samples.ndim == 3 and samples.shape[2] >= 1:
        red = samples[..., 0]
    else:
        raise ValueError(f"Samples must be (H, W) or (H, W, C), got shape {samples.shape}")

    red = red.astype(np.int64)
    return (red + red + red) // 3


def windowed_mean(values: np.ndarray, size: int) -> np.ndarray:
    """
    Integer mean over a clipped (2 * (size // 2) + 1)-wide square window.

    Uses a summed-area table, so cost does not depend on the window size.

    Args:
        values: Integer array of shape (H, W)
        size: Window size; half-width is size // 2 (size 2 therefore
              averages a 3x3 window, size 1 a single sample)

    Returns:
        means: uint8 array of shape (H, W), floor(sum / count)

    Raises:
        ValueError: If size < 1
    """
    if size < 1:
        raise ValueError(f"size must be >= 1, got {size}")

    h, w = values.shape
    if h == 0 or w == 0:
        return np.zeros((h, w), dtype=np.uint8)

    half = size // 2
    integral = np.zeros((h + 1, w + 1), dtype=np.int64)
    integral[1:, 1:] = values.astype(np.int64).cumsum(axis=0).cumsum(axis=1)

    rows = np.arange(h)
    cols = np.arange(w)
    y0 = np.clip(rows - half, 0, h)
    y1 = np.clip(rows + half + 1, 0, h)
    x0 = np.clip(cols - half, 0, w)
    x1 = np.clip(cols + half + 1, 0, w)

    totals = (
        integral[y1][:, x1]
        - integral[y0][:, x1]
        - integral[y1][:, x0]
        + integral[y0][:, x0]
    )
    counts = (y1 - y0)[:, None] * (x1 - x0)[None, :]

    return (totals // counts).astype(np.uint8)


class BoxFilterEngine:
    """
    Averaging filter working directly on colour samples.

    Example:
        >>> engine = BoxFilterEngine()
        >>> blurred = engine.filter(rgb_array, size=5)  # RasterBuffer (H, W)
    """

    def filter(self, image: Union[np.ndarray, RasterBuffer], size: int) -> RasterBuffer:
        """
        Average a size x size neighbourhood of every pixel.

        Args:
            image: Colour (H, W, C) or grayscale (H, W) uint8 samples, or a
                   RasterBuffer
            size: Window size (>= 1)

        Returns:
            result: Grayscale RasterBuffer of the same width and height

        Raises:
            ValueError: If size < 1 or the samples are malformed
        """
        return RasterBuffer(windowed_mean(luminance(image), size))
