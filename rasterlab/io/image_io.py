"""
Image and text persistence for the analysis pipeline.

Proporciona la clase RasterIO para decodificar la imagen de entrada
(cualquier formato que soporte Pillow), escribir los rásters resultantes
como PNG y guardar el código de cadena como texto.

Every failure here is fatal for a run: the caller gets FileNotFoundError
or OSError naming the path, chained to the underlying Pillow/OS error.
"""

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union
import numpy as np
from PIL import Image, UnidentifiedImageError

from ..raster import RasterBuffer

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

WIDE_MODES = ("I", "F")
ALPHA_MODES = ("RGBA", "LA", "PA", "RGBa", "La")


def to_rgb8(img: Image.Image) -> Image.Image:
    """
    Reduce any decoded image to 8-bit RGB.

    - 16-bit and 32-bit integer/float samples (modes I;16*, I, F) are
      clipped to 0..65535 and keep their high byte, so a 16-bit ramp stays
      a ramp instead of saturating at 255.
    - Images with an alpha channel or a transparency key are composited
      on opaque black, so fully transparent pixels read as 0.
    - Everything else goes through Pillow's own RGB conversion.

    Args:
        img: Decoded Pillow image

    Returns:
        rgb: Image in mode "RGB"
    """
    if img.mode.startswith("I;16") or img.mode in WIDE_MODES:
        wide = np.clip(np.asarray(img, dtype=np.float64), 0, 65535).astype(np.uint32)
        return Image.fromarray((wide >> 8).astype(np.uint8)).convert("RGB")

    if img.mode in ALPHA_MODES or "transparency" in img.info:
        rgba = img.convert("RGBA")
        black = Image.new("RGBA", rgba.size, (0, 0, 0, 255))
        return Image.alpha_composite(black, rgba).convert("RGB")

    return img.convert("RGB")


@dataclass
class LoadedImage:
    """
    Decoded source image.

    Attributes:
        gray: Grayscale raster used by every stage except the box filter
        samples: Original RGB samples (H, W, 3) uint8, fed to the box filter
        path: File the image was read from
    """
    gray: RasterBuffer
    samples: np.ndarray
    path: Path


class RasterIO:
    """
    Reads source images and writes rasters and text outputs.

    Example:
        >>> io = RasterIO()
        >>> image = io.load("photo.jpg")
        >>> print(image.gray.width, image.gray.height)
        >>> io.save_raster(image.gray, "out/gray.png")
        >>> io.save_text("0076543", "out/freeman_chain.txt")
    """

    def load(self, path: PathLike) -> LoadedImage:
        """
        Decode an image file.

        The samples are reduced to 8-bit RGB first (see `to_rgb8`): wide
        samples keep their high byte and transparent pixels become black.
        The gray raster is the luma of those samples.

        Args:
            path: Image file (JPEG, PNG, BMP, ... anything Pillow decodes)

        Returns:
            LoadedImage with grayscale raster and RGB samples

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: If the file cannot be decoded
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")

        try:
            with Image.open(path) as img:
                img.load()
                rgb = to_rgb8(img)
                samples = np.array(rgb)
                gray = np.array(rgb.convert("L"))
        except (UnidentifiedImageError, OSError) as e:
            raise OSError(f"Cannot decode image {path}: {e}") from e

        logger.debug("Loaded %s (%dx%d)", path, gray.shape[1], gray.shape[0])
        return LoadedImage(gray=RasterBuffer(gray, path=path), samples=samples, path=path)

    def _prepare(self, path: PathLike) -> Path:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OSError(f"Cannot create output directory {path.parent}: {e}") from e
        return path

    def save_raster(self, buffer: RasterBuffer, path: PathLike) -> Path:
        """
        Encode `buffer` as an 8-bit grayscale PNG.

        Raises:
            OSError: If the destination cannot be created or written
        """
        path = self._prepare(path)
        try:
            Image.fromarray(buffer.pixels).save(path, format="PNG")
        except (ValueError, OSError) as e:
            raise OSError(f"Cannot write image {path}: {e}") from e
        logger.debug("Wrote %s", path)
        return path

    def save_text(self, text: str, path: PathLike) -> Path:
        """
        Write `text` as UTF-8.

        Raises:
            OSError: If the destination cannot be created or written
        """
        path = self._prepare(path)
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot write text file {path}: {e}") from e
        logger.debug("Wrote %s", path)
        return path

    def save_json(self, data: Dict[str, Any], path: PathLike) -> Path:
        """
        Write `data` as indented JSON.

        Raises:
            OSError: If the destination cannot be created or written
        """
        path = self._prepare(path)
        try:
            with open(path, 'w') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise OSError(f"Cannot write JSON file {path}: {e}") from e
        logger.debug("Wrote %s", path)
        return path
