"""
Módulo de entrada/salida para rasterlab.

Decodifica la imagen de origen y escribe los rásters PNG, el código de
cadena y el resumen JSON de cada ejecución.

Example:
    >>> from rasterlab.io import RasterIO
    >>> io = RasterIO()
    >>> image = io.load("photo.jpg")
    >>> io.save_raster(image.gray, "gray.png")
"""

from .image_io import LoadedImage, RasterIO, to_rgb8

__all__ = ['LoadedImage', 'RasterIO', 'to_rgb8']
