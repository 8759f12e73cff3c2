"""
Raster data model shared by every pipeline stage.
"""

from .buffer import RasterBuffer, histogram, FOREGROUND, BACKGROUND

__all__ = ['RasterBuffer', 'histogram', 'FOREGROUND', 'BACKGROUND']
