"""
Binary morphology with a flat square structuring element.
"""

from .morphology import StructuringElement, MorphologyConfig, MorphologyEngine

__all__ = ['StructuringElement', 'MorphologyConfig', 'MorphologyEngine']
