"""
Edge Detection Module.

This module provides:
1. Sobel gradient-magnitude maps (the "canny" output, no suppression)
2. Laplacian (Marr-Hildreth) response maps with a selectable kernel
"""

from .edge_detector import (
    EdgeMethod,
    LaplacianVariant,
    EdgeConfig,
    EdgeResult,
    BaseEdgeDetector,
    GradientEdgeDetector,
    LaplacianEdgeDetector,
    create_edge_detector
)

__all__ = [
    'EdgeMethod',
    'LaplacianVariant',
    'EdgeConfig',
    'EdgeResult',
    'BaseEdgeDetector',
    'GradientEdgeDetector',
    'LaplacianEdgeDetector',
    'create_edge_detector'
]
