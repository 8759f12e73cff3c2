"""
Segmentation Module.

This module provides:
1. Object counting (smoothing + open/close + 8-connected flood fill)
2. Freeman chain-code tracing of the first object
3. Five-bucket intensity quantization
"""

from .components import (
    ComponentConfig,
    ComponentResult,
    ConnectedComponentCounter,
    label_regions
)

from .chain_code import (
    ChainCode,
    ContourTracer,
    FREEMAN_DIRECTIONS,
    NO_OBJECT_SENTINEL
)

from .intensity import IntensityQuantizer, build_table

__all__ = [
    # Object counting
    'ComponentConfig',
    'ComponentResult',
    'ConnectedComponentCounter',
    'label_regions',
    # Chain code
    'ChainCode',
    'ContourTracer',
    'FREEMAN_DIRECTIONS',
    'NO_OBJECT_SENTINEL',
    # Quantization
    'IntensityQuantizer',
    'build_table'
]
