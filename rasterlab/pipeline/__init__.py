"""
Batch analysis pipeline.

Example:
    >>> from rasterlab.pipeline import AnalysisPipeline, PipelineConfig
    >>>
    >>> config = PipelineConfig(output_dir="out", background_fraction=0.2)
    >>> pipeline = AnalysisPipeline(config)
    >>> result = pipeline.run("photo.jpg")
    >>> print(f"Objects: {result.objects.count}")
"""

from .config import PipelineConfig
from .runner import AnalysisPipeline, PipelineResult, OUTPUT_NAMES, box_output_name

__all__ = [
    'PipelineConfig',
    'AnalysisPipeline',
    'PipelineResult',
    'OUTPUT_NAMES',
    'box_output_name',
]
