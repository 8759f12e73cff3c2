"""
rasterlab - Batch analysis of a single grayscale raster.

Este paquete contiene los detectores de bordes, la binarización por
histograma, la morfología binaria, el conteo de objetos y el código de
cadena de Freeman que componen el pipeline de análisis.

Example:
    >>> from rasterlab.pipeline import AnalysisPipeline, PipelineConfig
    >>> pipeline = AnalysisPipeline(PipelineConfig(output_dir="out"))
    >>> result = pipeline.run("photo.jpg")
    >>> print(result.objects.count)
"""

__version__ = "0.3.0"
