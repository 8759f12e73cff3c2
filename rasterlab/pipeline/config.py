"""
Pipeline Configuration

Settings for one batch analysis run.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from ..edges import LaplacianVariant
from ..threshold import validate_fraction


@dataclass
class PipelineConfig:
    """
    Configuration for the analysis pipeline.

    Attributes:
        output_dir: Directory receiving every output file
        background_fraction: Percentile cut for the watershed output
        box_sizes: Window sizes of the box-filter outputs
        laplacian: Laplacian kernel variant for the Marr-Hildreth output
        min_object_area: Minimum object area for the object count
        max_workers: Worker threads for independent stages (1 = sequential)
        write_summary: Write a JSON summary next to the outputs
        summary_name: File name of the JSON summary
    """
    output_dir: Union[str, Path] = "."
    """Directory receiving every output file (created if missing)"""

    background_fraction: float = 0.2
    """Share of the darkest pixels below the watershed cut"""

    box_sizes: Tuple[int, ...] = (2, 3, 5, 7)
    """Box filter window sizes, one output each"""

    laplacian: LaplacianVariant = LaplacianVariant.WEAK
    """Centre weight -1 (WEAK) or -4 (STANDARD)"""

    min_object_area: int = 10
    """Objects smaller than this are not counted"""

    max_workers: int = 1
    """Threads for the independent stages; 1 runs everything in order"""

    write_summary: bool = True
    """Write summary.json with thresholds, counts and timings"""

    summary_name: str = "summary.json"
    """File name of the JSON summary"""

    def __post_init__(self):
        """Validate configuration."""
        self.background_fraction = validate_fraction(self.background_fraction)

        self.box_sizes = tuple(int(size) for size in self.box_sizes)
        for size in self.box_sizes:
            if size < 1:
                raise ValueError(f"box sizes must be >= 1, got {size}")
        if len(set(self.box_sizes)) != len(self.box_sizes):
            raise ValueError(f"box sizes must be unique, got {self.box_sizes}")

        if isinstance(self.laplacian, str):
            self.laplacian = LaplacianVariant(self.laplacian)

        if self.min_object_area < 1:
            raise ValueError(f"min_object_area must be >= 1, got {self.min_object_area}")

        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
