"""
cli.py
Command-line driver: argument parsing, logging setup and console report.
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .edges import LaplacianVariant
from .pipeline import AnalysisPipeline, PipelineConfig, PipelineResult

console = Console()
logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rasterlab",
        description="Edge maps, segmentation, object count and chain code for one image"
    )
    parser.add_argument("input", type=str, help="Image to analyze")
    parser.add_argument("--out", type=str, default=".", help="Output directory")
    parser.add_argument(
        "--background-fraction", type=float, default=0.2,
        help="Share of darkest pixels below the watershed cut (0-1)"
    )
    parser.add_argument(
        "--laplacian", choices=[v.value for v in LaplacianVariant],
        default=LaplacianVariant.WEAK.value,
        help="Laplacian centre weight: weak (-1) or standard (-4)"
    )
    parser.add_argument("--min-area", type=int, default=10, help="Minimum object area in pixels")
    parser.add_argument("--workers", type=int, default=1, help="Threads for independent stages")
    parser.add_argument("--no-summary", action="store_true", help="Do not write summary.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def print_summary(result: PipelineResult) -> None:
    table = Table(title="Results", box=box.ROUNDED)
    table.add_column("Output", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Size", f"{result.width}x{result.height}")
    table.add_row("Otsu threshold", str(result.otsu.threshold))
    table.add_row("Watershed threshold", str(result.percentile.threshold))
    table.add_row("Objects", f"[bold green]{result.objects.count}[/bold green]")
    chain = str(result.chain) if not result.chain.found else f"{len(result.chain)} steps"
    table.add_row("Chain code", chain)
    table.add_row("Files written", str(len(result.outputs)))

    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = PipelineConfig(
            output_dir=args.out,
            background_fraction=args.background_fraction,
            laplacian=args.laplacian,
            min_object_area=args.min_area,
            max_workers=args.workers,
            write_summary=not args.no_summary
        )
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1

    console.print(Panel.fit(
        f"Input: [bold cyan]{args.input}[/bold cyan]\n"
        f"Output: [bold green]{config.output_dir}[/bold green]",
        title="rasterlab", border_style="blue"
    ))

    try:
        result = AnalysisPipeline(config).run(args.input)
    except (OSError, ValueError) as e:
        logger.error("Run aborted: %s", e)
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1

    print_summary(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
