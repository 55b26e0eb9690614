"""
Command-line interface for meshquality.

Provides commands for evaluating element files, batch runs and samples.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="meshquality",
    help="Quality metrics for quad and hex mesh elements: aspect ratio, skewness, Jacobian ratio"
)
console = Console()

BAND_STYLES = {
    "excellent": "green",
    "good": "yellow",
    "poor": "dark_orange",
    "bad": "red",
    "invalid": "magenta",
    "unclassified": "dim",
}


def _configure_logging(level: int) -> None:
    logging.basicConfig(level=level, format='%(name)s - %(message)s')


def _print_report(report, title: str, show_elements: bool = False) -> None:
    """Render a QualityReport as rich tables."""
    stats = report.statistics

    if not stats.has_data:
        console.print("[yellow]No elements evaluated[/yellow]")
        for d in report.diagnostics:
            console.print(f"  {d}")
        return

    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Mean", justify="right")
    table.add_column("Ideal", justify="right")
    table.add_row("Aspect Ratio", f"{stats.mean_aspect_ratio:.3f}", "1.000")
    table.add_row("Skewness", f"{stats.mean_skewness:.3f}", "1.000")
    table.add_row("Jacobian Ratio", f"{stats.mean_jacobian_ratio:.3f}", "1.000")
    console.print(table)

    if report.metric is not None:
        bands = Table(title=f"Bands: {report.metric.label}")
        bands.add_column("Band")
        bands.add_column("Elements", justify="right")
        for label, n in report.band_counts().items():
            if n:
                style = BAND_STYLES.get(label, "white")
                bands.add_row(f"[{style}]{label}[/{style}]", str(n))
        console.print(bands)

    if show_elements:
        rows = Table(title="Elements")
        rows.add_column("Id", justify="right")
        rows.add_column("Kind")
        rows.add_column("AR", justify="right")
        rows.add_column("SK", justify="right")
        rows.add_column("JR", justify="right")
        rows.add_column("Band")
        padded = report.bands or [None] * len(report.qualities)
        for q, band in zip(report.qualities, padded):
            label = band.label if band is not None else "-"
            style = BAND_STYLES.get(label, "white")
            rows.add_row(
                str(q.element_id),
                q.element.kind,
                f"{q.aspect_ratio:.3f}",
                f"{q.skewness:.3f}",
                f"{q.jacobian_ratio:.3f}",
                f"[{style}]{label}[/{style}]",
            )
        console.print(rows)

    diagnostics = [d for d in report.all_diagnostics if d.severity.value != "info"]
    if diagnostics:
        console.print(f"\n[bold yellow]Diagnostics ({len(diagnostics)})[/bold yellow]")
        for d in diagnostics[:20]:
            color = "red" if d.severity.value == "error" else "yellow"
            console.print(f"  [{color}]{d}[/{color}]")
        if len(diagnostics) > 20:
            console.print(f"  ... {len(diagnostics) - 20} more")


@app.command()
def evaluate(
    input_path: Path = typer.Argument(..., help="Element file (OBJ, YAML, JSON)"),
    metric: Optional[str] = typer.Option(None, "-m", "--metric", help="Coloring metric: 1/aspect, 2/skewness, 3/jacobian"),
    workers: int = typer.Option(1, "-w", "--workers", help="Evaluation threads"),
    output_path: Optional[Path] = typer.Option(None, "-o", "--output", help="Write report (JSON or YAML)"),
    color_mesh: Optional[Path] = typer.Option(None, "--color-mesh", help="Write band-colored mesh (PLY, OBJ, GLB)"),
    show_elements: bool = typer.Option(False, "--elements", help="Print per-element metrics"),
    strict: bool = typer.Option(False, "--strict", help="Exit with code 1 on inverted elements"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable verbose logging"),
):
    """
    Evaluate the quality of every element in a file.
    """
    from meshquality.core.io import load_elements, save_report
    from meshquality.evaluation import QualityAggregator, QualityMetric, export_color_mesh

    if verbose:
        _configure_logging(logging.DEBUG)

    try:
        selected = QualityMetric.parse(metric)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    console.print(f"[bold blue]Loading elements:[/bold blue] {input_path}")
    elements = load_elements(input_path)

    report = QualityAggregator(workers=workers).evaluate(elements, selected)
    _print_report(report, f"Quality: {input_path.name}", show_elements)

    if output_path:
        save_report(report, output_path)
        console.print(f"[green]Report saved to:[/green] {output_path}")

    if color_mesh:
        if report.metric is None:
            console.print("[yellow]No metric selected; color mesh is unclassified[/yellow]")
        if report.qualities:
            export_color_mesh(report, color_mesh)
            console.print(f"[green]Color mesh saved to:[/green] {color_mesh}")

    if strict and report.has_errors:
        raise typer.Exit(code=1)


@app.command()
def run(
    config_path: Path = typer.Option(..., "-c", "--config", help="Run config YAML"),
    output_dir: Optional[Path] = typer.Option(None, "-o", "--output", help="Output directory override"),
):
    """
    Evaluate every input listed in a configuration file.
    """
    from meshquality.config import QualityConfig
    from meshquality.core.io import load_elements, save_report
    from meshquality.evaluation import QualityAggregator, export_color_mesh

    console.print(f"[bold blue]Loading config:[/bold blue] {config_path}")
    config = QualityConfig.load(config_path)
    if output_dir:
        config = config.with_overrides(**{"output.output_dir": str(output_dir)})

    _configure_logging(getattr(logging, config.log_level, logging.WARNING))

    if not config.inputs:
        console.print("[yellow]Config lists no inputs[/yellow]")
        return

    aggregator = QualityAggregator(
        workers=config.evaluation.workers,
        chunk_size=config.evaluation.chunk_size,
    )
    out_dir = Path(config.output.output_dir)

    summary = Table(title=f"Run: {config.name}")
    summary.add_column("Input", style="cyan")
    summary.add_column("Elements", justify="right")
    summary.add_column("AR", justify="right")
    summary.add_column("SK", justify="right")
    summary.add_column("JR", justify="right")
    summary.add_column("Errors", justify="right")

    for input_name in config.inputs:
        input_path = Path(input_name)
        report = aggregator.evaluate(load_elements(input_path), config.evaluation.metric)
        stats = report.statistics

        save_report(report, out_dir / f"{input_path.stem}_quality.{config.output.report_format}")
        if config.output.color_mesh and report.qualities:
            export_color_mesh(
                report, out_dir / f"{input_path.stem}_quality.{config.output.color_mesh_format}"
            )

        errors = sum(1 for d in report.all_diagnostics if d.severity.value == "error")
        summary.add_row(
            input_path.name,
            str(stats.count),
            f"{stats.mean_aspect_ratio:.3f}",
            f"{stats.mean_skewness:.3f}",
            f"{stats.mean_jacobian_ratio:.3f}",
            f"[red]{errors}[/red]" if errors else "0",
        )

    console.print(summary)
    console.print(f"\n[green]Results saved to:[/green] {out_dir}")


@app.command()
def info(
    input_path: Path = typer.Argument(..., help="Element file to inspect"),
):
    """
    Show information about an element file.
    """
    import numpy as np
    from meshquality.core.io import load_elements

    elements = load_elements(input_path)

    table = Table(title=f"Element Info: {input_path.name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", justify="right")

    n_quads = sum(1 for e in elements if e.kind == "quad")
    table.add_row("Elements", str(len(elements)))
    table.add_row("Quads", str(n_quads))
    table.add_row("Hexahedra", str(len(elements) - n_quads))

    if elements:
        points = np.concatenate([e.corners for e in elements])
        min_b, max_b = points.min(axis=0), points.max(axis=0)
        table.add_row("Bounding Box Min", f"({min_b[0]:.3f}, {min_b[1]:.3f}, {min_b[2]:.3f})")
        table.add_row("Bounding Box Max", f"({max_b[0]:.3f}, {max_b[1]:.3f}, {max_b[2]:.3f})")

    console.print(table)


@app.command()
def gen_samples(
    output_dir: Path = typer.Option("samples", "-o", "--output", help="Output directory"),
):
    """
    Generate sample element files for experimentation.
    """
    from meshquality.samples import save_samples

    console.print(f"[bold blue]Generating samples to:[/bold blue] {output_dir}")
    save_samples(str(output_dir))
    console.print("[green]Done![/green]")


@app.command()
def gen_config(
    output_path: Path = typer.Option("quality.yaml", "-o", "--output", help="Output config file"),
    name: str = typer.Option("quality", "-n", "--name", help="Run name"),
):
    """
    Generate a default run configuration file.
    """
    from meshquality.config import create_default_config

    config = create_default_config()
    config.name = name
    config.save(output_path)

    console.print(f"[green]Config saved to:[/green] {output_path}")


if __name__ == "__main__":
    app()
