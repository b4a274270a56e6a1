"""fluotitre run — quantify reporter coverage for a folder of images."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.markup import escape
from rich.table import Table

from fluotitre.cli.utils import console, error_handler, load_config, make_progress

if TYPE_CHECKING:
    from fluotitre.core import PipelineConfig
    from fluotitre.pipeline import BatchResult


def _parse_roi(ctx: click.Context, param: click.Parameter, value: str | None):  # type: ignore[no-untyped-def]
    if value is None:
        return None
    from fluotitre.core.models import RoiGeometry

    try:
        return RoiGeometry.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.command("run")
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False))
@click.option(
    "-o", "--output", type=click.Path(file_okay=False), default=None,
    help="Output folder. Defaults to <input>/<prefix><input name>.",
)
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
    help="YAML configuration file.",
)
@click.option("--rolling-radius", type=float, default=None, help="Rolling-ball radius (px).")
@click.option("--min-area", type=int, default=None, help="Minimum particle area (px).")
@click.option(
    "--af-threshold", type=float, default=None,
    help="MFI above which the high-autofluorescence path is used.",
)
@click.option(
    "--roi", callback=_parse_roi, default=None,
    help="Default ROI as 'cx,cy,width,height'.",
)
@click.option(
    "--decisions", type=click.Choice(["auto", "prompt", "napari"]), default="auto",
    show_default=True,
    help="How ROI placement and threshold confirmation are decided.",
)
@click.option(
    "--on-abort", type=click.Choice(["skip", "stop"]), default=None,
    help="Continue or stop the batch when an image is aborted.",
)
@click.option(
    "--on-io-error", type=click.Choice(["skip", "stop"]), default=None,
    help="Continue or stop the batch on read/write errors.",
)
@error_handler
def run(
    input_dir: str,
    output: str | None,
    config_path: str | None,
    rolling_radius: float | None,
    min_area: int | None,
    af_threshold: float | None,
    roi,  # RoiGeometry | None
    decisions: str,
    on_abort: str | None,
    on_io_error: str | None,
) -> None:
    """Quantify reporter coverage for every image in INPUT_DIR."""
    config = load_config(
        config_path,
        rolling_radius=rolling_radius,
        min_particle_area=min_area,
        autofluorescence_threshold=af_threshold,
        default_roi=roi,
        on_abort=on_abort,
        on_io_error=on_io_error,
    )
    try:
        result = run_batch(Path(input_dir), config, decisions, Path(output) if output else None)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    show_result(result)
    if result.aborted:
        raise SystemExit(1)


def run_batch(
    input_dir: Path,
    config: PipelineConfig,
    decisions: str = "auto",
    output: Path | None = None,
) -> BatchResult:
    """Run the pipeline with a progress bar (shared with the interactive menu)."""
    from fluotitre.decisions import make_provider
    from fluotitre.pipeline import PipelineEngine

    engine = PipelineEngine(config=config, decisions=make_provider(decisions))
    files = engine.scan(input_dir)
    console.print(f"Found {len(files)} input file(s) in {input_dir}")

    if decisions == "auto":
        with make_progress() as progress:
            task = progress.add_task("Processing...", total=len(files))

            def on_progress(current: int, total: int, name: str) -> None:
                progress.update(task, total=total, completed=current, description=name)

            return engine.run(
                input_dir=input_dir, files=files, output_dir=output,
                progress_callback=on_progress,
            )

    # Interactive providers prompt on the console; no live progress bar.
    def on_step(current: int, total: int, name: str) -> None:
        console.print(f"[dim][{current}/{total}] {name}[/dim]")

    return engine.run(
        input_dir=input_dir, files=files, output_dir=output, progress_callback=on_step,
    )


def show_result(result: BatchResult) -> None:
    """Print the per-image table, failures and output locations."""
    table = Table(show_header=True, title="Summary")
    table.add_column("Image")
    table.add_column("Mode")
    table.add_column("MFI", justify="right")
    table.add_column("Count", justify="right")
    table.add_column("Area (px)", justify="right")
    table.add_column("%Area", justify="right")
    for row in result.summary:
        table.add_row(
            row.label,
            row.classification.value if row.classification else "",
            f"{row.mfi:.1f}" if row.mfi is not None else "",
            str(row.count),
            f"{row.total_area:.0f}",
            f"{row.percent_coverage:.3f}",
        )
    console.print()
    console.print(table)

    console.print()
    console.print("[green]Batch complete[/green]" if not result.aborted else "[yellow]Batch stopped early[/yellow]")
    console.print(f"  Images processed: {result.images_processed}")
    console.print(f"  Failed: {len(result.failures)}")
    console.print(f"  Summary: {result.summary_path}")
    console.print(f"  Elapsed: {result.elapsed_seconds:.1f}s")

    if result.warnings:
        console.print()
        console.print(f"[yellow]Warnings ({len(result.warnings)}):[/yellow]")
        for w in result.warnings:
            console.print(f"  [dim]- {escape(w)}[/dim]")
