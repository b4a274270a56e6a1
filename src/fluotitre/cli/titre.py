"""fluotitre titre — estimate relative titres from a batch summary."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.table import Table

from fluotitre.cli.utils import console, error_handler

if TYPE_CHECKING:
    from fluotitre.core.models import BatchSummary, CalibrationWell, TitreEstimate


@click.command()
@click.argument("summary", type=click.Path(exists=True, dir_okay=False))
@click.option("--control-titre", type=float, required=True, help="Known titre of the control well.")
@click.option("--control-label", default=None, help="Summary row of the control well.")
@click.option("--control-coverage", type=float, default=None, help="Control %coverage, if not in the summary.")
@click.option("--baseline-label", default=None, help="Summary row of the uninfected well.")
@click.option("--baseline-coverage", type=float, default=None, help="Uninfected %coverage, if not in the summary.")
@click.option(
    "--tolerance", type=float, default=1.0, show_default=True,
    help="Largest baseline %coverage still treated as zero.",
)
@click.option(
    "-o", "--output", type=click.Path(dir_okay=False), default=None,
    help="Write the estimates to this CSV file.",
)
@error_handler
def titre(
    summary: str,
    control_titre: float,
    control_label: str | None,
    control_coverage: float | None,
    baseline_label: str | None,
    baseline_coverage: float | None,
    tolerance: float,
    output: str | None,
) -> None:
    """Estimate the titre of every well in SUMMARY against a control well."""
    from fluotitre.io.writer import read_summary
    from fluotitre.measure.titre import TitreEstimator

    if (control_label is None) == (control_coverage is None):
        raise click.UsageError("Give exactly one of --control-label or --control-coverage")
    if baseline_label is not None and baseline_coverage is not None:
        raise click.UsageError("Give at most one of --baseline-label or --baseline-coverage")

    table_in = read_summary(Path(summary))
    control = _well(table_in, control_label, control_coverage, control_titre)
    baseline = None
    if baseline_label is not None or baseline_coverage is not None:
        baseline = _well(table_in, baseline_label, baseline_coverage, 0.0)

    estimator = TitreEstimator(control, baseline=baseline, baseline_tolerance=tolerance)
    exclude = [w.label for w in (control, baseline) if w is not None and w.label]
    estimates = estimator.estimate_summary(table_in, exclude=exclude)

    _show_estimates(estimates, control)
    if not estimator.baseline_ok:
        console.print(
            f"[yellow]Warning:[/yellow] baseline coverage "
            f"{baseline.percent_coverage:.3f}% exceeds {tolerance:.3f}%"  # type: ignore[union-attr]
        )

    if output:
        out_path = Path(output).expanduser()
        _write_estimates(estimates, out_path)
        console.print(f"[green]Wrote {len(estimates)} estimate(s) to {out_path}[/green]")


def _well(
    summary: BatchSummary,
    label: str | None,
    coverage: float | None,
    known_titre: float,
) -> CalibrationWell:
    from fluotitre.core.models import CalibrationWell
    from fluotitre.measure.titre import calibration_from_summary

    if coverage is not None:
        try:
            return CalibrationWell(known_titre=known_titre, percent_coverage=coverage)
        except ValueError as e:
            raise click.BadParameter(str(e)) from e
    try:
        return calibration_from_summary(summary, label, known_titre)  # type: ignore[arg-type]
    except KeyError:
        available = ", ".join(row.label for row in summary) or "none"
        console.print(
            f"[red]Error:[/red] No summary row labelled '{label}'. Available: {available}"
        )
        raise SystemExit(1)


def _show_estimates(estimates: list[TitreEstimate], control: CalibrationWell) -> None:
    table = Table(
        show_header=True,
        title=(
            f"Titre vs {control.label or 'control'} "
            f"({control.percent_coverage:.3f}% = {control.known_titre:g})"
        ),
    )
    table.add_column("Well")
    table.add_column("%Area", justify="right")
    table.add_column("Titre", justify="right")
    for est in estimates:
        table.add_row(est.label, f"{est.percent_coverage:.3f}", f"{est.titre:.4g}")
    console.print(table)


def _write_estimates(estimates: list[TitreEstimate], path: Path) -> None:
    import pandas as pd

    df = pd.DataFrame(
        [
            {
                "Slice": e.label,
                "%Area": e.percent_coverage,
                "Titre": e.titre,
                "Baseline OK": e.baseline_ok,
            }
            for e in estimates
        ],
        columns=["Slice", "%Area", "Titre", "Baseline OK"],
    )
    df.to_csv(path, index=False)
