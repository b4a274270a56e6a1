"""fluotitre config — write and inspect pipeline configuration files."""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from fluotitre.cli.utils import console, error_handler, load_config


@click.group()
def config() -> None:
    """Write and inspect configuration files."""


@config.command("write")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--overwrite", is_flag=True, help="Overwrite the file if it exists.")
@error_handler
def write_config(path: str, overwrite: bool) -> None:
    """Write the default configuration to PATH as YAML."""
    from fluotitre.core import PipelineConfig

    out_path = Path(path).expanduser()
    if out_path.exists() and not overwrite:
        console.print(
            f"[red]Error:[/red] File already exists: {out_path}\n"
            "Use --overwrite to replace it."
        )
        raise SystemExit(1)
    PipelineConfig().to_yaml(out_path)
    console.print(f"[green]Wrote default configuration to {out_path}[/green]")


@config.command("show")
@click.argument("path", type=click.Path(exists=True, dir_okay=False), required=False)
@error_handler
def show_config(path: str | None) -> None:
    """Show the effective configuration (defaults, or PATH if given)."""
    show_config_table(load_config(path), source=path)


def show_config_table(cfg, source: str | None = None) -> None:  # type: ignore[no-untyped-def]
    """Render a PipelineConfig as a two-column table."""
    table = Table(show_header=True, title=f"Configuration ({source or 'defaults'})")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in cfg.to_dict().items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v:g}" for k, v in value.items())
        table.add_row(key, str(value))
    console.print(table)
