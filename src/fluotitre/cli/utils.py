"""Shared CLI utilities — Rich console, error handling, config helpers."""

from __future__ import annotations

import functools
import logging
import traceback
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

if TYPE_CHECKING:
    from fluotitre.core import PipelineConfig

console = Console()

# Set by the --verbose flag on the top-level CLI group.
verbose: bool = False


def configure_logging(debug: bool = False) -> None:
    """Route package log records to the Rich console."""
    logger = logging.getLogger("fluotitre")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=False, markup=False))
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def load_config(path: str | None, **overrides: Any) -> PipelineConfig:
    """Load a config file (or defaults) and apply CLI overrides.

    Options left at None keep the file's value.
    """
    from fluotitre.core import PipelineConfig

    config = PipelineConfig.from_yaml(Path(path)) if path else PipelineConfig()
    return config.replace(**overrides)


def error_handler(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator wrapping CLI commands with standard error handling.

    Catches PipelineError (exit 1) and unexpected exceptions (exit 2).
    With --verbose, unexpected errors include the full traceback.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        from fluotitre.core.exceptions import PipelineError

        try:
            return func(*args, **kwargs)
        except (SystemExit, click.ClickException):
            raise
        except PipelineError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise SystemExit(1)
        except (FileNotFoundError, NotADirectoryError) as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)
        except Exception as e:
            if verbose:
                console.print(f"[red]Internal error:[/red] {e}")
                console.print(traceback.format_exc())
            else:
                console.print(
                    f"[red]Internal error:[/red] {type(e).__name__}: {e}\n"
                    "[dim]Use --verbose for the full traceback.[/dim]"
                )
            raise SystemExit(2)

    return wrapper


def make_progress() -> Progress:
    """Create a Rich progress bar for CLI operations."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    )
