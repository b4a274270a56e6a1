"""Interactive menu for the FluoTitre CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from rich.prompt import FloatPrompt, Prompt

from fluotitre.cli.utils import console

if TYPE_CHECKING:
    from fluotitre.core import PipelineConfig


@dataclass(frozen=True)
class MenuItem:
    """A single entry in the interactive menu."""

    key: str
    label: str
    handler: Callable[[MenuState], None] | None


class MenuState:
    """Holds state across the interactive menu session."""

    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.config: PipelineConfig | None = None
        self.last_summary: Path | None = None
        self.running = True

    def require_config(self) -> PipelineConfig:
        """Return the session config, loading defaults on first use."""
        if self.config is None:
            from fluotitre.core import PipelineConfig

            self.config = PipelineConfig()
        return self.config


class _MenuCancel(Exception):
    """Raised when user cancels an interactive operation."""


def run_interactive_menu() -> None:
    """Run the interactive menu loop."""
    state = MenuState()

    menu_items: list[MenuItem] = [
        MenuItem("1", "Quantify a folder of images", _run_analysis),
        MenuItem("2", "Estimate titres from a summary", _estimate_titre),
        MenuItem("3", "Load configuration file", _load_config),
        MenuItem("4", "Show configuration", _show_config),
        MenuItem("q", "Quit", None),
    ]

    while state.running:
        _show_header(state)
        for item in menu_items:
            console.print(f"  \\[{item.key}] {item.label}")

        try:
            choice = Prompt.ask("\nSelect an option", default="q")
        except EOFError:
            # Piped stdin ran out; leave the menu.
            break

        if choice == "q":
            break

        handler = None
        for item in menu_items:
            if item.key == choice:
                handler = item.handler
                break
        else:
            console.print(f"[red]Invalid option: {choice}[/red]")
            continue

        if handler:
            from fluotitre.core.exceptions import PipelineError

            try:
                handler(state)
            except (_MenuCancel, EOFError):
                console.print("[dim]Cancelled.[/dim]")
            except (PipelineError, FileNotFoundError, NotADirectoryError, KeyError, ValueError) as e:
                console.print(f"[red]Error:[/red] {e}")
            except Exception as e:
                console.print(f"[red]Internal error:[/red] {e}")


def _show_header(state: MenuState) -> None:
    """Display the menu header with the active configuration."""
    console.print("\n[bold]FluoTitre[/bold] — Reporter Coverage and Titre\n")
    if state.config_path:
        console.print(f"  Config: [cyan]{state.config_path}[/cyan]")
    else:
        console.print("  Config: [dim]defaults[/dim]")
    if state.last_summary:
        console.print(f"  Last summary: [cyan]{state.last_summary}[/cyan]")
    console.print()


def _ask_path(prompt: str) -> Path:
    text = Prompt.ask(f"{prompt} (or 'b' to go back)")
    if text.lower() == "b":
        raise _MenuCancel()
    return Path(text).expanduser()


# --- Menu handlers ---


def _run_analysis(state: MenuState) -> None:
    """Interactively quantify a folder of images."""
    from fluotitre.cli.run import run_batch, show_result

    source = _ask_path("Folder of images")
    if not source.is_dir():
        console.print(f"[red]Error:[/red] Not a folder: {source}")
        return

    decisions = Prompt.ask(
        "Decision mode", choices=["auto", "prompt", "napari"], default="prompt",
    )
    if Prompt.ask("Proceed?", choices=["y", "n"], default="y") != "y":
        console.print("[yellow]Analysis cancelled.[/yellow]")
        return

    result = run_batch(source, state.require_config(), decisions)
    show_result(result)
    state.last_summary = result.summary_path


def _estimate_titre(state: MenuState) -> None:
    """Interactively estimate titres against a control well."""
    from fluotitre.cli.titre import _show_estimates
    from fluotitre.io.writer import read_summary
    from fluotitre.measure.titre import TitreEstimator, calibration_from_summary

    default = str(state.last_summary) if state.last_summary else None
    text = Prompt.ask("Summary file (or 'b' to go back)", default=default)
    if text is None or text.lower() == "b":
        raise _MenuCancel()
    summary = read_summary(Path(text).expanduser())

    labels = [row.label for row in summary]
    if not labels:
        console.print("[yellow]Summary has no rows.[/yellow]")
        return
    console.print(f"\n[bold]Wells:[/bold] {', '.join(labels)}")

    control_label = Prompt.ask("Control well", choices=labels)
    control_titre = FloatPrompt.ask("Known titre of the control well")
    control = calibration_from_summary(summary, control_label, control_titre)

    baseline = None
    baseline_label = Prompt.ask("Uninfected well (blank = none)", default="")
    if baseline_label:
        baseline = calibration_from_summary(summary, baseline_label, 0.0)

    estimator = TitreEstimator(control, baseline=baseline)
    exclude = [w.label for w in (control, baseline) if w is not None and w.label]
    _show_estimates(estimator.estimate_summary(summary, exclude=exclude), control)
    if not estimator.baseline_ok:
        console.print("[yellow]Warning:[/yellow] baseline well is not near 0% coverage")


def _load_config(state: MenuState) -> None:
    """Load a YAML configuration for this session."""
    from fluotitre.core import PipelineConfig

    path = _ask_path("Configuration file")
    state.config = PipelineConfig.from_yaml(path)
    state.config_path = path
    console.print(f"[green]Loaded configuration from {path}[/green]")


def _show_config(state: MenuState) -> None:
    """Display the active configuration."""
    from fluotitre.cli.config_cmd import show_config_table

    show_config_table(
        state.require_config(),
        source=str(state.config_path) if state.config_path else None,
    )
