"""FluoTitre CLI — top-level Click group and interactive menu."""

from __future__ import annotations

import click


@click.group(invoke_without_command=True)
@click.version_option(package_name="fluotitre")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging and full tracebacks on errors.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """FluoTitre — reporter coverage and relative viral titre."""
    from fluotitre.cli import utils

    utils.verbose = verbose
    utils.configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        from fluotitre.cli.menu import run_interactive_menu

        run_interactive_menu()


def _register_commands() -> None:
    """Register all subcommands — imports deferred to avoid loading heavy deps at startup."""
    from fluotitre.cli.config_cmd import config
    from fluotitre.cli.run import run
    from fluotitre.cli.titre import titre

    cli.add_command(config)
    cli.add_command(run)
    cli.add_command(titre)


_register_commands()
