"""Taurus CLI main entry point.

This module defines the main Typer application and registers
all command groups for the Taurus CLI.
"""

from typing import Annotated

import typer

from taurus import __version__
from taurus.cli.commands import config, serve, status
from taurus.cli.formatters import console

app = typer.Typer(
    name="taurus",
    help="Taurus - Agent Orchestrator",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(status.app, name="status")
app.add_typer(serve.app, name="serve")
app.add_typer(config.app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]Taurus[/] version [green]{__version__}[/]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Taurus - Agent Orchestrator.

    Keeps a registry of external integration agents, probes the active ones
    and scales the active-set on their health.

    Use [bold cyan]taurus COMMAND --help[/] for command-specific help.
    """


__all__ = ["app", "main"]
