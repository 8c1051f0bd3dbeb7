"""Status command group for Taurus.

Inspect the agent registry as it would be seeded from the configuration.
"""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from taurus.agents.status import StatusSnapshot
from taurus.cli.formatters.panels import print_error
from taurus.cli.formatters.tables import create_agents_table, create_key_value_table, print_table
from taurus.config.loader import resolve_config
from taurus.config.models import TaurusConfig
from taurus.core.errors import ConfigError, TaurusError
from taurus.core.types import Result
from taurus.observability.logging import is_console_logging_enabled, set_console_logging
from taurus.orchestrator import Orchestrator

app = typer.Typer(
    name="status",
    help="Inspect agent status.",
    no_args_is_help=True,
)


async def _probe_once(orchestrator: Orchestrator) -> Result[StatusSnapshot, TaurusError]:
    try:
        return await orchestrator.run_health_check_now()
    finally:
        await orchestrator.stop()


def _collect(config: TaurusConfig, probe: bool) -> StatusSnapshot:
    orchestrator = Orchestrator(config)
    if probe:
        result = asyncio.run(_probe_once(orchestrator))
        if result.is_err:
            print_error(result.error.message, title="Health Check Failed")
            raise typer.Exit(1)
    return orchestrator.get_status()


@app.command()
def agents(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config.yaml."),
    ] = None,
    probe: Annotated[
        bool,
        typer.Option("--probe", "-p", help="Run one health pass before reporting."),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", "-d", help="Show log output alongside the report."),
    ] = False,
) -> None:
    """Show every declared agent and the orchestrator summary."""
    try:
        config = resolve_config(config_path)
    except ConfigError as e:
        print_error(e.message, title="Configuration Error")
        raise typer.Exit(1) from e

    console_logging = is_console_logging_enabled()
    set_console_logging(debug)
    try:
        snapshot = _collect(config, probe)
    finally:
        set_console_logging(console_logging)

    print_table(create_agents_table(snapshot))
    print_table(
        create_key_value_table(
            {
                "Total": snapshot.total_agents,
                "Active": snapshot.active_agents,
                "Healthy": snapshot.healthy_agents,
                "Pending": snapshot.pending_agents,
                "Auto-scaling": "on" if snapshot.orchestrator.auto_scaling_enabled else "off",
                "Max concurrent": snapshot.orchestrator.max_concurrent_agents,
            },
            "Summary",
        )
    )


__all__ = ["app"]
