"""Config command group for Taurus.

Create and inspect ~/.taurus/config.yaml.
"""

from pathlib import Path
from typing import Annotated

import typer

from taurus.cli.formatters.panels import print_error, print_success
from taurus.cli.formatters.tables import (
    create_key_value_table,
    create_table,
    print_table,
    styled,
)
from taurus.config.loader import create_default_config, resolve_config, resolve_endpoint
from taurus.core.errors import ConfigError
from taurus.core.security import mask_endpoint

app = typer.Typer(
    name="config",
    help="Manage Taurus configuration.",
    no_args_is_help=True,
)


@app.command()
def init(
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite", help="Replace an existing config.yaml."),
    ] = False,
    config_dir: Annotated[
        Path | None,
        typer.Option("--dir", help="Directory to write to. Defaults to ~/.taurus/."),
    ] = None,
) -> None:
    """Write the default configuration file."""
    try:
        path = create_default_config(config_dir, overwrite=overwrite)
    except ConfigError as e:
        print_error(f"{e.message}\nUse --overwrite to replace it.", title="Config Exists")
        raise typer.Exit(1) from e
    print_success(f"Configuration written to {path}")


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config.yaml."),
    ] = None,
) -> None:
    """Display the effective configuration.

    Endpoints are masked; most of them are API keys.
    """
    try:
        config = resolve_config(config_path)
    except ConfigError as e:
        print_error(e.message, title="Configuration Error")
        raise typer.Exit(1) from e

    settings = config.orchestrator
    print_table(
        create_key_value_table(
            {
                "health_check_interval": f"{settings.health_check_interval}s",
                "resync_interval": f"{settings.resync_interval}s",
                "auto_scaling_enabled": settings.auto_scaling_enabled,
                "max_concurrent_agents": settings.max_concurrent_agents,
                "scale_up_threshold": settings.scale_up_threshold,
                "scale_down_threshold": settings.scale_down_threshold,
                "probe": settings.probe,
                "api": f"{config.api.host}:{config.api.port}",
                "log_mode": config.logging.mode.value,
            },
            "Orchestrator",
        )
    )

    table = create_table("Declared Agents")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Priority", justify="center")
    table.add_column("Endpoint")
    for name, declaration in config.agents.items():
        table.add_row(
            name,
            styled(declaration.status.value),
            declaration.priority.value,
            mask_endpoint(resolve_endpoint(declaration)),
        )
    print_table(table)


__all__ = ["app"]
