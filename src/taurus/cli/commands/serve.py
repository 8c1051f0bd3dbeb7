"""Serve command for Taurus - run the management API with uvicorn."""

from pathlib import Path
from typing import Annotated

import typer
import uvicorn

from taurus.api import create_app
from taurus.cli.formatters import console
from taurus.cli.formatters.panels import print_error
from taurus.config.loader import resolve_config
from taurus.core.errors import ConfigError
from taurus.observability.logging import configure_logging

app = typer.Typer(name="serve", help="Run the management API.")


@app.callback(invoke_without_command=True)
def serve(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config.yaml."),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", help="Bind address. Overrides the config."),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", help="Bind port. Overrides the config and PORT."),
    ] = None,
) -> None:
    """Start the orchestrator loops and serve the HTTP/WebSocket API."""
    try:
        config = resolve_config(config_path)
    except ConfigError as e:
        print_error(e.message, title="Configuration Error")
        raise typer.Exit(1) from e

    overrides = {k: v for k, v in {"host": host, "port": port}.items() if v is not None}
    if overrides:
        config = config.model_copy(update={"api": config.api.model_copy(update=overrides)})

    configure_logging(config.logging)
    console.print(
        f"[highlight]Taurus[/] serving on [success]http://{config.api.host}:{config.api.port}[/]"
    )
    uvicorn.run(create_app(config=config), host=config.api.host, port=config.api.port)


__all__ = ["app"]
