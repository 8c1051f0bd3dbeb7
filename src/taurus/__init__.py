"""Taurus - Agent orchestration core.

Keeps a registry of named remote agent integrations, activates them,
health-checks them on a fixed interval and auto-scales the active set,
broadcasting every state change to connected observers.

Example:
    # Using CLI
    taurus status agents --probe
    taurus serve --port 3000

    # Using Python
    from taurus.orchestrator import Orchestrator

    orchestrator = Orchestrator()
    await orchestrator.start()
"""

__version__ = "0.1.0"

__all__ = ["__version__", "main"]


def main() -> None:
    """Main entry point for the Taurus CLI.

    This function invokes the Typer app from taurus.cli.main.
    """
    from taurus.cli.main import app

    app()
